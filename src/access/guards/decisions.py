"""Guard decision values shared by every guard."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from src.access.config import get_guard_config
from src.access.guards.auth_context import AuthSnapshot
from src.access.guards.navigation import Location
from src.access.rbac.audit import AuditHook, GuardDecisionEvent, emit_decision, logging_audit_hook
from src.access.rbac.enums import Role


class GuardOutcome(StrEnum):
    """Terminal (and one non-terminal) outputs of a guard evaluation."""

    PENDING = "pending"  # principal still loading
    RENDER = "render"
    FALLBACK = "fallback"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class GuardDecision:
    """Result of one guard evaluation. Never persisted.

    Attributes:
        guard: Guard kind that produced the decision
        outcome: What the caller should do
        role: Resolved role, None while loading
        required: Permissions (or role) the guard asked for
        redirect_to: Target for REDIRECT outcomes
        remember: Location to remember for after login, on REDIRECT
    """

    guard: str
    outcome: GuardOutcome
    role: Role | None = None
    required: tuple[str, ...] = ()
    redirect_to: str | None = None
    remember: Location | None = None

    @property
    def allowed(self) -> bool:
        return self.outcome is GuardOutcome.RENDER

    @property
    def is_pending(self) -> bool:
        return self.outcome is GuardOutcome.PENDING


def resolve_audit_hook(audit_hook: AuditHook | None) -> AuditHook | None:
    """Explicit hook wins; otherwise log decisions when RBAC_AUDIT_DECISIONS is on."""
    if audit_hook is not None:
        return audit_hook
    if get_guard_config().audit_decisions:
        return logging_audit_hook
    return None


def report(
    hook: AuditHook | None,
    decision: GuardDecision,
    snapshot: AuthSnapshot,
    location: Location | None = None,
) -> None:
    """Send ``decision`` to the audit hook."""
    if hook is None:
        return
    emit_decision(
        hook,
        GuardDecisionEvent(
            guard=decision.guard,
            outcome=decision.outcome.value,
            role=decision.role.value if decision.role is not None else None,
            required=decision.required,
            user_id=snapshot.user_id,
            path=location.path if location is not None else None,
            destination=decision.redirect_to,
        ),
    )
