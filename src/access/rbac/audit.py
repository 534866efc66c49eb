"""Guard decision audit trail.

Every guard decision can be reported to an audit hook as a structured
``GuardDecisionEvent``. Hooks run after the decision is made and cannot
change it; a failing hook is logged and ignored so observability never
breaks rendering or navigation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from src.lib.logging_utils import get_safe_error_info, path_for_log, user_id_prefix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GuardDecisionEvent:
    """One guard decision, ready for auditing.

    Attributes:
        guard: Guard kind (permission_guard, route_guard, role_route, post_auth)
        outcome: Decision outcome value (pending, render, fallback, redirect)
        role: Resolved role name, None while loading
        required: Permissions (or role) the guard asked for
        user_id: Principal user id, None for visitors
        path: Location being evaluated, if any
        destination: Redirect/navigation target, if any
        decided_at: UTC decision timestamp
    """

    guard: str
    outcome: str
    role: str | None = None
    required: tuple[str, ...] = ()
    user_id: str | None = None
    path: str | None = None
    destination: str | None = None
    decided_at: datetime = field(default_factory=lambda: datetime.now(UTC))


AuditHook = Callable[[GuardDecisionEvent], None]


def create_decision_audit_entry(event: GuardDecisionEvent) -> dict[str, str]:
    """Flatten a decision event into log-safe string fields.

    Follows the ``{guard}:{outcome}`` format for ``decision`` so log queries
    can group by both at once.

    Examples:
        >>> create_decision_audit_entry(GuardDecisionEvent("route_guard", "redirect"))
        {'decision': 'route_guard:redirect', 'decided_at': '2026-01-08T12:00:00+00:00', ...}
    """
    entry = {
        "decision": f"{event.guard}:{event.outcome}",
        "decided_at": event.decided_at.isoformat(),
        "role": event.role or "",
        "required": ",".join(event.required),
    }
    prefix = user_id_prefix(event.user_id)
    if prefix:
        entry["user_id_prefix"] = prefix
    path = path_for_log(event.path)
    if path:
        entry["path"] = path
    destination = path_for_log(event.destination)
    if destination:
        entry["destination"] = destination
    return entry


def logging_audit_hook(event: GuardDecisionEvent) -> None:
    """Audit hook writing one INFO record per decision."""
    logger.info("Guard decision", extra=create_decision_audit_entry(event))


def emit_decision(hook: AuditHook | None, event: GuardDecisionEvent) -> None:
    """Deliver ``event`` to ``hook`` without letting hook failures escape."""
    if hook is None:
        return
    try:
        hook(event)
    except Exception as e:
        logger.warning(
            "Audit hook failed",
            extra={**get_safe_error_info(e), "decision": f"{event.guard}:{event.outcome}"},
        )
