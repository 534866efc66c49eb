"""Render guard: show a UI region only to principals holding a permission.

Usage:
    guard = PermissionGuard(Permission.CREATE_LISTINGS)
    html = guard.render(snapshot, lambda: render_sell_button(), lambda: "")

The guard is synchronous and stateless; re-evaluate it whenever the
snapshot or the permission changes. A missing principal behaves as the
GUEST role and a loading snapshot renders the fallback, so the protected
region never flashes before the principal is known.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from src.access.guards.auth_context import AuthSnapshot
from src.access.guards.decisions import GuardDecision, GuardOutcome, report, resolve_audit_hook
from src.access.models.principal import Principal
from src.access.rbac.audit import AuditHook
from src.access.rbac.enums import Permission
from src.access.rbac.evaluator import has_permission
from src.access.rbac.registry import RoleRegistry, get_default_registry
from src.lib.logging_utils import sanitize_for_log

logger = logging.getLogger(__name__)

T = TypeVar("T")

Subject = AuthSnapshot | Principal | None


class PermissionGuard:
    """Gate a UI region on a single required permission."""

    name = "permission_guard"

    def __init__(
        self,
        permission: Permission | str,
        *,
        registry: RoleRegistry | None = None,
        audit_hook: AuditHook | None = None,
    ) -> None:
        self.permission = permission
        self._registry = registry
        self._audit_hook = resolve_audit_hook(audit_hook)

    def evaluate(self, subject: Subject) -> GuardDecision:
        snapshot = AuthSnapshot.coerce(subject)
        required = (str(self.permission),)

        if snapshot.is_loading:
            decision = GuardDecision(self.name, GuardOutcome.PENDING, required=required)
        else:
            registry = self._registry or get_default_registry()
            role = registry.resolve_role(snapshot.role_id)
            allowed = has_permission(role, self.permission, registry)
            decision = GuardDecision(
                self.name,
                GuardOutcome.RENDER if allowed else GuardOutcome.FALLBACK,
                role=role,
                required=required,
            )

        logger.debug(
            "Permission guard evaluated",
            extra={
                "permission": sanitize_for_log(self.permission, max_length=64),
                "outcome": decision.outcome.value,
            },
        )
        report(self._audit_hook, decision, snapshot)
        return decision

    def render(
        self,
        subject: Subject,
        children: Callable[[], T],
        fallback: Callable[[], T] | None = None,
    ) -> T | None:
        """Render ``children`` if allowed, else ``fallback`` (default: nothing)."""
        if self.evaluate(subject).allowed:
            return children()
        return fallback() if fallback is not None else None


def permission_guard(
    permission: Permission | str,
    subject: Subject,
    children: Callable[[], T],
    fallback: Callable[[], T] | None = None,
    *,
    registry: RoleRegistry | None = None,
) -> T | None:
    """Function form of PermissionGuard for one-off checks."""
    return PermissionGuard(permission, registry=registry).render(subject, children, fallback)
