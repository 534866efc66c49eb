"""Route guards: enter a route or be redirected away from it.

``RouteGuard`` admits principals holding *any one* of a list of
permissions; an empty list admits everyone. ``RoleRoute`` admits only
principals whose resolved role is exactly the given role.

Both are state machines with one non-terminal state:

    LOADING snapshot            -> PENDING (no redirect, nothing rendered)
    RESOLVED, access granted    -> RENDER
    RESOLVED, no principal      -> REDIRECT(login path or fallback), remembering
                                   the attempted location for after login
    RESOLVED, access denied     -> REDIRECT(fallback)

``evaluate()`` is pure. ``render()`` performs the redirect through the
navigator, at most once for an unchanged (snapshot, location, target).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

from src.access.guards.auth_context import AuthSnapshot
from src.access.guards.decisions import GuardDecision, GuardOutcome, report, resolve_audit_hook
from src.access.guards.navigation import Location, NavigateOptions, Navigator
from src.access.models.principal import Principal
from src.access.rbac.audit import AuditHook
from src.access.rbac.enums import Permission, Role, require_role_name
from src.access.rbac.evaluator import has_any_permission
from src.access.rbac.registry import RoleRegistry, get_default_registry
from src.lib.logging_utils import path_for_log, user_id_prefix

logger = logging.getLogger(__name__)

T = TypeVar("T")

Subject = AuthSnapshot | Principal | None


class _NavigationGuard:
    """Shared redirect plumbing for route-level guards."""

    name = "navigation_guard"

    def __init__(
        self,
        *,
        fallback: str,
        login_path: str | None,
        registry: RoleRegistry | None,
        audit_hook: AuditHook | None,
    ) -> None:
        self.fallback = fallback
        self.login_path = login_path
        self._registry = registry
        self._audit_hook = resolve_audit_hook(audit_hook)
        self._last_redirect: tuple[AuthSnapshot, Location, str] | None = None

    @property
    def registry(self) -> RoleRegistry:
        return self._registry or get_default_registry()

    def _required(self) -> tuple[str, ...]:
        raise NotImplementedError

    def _grants(self, role: Role) -> bool:
        raise NotImplementedError

    def evaluate(
        self, subject: Subject, location: Location | None = None
    ) -> GuardDecision:
        snapshot = AuthSnapshot.coerce(subject)
        required = self._required()

        if snapshot.is_loading:
            decision = GuardDecision(self.name, GuardOutcome.PENDING, required=required)
        else:
            role = self.registry.resolve_role(snapshot.role_id)
            if self._grants(role):
                decision = GuardDecision(
                    self.name, GuardOutcome.RENDER, role=role, required=required
                )
            elif snapshot.principal is None:
                decision = GuardDecision(
                    self.name,
                    GuardOutcome.REDIRECT,
                    role=role,
                    required=required,
                    redirect_to=self.login_path or self.fallback,
                    remember=location,
                )
            else:
                decision = GuardDecision(
                    self.name,
                    GuardOutcome.REDIRECT,
                    role=role,
                    required=required,
                    redirect_to=self.fallback,
                )

        report(self._audit_hook, decision, snapshot, location)
        return decision

    def render(
        self,
        subject: Subject,
        navigator: Navigator,
        children: Callable[[], T],
        pending: Callable[[], T] | None = None,
    ) -> T | None:
        """Render the route, show ``pending`` while loading, or redirect."""
        snapshot = AuthSnapshot.coerce(subject)
        location = navigator.location
        decision = self.evaluate(snapshot, location)

        if decision.outcome is GuardOutcome.RENDER:
            self._last_redirect = None
            return children()

        if decision.outcome is GuardOutcome.PENDING:
            return pending() if pending is not None else None

        target = decision.redirect_to or self.fallback
        key = (snapshot, location, target)
        if key == self._last_redirect:
            return None
        self._last_redirect = key

        logger.debug(
            "Route guard redirecting",
            extra={
                "guard": self.name,
                "path": path_for_log(location.path),
                "destination": path_for_log(target),
                "user_id_prefix": user_id_prefix(snapshot.user_id),
            },
        )
        navigator.navigate(target, NavigateOptions(replace=True, remember=decision.remember))
        return None


class RouteGuard(_NavigationGuard):
    """Admit principals holding any one of ``required_permissions``."""

    name = "route_guard"

    def __init__(
        self,
        required_permissions: Iterable[Permission | str] = (),
        *,
        fallback: str = "/",
        login_path: str | None = None,
        registry: RoleRegistry | None = None,
        audit_hook: AuditHook | None = None,
    ) -> None:
        super().__init__(
            fallback=fallback,
            login_path=login_path,
            registry=registry,
            audit_hook=audit_hook,
        )
        self.required_permissions = tuple(required_permissions)

    def _required(self) -> tuple[str, ...]:
        return tuple(str(p) for p in self.required_permissions)

    def _grants(self, role: Role) -> bool:
        if not self.required_permissions:
            return True
        return has_any_permission(role, self.required_permissions, self.registry)


class RoleRoute(_NavigationGuard):
    """Admit only principals whose resolved role is exactly ``role``.

    Raises:
        InvalidRoleError: At construction time for an unknown role name.
    """

    name = "role_route"

    def __init__(
        self,
        role: Role | str,
        *,
        fallback: str = "/",
        login_path: str | None = None,
        registry: RoleRegistry | None = None,
        audit_hook: AuditHook | None = None,
    ) -> None:
        super().__init__(
            fallback=fallback,
            login_path=login_path,
            registry=registry,
            audit_hook=audit_hook,
        )
        self.role = require_role_name(role)

    def _required(self) -> tuple[str, ...]:
        return (self.role.value,)

    def _grants(self, role: Role) -> bool:
        return role is self.role
