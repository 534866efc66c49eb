"""Post-authentication routing.

Once a principal becomes available after login, it lands on exactly one
destination, chosen by a strict priority chain evaluated lazily:

1. An explicit redirect target in the current query string
   (``?redirectTo=/foo``), if present and a safe in-app path.
2. The attempted location a route guard remembered before bouncing the
   visitor to the login flow.
3. The role's default destination (dashboard).

``PostAuthRouter`` performs that navigation once per authentication event.
It never navigates while the principal is loading and ignores repeated
notifications for the same user and role id until a logout re-arms it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType

from src.access.config import GuardConfig, get_guard_config
from src.access.guards.auth_context import AuthSnapshot
from src.access.guards.decisions import GuardDecision, GuardOutcome, report, resolve_audit_hook
from src.access.guards.navigation import Location, NavigateOptions, Navigator
from src.access.models.principal import Principal
from src.access.rbac.audit import AuditHook
from src.access.rbac.enums import Role, parse_role
from src.access.rbac.registry import RoleRegistry, get_default_registry
from src.lib.logging_utils import path_for_log, user_id_prefix

logger = logging.getLogger(__name__)

HOME_PATH = "/"

DASHBOARD_BY_ROLE: Mapping[Role, str] = MappingProxyType(
    {
        Role.GUEST: HOME_PATH,
        Role.BUYER: "/buyer-dashboard",
        Role.SELLER: "/seller-dashboard",
        Role.DEALER: "/showroom-dashboard",
        Role.SHOWROOM_BASIC: "/showroom-dashboard",
        Role.SHOWROOM_PREMIUM: "/showroom-dashboard",
        Role.GARAGE: "/garage-dashboard",
        Role.MODERATOR: "/admin",
        Role.SENIOR_MODERATOR: "/admin",
        Role.ADMIN: "/admin",
        Role.SUPER_ADMIN: "/admin",
    }
)

_unmapped = [role.value for role in Role if role not in DASHBOARD_BY_ROLE]
if _unmapped:
    raise RuntimeError(f"Roles without a default destination: {_unmapped}")


def dashboard_for_role(role: Role | str | None, home_path: str = HOME_PATH) -> str:
    """Default destination for ``role``; unknown roles go home."""
    member = parse_role(role)
    if member is None or member is Role.GUEST:
        return home_path
    return DASHBOARD_BY_ROLE[member]


def is_safe_redirect(target: str | None) -> bool:
    """Whether ``target`` is an in-app absolute path.

    Rejects absolute URLs, protocol-relative ``//host`` targets and
    backslash tricks so an attacker-crafted ``redirectTo`` cannot send a
    freshly authenticated user off-site. Control characters are rejected
    outright: browsers drop tab and newline while parsing, which turns
    ``/\\t/host`` into ``//host``.
    """
    if not target or not target.startswith("/"):
        return False
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in target):
        return False
    if target.startswith("//") or target.startswith("/\\"):
        return False
    return "\\" not in target


def resolve_post_auth_destination(
    role: Role | str | None,
    location: Location | None = None,
    remembered: Location | None = None,
    *,
    redirect_param: str = "redirectTo",
    home_path: str = HOME_PATH,
) -> str:
    """Pick the landing destination using the redirect priority chain."""
    if location is not None:
        explicit = location.query_param(redirect_param)
        if explicit is not None:
            if is_safe_redirect(explicit):
                return explicit
            logger.warning(
                "Ignoring unsafe post-login redirect target",
                extra={"redirect_param": redirect_param},
            )

    if remembered is not None and is_safe_redirect(remembered.href):
        return remembered.href

    return dashboard_for_role(role, home_path)


def redirect_to_dashboard(role: Role | str | None, navigator: Navigator) -> str | None:
    """Send a principal to its dashboard unless already somewhere under it.

    Returns:
        The destination navigated to, or None when no navigation happened.
    """
    dashboard = dashboard_for_role(role)
    current = navigator.location.path
    if current == dashboard or current.startswith(dashboard.rstrip("/") + "/"):
        return None
    navigator.navigate(dashboard)
    return dashboard


class PostAuthRouter:
    """Navigate a newly authenticated principal to its landing destination.

    Subscribe ``on_auth_change`` to an AuthSession, or call it directly with
    each new snapshot.
    """

    name = "post_auth"

    def __init__(
        self,
        navigator: Navigator,
        *,
        registry: RoleRegistry | None = None,
        config: GuardConfig | None = None,
        audit_hook: AuditHook | None = None,
    ) -> None:
        self._navigator = navigator
        self._registry = registry
        self._config = config or get_guard_config()
        self._audit_hook = resolve_audit_hook(audit_hook)
        # (user_id, role_id) of the last principal routed; a profile refresh
        # keeps it, a logout clears it
        self._handled: tuple[str, int | str | None] | None = None

    def destination_for(self, principal: Principal | None) -> str:
        """Destination for ``principal`` at the navigator's current location."""
        registry = self._registry or get_default_registry()
        role = registry.resolve_role(principal.role_id if principal is not None else None)
        return resolve_post_auth_destination(
            role,
            self._navigator.location,
            self._navigator.remembered_location,
            redirect_param=self._config.redirect_param,
            home_path=self._config.home_path,
        )

    def on_auth_change(self, snapshot: AuthSnapshot) -> str | None:
        """Handle a new auth snapshot.

        Returns:
            The destination navigated to, or None when nothing happened.
        """
        if snapshot.is_loading:
            return None

        principal = snapshot.principal
        if principal is None:
            # logout or visitor: the next login is a new authentication event
            self._handled = None
            return None

        identity = (principal.user_id, principal.role_id)
        if identity == self._handled:
            return None

        location = self._navigator.location
        destination = self.destination_for(principal)
        self._navigator.consume_remembered_location()
        self._navigator.navigate(destination, NavigateOptions(replace=True))
        self._handled = identity

        registry = self._registry or get_default_registry()
        decision = GuardDecision(
            self.name,
            GuardOutcome.REDIRECT,
            role=registry.resolve_role(principal.role_id),
            redirect_to=destination,
        )
        logger.debug(
            "Post-authentication navigation",
            extra={
                "path": path_for_log(location.path),
                "destination": path_for_log(destination),
                "user_id_prefix": user_id_prefix(principal.user_id),
            },
        )
        report(self._audit_hook, decision, snapshot, location)
        return destination

    __call__ = on_auth_change
