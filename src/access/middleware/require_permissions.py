"""Permission-gated page routes for FastAPI.

Server-rendered marketplace pages use the same route-guard rules as the
client: holding any one of the listed permissions admits the request,
everything else is redirected. Enforcement of the underlying API stays with
the server's own authorization layer; this only decides which page a
browser ends up on.

Usage:
    from src.access.middleware import require_permissions

    @router.get("/admin/settings")
    @require_permissions(Permission.MANAGE_PLATFORM_SETTINGS, fallback="/")
    async def admin_settings(request: Request):
        ...

The principal is read from ``request.state.principal``, which the host
application's authentication middleware sets (None or absent for visitors).

Security:
    - Permission names are validated at decoration time (typos fail startup)
    - Visitors go to the login page with the attempted path in the redirect
      query parameter; authenticated principals never learn which
      permission they lacked
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import Any, TypeVar
from urllib.parse import urlencode

from fastapi import HTTPException, Request
from fastapi.responses import RedirectResponse

from src.access.config import get_guard_config
from src.access.guards.auth_context import AuthSnapshot
from src.access.guards.decisions import GuardOutcome
from src.access.guards.navigation import Location
from src.access.guards.post_auth import resolve_post_auth_destination
from src.access.guards.route_guard import RouteGuard
from src.access.models.principal import Principal
from src.access.rbac.enums import Permission, require_permission_names
from src.access.rbac.registry import RoleRegistry, get_default_registry

logger = logging.getLogger(__name__)

# Type variable for preserving function signatures
F = TypeVar("F", bound=Callable[..., Any])


def get_request_principal(request: Request) -> Principal | None:
    """Principal attached by the host auth layer, or None for visitors."""
    principal = getattr(request.state, "principal", None)
    if principal is None or isinstance(principal, Principal):
        return principal
    logger.warning(
        "Ignoring request.state.principal of unexpected type",
        extra={"principal_type": type(principal).__name__},
    )
    return None


def _find_request(args: tuple[Any, ...], kwargs: dict[str, Any]) -> Request | None:
    if isinstance(kwargs.get("request"), Request):
        return kwargs["request"]
    for arg in args:
        if isinstance(arg, Request):
            return arg
    return None


def _request_location(request: Request) -> Location:
    return Location(path=request.url.path, query=request.url.query)


def require_permissions(
    *permissions: Permission | str,
    fallback: str = "/",
    login_path: str | None = None,
    registry: RoleRegistry | None = None,
) -> Callable[[F], F]:
    """Decorator factory gating a page endpoint on any of ``permissions``.

    Args:
        permissions: Acceptable permissions; none means "no restriction".
        fallback: Where authenticated principals without access are sent.
        login_path: Where visitors are sent (default: RBAC_LOGIN_PATH).
        registry: Role registry override (default: process registry).

    Raises:
        InvalidPermissionError: At decoration time for unknown permissions.
    """
    required = require_permission_names(permissions)

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            request = _find_request(args, kwargs)
            if request is None:
                logger.error("require_permissions: No Request object found in handler args")
                raise HTTPException(status_code=500, detail="Internal server error")

            config = get_guard_config()
            guard = RouteGuard(
                required,
                fallback=fallback,
                login_path=login_path or config.login_path,
                registry=registry,
            )
            location = _request_location(request)
            snapshot = AuthSnapshot.resolved(get_request_principal(request))
            decision = guard.evaluate(snapshot, location)

            if decision.outcome is GuardOutcome.RENDER:
                return await func(*args, **kwargs)

            target = decision.redirect_to or fallback
            if decision.remember is not None:
                query = urlencode({config.redirect_param: decision.remember.href})
                separator = "&" if "?" in target else "?"
                target = f"{target}{separator}{query}"
            return RedirectResponse(url=target, status_code=303)

        return wrapper  # type: ignore[return-value]

    return decorator


def post_auth_redirect(
    request: Request,
    principal: Principal | None,
    registry: RoleRegistry | None = None,
) -> RedirectResponse:
    """Redirect a just-authenticated principal to its landing destination.

    Call from the login handler once credentials check out. The explicit
    redirect parameter of the login request wins, then the role dashboard.
    """
    config = get_guard_config()
    registry = registry or get_default_registry()
    role = registry.resolve_role(principal.role_id if principal is not None else None)
    destination = resolve_post_auth_destination(
        role,
        _request_location(request),
        redirect_param=config.redirect_param,
        home_path=config.home_path,
    )
    return RedirectResponse(url=destination, status_code=303)
