"""Render guards, route guards and post-authentication routing."""

from src.access.guards.auth_context import AuthSession, AuthSnapshot, AuthStatus
from src.access.guards.decisions import GuardDecision, GuardOutcome
from src.access.guards.navigation import (
    HistoryNavigator,
    Location,
    NavigateOptions,
    Navigator,
)
from src.access.guards.permission_guard import PermissionGuard, permission_guard
from src.access.guards.post_auth import (
    DASHBOARD_BY_ROLE,
    PostAuthRouter,
    dashboard_for_role,
    redirect_to_dashboard,
    resolve_post_auth_destination,
)
from src.access.guards.route_guard import RoleRoute, RouteGuard

__all__ = [
    "AuthSession",
    "AuthSnapshot",
    "AuthStatus",
    "DASHBOARD_BY_ROLE",
    "GuardDecision",
    "GuardOutcome",
    "HistoryNavigator",
    "Location",
    "NavigateOptions",
    "Navigator",
    "PermissionGuard",
    "PostAuthRouter",
    "RoleRoute",
    "RouteGuard",
    "dashboard_for_role",
    "permission_guard",
    "redirect_to_dashboard",
    "resolve_post_auth_destination",
]
