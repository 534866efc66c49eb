"""Role registry and permission evaluation for marketplace RBAC."""

from src.access.rbac.enums import DEFAULT_ROLE, Permission, Role
from src.access.rbac.evaluator import PermissionChecker, has_any_permission, has_permission
from src.access.rbac.registry import (
    RoleRegistry,
    get_default_registry,
    load_registry,
    permissions_of,
    resolve_role,
)

__all__ = [
    "DEFAULT_ROLE",
    "Permission",
    "PermissionChecker",
    "Role",
    "RoleRegistry",
    "get_default_registry",
    "has_any_permission",
    "has_permission",
    "load_registry",
    "permissions_of",
    "resolve_role",
]
