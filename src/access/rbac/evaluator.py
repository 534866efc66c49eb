"""Permission evaluation.

``has_permission(role, permission)`` is the single question every guard
asks. It is pure and total: an unknown role holds nothing and an unknown
or malformed permission token is never held (fail closed).
"""

from __future__ import annotations

from collections.abc import Iterable

from src.access.models.principal import Principal
from src.access.rbac.enums import Permission, Role, parse_permission
from src.access.rbac.registry import RoleRegistry, get_default_registry


def has_permission(
    role: Role | str,
    permission: Permission | str,
    registry: RoleRegistry | None = None,
) -> bool:
    """Whether ``role`` holds ``permission``.

    Equivalent to ``permission in permissions_of(role)``; tokens outside the
    Permission vocabulary return False instead of raising.
    """
    member = parse_permission(permission)
    if member is None:
        return False
    return member in (registry or get_default_registry()).permissions_of(role)


def has_any_permission(
    role: Role | str,
    permissions: Iterable[Permission | str],
    registry: RoleRegistry | None = None,
) -> bool:
    """Whether ``role`` holds at least one of ``permissions`` (empty → False)."""
    registry = registry or get_default_registry()
    return any(has_permission(role, p, registry) for p in permissions)


class PermissionChecker:
    """Permission checks bound to one explicitly supplied principal.

    Example:
        >>> checker = PermissionChecker.for_principal(principal)
        >>> checker.can(Permission.CREATE_LISTINGS)
        True
    """

    def __init__(self, role: Role, registry: RoleRegistry | None = None) -> None:
        self.role = role
        self._registry = registry or get_default_registry()

    @classmethod
    def for_principal(
        cls, principal: Principal | None, registry: RoleRegistry | None = None
    ) -> PermissionChecker:
        registry = registry or get_default_registry()
        role_id = principal.role_id if principal is not None else None
        return cls(registry.resolve_role(role_id), registry)

    @property
    def permissions(self) -> frozenset[Permission]:
        return self._registry.permissions_of(self.role)

    def can(self, permission: Permission | str) -> bool:
        return has_permission(self.role, permission, self._registry)

    def can_any(self, permissions: Iterable[Permission | str]) -> bool:
        return has_any_permission(self.role, permissions, self._registry)
