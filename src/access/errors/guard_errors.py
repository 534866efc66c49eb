"""Access-control error types.

These exceptions signal programming or configuration mistakes (a typo in a
permission name, an incomplete role table). They are raised at declaration
or startup time so the application fails to start instead of silently
denying or granting access later.

Runtime input problems (unknown role ids, unknown permission tokens, a
missing principal) are never errors: they resolve to the default role or
to "not held".
"""

from __future__ import annotations

from collections.abc import Iterable


class InvalidRoleError(ValueError):
    """Raised at declaration time for an unknown role name."""

    def __init__(self, role: str, valid_roles: Iterable[str]) -> None:
        self.role = role
        self.valid_roles = frozenset(valid_roles)
        super().__init__(
            f"Invalid role '{role}'. Valid roles: {sorted(self.valid_roles)}"
        )


class InvalidPermissionError(ValueError):
    """Raised at declaration time for an unknown permission token."""

    def __init__(self, permission: str, valid_permissions: Iterable[str]) -> None:
        self.permission = permission
        self.valid_permissions = frozenset(valid_permissions)
        super().__init__(f"Invalid permission '{permission}'")


class RegistryConfigError(ValueError):
    """Raised when a role/permission table cannot be turned into a registry.

    Covers missing roles, unknown role or permission names, malformed role
    ids and cyclic ``extends`` chains.
    """

    def __init__(self, message: str, source: str | None = None) -> None:
        self.source = source
        if source:
            message = f"{message} (source: {source})"
        super().__init__(message)
