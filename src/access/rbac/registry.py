"""Role registry: role ids, roles and their permission sets.

The registry is a read-only lookup table built once per process. It answers
two questions:

- ``resolve_role(role_id)``: which canonical Role an opaque principal role id
  stands for. Missing or unknown ids resolve to the default role (GUEST),
  never to an elevated one.
- ``permissions_of(role)``: the frozenset of permissions a role holds. Roles
  with no permissions get the empty set; values outside the Role enum also
  get the empty set.

The role table is injected configuration. The built-in table below mirrors
the marketplace policy; deployments can point ``RBAC_ROLE_TABLE`` at a YAML
or JSON file with the same shape:

    default_role: GUEST
    role_ids: {1: BUYER, 2: SELLER}
    roles:
      GUEST: []
      SHOWROOM_PREMIUM:
        extends: [SHOWROOM_BASIC]
        permissions: [use_bulk_upload]
      SUPER_ADMIN: ["*"]
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.access.config import get_guard_config
from src.access.errors.guard_errors import RegistryConfigError
from src.access.rbac.enums import (
    DEFAULT_ROLE,
    Permission,
    Role,
    parse_permission,
    parse_role,
    parse_role_name,
)
from src.lib.logging_utils import sanitize_for_log

logger = logging.getLogger(__name__)

WILDCARD = "*"

RoleId = int | str


class RoleEntry(BaseModel):
    """One role in an injected role table."""

    model_config = ConfigDict(extra="forbid")

    extends: list[str] = Field(default_factory=list)
    permissions: list[str] = Field(default_factory=list)


class RoleTable(BaseModel):
    """Shape of an injected role table (YAML/JSON/dict)."""

    model_config = ConfigDict(extra="forbid")

    default_role: str = DEFAULT_ROLE.value
    role_ids: dict[int, str] = Field(default_factory=dict)
    roles: dict[str, RoleEntry | list[str]]


BUILTIN_ROLE_TABLE: dict[str, Any] = {
    "default_role": "GUEST",
    "role_ids": {
        1: "BUYER",
        2: "SELLER",
        3: "SHOWROOM_BASIC",
        4: "SHOWROOM_PREMIUM",
        5: "MODERATOR",
        6: "SENIOR_MODERATOR",
        7: "ADMIN",
        8: "SUPER_ADMIN",
        9: "DEALER",
        10: "GARAGE",
    },
    "roles": {
        "GUEST": [],
        "BUYER": [
            "browse_listings",
            "save_searches",
            "save_favorites",
            "contact_sellers",
            "view_seller_profiles",
            "leave_reviews",
            "manage_alerts",
        ],
        "SELLER": [
            "create_listings",
            "manage_own_listings",
            "view_listing_analytics",
            "respond_to_inquiries",
            "manage_seller_profile",
            "browse_listings",
            "save_favorites",
        ],
        "SHOWROOM_BASIC": [
            "create_showroom_profile",
            "manage_showroom_profile",
            "manage_showroom_listings",
            "manage_own_listings",
            "manage_own_bookings",
            "access_showroom_analytics",
            "respond_to_inquiries",
            "browse_listings",
        ],
        "SHOWROOM_PREMIUM": {
            "extends": ["SHOWROOM_BASIC"],
            "permissions": [
                "use_bulk_upload",
                "create_promotions",
                "verified_seller_badge",
                "manage_showroom_staff",
            ],
        },
        "DEALER": {
            "extends": ["SHOWROOM_BASIC"],
            "permissions": ["create_listings", "view_listing_analytics"],
        },
        "GARAGE": [
            "create_showroom_profile",
            "manage_showroom_profile",
            "manage_own_services",
            "manage_own_bookings",
            "manage_service_bookings",
            "respond_to_inquiries",
            "browse_listings",
        ],
        "MODERATOR": [
            "approve_listings",
            "flag_inappropriate",
            "temp_suspend_users",
            "manage_reports",
            "view_moderation_logs",
            "browse_listings",
        ],
        "SENIOR_MODERATOR": {
            "extends": ["MODERATOR"],
            "permissions": ["manage_content", "manage_verifications"],
        },
        "ADMIN": [
            "manage_all_listings",
            "manage_all_services",
            "manage_all_users",
            "manage_bookings",
            "manage_service_bookings",
            "manage_showrooms",
            "manage_platform_settings",
            "view_platform_analytics",
            "manage_content",
            "manage_reports",
            "manage_support_tickets",
            "browse_listings",
        ],
        "SUPER_ADMIN": [WILDCARD],
    },
}


class RoleRegistry:
    """Immutable role id → Role → permission-set lookup.

    Construction validates the table: every Role must have an entry and the
    default role must be the least privileged one (its permissions are a
    subset of every other role's).
    """

    def __init__(
        self,
        role_permissions: Mapping[Role, Iterable[Permission]],
        role_ids: Mapping[int, Role] | None = None,
        default_role: Role = DEFAULT_ROLE,
        *,
        source: str | None = None,
    ) -> None:
        missing = [role.value for role in Role if role not in role_permissions]
        if missing:
            raise RegistryConfigError(f"Role table missing roles: {missing}", source)

        permissions = {role: frozenset(role_permissions[role]) for role in Role}
        default_set = permissions[default_role]
        elevated = [
            role.value
            for role, held in permissions.items()
            if not default_set <= held
        ]
        if elevated:
            raise RegistryConfigError(
                f"Default role {default_role.value} holds permissions that "
                f"{sorted(elevated)} lack; the default must be least privileged",
                source,
            )

        self._permissions: Mapping[Role, frozenset[Permission]] = MappingProxyType(
            permissions
        )
        self._role_ids: Mapping[int, Role] = MappingProxyType(dict(role_ids or {}))
        self._default_role = default_role
        self.source = source

    @classmethod
    def from_table(
        cls, data: Mapping[str, Any], source: str | None = None
    ) -> RoleRegistry:
        """Build a registry from an injected table (see module docstring).

        Raises:
            RegistryConfigError: On unknown names, cycles or missing roles.
        """
        try:
            table = RoleTable.model_validate(data)
        except ValidationError as e:
            raise RegistryConfigError(
                f"Malformed role table: {e.error_count()} validation error(s)", source
            ) from e

        default_role = parse_role_name(table.default_role)
        if default_role is None:
            raise RegistryConfigError(
                f"Unknown default role '{table.default_role}'", source
            )

        entries: dict[Role, RoleEntry] = {}
        for name, entry in table.roles.items():
            role = parse_role_name(name)
            if role is None:
                raise RegistryConfigError(f"Unknown role '{name}'", source)
            if isinstance(entry, list):
                entry = RoleEntry(permissions=entry)
            entries[role] = entry

        role_ids: dict[int, Role] = {}
        for role_id, name in table.role_ids.items():
            role = parse_role_name(name)
            if role is None:
                raise RegistryConfigError(
                    f"Role id {role_id} maps to unknown role '{name}'", source
                )
            role_ids[role_id] = role

        resolved: dict[Role, frozenset[Permission]] = {}
        for role in entries:
            resolved[role] = _expand_role(role, entries, resolved, (), source)

        return cls(resolved, role_ids, default_role, source=source)

    @property
    def default_role(self) -> Role:
        return self._default_role

    @property
    def role_ids(self) -> Mapping[int, Role]:
        return self._role_ids

    def resolve_role(self, role_id: RoleId | None) -> Role:
        """Map an opaque role id to a Role; absent or unknown → default role."""
        if role_id is None:
            return self._default_role

        key = _normalize_role_id(role_id)
        role = self._role_ids.get(key) if key is not None else None
        if role is None:
            logger.debug(
                "Unmapped role id resolved to default role",
                extra={
                    "role_id": sanitize_for_log(role_id, max_length=32),
                    "default_role": self._default_role.value,
                },
            )
            return self._default_role
        return role

    def permissions_of(self, role: Role | str) -> frozenset[Permission]:
        """Permissions held by ``role``; empty for roles outside the enum."""
        member = parse_role(role)
        if member is None:
            return frozenset()
        return self._permissions[member]


def _normalize_role_id(role_id: object) -> int | None:
    # bool is an int subclass; True must never alias role id 1
    if isinstance(role_id, bool):
        return None
    if isinstance(role_id, int):
        return role_id
    if isinstance(role_id, str):
        text = role_id.strip()
        if text.isascii() and text.isdigit():
            return int(text)
    return None


def _expand_role(
    role: Role,
    entries: Mapping[Role, RoleEntry],
    resolved: dict[Role, frozenset[Permission]],
    chain: tuple[Role, ...],
    source: str | None,
) -> frozenset[Permission]:
    """Resolve a role's own permissions plus everything it extends."""
    if role in resolved:
        return resolved[role]
    if role in chain:
        cycle = " -> ".join(r.value for r in (*chain, role))
        raise RegistryConfigError(f"Cyclic role inheritance: {cycle}", source)

    entry = entries.get(role)
    if entry is None:
        raise RegistryConfigError(f"Role '{role.value}' is extended but not defined", source)

    held: set[Permission] = set()
    for name in entry.permissions:
        if name == WILDCARD:
            held.update(Permission)
            continue
        permission = parse_permission(name)
        if permission is None:
            raise RegistryConfigError(
                f"Role '{role.value}' lists unknown permission '{name}'", source
            )
        held.add(permission)

    for parent_name in entry.extends:
        parent = parse_role_name(parent_name)
        if parent is None:
            raise RegistryConfigError(
                f"Role '{role.value}' extends unknown role '{parent_name}'", source
            )
        held.update(_expand_role(parent, entries, resolved, (*chain, role), source))

    resolved[role] = frozenset(held)
    return resolved[role]


def load_registry(path: str | Path) -> RoleRegistry:
    """Load a role table from a YAML or JSON file.

    Raises:
        RegistryConfigError: If the file cannot be read or is invalid.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise RegistryConfigError(f"Cannot read role table: {e.strerror}", str(path)) from e

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise RegistryConfigError("Role table is not valid YAML/JSON", str(path)) from e

    if not isinstance(data, Mapping):
        raise RegistryConfigError("Role table must be a mapping", str(path))

    registry = RoleRegistry.from_table(data, source=str(path))
    logger.info(
        "Loaded role table",
        extra={"source": str(path), "role_id_count": len(registry.role_ids)},
    )
    return registry


def builtin_registry() -> RoleRegistry:
    """Registry built from the built-in marketplace role table."""
    return RoleRegistry.from_table(BUILTIN_ROLE_TABLE, source="builtin")


@lru_cache(maxsize=1)
def get_default_registry() -> RoleRegistry:
    """Process-wide registry, loaded once from RBAC_ROLE_TABLE or the built-in table."""
    config = get_guard_config()
    if config.role_table_path:
        return load_registry(config.role_table_path)
    return builtin_registry()


def resolve_role(role_id: RoleId | None, registry: RoleRegistry | None = None) -> Role:
    """Resolve an opaque role id against ``registry`` (default: process registry)."""
    return (registry or get_default_registry()).resolve_role(role_id)


def permissions_of(
    role: Role | str, registry: RoleRegistry | None = None
) -> frozenset[Permission]:
    """Permission set of ``role`` in ``registry`` (default: process registry)."""
    return (registry or get_default_registry()).permissions_of(role)
