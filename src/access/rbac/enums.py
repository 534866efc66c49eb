"""Canonical enum definitions for marketplace RBAC.

This module defines the closed sets of roles and permissions used
throughout the application. Declarations (route guards, endpoint
decorators, role tables) are validated against these sets eagerly so a
typo fails at startup rather than at request time.

All access-related enums should be defined here to ensure a single source
of truth.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from src.access.errors.guard_errors import InvalidPermissionError, InvalidRoleError


class Role(StrEnum):
    """Canonical marketplace roles.

    GUEST is the unauthenticated, lowest-privilege role. Every unknown or
    missing role id resolves to it.
    """

    GUEST = "GUEST"
    BUYER = "BUYER"
    SELLER = "SELLER"
    DEALER = "DEALER"
    GARAGE = "GARAGE"
    SHOWROOM_BASIC = "SHOWROOM_BASIC"
    SHOWROOM_PREMIUM = "SHOWROOM_PREMIUM"
    MODERATOR = "MODERATOR"
    SENIOR_MODERATOR = "SENIOR_MODERATOR"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


class Permission(StrEnum):
    """Capability tokens checked against a role's permission set."""

    # Buyer
    BROWSE_LISTINGS = "browse_listings"
    SAVE_SEARCHES = "save_searches"
    SAVE_FAVORITES = "save_favorites"
    CONTACT_SELLERS = "contact_sellers"
    VIEW_SELLER_PROFILES = "view_seller_profiles"
    LEAVE_REVIEWS = "leave_reviews"
    MANAGE_ALERTS = "manage_alerts"

    # Private seller
    CREATE_LISTINGS = "create_listings"
    MANAGE_OWN_LISTINGS = "manage_own_listings"
    VIEW_LISTING_ANALYTICS = "view_listing_analytics"
    RESPOND_TO_INQUIRIES = "respond_to_inquiries"
    MANAGE_SELLER_PROFILE = "manage_seller_profile"

    # Showroom / dealer
    CREATE_SHOWROOM_PROFILE = "create_showroom_profile"
    MANAGE_SHOWROOM_PROFILE = "manage_showroom_profile"
    MANAGE_SHOWROOM_LISTINGS = "manage_showroom_listings"
    USE_BULK_UPLOAD = "use_bulk_upload"
    ACCESS_SHOWROOM_ANALYTICS = "access_showroom_analytics"
    MANAGE_SHOWROOM_STAFF = "manage_showroom_staff"
    CREATE_PROMOTIONS = "create_promotions"
    VERIFIED_SELLER_BADGE = "verified_seller_badge"

    # Garage services
    MANAGE_OWN_SERVICES = "manage_own_services"
    MANAGE_OWN_BOOKINGS = "manage_own_bookings"
    MANAGE_SERVICE_BOOKINGS = "manage_service_bookings"

    # Moderation
    APPROVE_LISTINGS = "approve_listings"
    FLAG_INAPPROPRIATE = "flag_inappropriate"
    TEMP_SUSPEND_USERS = "temp_suspend_users"
    MANAGE_REPORTS = "manage_reports"
    VIEW_MODERATION_LOGS = "view_moderation_logs"

    # Platform administration
    MANAGE_ALL_LISTINGS = "manage_all_listings"
    MANAGE_ALL_SERVICES = "manage_all_services"
    MANAGE_ALL_USERS = "manage_all_users"
    MANAGE_BOOKINGS = "manage_bookings"
    MANAGE_SHOWROOMS = "manage_showrooms"
    MANAGE_PLATFORM_FINANCES = "manage_platform_finances"
    MANAGE_PLATFORM_SETTINGS = "manage_platform_settings"
    VIEW_PLATFORM_ANALYTICS = "view_platform_analytics"
    MANAGE_CONTENT = "manage_content"
    MANAGE_SUPPORT_TICKETS = "manage_support_tickets"
    MANAGE_PAYMENTS = "manage_payments"
    MANAGE_PROMOTIONS = "manage_promotions"
    MANAGE_VERIFICATIONS = "manage_verifications"


DEFAULT_ROLE = Role.GUEST

# Immutable sets for O(1) validation at declaration time
VALID_ROLES: frozenset[str] = frozenset(role.value for role in Role)
VALID_PERMISSIONS: frozenset[str] = frozenset(p.value for p in Permission)


def parse_role(value: object) -> Role | None:
    """Return the Role whose value is exactly ``value``, or None.

    Runtime lookups use this: ``"admin"`` is not ``ADMIN``.
    """
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Role(value)
    except ValueError:
        return None


def parse_role_name(value: object) -> Role | None:
    """Case-insensitive Role lookup for declarations (role tables, RoleRoute)."""
    if isinstance(value, str):
        value = value.strip().upper()
    return parse_role(value)


def parse_permission(value: object) -> Permission | None:
    """Return the Permission named by ``value``, or None if it is not a member.

    Only exact token values are accepted (``"browse_listings"``); member
    names and other casings are treated as unknown.
    """
    if isinstance(value, Permission):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Permission(value)
    except ValueError:
        return None


def require_role_name(value: str | Role) -> Role:
    """Validate a declared role, raising InvalidRoleError on a typo."""
    role = parse_role_name(value)
    if role is None:
        raise InvalidRoleError(str(value), VALID_ROLES)
    return role


def require_permission_names(values: Iterable[str | Permission]) -> tuple[Permission, ...]:
    """Validate declared permissions, raising InvalidPermissionError on a typo."""
    validated = []
    for value in values:
        permission = parse_permission(value)
        if permission is None:
            raise InvalidPermissionError(str(value), VALID_PERMISSIONS)
        validated.append(permission)
    return tuple(validated)
