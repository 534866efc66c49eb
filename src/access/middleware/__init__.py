"""Web framework adapters for access guards."""

from src.access.middleware.require_permissions import (
    get_request_principal,
    post_auth_redirect,
    require_permissions,
)

__all__ = [
    "get_request_principal",
    "post_auth_redirect",
    "require_permissions",
]
