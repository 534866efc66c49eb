"""Shared error types for the access-control library."""

from src.access.errors.guard_errors import (
    InvalidPermissionError,
    InvalidRoleError,
    RegistryConfigError,
)

__all__ = [
    "InvalidPermissionError",
    "InvalidRoleError",
    "RegistryConfigError",
]
