"""
Pytest Configuration and Shared Fixtures
=========================================

Common fixtures used across all test modules.

For Developers:
    - Import fixtures by name in test files (pytest auto-discovers conftest.py)
    - Helpers that are not fixtures (make_principal, log assertions) are
      imported explicitly: ``from tests.conftest import make_principal``
    - The process-wide role registry is cached; the autouse fixture below
      clears it so RBAC_* environment changes take effect per test
"""

import logging
import os

import pytest

from src.access.guards.auth_context import AuthSnapshot
from src.access.guards.navigation import HistoryNavigator
from src.access.models.principal import Principal
from src.access.rbac.registry import RoleRegistry, builtin_registry, get_default_registry
from tests.fixtures.mocks.audit_recorder import AuditRecorder

# Role ids of the built-in role table
BUYER_ID = 1
SELLER_ID = 2
SHOWROOM_BASIC_ID = 3
SHOWROOM_PREMIUM_ID = 4
MODERATOR_ID = 5
SENIOR_MODERATOR_ID = 6
ADMIN_ID = 7
SUPER_ADMIN_ID = 8
DEALER_ID = 9
GARAGE_ID = 10
UNKNOWN_ROLE_ID = 9999


# Keep guard configuration deterministic regardless of the developer's shell
for _name in (
    "RBAC_LOGIN_PATH",
    "RBAC_HOME_PATH",
    "RBAC_REDIRECT_PARAM",
    "RBAC_ROLE_TABLE",
    "RBAC_AUDIT_DECISIONS",
):
    os.environ.pop(_name, None)


@pytest.fixture(autouse=True)
def reset_env_vars():
    """
    Reset environment variables before each test.

    Ensures tests don't pollute each other's environment.
    """
    original_env = os.environ.copy()

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def reset_default_registry():
    """Drop the cached process registry before and after each test."""
    get_default_registry.cache_clear()
    yield
    get_default_registry.cache_clear()


@pytest.fixture
def registry() -> RoleRegistry:
    """Registry built from the built-in marketplace role table."""
    return builtin_registry()


@pytest.fixture
def navigator() -> HistoryNavigator:
    """Navigator starting on the home page."""
    return HistoryNavigator("/")


@pytest.fixture
def audit_recorder() -> AuditRecorder:
    """Audit hook capturing guard decisions."""
    return AuditRecorder()


def make_principal(
    role_id: int | str | None = BUYER_ID,
    user_id: str = "user-1234567890",
    email: str | None = None,
) -> Principal:
    """Build a Principal for tests."""
    return Principal(user_id=user_id, role_id=role_id, email=email)


def resolved(role_id: int | str | None = BUYER_ID, **kwargs) -> AuthSnapshot:
    """Resolved snapshot carrying a principal with ``role_id``."""
    return AuthSnapshot.resolved(make_principal(role_id, **kwargs))


# =============================================================================
# Log Validation Helpers
# =============================================================================
#
# Production code logs normally (never test-aware); tests assert on the
# logs they expect using caplog.


def assert_warning_logged(caplog, pattern: str):
    """
    Helper to assert a WARNING log was captured.

    Args:
        caplog: pytest caplog fixture
        pattern: String pattern to search for in log messages

    Raises:
        AssertionError: If no WARNING log matches the pattern
    """
    assert any(
        pattern in record.message
        for record in caplog.records
        if record.levelno == logging.WARNING
    ), f"Expected WARNING log matching '{pattern}' not found"


def assert_no_warnings_logged(caplog):
    """Helper to assert nothing at WARNING or above was captured."""
    noisy = [r.message for r in caplog.records if r.levelno >= logging.WARNING]
    assert not noisy, f"Unexpected WARNING/ERROR logs: {noisy}"
