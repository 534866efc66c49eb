"""Configuration for access guards.

Values come from environment variables so the same build can run with
different login routes or an injected role table.

Environment:
    RBAC_LOGIN_PATH: Where unauthenticated visitors are sent (default: /login)
    RBAC_HOME_PATH: Generic home destination (default: /)
    RBAC_REDIRECT_PARAM: Query parameter carrying an explicit post-login
        redirect (default: redirectTo)
    RBAC_ROLE_TABLE: Optional YAML/JSON role table path
    RBAC_AUDIT_DECISIONS: Log every guard decision at INFO (default: false)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class GuardConfig:
    """Settings shared by route guards and the post-authentication router.

    Attributes:
        login_path: Login route for unauthenticated visitors
        home_path: Fallback destination for unknown roles
        redirect_param: Query parameter with an explicit redirect target
        role_table_path: Injected role table file, None for the built-in table
        audit_decisions: Whether decisions are logged through the audit hook
    """

    login_path: str = "/login"
    home_path: str = "/"
    redirect_param: str = "redirectTo"
    role_table_path: str | None = None
    audit_decisions: bool = False


def _path_from_env(name: str, default: str) -> str:
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    if not value.startswith("/"):
        logger.warning(
            "Ignoring non-absolute path setting",
            extra={"setting": name, "default": default},
        )
        return default
    return value


def get_guard_config() -> GuardConfig:
    """Load GuardConfig from the environment."""
    return GuardConfig(
        login_path=_path_from_env("RBAC_LOGIN_PATH", "/login"),
        home_path=_path_from_env("RBAC_HOME_PATH", "/"),
        redirect_param=os.environ.get("RBAC_REDIRECT_PARAM", "").strip() or "redirectTo",
        role_table_path=os.environ.get("RBAC_ROLE_TABLE") or None,
        audit_decisions=os.environ.get("RBAC_AUDIT_DECISIONS", "").lower() in _TRUTHY,
    )
