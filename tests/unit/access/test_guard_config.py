"""Unit tests for environment-driven guard configuration."""

import pytest

from src.access.config import GuardConfig, get_guard_config
from tests.conftest import assert_no_warnings_logged, assert_warning_logged


class TestGetGuardConfig:
    """Tests for get_guard_config()."""

    def test_defaults(self, caplog) -> None:
        assert get_guard_config() == GuardConfig()
        assert_no_warnings_logged(caplog)

    def test_reads_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("RBAC_LOGIN_PATH", "/auth/login")
        monkeypatch.setenv("RBAC_HOME_PATH", "/welcome")
        monkeypatch.setenv("RBAC_REDIRECT_PARAM", "next")
        monkeypatch.setenv("RBAC_ROLE_TABLE", "/etc/marketplace/roles.yaml")

        config = get_guard_config()

        assert config.login_path == "/auth/login"
        assert config.home_path == "/welcome"
        assert config.redirect_param == "next"
        assert config.role_table_path == "/etc/marketplace/roles.yaml"

    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "yes", "on"])
    def test_audit_flag_truthy(self, monkeypatch, value) -> None:
        monkeypatch.setenv("RBAC_AUDIT_DECISIONS", value)
        assert get_guard_config().audit_decisions

    @pytest.mark.parametrize("value", ["", "0", "false", "off", "maybe"])
    def test_audit_flag_falsy(self, monkeypatch, value) -> None:
        monkeypatch.setenv("RBAC_AUDIT_DECISIONS", value)
        assert not get_guard_config().audit_decisions

    def test_relative_login_path_ignored(self, monkeypatch, caplog) -> None:
        monkeypatch.setenv("RBAC_LOGIN_PATH", "https://evil.example/login")

        assert get_guard_config().login_path == "/login"
        assert_warning_logged(caplog, "Ignoring non-absolute path setting")

    def test_blank_values_use_defaults(self, monkeypatch) -> None:
        monkeypatch.setenv("RBAC_HOME_PATH", "   ")
        monkeypatch.setenv("RBAC_REDIRECT_PARAM", " ")
        monkeypatch.setenv("RBAC_ROLE_TABLE", "")

        config = get_guard_config()

        assert config.home_path == "/"
        assert config.redirect_param == "redirectTo"
        assert config.role_table_path is None

    def test_config_is_frozen(self) -> None:
        with pytest.raises(AttributeError):
            GuardConfig().login_path = "/elsewhere"  # type: ignore[misc]
