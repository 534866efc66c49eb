"""
Unit tests for logging_utils module.

Tests cover security-focused logging utilities:
- sanitize_for_log: CRLF injection prevention
- user_id_prefix: Truncated user correlation ids
- path_for_log: Query strings dropped from logged paths
- get_safe_error_info: Safe exception logging
"""

from src.lib.logging_utils import (
    get_safe_error_info,
    path_for_log,
    sanitize_for_log,
    user_id_prefix,
)


class TestSanitizeForLog:
    """Tests for sanitize_for_log function."""

    def test_removes_newlines(self):
        """Test that newlines are replaced with spaces."""
        result = sanitize_for_log("line1\nline2\nline3")
        assert "\n" not in result
        assert result == "line1 line2 line3"

    def test_removes_carriage_returns(self):
        result = sanitize_for_log("line1\rline2")
        assert result == "line1 line2"

    def test_removes_control_characters(self):
        """Test that control characters are removed."""
        result = sanitize_for_log("text\x00\x1fnull")
        assert "\x00" not in result
        assert "\x1f" not in result

    def test_truncates_long_input(self):
        """Test that long input is truncated with ellipsis."""
        result = sanitize_for_log("a" * 300)
        assert len(result) == 203  # 200 + "..."
        assert result.endswith("...")

    def test_custom_max_length(self):
        result = sanitize_for_log("a" * 100, max_length=50)
        assert len(result) == 53

    def test_converts_non_string_to_string(self):
        assert sanitize_for_log(12345) == "12345"
        assert sanitize_for_log(None) == "None"


class TestUserIdPrefix:
    """Tests for user_id_prefix function."""

    def test_truncates_to_eight_chars(self):
        assert user_id_prefix("0123456789abcdef") == "01234567"

    def test_short_ids_kept(self):
        assert user_id_prefix("u-1") == "u-1"

    def test_missing_user(self):
        assert user_id_prefix(None) is None
        assert user_id_prefix("") is None

    def test_sanitized(self):
        assert "\n" not in user_id_prefix("ab\ncdefgh")


class TestPathForLog:
    """Tests for path_for_log function."""

    def test_drops_query_string(self):
        assert path_for_log("/login?redirectTo=%2Fadmin&token=abc") == "/login"

    def test_plain_path(self):
        assert path_for_log("/seller-dashboard") == "/seller-dashboard"

    def test_none(self):
        assert path_for_log(None) is None

    def test_sanitized(self):
        assert path_for_log("/admin\r\nX-Injected: 1") == "/admin  X-Injected: 1"


class TestGetSafeErrorInfo:
    """Tests for get_safe_error_info function."""

    def test_returns_error_type_only(self):
        """Exception messages can echo user input and are not returned."""
        try:
            raise ValueError("secret message")
        except Exception as e:
            result = get_safe_error_info(e)

        assert result == {"error_type": "ValueError"}
