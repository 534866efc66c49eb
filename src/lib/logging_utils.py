"""
Logging Utilities
=================

Helpers that keep access-control logs safe to emit.

Guard decisions log role names, user id prefixes and requested paths. Paths
and query strings are user-controlled, so they are sanitized before they
reach a log record (CWE-117 log injection), and query strings are dropped
because redirect parameters can carry one-time tokens.

For Developers:
    Pass sanitized values through ``extra={...}``, never through f-strings
    built from raw request data.
"""

import re
from typing import Any

# Maximum length for logged user input to prevent log flooding
MAX_LOG_INPUT_LENGTH = 200

# Length of the user id prefix written to logs
USER_ID_PREFIX_LENGTH = 8

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def sanitize_for_log(value: Any, max_length: int = MAX_LOG_INPUT_LENGTH) -> str:
    """
    Sanitize a value for safe logging by removing CRLF and limiting length.

    Example:
        >>> sanitize_for_log("/admin\\n[FAKE] granted")
        '/admin [FAKE] granted'
    """
    text = str(value)
    text = text.replace("\r", " ").replace("\n", " ").replace("\t", " ")
    text = _CONTROL_CHARS.sub(" ", text)

    if len(text) > max_length:
        text = text[:max_length] + "..."

    return text


def user_id_prefix(user_id: str | None) -> str | None:
    """Truncated, sanitized user id for log correlation."""
    if not user_id:
        return None
    return sanitize_for_log(user_id[:USER_ID_PREFIX_LENGTH])


def path_for_log(path: str | None) -> str | None:
    """Request path without its query string, sanitized."""
    if path is None:
        return None
    return sanitize_for_log(path.split("?", 1)[0])


def get_safe_error_info(exception: Exception) -> dict[str, str]:
    """
    Extract safe information from an exception for logging.

    Returns only the exception type. Messages may echo user input.
    """
    return {"error_type": type(exception).__name__}
