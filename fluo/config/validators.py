"""Validation predicates shared by the typed accessors.

Each check raises ``ConfigurationError`` naming the offending property and
returns the value unchanged otherwise, so checks compose inline on both the
set and the get path.
"""

from __future__ import annotations

from typing import Any

from fluo.utils.exceptions import ConfigurationError

MIN_PORT = 1
MAX_PORT = 65535

_PATH_SEPARATORS = frozenset("/.:")


def check_int(prop: str, value: Any) -> int:
    """Reject anything that is not an int (bools included)."""
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{prop} must be an integer"
        raise ConfigurationError(msg, {"value": value})
    return value


def check_positive(prop: str, value: Any) -> int:
    check_int(prop, value)
    if value <= 0:
        msg = f"{prop} must be positive"
        raise ConfigurationError(msg, {"value": value})
    return value


def check_non_negative(prop: str, value: Any) -> int:
    check_int(prop, value)
    if value < 0:
        msg = f"{prop} must be non-negative"
        raise ConfigurationError(msg, {"value": value})
    return value


def check_retry_timeout(prop: str, value: Any) -> int:
    """Allow -1 (retry indefinitely) and any non-negative value."""
    check_int(prop, value)
    if value < -1:
        msg = f"{prop} must be >= -1"
        raise ConfigurationError(msg, {"value": value})
    return value


def check_port(prop: str, value: Any) -> int:
    check_int(prop, value)
    if not MIN_PORT <= value <= MAX_PORT:
        msg = f"{prop} must be valid port ({MIN_PORT}-{MAX_PORT})"
        raise ConfigurationError(msg, {"value": value})
    return value


def check_not_null(prop: str, value: Any) -> str:
    if value is None:
        msg = f"{prop} cannot be null"
        raise ConfigurationError(msg)
    if not isinstance(value, str):
        msg = f"{prop} must be a string"
        raise ConfigurationError(msg, {"value": value})
    return value


def check_non_empty(prop: str, value: Any) -> str:
    check_not_null(prop, value)
    if not value:
        msg = f"{prop} cannot be empty"
        raise ConfigurationError(msg)
    return value


def _is_invalid_char(code: int) -> bool:
    # 0xD800-0xF8FF spans the surrogates and the private use area
    return (
        0x0000 < code <= 0x001F
        or 0x007F <= code <= 0x009F
        or 0xD800 <= code <= 0xF8FF
        or 0xFFF0 <= code <= 0xFFFF
        or code > 0xFFFF
    )


def verify_application_name(name: Any) -> str:
    """Verify an application name is usable as a ZooKeeper node and HDFS path.

    Reported indexes count code points, so a character above U+FFFF has the
    index of its code point rather than of a UTF-16 surrogate.

    Args:
        name: Candidate application name

    Returns:
        The name, unchanged

    Raises:
        ConfigurationError: The name is null, empty or contains a character
            that ZooKeeper or HDFS reject

    """
    if name is None:
        msg = "Application name cannot be null"
        raise ConfigurationError(msg)
    if not isinstance(name, str):
        msg = "Application name must be a string"
        raise ConfigurationError(msg, {"value": name})
    if not name:
        msg = "Application name length must be > 0"
        raise ConfigurationError(msg)

    reason = None
    for index, char in enumerate(name):
        code = ord(char)
        if code == 0:
            reason = f"null character not allowed @{index}"
        elif char in _PATH_SEPARATORS:
            reason = f"invalid character {char!r} @{index}"
        elif _is_invalid_char(code):
            reason = f"invalid character {char!r} (U+{code:04X}) @{index}"
        if reason is not None:
            break

    if reason is not None:
        msg = f'Invalid application name "{name}" caused by {reason}'
        raise ConfigurationError(msg, {"character": char, "index": index})
    return name
