"""Configuration file loading.

Supports Java-style ``.properties`` files and TOML files. TOML tables are
flattened into dotted keys so both formats produce the same flat mapping.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import toml

from fluo.utils.exceptions import ConfigurationError, ConfigurationIOError

logger = logging.getLogger(__name__)

TOML_SUFFIXES = frozenset({".toml"})

_KEY_TERMINATORS = "=: \t\f"
_SEPARATORS = "=:"
_WHITESPACE = " \t\f"
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def load_configuration_file(path: str | Path) -> dict[str, Any]:
    """Load a configuration file into a flat key/value mapping.

    Args:
        path: ``.toml`` files are parsed as TOML, anything else as properties

    Returns:
        Flat mapping of dotted keys to values, in file order

    Raises:
        ConfigurationIOError: The file cannot be read
        ConfigurationError: The file content cannot be parsed

    """
    file_path = Path(path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        msg = f"Configuration file {file_path} is not valid UTF-8"
        raise ConfigurationError(msg) from e
    except OSError as e:
        msg = f"Failed to read configuration file {file_path}: {e}"
        raise ConfigurationIOError(msg, {"path": str(file_path)}) from e

    if file_path.suffix.lower() in TOML_SUFFIXES:
        try:
            data = toml.loads(text)
        except toml.TomlDecodeError as e:
            msg = f"Invalid TOML in {file_path}: {e}"
            raise ConfigurationError(msg, {"path": str(file_path)}) from e
        properties = flatten(data)
    else:
        properties = parse_properties(text)

    logger.debug("Loaded %d properties from %s", len(properties), file_path)
    return properties


def flatten(data: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested tables into dotted keys.

    Args:
        data: Parsed TOML document
        prefix: Key prefix for nested calls

    Returns:
        Flat mapping; arrays are rejected since values are never split

    """
    result: dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            result.update(flatten(value, full_key))
        elif isinstance(value, list):
            msg = f"Array values are not supported for '{full_key}'; use a single string"
            raise ConfigurationError(msg)
        else:
            result[full_key] = value
    return result


def parse_properties(text: str) -> dict[str, str]:
    """Parse the text of a ``.properties`` file.

    Comment lines start with ``#`` or ``!``. A key ends at the first
    unescaped ``=``, ``:`` or whitespace. A line ending in an odd number of
    backslashes continues on the next line. A repeated key keeps its last
    value.
    """
    properties: dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split_line(line)
        properties[key] = value
    return properties


def _logical_lines(text: str) -> list[str]:
    lines: list[str] = []
    pending: str | None = None
    for raw in text.splitlines():
        stripped = raw.lstrip(_WHITESPACE)
        if pending is None:
            if not stripped or stripped[0] in "#!":
                continue
            current = stripped
        else:
            current = pending + stripped

        trailing = len(current) - len(current.rstrip("\\"))
        if trailing % 2 == 1:
            pending = current[:-1]
            continue
        pending = None
        lines.append(current)

    if pending is not None:
        lines.append(pending)
    return lines


def _split_line(line: str) -> tuple[str, str]:
    index = 0
    length = len(line)
    while index < length:
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in _KEY_TERMINATORS:
            break
        index += 1

    key = line[:index]
    rest = line[index:].lstrip(_WHITESPACE)
    if rest and rest[0] in _SEPARATORS:
        rest = rest[1:].lstrip(_WHITESPACE)
    return _unescape(key), _unescape(rest)


def _unescape(value: str) -> str:
    if "\\" not in value:
        return value
    chars: list[str] = []
    index = 0
    length = len(value)
    while index < length:
        char = value[index]
        if char != "\\" or index + 1 >= length:
            chars.append(char)
            index += 1
            continue
        escaped = value[index + 1]
        if escaped == "u":
            code = value[index + 2 : index + 6]
            msg = f"Malformed \\uxxxx encoding: \\u{code}"
            if len(code) != 4 or not all(c in "0123456789abcdefABCDEF" for c in code):
                raise ConfigurationError(msg)
            chars.append(chr(int(code, 16)))
            index += 6
            continue
        chars.append(_ESCAPES.get(escaped, escaped))
        index += 2
    return "".join(chars)


def dump_properties(properties: dict[str, Any]) -> str:
    """Render a flat mapping as ``.properties`` text that parses back unchanged."""
    lines = []
    for key, value in properties.items():
        if isinstance(value, bool):
            value = "true" if value else "false"
        lines.append(f"{_escape(str(key), is_key=True)}={_escape(str(value))}")
    return "\n".join(lines) + "\n" if lines else ""


def _escape(value: str, is_key: bool = False) -> str:
    chars = []
    for index, char in enumerate(value):
        if char == "\\":
            chars.append("\\\\")
        elif char == "\n":
            chars.append("\\n")
        elif char == "\r":
            chars.append("\\r")
        elif char == "\t":
            chars.append("\\t")
        elif char == "\f":
            chars.append("\\f")
        elif char in "=:#!" and is_key:
            chars.append("\\" + char)
        elif char == " " and (is_key or index == 0):
            chars.append("\\ ")
        else:
            chars.append(char)
    return "".join(chars)
