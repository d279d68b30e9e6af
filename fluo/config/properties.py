"""Layered property store.

A ``CompositeConfiguration`` holds one mutable write layer followed by an
ordered list of source layers. Reads consult the write layer first and then
each source in the order it was added; the first layer holding the key wins.
Writes always land in the write layer. Values are stored as given and are
never split on delimiter characters.

Instances are not synchronized. Callers sharing one across threads must
provide their own locking.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterator, Mapping
from typing import Any

from fluo.utils.exceptions import ConfigurationError, MissingPropertyError

_MISSING: Any = object()

_BOOLEAN_TRUE = frozenset({"true", "t", "yes", "y", "on", "1"})
_BOOLEAN_FALSE = frozenset({"false", "f", "no", "n", "off", "0"})

_VARIABLE_PATTERN = re.compile(r"\$\{([^}]+)\}")
_ENV_PREFIX = "env:"
_MAX_INTERPOLATION_DEPTH = 16


class CompositeConfiguration:
    """Key/value configuration composed of a write layer and source layers."""

    def __init__(self, *sources: Mapping[str, Any] | CompositeConfiguration):
        """Initialize the store.

        Args:
            *sources: Source layers, highest priority first. Each is copied.

        """
        self._write_layer: dict[str, Any] = {}
        self._sources: list[dict[str, Any]] = []
        self.throw_exception_on_missing = False
        for source in sources:
            self.add_configuration(source)

    def add_configuration(
        self, source: Mapping[str, Any] | CompositeConfiguration
    ) -> None:
        """Append a source layer below the existing ones."""
        if isinstance(source, CompositeConfiguration):
            data = source.to_dict()
        elif isinstance(source, Mapping):
            data = {str(key): value for key, value in source.items()}
        else:
            msg = f"Unsupported configuration source type: {type(source).__name__}"
            raise ConfigurationError(msg)
        self._sources.append(data)

    def get_number_of_configurations(self) -> int:
        """Return the number of layers, the write layer included."""
        return len(self._sources) + 1

    def _layers(self) -> Iterator[dict[str, Any]]:
        yield self._write_layer
        yield from self._sources

    # Raw access

    def contains_key(self, key: str) -> bool:
        """Return True if any layer holds ``key``."""
        return any(key in layer for layer in self._layers())

    def get_property(self, key: str) -> Any | None:
        """Return the raw value for ``key`` or None when absent."""
        for layer in self._layers():
            if key in layer:
                return layer[key]
        return None

    def set_property(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key`` in the write layer.

        Setting None removes the key from every layer.
        """
        if value is None:
            self.clear_property(key)
            return
        self._write_layer[key] = value

    def clear_property(self, key: str) -> None:
        """Remove ``key`` from every layer."""
        for layer in self._layers():
            layer.pop(key, None)

    def clear(self) -> None:
        """Remove all keys from every layer."""
        for layer in self._layers():
            layer.clear()

    def keys(self, prefix: str | None = None) -> Iterator[str]:
        """Iterate over distinct keys in layer order, then insertion order.

        Args:
            prefix: Only yield keys equal to ``prefix`` or starting with
                ``prefix + "."``

        """
        seen: set[str] = set()
        for layer in self._layers():
            for key in list(layer):
                if key in seen:
                    continue
                seen.add(key)
                if prefix is None or key == prefix or key.startswith(prefix + "."):
                    yield key

    def is_empty(self) -> bool:
        """Return True when no layer holds any key."""
        return not any(self._layers())

    def to_dict(self) -> dict[str, Any]:
        """Return resolved raw values keyed in iteration order."""
        return {key: self.get_property(key) for key in self.keys()}

    def subset(self, prefix: str) -> SubsetConfiguration:
        """Return a view of the keys below ``prefix``."""
        return SubsetConfiguration(self, prefix)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.contains_key(key)

    def __iter__(self) -> Iterator[str]:
        return self.keys()

    def __len__(self) -> int:
        return sum(1 for _ in self.keys())

    # Typed access

    def _resolve(self, key: str, default: Any) -> Any:
        value = self.get_property(key)
        if value is not None:
            return value
        if default is not _MISSING:
            return default
        if self.throw_exception_on_missing:
            raise MissingPropertyError(key)
        return None

    def get_string(self, key: str, default: Any = _MISSING) -> str | None:
        """Return the value of ``key`` as an interpolated string."""
        value = self._resolve(key, default)
        if value is None:
            return None
        return self.interpolate(_to_string(value))

    def get_int(self, key: str, default: Any = _MISSING) -> int | None:
        """Return the value of ``key`` converted to an int."""
        value = self._resolve(key, default)
        if value is None:
            return None
        return _to_int(key, value)

    def get_boolean(self, key: str, default: Any = _MISSING) -> bool | None:
        """Return the value of ``key`` converted to a bool."""
        value = self._resolve(key, default)
        if value is None:
            return None
        return _to_boolean(key, value)

    def interpolate(self, value: str) -> str:
        """Substitute ``${env:NAME}`` and ``${other.key}`` references.

        References that cannot be resolved are left as written.
        """
        return self._interpolate(value, 0)

    def _interpolate(self, value: str, depth: int) -> str:
        if "${" not in value or depth >= _MAX_INTERPOLATION_DEPTH:
            return value

        def _replace(match: re.Match[str]) -> str:
            name = match.group(1)
            if name.startswith(_ENV_PREFIX):
                resolved = os.environ.get(name[len(_ENV_PREFIX) :])
                return match.group(0) if resolved is None else resolved
            raw = self.get_property(name)
            if raw is None:
                return match.group(0)
            return self._interpolate(_to_string(raw), depth + 1)

        return _VARIABLE_PATTERN.sub(_replace, value)


class SubsetConfiguration:
    """View over the keys of a parent configuration below a prefix.

    Keys read or written through the view are transparently prefixed in the
    parent, so changes on either side are visible on the other.
    """

    def __init__(self, parent: CompositeConfiguration, prefix: str):
        """Initialize the view.

        Args:
            parent: Backing configuration (shared, not copied)
            prefix: Key prefix without the trailing delimiter

        """
        self.parent = parent
        self.prefix = prefix

    def _parent_key(self, key: str) -> str:
        if not key:
            return self.prefix
        return f"{self.prefix}.{key}"

    def contains_key(self, key: str) -> bool:
        return self.parent.contains_key(self._parent_key(key))

    def get_property(self, key: str) -> Any | None:
        return self.parent.get_property(self._parent_key(key))

    def set_property(self, key: str, value: Any) -> None:
        self.parent.set_property(self._parent_key(key), value)

    def clear_property(self, key: str) -> None:
        self.parent.clear_property(self._parent_key(key))

    def get_string(self, key: str, default: Any = _MISSING) -> str | None:
        return self.parent.get_string(self._parent_key(key), default)

    def get_int(self, key: str, default: Any = _MISSING) -> int | None:
        return self.parent.get_int(self._parent_key(key), default)

    def get_boolean(self, key: str, default: Any = _MISSING) -> bool | None:
        return self.parent.get_boolean(self._parent_key(key), default)

    def keys(self) -> Iterator[str]:
        """Iterate over keys relative to the prefix."""
        start = len(self.prefix) + 1
        for key in self.parent.keys(self.prefix):
            yield key[start:] if key != self.prefix else ""

    def is_empty(self) -> bool:
        return next(self.keys(), None) is None

    def to_dict(self) -> dict[str, Any]:
        return {key: self.get_property(key) for key in self.keys()}

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.contains_key(key)

    def __iter__(self) -> Iterator[str]:
        return self.keys()


def _to_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _to_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        msg = f"'{key}' doesn't map to an int object"
        raise ConfigurationError(msg, {"value": value})
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError as e:
        msg = f"'{key}' doesn't map to an int object"
        raise ConfigurationError(msg, {"value": value}) from e


def _to_boolean(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    low = str(value).strip().lower()
    if low in _BOOLEAN_TRUE:
        return True
    if low in _BOOLEAN_FALSE:
        return False
    msg = f"'{key}' doesn't map to a boolean object"
    raise ConfigurationError(msg, {"value": value})
