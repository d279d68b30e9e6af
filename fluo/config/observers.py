"""Observer specification codec.

Each observer is stored as one string property ``io.fluo.observer.<N>``
holding ``className(,key=value)*``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from fluo.config.settings import OBSERVER_PREFIX
from fluo.models import ObserverConfiguration
from fluo.utils.exceptions import ConfigurationError

if TYPE_CHECKING:  # pragma: no cover
    from fluo.config.properties import CompositeConfiguration

_INDEX_PATTERN = re.compile(r"\d+")


def encode_observer(observer: ObserverConfiguration) -> str:
    """Return the property value for one observer."""
    params = "".join(f",{key}={value}" for key, value in observer.parameters.items())
    return observer.class_name + params


def decode_observer(key: str, value: str) -> ObserverConfiguration:
    """Parse the property value stored under ``key``.

    Args:
        key: Property key, used in error messages
        value: ``className(,key=value)*``

    Returns:
        The decoded observer with parameters in encoded order

    Raises:
        ConfigurationError: The value is empty or malformed

    """
    value = value.strip()
    if not value:
        msg = f"{key} is set to empty value"
        raise ConfigurationError(msg)

    fields = value.split(",")
    class_name = fields[0]
    if not class_name:
        msg = f"{key} has empty class name: {value}"
        raise ConfigurationError(msg)

    params: dict[str, str] = {}
    for field in fields[1:]:
        kv = field.split("=")
        if len(kv) != 2:
            msg = (
                f"{key} has invalid param. Expected 'key=value' but "
                f"encountered '{field}'"
            )
            raise ConfigurationError(msg)
        if not kv[0] or not kv[1]:
            msg = f"{key} has empty key or value in param: {field}"
            raise ConfigurationError(msg)
        params[kv[0]] = kv[1]

    return ObserverConfiguration(class_name=class_name, parameters=params)


def read_observers(config: CompositeConfiguration) -> list[ObserverConfiguration]:
    """Decode every observer property in the store's key iteration order."""
    observers = []
    for key in list(config.keys()):
        if key.startswith(OBSERVER_PREFIX):
            observers.append(decode_observer(key, config.get_string(key)))
    return observers


def write_observers(
    config: CompositeConfiguration,
    observers: Iterable[ObserverConfiguration],
) -> None:
    """Replace the indexed observer properties with ``observers``.

    Existing ``io.fluo.observer.<digits>`` keys are cleared first so a
    shorter list leaves no stale entries behind.
    """
    for key in list(config.keys()):
        if key.startswith(OBSERVER_PREFIX) and _INDEX_PATTERN.fullmatch(
            key[len(OBSERVER_PREFIX) :]
        ):
            config.clear_property(key)

    for index, observer in enumerate(observers):
        config.set_property(f"{OBSERVER_PREFIX}{index}", encode_observer(observer))
