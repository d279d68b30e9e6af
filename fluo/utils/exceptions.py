"""Exception hierarchy for Fluo configuration.

Two kinds of failure exist: caller-correctable argument errors
(``ConfigurationError`` and its subclasses) and fatal I/O failures raised
while reading configuration input (``ConfigurationIOError``).
"""

from __future__ import annotations

from typing import Any


class FluoError(Exception):
    """Base exception for all Fluo errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize Fluo error."""
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class ValidationError(FluoError):
    """Data validation errors."""


class ConfigurationError(ValidationError, ValueError):
    """Invalid configuration value or shape."""


class MissingPropertyError(ConfigurationError):
    """A required property is absent from every configuration layer."""

    def __init__(self, key: str):
        """Initialize missing property error."""
        super().__init__(f"Key '{key}' does not map to an existing object!")
        self.key = key


class ConfigurationIOError(FluoError):
    """Fatal failure reading configuration input (file or stream)."""
