"""Shared utilities: exceptions and logging setup."""

from __future__ import annotations

from fluo.utils.exceptions import (
    ConfigurationError,
    ConfigurationIOError,
    FluoError,
    MissingPropertyError,
    ValidationError,
)
from fluo.utils.logging_config import get_logger, setup_logging

__all__ = [
    "ConfigurationError",
    "ConfigurationIOError",
    "FluoError",
    "MissingPropertyError",
    "ValidationError",
    "get_logger",
    "setup_logging",
]
