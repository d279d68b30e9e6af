"""Pydantic models for Fluo.

Provides validated data models for observer specifications and logging setup.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Log level")
    log_file: str | None = Field(None, description="Log file path")
    structured_logging: bool = Field(
        default=False,
        description="Write JSON records to the log file",
    )


class ObserverConfiguration(BaseModel):
    """A pluggable observer: its class name and ordered parameters.

    The class name is an opaque identifier; it is stored and parsed but never
    resolved to a class.
    """

    class_name: str = Field(..., description="Observer implementation class name")
    parameters: dict[str, str] = Field(
        default_factory=dict,
        description="Observer parameters, serialized in insertion order",
    )

    @field_validator("class_name")
    @classmethod
    def validate_class_name(cls, v: str) -> str:
        """Validate class name is not empty and holds no separator."""
        if not v:
            msg = "Observer class name cannot be empty"
            raise ValueError(msg)
        if "," in v:
            msg = f"Observer class name cannot contain ',': {v!r}"
            raise ValueError(msg)
        return v

    @field_validator("parameters")
    @classmethod
    def validate_parameters(cls, v: dict[str, str]) -> dict[str, str]:
        """Validate parameter keys and values are not empty and hold no separator."""
        for key, value in v.items():
            if not key or not value:
                msg = f"Observer parameter has empty key or value: {key!r}={value!r}"
                raise ValueError(msg)
            if any(sep in key or sep in value for sep in ",="):
                msg = f"Observer parameter cannot contain ',' or '=': {key!r}={value!r}"
                raise ValueError(msg)
        return v

    def __str__(self) -> str:
        """String representation of the observer."""
        return self.class_name
