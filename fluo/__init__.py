"""Fluo - typed, layered configuration for Fluo applications."""

from __future__ import annotations

__version__ = "0.1.0"

from fluo.config import FluoConfiguration
from fluo.models import ObserverConfiguration

__all__ = ["FluoConfiguration", "ObserverConfiguration", "__version__"]
