"""Configuration management.

This package handles layered property storage, typed access, file loading,
observer and metrics encoding, and role preflight checks.
"""

from __future__ import annotations

from fluo.config.configuration import FluoConfiguration
from fluo.config.loader import load_configuration_file
from fluo.config.properties import CompositeConfiguration, SubsetConfiguration
from fluo.config.roles import Role, RoleValidator
from fluo.config.settings import (
    SETTINGS,
    SettingDescriptor,
    SettingKind,
    TimeUnit,
    get_default_configuration,
    get_setting,
    set_default_configuration,
)

__all__ = [
    "SETTINGS",
    "CompositeConfiguration",
    "FluoConfiguration",
    "Role",
    "RoleValidator",
    "SettingDescriptor",
    "SettingKind",
    "SubsetConfiguration",
    "TimeUnit",
    "get_default_configuration",
    "get_setting",
    "load_configuration_file",
    "set_default_configuration",
]
