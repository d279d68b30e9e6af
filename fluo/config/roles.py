"""Required-property preflight checks per deployment role.

Checks never raise. Every check in a profile runs even after an earlier one
failed, so a single call logs all missing or conflicting properties.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from fluo.config.settings import (
    ADMIN_ACCUMULO_TABLE_PROP,
    CLIENT_ACCUMULO_INSTANCE_PROP,
    CLIENT_ACCUMULO_PASSWORD_PROP,
    CLIENT_ACCUMULO_USER_PROP,
    CLIENT_ACCUMULO_ZOOKEEPERS_PROP,
    CLIENT_APPLICATION_NAME_PROP,
    CLIENT_ZOOKEEPER_CONNECT_PROP,
    MINI_START_ACCUMULO_PROP,
)
from fluo.utils.exceptions import ConfigurationError

if TYPE_CHECKING:  # pragma: no cover
    from fluo.config.configuration import FluoConfiguration

logger = logging.getLogger(__name__)

CLIENT_REQUIRED_PROPS = (
    CLIENT_APPLICATION_NAME_PROP,
    CLIENT_ACCUMULO_USER_PROP,
    CLIENT_ACCUMULO_PASSWORD_PROP,
    CLIENT_ACCUMULO_INSTANCE_PROP,
)

MINI_FORBIDDEN_PROPS = (
    CLIENT_ACCUMULO_USER_PROP,
    CLIENT_ACCUMULO_PASSWORD_PROP,
    CLIENT_ACCUMULO_INSTANCE_PROP,
    CLIENT_ACCUMULO_ZOOKEEPERS_PROP,
    CLIENT_ZOOKEEPER_CONNECT_PROP,
)


class Role(str, Enum):
    """Deployment roles with their own required properties."""

    CLIENT = "client"
    ADMIN = "admin"
    ORACLE = "oracle"
    WORKER = "worker"
    MINI = "mini"


class RoleValidator:
    """Evaluates role profiles against one configuration."""

    def __init__(
        self,
        config: FluoConfiguration,
        log: logging.Logger | None = None,
    ):
        """Initialize role validator.

        Args:
            config: Configuration to inspect
            log: Logger receiving violation messages

        """
        self.config = config
        self.log = log or logger

    def _is_set(self, key: str) -> bool:
        return self.config.contains_key(key) and bool(self.config.get_string(key))

    def verify_string_prop_set(self, key: str) -> bool:
        if self._is_set(key):
            return True
        self.log.info("%s is not set", key)
        return False

    def verify_string_prop_not_set(self, key: str) -> bool:
        if self._is_set(key):
            self.log.info("%s should not be set", key)
            return False
        return True

    def has_required_client_props(self) -> bool:
        valid = True
        for key in CLIENT_REQUIRED_PROPS:
            valid &= self.verify_string_prop_set(key)
        return valid

    def has_required_admin_props(self) -> bool:
        valid = True
        valid &= self.has_required_client_props()
        valid &= self.verify_string_prop_set(ADMIN_ACCUMULO_TABLE_PROP)
        return valid

    def has_required_oracle_props(self) -> bool:
        return self.has_required_client_props()

    def has_required_worker_props(self) -> bool:
        return self.has_required_client_props()

    def has_required_mini_fluo_props(self) -> bool:
        """Check MiniFluo properties.

        When MiniFluo starts its own Accumulo, no client connection
        properties may be set. Otherwise every other role must be satisfied.
        """
        valid = True
        try:
            start_accumulo = self.config.get_mini_start_accumulo()
        except ConfigurationError as e:
            self.log.error("%s", e)
            return False
        if start_accumulo:
            for key in MINI_FORBIDDEN_PROPS:
                valid &= self.verify_string_prop_not_set(key)
            if not valid:
                self.log.error(
                    "Client properties should not be set in your configuration if "
                    "MiniFluo is configured to start its own accumulo (indicated by "
                    "%s being set to true)",
                    MINI_START_ACCUMULO_PROP,
                )
        else:
            valid &= self.has_required_client_props()
            valid &= self.has_required_admin_props()
            valid &= self.has_required_oracle_props()
            valid &= self.has_required_worker_props()
        return valid

    def check(self, role: Role | str) -> bool:
        """Run the profile for ``role``."""
        checks = {
            Role.CLIENT: self.has_required_client_props,
            Role.ADMIN: self.has_required_admin_props,
            Role.ORACLE: self.has_required_oracle_props,
            Role.WORKER: self.has_required_worker_props,
            Role.MINI: self.has_required_mini_fluo_props,
        }
        return checks[Role(role)]()
