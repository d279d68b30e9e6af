"""Typed configuration for Fluo.

``FluoConfiguration`` layers its sources into one view and exposes a typed
``set_*``/``get_*`` pair for every setting. Setters return the configuration
so calls can be chained. Getters re-validate what they read, including
defaults, so values loaded from files obey the same rules as values set in
code.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, BinaryIO

from fluo.config import metrics_yaml, observers
from fluo.config.loader import load_configuration_file
from fluo.config.properties import CompositeConfiguration, SubsetConfiguration
from fluo.config.roles import RoleValidator
from fluo.config.settings import (
    ADMIN_ACCUMULO_CLASSPATH_DEFAULT,
    ADMIN_ACCUMULO_CLASSPATH_PROP,
    ADMIN_ACCUMULO_TABLE_PROP,
    ADMIN_CLASS_DEFAULT,
    ADMIN_CLASS_PROP,
    APP_PREFIX,
    CLIENT_ACCUMULO_INSTANCE_PROP,
    CLIENT_ACCUMULO_PASSWORD_PROP,
    CLIENT_ACCUMULO_USER_PROP,
    CLIENT_ACCUMULO_ZOOKEEPERS_DEFAULT,
    CLIENT_ACCUMULO_ZOOKEEPERS_PROP,
    CLIENT_APPLICATION_NAME_PROP,
    CLIENT_CLASS_DEFAULT,
    CLIENT_CLASS_PROP,
    CLIENT_PREFIX,
    CLIENT_RETRY_TIMEOUT_MS_DEFAULT,
    CLIENT_RETRY_TIMEOUT_MS_PROP,
    CLIENT_ZOOKEEPER_CONNECT_DEFAULT,
    CLIENT_ZOOKEEPER_CONNECT_PROP,
    CLIENT_ZOOKEEPER_TIMEOUT_DEFAULT,
    CLIENT_ZOOKEEPER_TIMEOUT_PROP,
    LOADER_NUM_THREADS_DEFAULT,
    LOADER_NUM_THREADS_PROP,
    LOADER_QUEUE_SIZE_DEFAULT,
    LOADER_QUEUE_SIZE_PROP,
    METRICS_YAML_BASE64,
    METRICS_YAML_BASE64_DEFAULT,
    MINI_CLASS_DEFAULT,
    MINI_CLASS_PROP,
    MINI_DATA_DIR_DEFAULT,
    MINI_DATA_DIR_PROP,
    MINI_START_ACCUMULO_DEFAULT,
    MINI_START_ACCUMULO_PROP,
    ORACLE_INSTANCES_DEFAULT,
    ORACLE_INSTANCES_PROP,
    ORACLE_MAX_MEMORY_MB_DEFAULT,
    ORACLE_MAX_MEMORY_MB_PROP,
    ORACLE_NUM_CORES_DEFAULT,
    ORACLE_NUM_CORES_PROP,
    TRANSACTION_ROLLBACK_TIME_DEFAULT,
    TRANSACTION_ROLLBACK_TIME_PROP,
    WORKER_INSTANCES_DEFAULT,
    WORKER_INSTANCES_PROP,
    WORKER_MAX_MEMORY_MB_DEFAULT,
    WORKER_MAX_MEMORY_MB_PROP,
    WORKER_NUM_CORES_DEFAULT,
    WORKER_NUM_CORES_PROP,
    WORKER_NUM_THREADS_DEFAULT,
    WORKER_NUM_THREADS_PROP,
    TimeUnit,
    get_default_configuration,
    set_default_configuration,
)
from fluo.config.validators import (
    check_int,
    check_non_empty,
    check_non_negative,
    check_not_null,
    check_port,
    check_positive,
    check_retry_timeout,
    verify_application_name,
)
from fluo.models import ObserverConfiguration
from fluo.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class FluoConfiguration(CompositeConfiguration):
    """Configuration helper for Fluo.

    Reads of missing keys raise ``MissingPropertyError`` unless a default is
    supplied. Instances are not thread safe.
    """

    def __init__(
        self,
        source: CompositeConfiguration | Mapping[str, Any] | str | Path | None = None,
        *,
        log: logging.Logger | None = None,
    ):
        """Initialize configuration.

        Args:
            source: Nothing for an empty configuration, another
                ``FluoConfiguration`` to copy its keys, a configuration or
                mapping to add as a source layer, or a path to a
                ``.properties``/``.toml`` file to load
            log: Logger used by ``print`` and the role checks

        """
        super().__init__()
        self.throw_exception_on_missing = True
        self.log = log or logger

        if source is None:
            return
        if isinstance(source, FluoConfiguration):
            for key in source.keys():
                self.set_property(key, source.get_property(key))
        elif isinstance(source, (str, Path)):
            self.add_configuration(load_configuration_file(source))
        else:
            self.add_configuration(source)

    @classmethod
    def from_file(
        cls, path: str | Path, *, log: logging.Logger | None = None
    ) -> FluoConfiguration:
        """Load a configuration from a ``.properties`` or ``.toml`` file."""
        return cls(Path(path), log=log)

    def validate(self) -> None:
        """Read every typed property, raising the first validation failure."""
        # keep in alphabetical order
        self.get_accumulo_classpath()
        self.get_accumulo_instance()
        self.get_accumulo_password()
        self.get_accumulo_table()
        self.get_accumulo_user()
        self.get_accumulo_zookeepers()
        self.get_admin_class()
        self.get_app_zookeepers()
        self.get_application_name()
        self.get_client_class()
        self.get_client_retry_timeout()
        self.get_instance_zookeepers()
        self.get_loader_queue_size()
        self.get_loader_threads()
        self.get_metrics_yaml()
        self.get_metrics_yaml_base64()
        self.get_mini_class()
        self.get_mini_data_dir()
        self.get_mini_start_accumulo()
        self.get_observer_config()
        self.get_oracle_instances()
        self.get_oracle_max_memory()
        self.get_oracle_num_cores()
        self.get_transaction_rollback_time()
        self.get_worker_instances()
        self.get_worker_max_memory()
        self.get_worker_num_cores()
        self.get_worker_threads()
        self.get_zookeeper_timeout()

    # Client

    def set_application_name(self, application_name: str) -> FluoConfiguration:
        verify_application_name(application_name)
        self.set_property(CLIENT_APPLICATION_NAME_PROP, application_name)
        return self

    def get_application_name(self) -> str:
        return verify_application_name(self.get_string(CLIENT_APPLICATION_NAME_PROP))

    def set_instance_zookeepers(self, zookeepers: str) -> FluoConfiguration:
        return self.set_non_empty_string(CLIENT_ZOOKEEPER_CONNECT_PROP, zookeepers)

    def get_instance_zookeepers(self) -> str:
        return self.get_non_empty_string(
            CLIENT_ZOOKEEPER_CONNECT_PROP, CLIENT_ZOOKEEPER_CONNECT_DEFAULT
        )

    def get_app_zookeepers(self) -> str:
        """Return the ZooKeeper connect string rooted at this application."""
        return self.get_instance_zookeepers() + "/" + self.get_application_name()

    def set_zookeeper_timeout(self, timeout: int) -> FluoConfiguration:
        return self.set_positive_int(CLIENT_ZOOKEEPER_TIMEOUT_PROP, timeout)

    def get_zookeeper_timeout(self) -> int:
        return self.get_positive_int(
            CLIENT_ZOOKEEPER_TIMEOUT_PROP, CLIENT_ZOOKEEPER_TIMEOUT_DEFAULT
        )

    def set_client_retry_timeout(self, timeout_ms: int) -> FluoConfiguration:
        """Set the client retry timeout; -1 means retry indefinitely."""
        check_retry_timeout(CLIENT_RETRY_TIMEOUT_MS_PROP, timeout_ms)
        self.set_property(CLIENT_RETRY_TIMEOUT_MS_PROP, timeout_ms)
        return self

    def get_client_retry_timeout(self) -> int:
        value = self.get_int(CLIENT_RETRY_TIMEOUT_MS_PROP, CLIENT_RETRY_TIMEOUT_MS_DEFAULT)
        return check_retry_timeout(CLIENT_RETRY_TIMEOUT_MS_PROP, value)

    def set_accumulo_instance(self, accumulo_instance: str) -> FluoConfiguration:
        return self.set_non_empty_string(CLIENT_ACCUMULO_INSTANCE_PROP, accumulo_instance)

    def get_accumulo_instance(self) -> str:
        return self.get_non_empty_string(CLIENT_ACCUMULO_INSTANCE_PROP)

    def set_accumulo_user(self, accumulo_user: str) -> FluoConfiguration:
        return self.set_non_empty_string(CLIENT_ACCUMULO_USER_PROP, accumulo_user)

    def get_accumulo_user(self) -> str:
        return self.get_non_empty_string(CLIENT_ACCUMULO_USER_PROP)

    def set_accumulo_password(self, accumulo_password: str) -> FluoConfiguration:
        self.set_property(
            CLIENT_ACCUMULO_PASSWORD_PROP,
            check_not_null(CLIENT_ACCUMULO_PASSWORD_PROP, accumulo_password),
        )
        return self

    def get_accumulo_password(self) -> str:
        return check_not_null(
            CLIENT_ACCUMULO_PASSWORD_PROP, self.get_string(CLIENT_ACCUMULO_PASSWORD_PROP)
        )

    def set_accumulo_zookeepers(self, zookeepers: str) -> FluoConfiguration:
        return self.set_non_empty_string(CLIENT_ACCUMULO_ZOOKEEPERS_PROP, zookeepers)

    def get_accumulo_zookeepers(self) -> str:
        return self.get_non_empty_string(
            CLIENT_ACCUMULO_ZOOKEEPERS_PROP, CLIENT_ACCUMULO_ZOOKEEPERS_DEFAULT
        )

    def set_client_class(self, client_class: str) -> FluoConfiguration:
        return self.set_non_empty_string(CLIENT_CLASS_PROP, client_class)

    def get_client_class(self) -> str:
        return self.get_non_empty_string(CLIENT_CLASS_PROP, CLIENT_CLASS_DEFAULT)

    # Admin

    def set_accumulo_table(self, table: str) -> FluoConfiguration:
        """Set the Accumulo table.

        Only the admin needs this; clients read it back from ZooKeeper.
        """
        return self.set_non_empty_string(ADMIN_ACCUMULO_TABLE_PROP, table)

    def get_accumulo_table(self) -> str:
        return self.get_non_empty_string(ADMIN_ACCUMULO_TABLE_PROP)

    def set_accumulo_classpath(self, path: str) -> FluoConfiguration:
        self.set_property(
            ADMIN_ACCUMULO_CLASSPATH_PROP,
            check_not_null(ADMIN_ACCUMULO_CLASSPATH_PROP, path),
        )
        return self

    def get_accumulo_classpath(self) -> str:
        return self.get_string(ADMIN_ACCUMULO_CLASSPATH_PROP, ADMIN_ACCUMULO_CLASSPATH_DEFAULT)

    def set_admin_class(self, admin_class: str) -> FluoConfiguration:
        return self.set_non_empty_string(ADMIN_CLASS_PROP, admin_class)

    def get_admin_class(self) -> str:
        return self.get_non_empty_string(ADMIN_CLASS_PROP, ADMIN_CLASS_DEFAULT)

    # Worker

    def set_worker_threads(self, num_threads: int) -> FluoConfiguration:
        return self.set_positive_int(WORKER_NUM_THREADS_PROP, num_threads)

    def get_worker_threads(self) -> int:
        return self.get_positive_int(WORKER_NUM_THREADS_PROP, WORKER_NUM_THREADS_DEFAULT)

    def set_worker_instances(self, worker_instances: int) -> FluoConfiguration:
        return self.set_positive_int(WORKER_INSTANCES_PROP, worker_instances)

    def get_worker_instances(self) -> int:
        return self.get_positive_int(WORKER_INSTANCES_PROP, WORKER_INSTANCES_DEFAULT)

    def set_worker_max_memory(self, max_memory_mb: int) -> FluoConfiguration:
        return self.set_positive_int(WORKER_MAX_MEMORY_MB_PROP, max_memory_mb)

    def get_worker_max_memory(self) -> int:
        return self.get_positive_int(WORKER_MAX_MEMORY_MB_PROP, WORKER_MAX_MEMORY_MB_DEFAULT)

    def set_worker_num_cores(self, num_cores: int) -> FluoConfiguration:
        return self.set_positive_int(WORKER_NUM_CORES_PROP, num_cores)

    def get_worker_num_cores(self) -> int:
        return self.get_positive_int(WORKER_NUM_CORES_PROP, WORKER_NUM_CORES_DEFAULT)

    # Observers

    def get_observer_config(self) -> list[ObserverConfiguration]:
        """Decode every ``io.fluo.observer.*`` property.

        Order follows the key iteration order of the layered store.
        """
        return observers.read_observers(self)

    def set_observers(
        self, observer_configs: Iterable[ObserverConfiguration]
    ) -> FluoConfiguration:
        """Replace the configured observers, indexed from 0."""
        observers.write_observers(self, observer_configs)
        return self

    # Transactions

    def set_transaction_rollback_time(
        self, time: int, unit: TimeUnit = TimeUnit.MILLISECONDS
    ) -> FluoConfiguration:
        check_int(TRANSACTION_ROLLBACK_TIME_PROP, time)
        return self.set_positive_long(TRANSACTION_ROLLBACK_TIME_PROP, unit.to_millis(time))

    def get_transaction_rollback_time(self) -> int:
        """Return the rollback time in milliseconds."""
        return self.get_positive_long(
            TRANSACTION_ROLLBACK_TIME_PROP, TRANSACTION_ROLLBACK_TIME_DEFAULT
        )

    # Loader

    def set_loader_threads(self, num_threads: int) -> FluoConfiguration:
        return self.set_non_negative_int(LOADER_NUM_THREADS_PROP, num_threads)

    def get_loader_threads(self) -> int:
        return self.get_non_negative_int(LOADER_NUM_THREADS_PROP, LOADER_NUM_THREADS_DEFAULT)

    def set_loader_queue_size(self, queue_size: int) -> FluoConfiguration:
        return self.set_non_negative_int(LOADER_QUEUE_SIZE_PROP, queue_size)

    def get_loader_queue_size(self) -> int:
        return self.get_non_negative_int(LOADER_QUEUE_SIZE_PROP, LOADER_QUEUE_SIZE_DEFAULT)

    # Oracle

    def set_oracle_max_memory(self, oracle_max_memory: int) -> FluoConfiguration:
        return self.set_positive_int(ORACLE_MAX_MEMORY_MB_PROP, oracle_max_memory)

    def get_oracle_max_memory(self) -> int:
        return self.get_positive_int(ORACLE_MAX_MEMORY_MB_PROP, ORACLE_MAX_MEMORY_MB_DEFAULT)

    def set_oracle_instances(self, oracle_instances: int) -> FluoConfiguration:
        return self.set_positive_int(ORACLE_INSTANCES_PROP, oracle_instances)

    def get_oracle_instances(self) -> int:
        return self.get_positive_int(ORACLE_INSTANCES_PROP, ORACLE_INSTANCES_DEFAULT)

    def set_oracle_num_cores(self, num_cores: int) -> FluoConfiguration:
        return self.set_positive_int(ORACLE_NUM_CORES_PROP, num_cores)

    def get_oracle_num_cores(self) -> int:
        return self.get_positive_int(ORACLE_NUM_CORES_PROP, ORACLE_NUM_CORES_DEFAULT)

    # MiniFluo

    def set_mini_class(self, mini_class: str) -> FluoConfiguration:
        return self.set_non_empty_string(MINI_CLASS_PROP, mini_class)

    def get_mini_class(self) -> str:
        return self.get_non_empty_string(MINI_CLASS_PROP, MINI_CLASS_DEFAULT)

    def set_mini_start_accumulo(self, start_accumulo: bool) -> FluoConfiguration:
        if not isinstance(start_accumulo, bool):
            msg = f"{MINI_START_ACCUMULO_PROP} must be a boolean"
            raise ConfigurationError(msg, {"value": start_accumulo})
        self.set_property(MINI_START_ACCUMULO_PROP, start_accumulo)
        return self

    def get_mini_start_accumulo(self) -> bool:
        return self.get_boolean(MINI_START_ACCUMULO_PROP, MINI_START_ACCUMULO_DEFAULT)

    def set_mini_data_dir(self, data_dir: str) -> FluoConfiguration:
        return self.set_non_empty_string(MINI_DATA_DIR_PROP, data_dir)

    def get_mini_data_dir(self) -> str:
        return self.get_non_empty_string(MINI_DATA_DIR_PROP, MINI_DATA_DIR_DEFAULT)

    # Application

    def get_app_configuration(self) -> SubsetConfiguration:
        """Return a view of the ``io.fluo.app`` keys.

        Changes made through the view land in this configuration with the
        prefix added. Use it to set application configuration before
        initialization.
        """
        return self.subset(APP_PREFIX)

    # Metrics

    def set_metrics_yaml(self, stream: BinaryIO) -> FluoConfiguration:
        """Base64-encode the YAML read from ``stream`` and store it.

        The stream is read to exhaustion. Read failures raise
        ``ConfigurationIOError``. An empty stream stores an empty value,
        which later reads reject with ``ConfigurationError``.
        """
        data = metrics_yaml.read_stream(stream)
        self.set_property(METRICS_YAML_BASE64, metrics_yaml.encode(data))
        return self

    def set_metrics_yaml_base64(self, base64_yaml: str) -> FluoConfiguration:
        """Store an already base64-encoded metrics YAML.

        Use ``set_metrics_yaml`` to have the encoding done for you.
        """
        return self.set_non_empty_string(METRICS_YAML_BASE64, base64_yaml)

    def get_metrics_yaml_base64(self) -> str:
        return self.get_non_empty_string(METRICS_YAML_BASE64, METRICS_YAML_BASE64_DEFAULT)

    def get_metrics_yaml(self) -> io.BytesIO:
        """Return the decoded metrics YAML as a fresh stream."""
        return io.BytesIO(metrics_yaml.decode(self.get_metrics_yaml_base64()))

    # Misc

    def set_default(self, key: str, value: Any) -> None:
        """Set ``key`` only if no layer holds it yet."""
        if self.get_property(key) is None:
            self.set_property(key, value)

    def print(self) -> None:
        """Log all properties."""
        for key in self.keys():
            self.log.info("%s = %s", key, self.get_property(key))

    def get_client_configuration(self) -> CompositeConfiguration:
        """Return a new store holding only the ``io.fluo.client`` keys."""
        client_config = CompositeConfiguration()
        for key in self.keys():
            if key.startswith(CLIENT_PREFIX):
                client_config.set_property(key, self.get_property(key))
        return client_config

    @staticmethod
    def get_default_configuration() -> CompositeConfiguration:
        """Return a store with every property that has a default.

        Some properties have no default and are not set.
        """
        return get_default_configuration()

    @staticmethod
    def set_default_configuration(config: Any) -> None:
        """Set every property that has a default on ``config``."""
        set_default_configuration(config)

    # Role checks

    def _roles(self) -> RoleValidator:
        return RoleValidator(self, self.log)

    def has_required_client_props(self) -> bool:
        """Return True if the properties a client needs are set."""
        return self._roles().has_required_client_props()

    def has_required_admin_props(self) -> bool:
        """Return True if the properties an admin needs are set."""
        return self._roles().has_required_admin_props()

    def has_required_oracle_props(self) -> bool:
        """Return True if the properties an oracle needs are set."""
        return self._roles().has_required_oracle_props()

    def has_required_worker_props(self) -> bool:
        """Return True if the properties a worker needs are set."""
        return self._roles().has_required_worker_props()

    def has_required_mini_fluo_props(self) -> bool:
        """Return True if the properties MiniFluo needs are set."""
        return self._roles().has_required_mini_fluo_props()

    # Typed helpers, usable for application-defined keys

    def set_positive_int(self, prop: str, value: int) -> FluoConfiguration:
        self.set_property(prop, check_positive(prop, value))
        return self

    def get_positive_int(self, prop: str, default: int) -> int:
        return check_positive(prop, self.get_int(prop, default))

    def set_non_negative_int(self, prop: str, value: int) -> FluoConfiguration:
        self.set_property(prop, check_non_negative(prop, value))
        return self

    def get_non_negative_int(self, prop: str, default: int) -> int:
        return check_non_negative(prop, self.get_int(prop, default))

    def set_positive_long(self, prop: str, value: int) -> FluoConfiguration:
        return self.set_positive_int(prop, value)

    def get_positive_long(self, prop: str, default: int) -> int:
        return self.get_positive_int(prop, default)

    def set_port(self, prop: str, value: int) -> FluoConfiguration:
        self.set_property(prop, check_port(prop, value))
        return self

    def get_port(self, prop: str, default: int) -> int:
        return check_port(prop, self.get_int(prop, default))

    def set_non_empty_string(self, prop: str, value: str) -> FluoConfiguration:
        self.set_property(prop, check_non_empty(prop, value))
        return self

    def get_non_empty_string(self, prop: str, *default: str) -> str:
        """Return a non-empty string, using ``default`` only if ``prop`` is absent."""
        return check_non_empty(prop, self.get_string(prop, *default))
