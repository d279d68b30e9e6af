"""Property keys, defaults and the setting registry.

Every logical setting has one fully-qualified dotted key below
``io.fluo``. The keys are a stable wire format: persisted or transmitted
configurations must use exactly these names.
"""

from __future__ import annotations

import base64
from collections.abc import MutableMapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from fluo.config.properties import CompositeConfiguration

FLUO_PREFIX = "io.fluo"

# Client properties
CLIENT_PREFIX = FLUO_PREFIX + ".client"
CLIENT_APPLICATION_NAME_PROP = CLIENT_PREFIX + ".application.name"
CLIENT_ACCUMULO_PASSWORD_PROP = CLIENT_PREFIX + ".accumulo.password"
CLIENT_ACCUMULO_USER_PROP = CLIENT_PREFIX + ".accumulo.user"
CLIENT_ACCUMULO_INSTANCE_PROP = CLIENT_PREFIX + ".accumulo.instance"
CLIENT_ACCUMULO_ZOOKEEPERS_PROP = CLIENT_PREFIX + ".accumulo.zookeepers"
CLIENT_ZOOKEEPER_TIMEOUT_PROP = CLIENT_PREFIX + ".zookeeper.timeout"
CLIENT_ZOOKEEPER_CONNECT_PROP = CLIENT_PREFIX + ".zookeeper.connect"
CLIENT_RETRY_TIMEOUT_MS_PROP = CLIENT_PREFIX + ".retry.timeout.ms"
CLIENT_CLASS_PROP = CLIENT_PREFIX + ".class"
CLIENT_ZOOKEEPER_TIMEOUT_DEFAULT = 30000
CLIENT_ACCUMULO_ZOOKEEPERS_DEFAULT = "localhost"
CLIENT_ZOOKEEPER_CONNECT_DEFAULT = "localhost/fluo"
CLIENT_RETRY_TIMEOUT_MS_DEFAULT = -1
CLIENT_CLASS_DEFAULT = FLUO_PREFIX + ".core.client.FluoClientImpl"

# Administration
ADMIN_PREFIX = FLUO_PREFIX + ".admin"
ADMIN_ACCUMULO_TABLE_PROP = ADMIN_PREFIX + ".accumulo.table"
ADMIN_ACCUMULO_CLASSPATH_PROP = ADMIN_PREFIX + ".accumulo.classpath"
ADMIN_ACCUMULO_CLASSPATH_DEFAULT = ""
ADMIN_CLASS_PROP = ADMIN_PREFIX + ".class"
ADMIN_CLASS_DEFAULT = FLUO_PREFIX + ".core.client.FluoAdminImpl"

# Worker
WORKER_PREFIX = FLUO_PREFIX + ".worker"
WORKER_NUM_THREADS_PROP = WORKER_PREFIX + ".num.threads"
WORKER_INSTANCES_PROP = WORKER_PREFIX + ".instances"
WORKER_MAX_MEMORY_MB_PROP = WORKER_PREFIX + ".max.memory.mb"
WORKER_NUM_CORES_PROP = WORKER_PREFIX + ".num.cores"
WORKER_NUM_THREADS_DEFAULT = 10
WORKER_INSTANCES_DEFAULT = 1
WORKER_MAX_MEMORY_MB_DEFAULT = 1024
WORKER_NUM_CORES_DEFAULT = 1

# Loader
LOADER_PREFIX = FLUO_PREFIX + ".loader"
LOADER_NUM_THREADS_PROP = LOADER_PREFIX + ".num.threads"
LOADER_QUEUE_SIZE_PROP = LOADER_PREFIX + ".queue.size"
LOADER_NUM_THREADS_DEFAULT = 10
LOADER_QUEUE_SIZE_DEFAULT = 10

# Oracle
ORACLE_PREFIX = FLUO_PREFIX + ".oracle"
ORACLE_INSTANCES_PROP = ORACLE_PREFIX + ".instances"
ORACLE_MAX_MEMORY_MB_PROP = ORACLE_PREFIX + ".max.memory.mb"
ORACLE_NUM_CORES_PROP = ORACLE_PREFIX + ".num.cores"
ORACLE_INSTANCES_DEFAULT = 1
ORACLE_MAX_MEMORY_MB_DEFAULT = 512
ORACLE_NUM_CORES_DEFAULT = 1

# MiniFluo
MINI_PREFIX = FLUO_PREFIX + ".mini"
MINI_CLASS_PROP = MINI_PREFIX + ".class"
MINI_START_ACCUMULO_PROP = MINI_PREFIX + ".start.accumulo"
MINI_DATA_DIR_PROP = MINI_PREFIX + ".data.dir"
MINI_CLASS_DEFAULT = FLUO_PREFIX + ".mini.MiniFluoImpl"
MINI_START_ACCUMULO_DEFAULT = True
MINI_DATA_DIR_DEFAULT = "${env:FLUO_HOME}/mini"

# Observer, indexed as io.fluo.observer.<N>
OBSERVER_PREFIX = FLUO_PREFIX + ".observer."

# Transaction
TRANSACTION_PREFIX = FLUO_PREFIX + ".tx"
TRANSACTION_ROLLBACK_TIME_PROP = TRANSACTION_PREFIX + ".rollback.time"
TRANSACTION_ROLLBACK_TIME_DEFAULT = 300000

# Metrics
METRICS_YAML_BASE64 = FLUO_PREFIX + ".metrics.yaml.base64"
METRICS_YAML_DEFAULT = b"---\nfrequency: 60 seconds\n"
METRICS_YAML_BASE64_DEFAULT = (
    base64.b64encode(METRICS_YAML_DEFAULT).decode("ascii").replace("\n", "")
)

# Application
APP_PREFIX = FLUO_PREFIX + ".app"


class TimeUnit(Enum):
    """Time units accepted by duration setters, valued in milliseconds."""

    MILLISECONDS = 1
    SECONDS = 1000
    MINUTES = 60 * 1000
    HOURS = 60 * 60 * 1000
    DAYS = 24 * 60 * 60 * 1000

    def to_millis(self, duration: int) -> int:
        """Convert ``duration`` in this unit to milliseconds."""
        return duration * self.value


class SettingKind(str, Enum):
    """Validation predicate applied to a setting."""

    APPLICATION_NAME = "application_name"
    NON_EMPTY_STRING = "non_empty_string"
    NOT_NULL_STRING = "not_null_string"
    POSITIVE_INT = "positive_int"
    NON_NEGATIVE_INT = "non_negative_int"
    POSITIVE_LONG = "positive_long"
    RETRY_TIMEOUT = "retry_timeout"
    BOOLEAN = "boolean"
    BASE64 = "base64"


@dataclass(frozen=True)
class SettingDescriptor:
    """Fully-qualified key, validation kind and optional default of a setting."""

    name: str
    key: str
    kind: SettingKind
    default: Any = None
    description: str = ""

    @property
    def has_default(self) -> bool:
        """Return True if the setting has a default value."""
        return self.default is not None


SETTINGS: tuple[SettingDescriptor, ...] = (
    SettingDescriptor(
        "application_name",
        CLIENT_APPLICATION_NAME_PROP,
        SettingKind.APPLICATION_NAME,
        description="Fluo application name, used as a ZooKeeper node and HDFS path segment",
    ),
    SettingDescriptor(
        "instance_zookeepers",
        CLIENT_ZOOKEEPER_CONNECT_PROP,
        SettingKind.NON_EMPTY_STRING,
        CLIENT_ZOOKEEPER_CONNECT_DEFAULT,
        "ZooKeeper connect string including the Fluo root",
    ),
    SettingDescriptor(
        "zookeeper_timeout",
        CLIENT_ZOOKEEPER_TIMEOUT_PROP,
        SettingKind.POSITIVE_INT,
        CLIENT_ZOOKEEPER_TIMEOUT_DEFAULT,
        "ZooKeeper session timeout in milliseconds",
    ),
    SettingDescriptor(
        "accumulo_zookeepers",
        CLIENT_ACCUMULO_ZOOKEEPERS_PROP,
        SettingKind.NON_EMPTY_STRING,
        CLIENT_ACCUMULO_ZOOKEEPERS_DEFAULT,
        "ZooKeepers used by Accumulo",
    ),
    SettingDescriptor(
        "accumulo_instance",
        CLIENT_ACCUMULO_INSTANCE_PROP,
        SettingKind.NON_EMPTY_STRING,
        description="Accumulo instance name",
    ),
    SettingDescriptor(
        "accumulo_user",
        CLIENT_ACCUMULO_USER_PROP,
        SettingKind.NON_EMPTY_STRING,
        description="Accumulo user",
    ),
    SettingDescriptor(
        "accumulo_password",
        CLIENT_ACCUMULO_PASSWORD_PROP,
        SettingKind.NOT_NULL_STRING,
        description="Accumulo password",
    ),
    SettingDescriptor(
        "client_retry_timeout",
        CLIENT_RETRY_TIMEOUT_MS_PROP,
        SettingKind.RETRY_TIMEOUT,
        CLIENT_RETRY_TIMEOUT_MS_DEFAULT,
        "Client retry timeout in milliseconds, -1 retries indefinitely",
    ),
    SettingDescriptor(
        "client_class",
        CLIENT_CLASS_PROP,
        SettingKind.NON_EMPTY_STRING,
        CLIENT_CLASS_DEFAULT,
        "Client implementation class",
    ),
    SettingDescriptor(
        "accumulo_table",
        ADMIN_ACCUMULO_TABLE_PROP,
        SettingKind.NON_EMPTY_STRING,
        description="Accumulo table backing the application",
    ),
    SettingDescriptor(
        "accumulo_classpath",
        ADMIN_ACCUMULO_CLASSPATH_PROP,
        SettingKind.NOT_NULL_STRING,
        ADMIN_ACCUMULO_CLASSPATH_DEFAULT,
        "Classpath Accumulo tablet servers load application code from",
    ),
    SettingDescriptor(
        "admin_class",
        ADMIN_CLASS_PROP,
        SettingKind.NON_EMPTY_STRING,
        ADMIN_CLASS_DEFAULT,
        "Admin implementation class",
    ),
    SettingDescriptor(
        "worker_threads",
        WORKER_NUM_THREADS_PROP,
        SettingKind.POSITIVE_INT,
        WORKER_NUM_THREADS_DEFAULT,
        "Threads per worker",
    ),
    SettingDescriptor(
        "worker_instances",
        WORKER_INSTANCES_PROP,
        SettingKind.POSITIVE_INT,
        WORKER_INSTANCES_DEFAULT,
        "Number of worker processes",
    ),
    SettingDescriptor(
        "worker_max_memory",
        WORKER_MAX_MEMORY_MB_PROP,
        SettingKind.POSITIVE_INT,
        WORKER_MAX_MEMORY_MB_DEFAULT,
        "Worker memory limit in MB",
    ),
    SettingDescriptor(
        "worker_num_cores",
        WORKER_NUM_CORES_PROP,
        SettingKind.POSITIVE_INT,
        WORKER_NUM_CORES_DEFAULT,
        "Cores per worker",
    ),
    SettingDescriptor(
        "transaction_rollback_time",
        TRANSACTION_ROLLBACK_TIME_PROP,
        SettingKind.POSITIVE_LONG,
        TRANSACTION_ROLLBACK_TIME_DEFAULT,
        "Time in milliseconds before a stalled transaction is rolled back",
    ),
    SettingDescriptor(
        "loader_threads",
        LOADER_NUM_THREADS_PROP,
        SettingKind.NON_NEGATIVE_INT,
        LOADER_NUM_THREADS_DEFAULT,
        "Loader threads, 0 runs loaders in the calling thread",
    ),
    SettingDescriptor(
        "loader_queue_size",
        LOADER_QUEUE_SIZE_PROP,
        SettingKind.NON_NEGATIVE_INT,
        LOADER_QUEUE_SIZE_DEFAULT,
        "Loader queue size",
    ),
    SettingDescriptor(
        "oracle_instances",
        ORACLE_INSTANCES_PROP,
        SettingKind.POSITIVE_INT,
        ORACLE_INSTANCES_DEFAULT,
        "Number of oracle processes",
    ),
    SettingDescriptor(
        "oracle_max_memory",
        ORACLE_MAX_MEMORY_MB_PROP,
        SettingKind.POSITIVE_INT,
        ORACLE_MAX_MEMORY_MB_DEFAULT,
        "Oracle memory limit in MB",
    ),
    SettingDescriptor(
        "oracle_num_cores",
        ORACLE_NUM_CORES_PROP,
        SettingKind.POSITIVE_INT,
        ORACLE_NUM_CORES_DEFAULT,
        "Cores per oracle",
    ),
    SettingDescriptor(
        "mini_class",
        MINI_CLASS_PROP,
        SettingKind.NON_EMPTY_STRING,
        MINI_CLASS_DEFAULT,
        "MiniFluo implementation class",
    ),
    SettingDescriptor(
        "mini_start_accumulo",
        MINI_START_ACCUMULO_PROP,
        SettingKind.BOOLEAN,
        MINI_START_ACCUMULO_DEFAULT,
        "Start an embedded Accumulo for MiniFluo",
    ),
    SettingDescriptor(
        "mini_data_dir",
        MINI_DATA_DIR_PROP,
        SettingKind.NON_EMPTY_STRING,
        MINI_DATA_DIR_DEFAULT,
        "MiniFluo data directory",
    ),
    SettingDescriptor(
        "metrics_yaml_base64",
        METRICS_YAML_BASE64,
        SettingKind.BASE64,
        METRICS_YAML_BASE64_DEFAULT,
        "Base64 encoded metrics reporter YAML",
    ),
)

_SETTINGS_BY_NAME = {setting.name: setting for setting in SETTINGS}
_SETTINGS_BY_KEY = {setting.key: setting for setting in SETTINGS}


def get_setting(name_or_key: str) -> SettingDescriptor | None:
    """Look up a setting by logical name or fully-qualified key."""
    return _SETTINGS_BY_NAME.get(name_or_key) or _SETTINGS_BY_KEY.get(name_or_key)


def set_default_configuration(config: Any) -> None:
    """Set every setting that has a default on ``config``.

    Settings without a default (credentials, application name, table) are
    left unset.

    Args:
        config: A store with ``set_property`` or any mutable mapping

    """
    for setting in SETTINGS:
        if not setting.has_default:
            continue
        if hasattr(config, "set_property"):
            config.set_property(setting.key, setting.default)
        elif isinstance(config, MutableMapping):
            config[setting.key] = setting.default
        else:
            msg = f"Cannot populate defaults on {type(config).__name__}"
            raise TypeError(msg)


def get_default_configuration() -> CompositeConfiguration:
    """Return a new store holding every setting that has a default."""
    config = CompositeConfiguration()
    set_default_configuration(config)
    return config
