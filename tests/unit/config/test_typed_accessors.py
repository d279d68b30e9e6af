"""Unit tests for the typed set/get accessors of FluoConfiguration."""

from __future__ import annotations

import pytest

pytestmark = [pytest.mark.unit, pytest.mark.config]

from fluo.config import FluoConfiguration, TimeUnit
from fluo.config import settings
from fluo.utils.exceptions import ConfigurationError, MissingPropertyError


class TestDefaults:
    """Getters fall back to defaults when nothing is set."""

    def test_defaults(self, monkeypatch):
        """Every defaulted getter returns its documented default."""
        monkeypatch.setenv("FLUO_HOME", "/opt/fluo")
        config = FluoConfiguration()
        assert config.get_instance_zookeepers() == "localhost/fluo"
        assert config.get_accumulo_zookeepers() == "localhost"
        assert config.get_zookeeper_timeout() == 30000
        assert config.get_client_retry_timeout() == -1
        assert config.get_client_class() == "io.fluo.core.client.FluoClientImpl"
        assert config.get_admin_class() == "io.fluo.core.client.FluoAdminImpl"
        assert config.get_accumulo_classpath() == ""
        assert config.get_worker_threads() == 10
        assert config.get_worker_instances() == 1
        assert config.get_worker_max_memory() == 1024
        assert config.get_worker_num_cores() == 1
        assert config.get_loader_threads() == 10
        assert config.get_loader_queue_size() == 10
        assert config.get_oracle_instances() == 1
        assert config.get_oracle_max_memory() == 512
        assert config.get_oracle_num_cores() == 1
        assert config.get_transaction_rollback_time() == 300000
        assert config.get_mini_class() == "io.fluo.mini.MiniFluoImpl"
        assert config.get_mini_start_accumulo() is True
        assert config.get_mini_data_dir() == "/opt/fluo/mini"
        assert config.get_observer_config() == []

    @pytest.mark.parametrize(
        "getter",
        [
            "get_application_name",
            "get_accumulo_instance",
            "get_accumulo_user",
            "get_accumulo_password",
            "get_accumulo_table",
        ],
    )
    def test_no_default_raises_missing(self, getter):
        """Settings without a default raise when absent."""
        config = FluoConfiguration()
        with pytest.raises(MissingPropertyError):
            getattr(config, getter)()


class TestRoundTrip:
    """A value set through a setter reads back unchanged."""

    @pytest.mark.parametrize(
        ("setter", "getter", "value"),
        [
            ("set_application_name", "get_application_name", "app1"),
            ("set_instance_zookeepers", "get_instance_zookeepers", "zk1:2181/fluo"),
            ("set_zookeeper_timeout", "get_zookeeper_timeout", 5000),
            ("set_client_retry_timeout", "get_client_retry_timeout", 0),
            ("set_accumulo_instance", "get_accumulo_instance", "accumulo"),
            ("set_accumulo_user", "get_accumulo_user", "root"),
            ("set_accumulo_password", "get_accumulo_password", ""),
            ("set_accumulo_zookeepers", "get_accumulo_zookeepers", "zk1,zk2"),
            ("set_client_class", "get_client_class", "com.example.Client"),
            ("set_accumulo_table", "get_accumulo_table", "fluo_table"),
            ("set_accumulo_classpath", "get_accumulo_classpath", "hdfs://lib/*"),
            ("set_admin_class", "get_admin_class", "com.example.Admin"),
            ("set_worker_threads", "get_worker_threads", 4),
            ("set_worker_instances", "get_worker_instances", 3),
            ("set_worker_max_memory", "get_worker_max_memory", 2048),
            ("set_worker_num_cores", "get_worker_num_cores", 2),
            ("set_loader_threads", "get_loader_threads", 0),
            ("set_loader_queue_size", "get_loader_queue_size", 0),
            ("set_oracle_instances", "get_oracle_instances", 2),
            ("set_oracle_max_memory", "get_oracle_max_memory", 256),
            ("set_oracle_num_cores", "get_oracle_num_cores", 4),
            ("set_mini_class", "get_mini_class", "com.example.Mini"),
            ("set_mini_start_accumulo", "get_mini_start_accumulo", False),
            ("set_mini_data_dir", "get_mini_data_dir", "/tmp/mini"),
        ],
    )
    def test_round_trip(self, setter, getter, value):
        """Setters return the configuration and getters read the value back."""
        config = FluoConfiguration()
        assert getattr(config, setter)(value) is config
        assert getattr(config, getter)() == value

    def test_setters_chain(self):
        """Fluent setters can be chained."""
        config = (
            FluoConfiguration()
            .set_application_name("app1")
            .set_worker_threads(3)
            .set_loader_threads(0)
        )
        assert config.get_application_name() == "app1"
        assert config.get_worker_threads() == 3

    def test_app_zookeepers(self):
        """Application zookeepers append the application name."""
        config = FluoConfiguration()
        config.set_instance_zookeepers("zk1:2181/fluo").set_application_name("app1")
        assert config.get_app_zookeepers() == "zk1:2181/fluo/app1"

    def test_rollback_time_units(self):
        """Rollback times are stored in milliseconds."""
        config = FluoConfiguration()
        config.set_transaction_rollback_time(2, TimeUnit.MINUTES)
        assert config.get_transaction_rollback_time() == 120000
        assert config.get_property(settings.TRANSACTION_ROLLBACK_TIME_PROP) == 120000
        config.set_transaction_rollback_time(750)
        assert config.get_transaction_rollback_time() == 750


class TestSetterValidation:
    """Setters reject invalid values before storing them."""

    @pytest.mark.parametrize(
        ("setter", "value", "message"),
        [
            ("set_zookeeper_timeout", 0, "must be positive"),
            ("set_worker_threads", -1, "must be positive"),
            ("set_worker_instances", 0, "must be positive"),
            ("set_worker_max_memory", 0, "must be positive"),
            ("set_worker_num_cores", 0, "must be positive"),
            ("set_oracle_instances", 0, "must be positive"),
            ("set_oracle_max_memory", -5, "must be positive"),
            ("set_oracle_num_cores", 0, "must be positive"),
            ("set_loader_threads", -1, "must be non-negative"),
            ("set_loader_queue_size", -1, "must be non-negative"),
            ("set_client_retry_timeout", -2, ">= -1"),
            ("set_worker_threads", "4", "must be an integer"),
            ("set_instance_zookeepers", "", "cannot be empty"),
            ("set_accumulo_instance", "", "cannot be empty"),
            ("set_accumulo_user", "", "cannot be empty"),
            ("set_accumulo_zookeepers", "", "cannot be empty"),
            ("set_accumulo_table", "", "cannot be empty"),
            ("set_client_class", "", "cannot be empty"),
            ("set_admin_class", "", "cannot be empty"),
            ("set_mini_class", "", "cannot be empty"),
            ("set_mini_data_dir", "", "cannot be empty"),
            ("set_accumulo_password", None, "cannot be null"),
            ("set_accumulo_classpath", None, "cannot be null"),
            ("set_mini_start_accumulo", "yes", "must be a boolean"),
        ],
    )
    def test_invalid_values_rejected(self, setter, value, message):
        """Invalid values raise and leave the store unchanged."""
        config = FluoConfiguration()
        with pytest.raises(ConfigurationError, match=message):
            getattr(config, setter)(value)
        assert config.is_empty()

    def test_invalid_application_name_rejected(self):
        """Application names are verified on set."""
        config = FluoConfiguration()
        with pytest.raises(ConfigurationError, match="Invalid application name"):
            config.set_application_name("my/app")
        assert not config.contains_key(settings.CLIENT_APPLICATION_NAME_PROP)

    def test_rollback_time_must_be_positive(self):
        """Zero rollback time is rejected after unit conversion."""
        config = FluoConfiguration()
        with pytest.raises(ConfigurationError, match="must be positive"):
            config.set_transaction_rollback_time(0, TimeUnit.SECONDS)


class TestGetterValidation:
    """Getters re-validate values that bypassed the setters."""

    @pytest.mark.parametrize(
        ("key", "raw", "getter", "message"),
        [
            (settings.WORKER_NUM_THREADS_PROP, "0", "get_worker_threads", "must be positive"),
            (settings.WORKER_NUM_THREADS_PROP, "many", "get_worker_threads", "int object"),
            (settings.LOADER_QUEUE_SIZE_PROP, "-3", "get_loader_queue_size", "non-negative"),
            (settings.CLIENT_RETRY_TIMEOUT_MS_PROP, "-7", "get_client_retry_timeout", ">= -1"),
            (settings.CLIENT_ACCUMULO_USER_PROP, "", "get_accumulo_user", "cannot be empty"),
            (settings.CLIENT_APPLICATION_NAME_PROP, "a.b", "get_application_name", "Invalid"),
            (settings.MINI_START_ACCUMULO_PROP, "perhaps", "get_mini_start_accumulo", "boolean"),
            (settings.TRANSACTION_ROLLBACK_TIME_PROP, "0", "get_transaction_rollback_time", "positive"),
        ],
    )
    def test_raw_values_validated(self, key, raw, getter, message):
        """Values loaded from sources are checked on read."""
        config = FluoConfiguration({key: raw})
        with pytest.raises(ConfigurationError, match=message):
            getattr(config, getter)()

    def test_string_values_parse(self):
        """Numeric and boolean text from files is converted."""
        config = FluoConfiguration(
            {
                settings.WORKER_NUM_THREADS_PROP: "7",
                settings.MINI_START_ACCUMULO_PROP: "false",
                settings.CLIENT_RETRY_TIMEOUT_MS_PROP: "-1",
            }
        )
        assert config.get_worker_threads() == 7
        assert config.get_mini_start_accumulo() is False
        assert config.get_client_retry_timeout() == -1

    def test_empty_password_allowed(self):
        """The password is only required to be present."""
        config = FluoConfiguration({settings.CLIENT_ACCUMULO_PASSWORD_PROP: ""})
        assert config.get_accumulo_password() == ""


class TestGenericHelpers:
    """Typed helpers work for application-defined keys."""

    def test_port(self):
        """Port helpers accept 1-65535."""
        config = FluoConfiguration()
        config.set_port("io.fluo.app.port", 9090)
        assert config.get_port("io.fluo.app.port", 80) == 9090
        assert config.get_port("io.fluo.app.other", 80) == 80
        with pytest.raises(ConfigurationError, match="valid port"):
            config.set_port("io.fluo.app.port", 70000)

    def test_non_empty_string_default(self):
        """The default is only used when the key is absent."""
        config = FluoConfiguration()
        assert config.get_non_empty_string("io.fluo.app.name", "fallback") == "fallback"
        config.set_property("io.fluo.app.name", "")
        with pytest.raises(ConfigurationError, match="cannot be empty"):
            config.get_non_empty_string("io.fluo.app.name", "fallback")

    def test_positive_long(self):
        """Long helpers share the positive check."""
        config = FluoConfiguration()
        config.set_positive_long("io.fluo.app.big", 10**12)
        assert config.get_positive_long("io.fluo.app.big", 1) == 10**12

    @pytest.mark.parametrize(
        "setter",
        [
            "set_instance_zookeepers",
            "set_accumulo_instance",
            "set_accumulo_user",
            "set_accumulo_zookeepers",
            "set_accumulo_table",
            "set_client_class",
            "set_admin_class",
            "set_mini_class",
            "set_mini_data_dir",
            "set_metrics_yaml_base64",
        ],
    )
    def test_non_empty_string_rejects_none(self, setter):
        """None is rejected as well as the empty string."""
        with pytest.raises(ConfigurationError, match="cannot be null"):
            getattr(FluoConfiguration(), setter)(None)
