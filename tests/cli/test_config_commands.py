"""Tests for the fluo config CLI commands."""

from __future__ import annotations

import pytest
import toml
from click.testing import CliRunner

pytestmark = [pytest.mark.cli]

from fluo.cli.main import cli
from fluo.config.loader import parse_properties
from fluo.config.settings import SETTINGS, WORKER_NUM_THREADS_PROP

CLIENT_PROPERTIES = (
    "io.fluo.client.application.name=app1\n"
    "io.fluo.client.accumulo.user=root\n"
    "io.fluo.client.accumulo.password=secret\n"
    "io.fluo.client.accumulo.instance=inst\n"
)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def client_file(tmp_path):
    path = tmp_path / "fluo.properties"
    path.write_text(CLIENT_PROPERTIES, encoding="utf-8")
    return path


class TestGroup:
    """Tests for the top-level group."""

    def test_help(self, runner):
        """The config group is registered."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "config" in result.output

    def test_version(self, runner):
        """--version prints the package version."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestGetAndShow:
    """Tests for reading values."""

    def test_get(self, runner, client_file):
        """get prints one resolved value."""
        result = runner.invoke(
            cli, ["config", "get", "io.fluo.client.accumulo.user", "--config", str(client_file)]
        )
        assert result.exit_code == 0
        assert result.output.strip() == "root"

    def test_get_missing_key(self, runner, client_file):
        """Missing keys fail with the store's message."""
        result = runner.invoke(
            cli, ["config", "get", "io.fluo.nothing", "--config", str(client_file)]
        )
        assert result.exit_code == 1
        assert "does not map to an existing object" in result.output

    def test_get_nonexistent_file(self, runner, tmp_path):
        """click rejects paths that do not exist."""
        result = runner.invoke(
            cli, ["config", "get", "a", "--config", str(tmp_path / "nope.properties")]
        )
        assert result.exit_code == 2

    def test_show_with_prefix(self, runner, tmp_path):
        """show lists keys below the prefix."""
        path = tmp_path / "app.properties"
        path.write_text("io.fluo.app.a=1\nio.fluo.app.b=2\nother=3\n", encoding="utf-8")
        result = runner.invoke(
            cli, ["config", "show", "--config", str(path), "--prefix", "io.fluo.app"]
        )
        assert result.exit_code == 0
        assert "io.fluo.app.a" in result.output
        assert "io.fluo.app.b" in result.output
        assert "other" not in result.output


class TestValidate:
    """Tests for config validate."""

    def test_valid(self, runner, tmp_path):
        """A complete configuration prints VALID."""
        path = tmp_path / "fluo.properties"
        path.write_text(
            CLIENT_PROPERTIES + "io.fluo.admin.accumulo.table=t1\n", encoding="utf-8"
        )
        result = runner.invoke(cli, ["config", "validate", "--config", str(path)])
        assert result.exit_code == 0
        assert "VALID" in result.output

    def test_invalid(self, runner, tmp_path):
        """Invalid values fail with their message."""
        path = tmp_path / "fluo.properties"
        path.write_text(
            CLIENT_PROPERTIES
            + "io.fluo.admin.accumulo.table=t1\n"
            + f"{WORKER_NUM_THREADS_PROP}=0\n",
            encoding="utf-8",
        )
        result = runner.invoke(cli, ["config", "validate", "--config", str(path)])
        assert result.exit_code == 1
        assert "must be positive" in result.output

    def test_unparseable_file(self, runner, tmp_path):
        """Parse failures are reported as CLI errors."""
        path = tmp_path / "bad.toml"
        path.write_text('a = "unterminated\n', encoding="utf-8")
        result = runner.invoke(cli, ["config", "validate", "--config", str(path)])
        assert result.exit_code == 1
        assert "Invalid TOML" in result.output


class TestCheck:
    """Tests for config check."""

    def test_client_ok(self, runner, client_file):
        """A complete client configuration passes."""
        result = runner.invoke(cli, ["config", "check", "client", "--config", str(client_file)])
        assert result.exit_code == 0
        assert "client: OK" in result.output

    def test_admin_missing_table(self, runner, client_file):
        """Failing checks exit with status 1."""
        result = runner.invoke(cli, ["config", "check", "admin", "--config", str(client_file)])
        assert result.exit_code == 1
        assert "admin: missing or conflicting properties" in result.output

    def test_lists_every_violation(self, runner):
        """Each missing property is printed, not only the summary."""
        result = runner.invoke(cli, ["config", "check", "client"])
        assert result.exit_code == 1
        assert "io.fluo.client.application.name is not set" in result.output
        assert "io.fluo.client.accumulo.user is not set" in result.output
        assert "io.fluo.client.accumulo.password is not set" in result.output
        assert "io.fluo.client.accumulo.instance is not set" in result.output
        assert "client: missing or conflicting properties" in result.output

    def test_lists_mini_conflicts(self, runner, client_file):
        """Connection properties set next to an embedded Accumulo are named."""
        result = runner.invoke(cli, ["config", "check", "mini", "--config", str(client_file)])
        assert result.exit_code == 1
        assert "io.fluo.client.accumulo.user should not be set" in result.output
        assert "MiniFluo is configured to start its own accumulo" in result.output

    def test_unknown_role(self, runner):
        """Roles are restricted to the known names."""
        result = runner.invoke(cli, ["config", "check", "gateway"])
        assert result.exit_code == 2

    def test_mini_without_config(self, runner):
        """MiniFluo with defaults needs nothing set."""
        result = runner.invoke(cli, ["config", "check", "mini"])
        assert result.exit_code == 0


class TestDefaults:
    """Tests for config defaults."""

    def test_properties_format(self, runner):
        """The default output parses back as properties."""
        result = runner.invoke(cli, ["config", "defaults"])
        assert result.exit_code == 0
        properties = parse_properties(result.output)
        assert properties[WORKER_NUM_THREADS_PROP] == "10"
        assert properties["io.fluo.mini.start.accumulo"] == "true"
        assert len(properties) == sum(1 for s in SETTINGS if s.has_default)

    def test_toml_format(self, runner):
        """TOML output uses the flat dotted keys."""
        result = runner.invoke(cli, ["config", "defaults", "--format", "toml"])
        assert result.exit_code == 0
        data = toml.loads(result.output)
        assert data[WORKER_NUM_THREADS_PROP] == 10
        assert data["io.fluo.client.retry.timeout.ms"] == -1


class TestObservers:
    """Tests for config observers."""

    def test_lists_observers(self, runner, tmp_path):
        """Observers print with their parameters."""
        path = tmp_path / "fluo.properties"
        path.write_text(
            "io.fluo.observer.0=com.foo.First,k=v\nio.fluo.observer.1=com.foo.Second\n",
            encoding="utf-8",
        )
        result = runner.invoke(cli, ["config", "observers", "--config", str(path)])
        assert result.exit_code == 0
        assert "com.foo.First [k=v]" in result.output
        assert "com.foo.Second" in result.output

    def test_no_observers(self, runner):
        """An empty configuration has no observers."""
        result = runner.invoke(cli, ["config", "observers"])
        assert result.exit_code == 0
        assert "No observers configured" in result.output

    def test_malformed_observer(self, runner, tmp_path):
        """Decode failures are CLI errors."""
        path = tmp_path / "fluo.properties"
        path.write_text("io.fluo.observer.0=A,bad\n", encoding="utf-8")
        result = runner.invoke(cli, ["config", "observers", "--config", str(path)])
        assert result.exit_code == 1
        assert "invalid param" in result.output
