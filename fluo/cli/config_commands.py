"""Configuration CLI commands for Fluo.

Adds commands:
- config show
- config get
- config validate
- config check
- config defaults
- config observers
"""

from __future__ import annotations

import logging

import click
import toml
from rich.console import Console
from rich.table import Table

from fluo.config.configuration import FluoConfiguration
from fluo.config.loader import dump_properties
from fluo.config.roles import Role, RoleValidator
from fluo.config.settings import SETTINGS, get_default_configuration
from fluo.utils.exceptions import FluoError

logger = logging.getLogger(__name__)

console = Console()

_config_option = click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a .properties or .toml configuration file",
)


def _load(config_file: str | None) -> FluoConfiguration:
    try:
        if config_file is None:
            return FluoConfiguration()
        return FluoConfiguration.from_file(config_file)
    except FluoError as e:
        raise click.ClickException(str(e)) from e


@click.group()
def config():
    """Configuration management commands."""


@config.command("show")
@click.option("--prefix", type=str, default=None, help="Only show keys below this prefix")
@_config_option
def show_config(prefix: str | None, config_file: str | None):
    """Show the resolved properties of a configuration."""
    fluo_config = _load(config_file)
    table = Table(title="Fluo Configuration")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key in fluo_config.keys(prefix):
        table.add_row(key, str(fluo_config.get_string(key)))
    console.print(table)


@config.command("get")
@click.argument("key")
@_config_option
def get_value(key: str, config_file: str | None):
    """Print the resolved value of KEY."""
    fluo_config = _load(config_file)
    try:
        click.echo(fluo_config.get_string(key))
    except FluoError as e:
        raise click.ClickException(str(e)) from e


@config.command("validate")
@_config_option
def validate_config_cmd(config_file: str | None):
    """Validate every property and print the result."""
    fluo_config = _load(config_file)
    try:
        fluo_config.validate()
    except FluoError as e:
        raise click.ClickException(str(e)) from e
    click.echo("VALID")


class _EchoHandler(logging.Handler):
    """Echo role check violations to stderr regardless of the CLI log level."""

    def emit(self, record: logging.LogRecord) -> None:
        click.echo(self.format(record), err=True)


@config.command("check")
@click.argument("role", type=click.Choice([role.value for role in Role]))
@_config_option
@click.pass_context
def check_role(ctx: click.Context, role: str, config_file: str | None):
    """Check the properties required to run ROLE are set.

    Every missing or conflicting property is listed before the result.
    """
    fluo_config = _load(config_file)
    check_logger = logging.getLogger("fluo.cli.check")
    check_logger.setLevel(logging.INFO)
    check_logger.propagate = False
    handler = _EchoHandler(logging.INFO)
    check_logger.addHandler(handler)
    try:
        passed = RoleValidator(fluo_config, check_logger).check(role)
    finally:
        check_logger.removeHandler(handler)
    if passed:
        click.echo(f"{role}: OK")
        return
    click.echo(f"{role}: missing or conflicting properties", err=True)
    ctx.exit(1)


@config.command("defaults")
@click.option(
    "--format",
    "format_",
    type=click.Choice(["properties", "toml", "table"]),
    default="properties",
)
def show_defaults(format_: str):
    """Print every property that has a default value."""
    defaults = get_default_configuration().to_dict()
    if format_ == "properties":
        click.echo(dump_properties(defaults), nl=False)
    elif format_ == "toml":
        click.echo(toml.dumps(defaults), nl=False)
    else:
        table = Table(title="Fluo Settings")
        table.add_column("Key", style="cyan")
        table.add_column("Kind")
        table.add_column("Default")
        table.add_column("Description")
        for setting in SETTINGS:
            default = "" if setting.default is None else str(setting.default)
            table.add_row(setting.key, setting.kind.value, default, setting.description)
        console.print(table)


@config.command("observers")
@_config_option
def list_observers(config_file: str | None):
    """List the configured observers."""
    fluo_config = _load(config_file)
    try:
        observer_configs = fluo_config.get_observer_config()
    except FluoError as e:
        raise click.ClickException(str(e)) from e
    if not observer_configs:
        click.echo("No observers configured")
        return
    for observer in observer_configs:
        params = ", ".join(f"{k}={v}" for k, v in observer.parameters.items())
        click.echo(f"{observer.class_name} [{params}]" if params else observer.class_name)
