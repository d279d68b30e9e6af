"""CLI entry point for Fluo.

Provides:
- Logging setup shared by all commands
- Configuration management commands
"""

from __future__ import annotations

import logging

import click

from fluo import __version__
from fluo.cli.config_commands import config as config_group
from fluo.models import LoggingConfig, LogLevel
from fluo.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


@click.group()
@click.option(
    "--log-level",
    type=click.Choice([level.value for level in LogLevel], case_sensitive=False),
    default=LogLevel.WARNING.value,
    show_default=True,
    help="Log level for the fluo loggers",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write logs to this file",
)
@click.option(
    "--structured-logging",
    is_flag=True,
    help="Write JSON records to the log file",
)
@click.version_option(__version__, prog_name="fluo")
@click.pass_context
def cli(ctx, log_level, log_file, structured_logging):
    """Fluo - configuration tooling."""
    ctx.ensure_object(dict)
    logging_config = LoggingConfig(
        log_level=LogLevel(log_level.upper()),
        log_file=log_file,
        structured_logging=structured_logging,
    )
    setup_logging(logging_config)
    ctx.obj["logging"] = logging_config
    logger.debug("Logging configured at %s", log_level)


cli.add_command(config_group)


def main():
    """Main CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
