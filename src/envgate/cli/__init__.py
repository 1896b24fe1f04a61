"""CLI module for envgate."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from envgate import __version__

logger = logging.getLogger(__name__)


def _configure_logging(
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging from CLI options.

    Args:
        log_level: Override log level (debug, info, warning, error).
        log_file: Additional log file; stderr logging is kept as well.
        log_json: Use JSON log format.
    """
    from envgate.config.models import LoggingConfig
    from envgate.logging import configure_logging

    configure_logging(
        LoggingConfig(
            level=log_level or "warning",
            file=log_file,
            format="json" if log_json else "text",
        )
    )


@click.group()
@click.version_option(version=__version__, prog_name="envgate")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: warning).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Also write logs to this file.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
def main(
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """envgate - check environment and user scoped feature flags."""
    _configure_logging(log_level, log_file, log_json)
    logger.debug("envgate %s starting", __version__)


# Defer import to avoid circular dependency
def _register_commands():
    from envgate.cli.flags import (
        check_command,
        list_command,
        show_command,
        validate_command,
    )

    main.add_command(check_command)
    main.add_command(list_command)
    main.add_command(show_command)
    main.add_command(validate_command)


_register_commands()
