"""Root logger setup for the envgate CLI and embedding applications."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from envgate.logging.handlers import JSONFormatter, TextFormatter

if TYPE_CHECKING:
    from envgate.config.models import LoggingConfig

logger = logging.getLogger(__name__)


def _open_log_file(path: Path) -> logging.Handler:
    path = path.expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, encoding="utf-8")


def configure_logging(config: LoggingConfig) -> None:
    """Route log records to stderr and, optionally, a log file.

    Stderr always receives records so flag warnings stay visible next to
    command output. Existing root handlers are replaced, so repeated calls
    do not duplicate output. A log file that cannot be opened is reported
    as a warning and skipped.

    Args:
        config: Logging configuration.
    """
    formatter: logging.Formatter = (
        JSONFormatter() if config.format == "json" else TextFormatter()
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    file_error: OSError | None = None
    if config.file is not None:
        try:
            handlers.append(_open_log_file(config.file))
        except OSError as e:
            file_error = e

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.setLevel(config.level_number)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    if file_error is not None:
        logger.warning("Could not open log file %s: %s", config.file, file_error)
