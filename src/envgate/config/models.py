"""Configuration dataclasses."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from envgate.environment import Environment

# Map of lowercase level names to logging module constants.
# CRITICAL is not exposed via configuration.
LEVEL_MAP: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass(frozen=True)
class LoggingConfig:
    """How the CLI reports diagnostics.

    Records always go to stderr; ``file`` adds a second, appending sink.
    """

    # Log level: debug, info, warning, error
    level: str = "warning"

    # Extra log file (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.level.lower() not in LEVEL_MAP:
            raise ValueError(
                f"level must be one of {sorted(LEVEL_MAP)}, got {self.level}"
            )
        valid_formats = {"text", "json"}
        if self.format not in valid_formats:
            raise ValueError(
                f"format must be one of {sorted(valid_formats)}, got {self.format}"
            )

    @property
    def level_number(self) -> int:
        """Numeric logging level for the configured level name."""
        return LEVEL_MAP[self.level.lower()]


@dataclass(frozen=True)
class Settings:
    """Flag file location and initial environment after precedence resolution."""

    flags_path: Path
    environment: Environment
