"""Flag file loading and settings resolution.

Settings are resolved with the following precedence (highest to lowest):
1. Arguments passed directly to functions (e.g., CLI options)
2. Environment variables (ENVGATE_*)
3. Default values

Environment variables:
- ENVGATE_ENV: Initial environment (dev, test or prod; default dev)
- ENVGATE_FLAGS_PATH: Path to the YAML flag file (default ./flags.yaml)
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import ValidationError

from envgate.config.models import Settings
from envgate.environment import Environment, parse_environment
from envgate.evaluator import FlagEvaluator
from envgate.exceptions import InvalidConfigurationError
from envgate.models import FlagRule
from envgate.schema import FlagFileModel, format_validation_error

logger = logging.getLogger(__name__)

ENV_VAR_ENVIRONMENT = "ENVGATE_ENV"
ENV_VAR_FLAGS_PATH = "ENVGATE_FLAGS_PATH"

DEFAULT_ENVIRONMENT = Environment.DEV
DEFAULT_FLAGS_FILE = Path("flags.yaml")

# Cache for loaded flag files (path -> (table, mtime))
_flag_file_cache: dict[Path, tuple[dict[str, FlagRule], float]] = {}
_flag_file_cache_lock = threading.Lock()


def get_default_flags_path(environ: Mapping[str, str] | None = None) -> Path:
    """Get the flag file path.

    Can be overridden by the ENVGATE_FLAGS_PATH environment variable.

    Args:
        environ: Environment mapping to read (uses os.environ if None).

    Returns:
        Path to the flag file.
    """
    env = os.environ if environ is None else environ
    env_path = env.get(ENV_VAR_FLAGS_PATH)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_FLAGS_FILE


def get_default_environment(environ: Mapping[str, str] | None = None) -> Environment:
    """Get the initial environment from ENVGATE_ENV, or the default.

    Raises:
        InvalidEnvironmentError: If ENVGATE_ENV holds an unknown environment.
    """
    env = os.environ if environ is None else environ
    value = env.get(ENV_VAR_ENVIRONMENT)
    if value:
        return parse_environment(value)
    return DEFAULT_ENVIRONMENT


def resolve_settings(
    flags_path: Path | None = None,
    environment: Environment | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Resolve settings with argument > environment variable > default precedence.

    Raises:
        InvalidEnvironmentError: If the chosen environment is unknown.
    """
    return Settings(
        flags_path=flags_path
        if flags_path is not None
        else get_default_flags_path(environ),
        environment=parse_environment(environment)
        if environment is not None
        else get_default_environment(environ),
    )


def parse_flag_document(data: object, source: str | None = None) -> dict[str, FlagRule]:
    """Validate a parsed flag document.

    Args:
        data: Parsed YAML content, expected to hold a top-level "flags" mapping.
        source: Where the document came from (for error messages).

    Returns:
        Dict of flag name to FlagRule.

    Raises:
        InvalidConfigurationError: If the document is malformed or has no flags.
    """
    if data is None:
        raise InvalidConfigurationError("Flag file is empty", source)
    if not isinstance(data, dict):
        raise InvalidConfigurationError("Flag file must be a YAML mapping", source)

    try:
        model = FlagFileModel.model_validate(data)
    except ValidationError as e:
        raise InvalidConfigurationError(format_validation_error(e), source) from e

    if not model.flags:
        raise InvalidConfigurationError("Flag file defines no flags", source)

    return {name: FlagRule.from_model(rule) for name, rule in model.flags.items()}


def load_flag_file(path: Path) -> dict[str, FlagRule]:
    """Load a YAML flag file.

    Results are cached with mtime-based invalidation. Each call returns a
    new dict, so callers may modify it freely.

    Thread-safe: uses a lock to protect concurrent access to the cache.

    Args:
        path: Path to the flag file.

    Returns:
        Dict of flag name to FlagRule.

    Raises:
        InvalidConfigurationError: If the file is missing, unreadable or invalid.
    """
    try:
        current_mtime = path.stat().st_mtime
    except FileNotFoundError as e:
        raise InvalidConfigurationError("Flag file not found", str(path)) from e
    except OSError as e:
        raise InvalidConfigurationError(
            f"Cannot read flag file: {e}", str(path)
        ) from e

    with _flag_file_cache_lock:
        cached = _flag_file_cache.get(path)
        if cached is not None and cached[1] == current_mtime:
            return dict(cached[0])

        try:
            # Binary mode lets PyYAML report undecodable bytes as a ReaderError
            with open(path, "rb") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidConfigurationError(
                f"Invalid YAML syntax: {e}", str(path)
            ) from e
        except OSError as e:
            raise InvalidConfigurationError(
                f"Cannot read flag file: {e}", str(path)
            ) from e

        table = parse_flag_document(data, str(path))
        _flag_file_cache[path] = (table, current_mtime)
        logger.debug("Loaded %d flags from %s", len(table), path)
        return dict(table)


def clear_flag_file_cache() -> None:
    """Clear the flag file cache.

    Call this if a flag file may have changed within the mtime resolution
    and you need a fresh load. Primarily useful for testing.
    """
    with _flag_file_cache_lock:
        _flag_file_cache.clear()


def create_evaluator(
    flags_path: Path | None = None,
    environment: Environment | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> FlagEvaluator:
    """Build a FlagEvaluator from a flag file.

    The caller owns the returned evaluator and passes it to whatever needs
    it; nothing is stored at module level.

    Args:
        flags_path: Flag file (overrides ENVGATE_FLAGS_PATH).
        environment: Initial environment (overrides ENVGATE_ENV).
        environ: Environment mapping to read (uses os.environ if None).

    Raises:
        InvalidConfigurationError: If the flag file cannot be loaded.
        InvalidEnvironmentError: If the environment is unknown.
    """
    settings = resolve_settings(flags_path, environment, environ)
    table = load_flag_file(settings.flags_path)
    return FlagEvaluator(table, settings.environment)
