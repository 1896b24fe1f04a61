"""Configuration for envgate.

Flag tables are loaded from a YAML file; the file location and initial
environment are resolved with precedence:
1. Explicit arguments / CLI options (highest priority)
2. Environment variables (ENVGATE_*)
3. Default values (lowest priority)
"""

from envgate.config.loader import (
    clear_flag_file_cache,
    create_evaluator,
    get_default_environment,
    get_default_flags_path,
    load_flag_file,
    parse_flag_document,
    resolve_settings,
)
from envgate.config.models import LoggingConfig, Settings

__all__ = [
    # Models
    "LoggingConfig",
    "Settings",
    # Loader
    "clear_flag_file_cache",
    "create_evaluator",
    "get_default_environment",
    "get_default_flags_path",
    "load_flag_file",
    "parse_flag_document",
    "resolve_settings",
]
