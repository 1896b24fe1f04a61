"""envgate - environment and user scoped feature flags."""

from envgate.environment import Environment, parse_environment
from envgate.evaluator import FlagEvaluator
from envgate.exceptions import (
    FlagConfigError,
    InvalidConfigurationError,
    InvalidEnvironmentError,
)
from envgate.models import DecisionReason, FlagDecision, FlagRule, build_flag_table

__version__ = "0.1.0"

__all__ = [
    "DecisionReason",
    "Environment",
    "FlagConfigError",
    "FlagDecision",
    "FlagEvaluator",
    "FlagRule",
    "InvalidConfigurationError",
    "InvalidEnvironmentError",
    "__version__",
    "build_flag_table",
    "parse_environment",
]
