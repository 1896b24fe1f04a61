"""Deployment environments flags are scoped to."""

from __future__ import annotations

from enum import Enum

from envgate.exceptions import InvalidEnvironmentError


class Environment(str, Enum):
    """Fixed set of deployment stages."""

    DEV = "dev"
    TEST = "test"
    PROD = "prod"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        """Return the string values of all environments, in declaration order."""
        return tuple(member.value for member in cls)


def parse_environment(value: Environment | str | None) -> Environment:
    """Convert a user-supplied value into an Environment.

    Strings are matched case-insensitively after stripping whitespace.

    Args:
        value: Environment member or its string value.

    Returns:
        The matching Environment.

    Raises:
        InvalidEnvironmentError: If value is not one of the known environments.
    """
    if isinstance(value, Environment):
        return value
    if isinstance(value, str):
        try:
            return Environment(value.strip().casefold())
        except ValueError:
            pass
    raise InvalidEnvironmentError(value, Environment.values())
