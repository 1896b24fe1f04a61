"""Exceptions raised by flag configuration and evaluation.

Both concrete errors are programmer-error class faults: they are raised
synchronously at the offending call and are never retried. Looking up an
unknown flag is not an error.
"""

from __future__ import annotations


class FlagConfigError(Exception):
    """Base class for flag configuration errors."""

    pass


class InvalidConfigurationError(FlagConfigError):
    """Raised when a flag table is absent, empty, or malformed."""

    def __init__(self, message: str, source: str | None = None) -> None:
        """Initialize the error.

        Args:
            message: Description of what is wrong with the configuration.
            source: Where the configuration came from (e.g., a file path).
        """
        self.message = message
        self.source = source
        if source:
            message = f"{message} (source: {source})"
        super().__init__(message)


class InvalidEnvironmentError(FlagConfigError):
    """Raised when an environment is outside the fixed set of environments."""

    def __init__(self, value: object, allowed: tuple[str, ...]) -> None:
        self.value = value
        self.allowed = allowed
        super().__init__(
            f"Invalid environment {value!r}. Valid environments are: "
            f"{', '.join(allowed)}"
        )
