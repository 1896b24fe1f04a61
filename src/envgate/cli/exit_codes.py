"""Exit codes for the envgate CLI.

Ranges:
- 0-9: check outcomes
- 10-19: configuration errors
- 20-29: lookup errors
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes used by CLI commands."""

    SUCCESS = 0
    # Returned by "check" so shell scripts can branch on a flag
    FLAG_DISABLED = 1

    CONFIG_ERROR = 10
    ENVIRONMENT_ERROR = 11

    FLAG_NOT_FOUND = 20
