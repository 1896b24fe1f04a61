"""Result rendering shared by all envgate commands.

Every command builds one CLIResult and hands it to emit(), which prints it
as text or JSON and exits with the result's code. Completed results go to
stdout, failures to stderr.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from typing import Any, NoReturn

import click

from envgate.cli.exit_codes import ExitCode


@dataclass
class CLIResult:
    """Outcome of one command.

    ``success`` means the command ran to completion; a disabled flag is a
    completed check with exit code FLAG_DISABLED. ``message`` is the text
    rendering, ``data`` the JSON payload.
    """

    success: bool
    message: str
    data: dict[str, Any] = field(default_factory=dict)
    exit_code: ExitCode = ExitCode.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"status": "completed", **self.data}
        return {
            "status": "failed",
            "error": {"code": self.exit_code.name, "message": self.message},
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


def emit(result: CLIResult, json_output: bool = False) -> NoReturn:
    """Print a result and exit with its code."""
    text = result.to_json() if json_output else result.message
    if result.success:
        click.echo(text)
    else:
        click.echo(text if json_output else f"Error: {text}", err=True)
    sys.exit(int(result.exit_code))


def error_exit(message: str, code: ExitCode, json_output: bool = False) -> NoReturn:
    """Report a failure and exit with the given code."""
    emit(CLIResult(success=False, message=message, exit_code=code), json_output)
