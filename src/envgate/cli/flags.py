"""CLI commands for inspecting and evaluating feature flags."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from envgate.cli.exit_codes import ExitCode
from envgate.cli.output import CLIResult, emit, error_exit
from envgate.config.loader import (
    create_evaluator,
    get_default_flags_path,
    load_flag_file,
)
from envgate.environment import Environment
from envgate.evaluator import FlagEvaluator
from envgate.exceptions import InvalidConfigurationError, InvalidEnvironmentError

logger = logging.getLogger(__name__)

flags_file_option = click.option(
    "--flags-file",
    "-f",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="YAML flag file (default: $ENVGATE_FLAGS_PATH or ./flags.yaml).",
)
env_option = click.option(
    "--env",
    "environment",
    type=click.Choice(Environment.values(), case_sensitive=False),
    default=None,
    help="Environment to evaluate in (default: $ENVGATE_ENV or dev).",
)
json_option = click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output in JSON format.",
)


def _load_evaluator(
    flags_file: Path | None,
    environment: str | None,
    json_output: bool,
) -> FlagEvaluator:
    """Build an evaluator, exiting with a CLI error on bad configuration."""
    try:
        return create_evaluator(flags_path=flags_file, environment=environment)
    except InvalidEnvironmentError as e:
        error_exit(str(e), ExitCode.ENVIRONMENT_ERROR, json_output)
    except InvalidConfigurationError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR, json_output)


@click.command("check")
@click.argument("flag_name")
@click.option("--user", "-u", "user_id", default=None, help="User id to check for.")
@env_option
@flags_file_option
@click.option("--explain", is_flag=True, help="Show why the flag is on or off.")
@json_option
def check_command(
    flag_name: str,
    user_id: str | None,
    environment: str | None,
    flags_file: Path | None,
    explain: bool,
    json_output: bool,
) -> None:
    """Check whether a flag is enabled.

    Exits 0 when the flag is enabled and 1 when it is disabled, so the
    command can be used directly in shell conditionals.

    Examples:

        # Is newFeatureA on for tester1 in test?
        envgate check newFeatureA --user tester1 --env test

        # Show the reason
        envgate check newFeatureA --explain
    """
    evaluator = _load_evaluator(flags_file, environment, json_output)
    decision = evaluator.evaluate(flag_name, user_id)
    logger.debug(
        "check %s: enabled=%s reason=%s",
        flag_name,
        decision.enabled,
        decision.reason.value,
        extra={"flag": flag_name, "environment": decision.environment.value},
    )

    status = "enabled" if decision.enabled else "disabled"
    emit(
        CLIResult(
            success=True,
            message=f"{status} ({decision.reason.value})" if explain else status,
            data={
                "flag": decision.flag_name,
                "enabled": decision.enabled,
                "reason": decision.reason.value,
                "environment": decision.environment.value,
                "user": decision.user_id,
            },
            exit_code=ExitCode.SUCCESS
            if decision.enabled
            else ExitCode.FLAG_DISABLED,
        ),
        json_output,
    )


@click.command("list")
@env_option
@flags_file_option
@json_option
def list_command(
    environment: str | None,
    flags_file: Path | None,
    json_output: bool,
) -> None:
    """List all flags with their rules.

    The ENABLED column shows whether each flag is on in the environment
    for a caller with no user id.
    """
    evaluator = _load_evaluator(flags_file, environment, json_output)
    flags = sorted(evaluator.get_all_flags().items())
    enabled = {name: evaluator.is_enabled(name) for name, _ in flags}

    lines = [
        f"Environment: {evaluator.environment.value}",
        f"{'NAME':<30} {'ENVIRONMENTS':<18} {'USERS':<24} {'ENABLED':<7}",
        "-" * 82,
    ]
    for name, rule in flags:
        rendered = rule.to_dict()
        envs = ",".join(rendered["environments"]) or "*"
        users = ",".join(rendered["users"]) or "*"
        if len(users) > 24:
            users = users[:21] + "..."
        on = "yes" if enabled[name] else "no"
        lines.append(f"{name:<30} {envs:<18} {users:<24} {on:<7}")

    emit(
        CLIResult(
            success=True,
            message="\n".join(lines),
            data={
                "environment": evaluator.environment.value,
                "flags": {
                    name: {**rule.to_dict(), "enabled": enabled[name]}
                    for name, rule in flags
                },
            },
        ),
        json_output,
    )


@click.command("show")
@click.argument("flag_name")
@flags_file_option
@json_option
def show_command(
    flag_name: str,
    flags_file: Path | None,
    json_output: bool,
) -> None:
    """Show the rule configured for one flag."""
    evaluator = _load_evaluator(flags_file, None, json_output)
    rule = evaluator.get_flag_rule(flag_name)
    if rule is None:
        error_exit(f"Flag not found: {flag_name}", ExitCode.FLAG_NOT_FOUND, json_output)

    rendered = rule.to_dict()
    lines = [
        f"Flag:         {flag_name}",
        f"Environments: {', '.join(rendered['environments']) or '(any)'}",
        f"Users:        {', '.join(rendered['users']) or '(any)'}",
    ]
    emit(
        CLIResult(
            success=True,
            message="\n".join(lines),
            data={"flag": flag_name, **rendered},
        ),
        json_output,
    )


@click.command("validate")
@flags_file_option
@json_option
def validate_command(flags_file: Path | None, json_output: bool) -> None:
    """Validate a flag file."""
    path = flags_file if flags_file is not None else get_default_flags_path()
    try:
        table = load_flag_file(path)
    except InvalidConfigurationError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR, json_output)

    emit(
        CLIResult(
            success=True,
            message=f"{path}: {len(table)} flags OK",
            data={"path": str(path), "flag_count": len(table)},
        ),
        json_output,
    )
