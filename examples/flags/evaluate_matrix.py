#!/usr/bin/env python3
"""Print a flag/environment/user evaluation matrix.

Builds one evaluator, owned by this script, and evaluates every flag in the
file for each environment and each user listed anywhere in the file.

Usage:
    python examples/flags/evaluate_matrix.py examples/flags/flags.yaml
    python examples/flags/evaluate_matrix.py flags.yaml --user someone
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from envgate import Environment, FlagEvaluator, InvalidConfigurationError
from envgate.config import create_evaluator


def print_matrix(evaluator: FlagEvaluator, users: list[str | None]) -> None:
    """Evaluate every flag for every environment and user."""
    for env in Environment:
        evaluator.set_environment(env)
        print(f"--- {env.value} ---")
        for name in sorted(evaluator):
            for user in users:
                decision = evaluator.evaluate(name, user)
                label = user or "(no user)"
                print(f"{name:<20} {label:<12} {decision.reason.value}")


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("flags_file", type=Path)
    parser.add_argument(
        "--user", action="append", default=[], help="Extra user id to evaluate"
    )
    args = parser.parse_args()

    try:
        evaluator = create_evaluator(args.flags_file, Environment.DEV)
    except InvalidConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    listed = sorted(
        {user for rule in evaluator.get_all_flags().values() for user in rule.users}
    )
    print_matrix(evaluator, [None, *listed, *args.user])
    return 0


if __name__ == "__main__":
    sys.exit(main())
