"""Feature flag evaluation.

A flag is enabled when its rule admits both the current environment and
the caller's user id. Each dimension is checked independently: an empty
set admits everything, a non-empty set requires membership. Flags missing
from the table are disabled.

The table is held as an immutable snapshot. Writers build a new snapshot
and swap it in under a lock; readers take one reference per call and never
observe a half-applied update.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from envgate.environment import Environment, parse_environment
from envgate.exceptions import InvalidConfigurationError
from envgate.models import (
    DecisionReason,
    FlagDecision,
    FlagRule,
    build_flag_table,
    merge_rule,
)

logger = logging.getLogger(__name__)


def _diagnostic_fields(
    flag_name: str, environment: Environment, user_id: str | None
) -> dict[str, str]:
    """Record attributes identifying one evaluation, for structured logs."""
    fields = {"flag": flag_name, "environment": environment.value}
    if user_id is not None:
        fields["user"] = user_id
    return fields


class FlagEvaluator:
    """Evaluate flags against a flag table and a current environment.

    Example:
        evaluator = FlagEvaluator(
            {"newFeatureA": {"environments": ["dev", "test"], "users": ["tester1"]}},
            "dev",
        )
        evaluator.is_enabled("newFeatureA", "tester1")  # True
    """

    def __init__(
        self,
        table: Mapping[str, FlagRule | Mapping[str, Any]],
        environment: Environment | str,
    ) -> None:
        """Initialize the evaluator.

        Args:
            table: Non-empty mapping of flag name to rule.
            environment: Initial environment.

        Raises:
            InvalidConfigurationError: If the table is absent, empty or malformed.
            InvalidEnvironmentError: If the environment is not a known one.
        """
        self._table: Mapping[str, FlagRule] = MappingProxyType(
            build_flag_table(table)
        )
        self._environment = parse_environment(environment)
        self._write_lock = threading.Lock()

    @property
    def environment(self) -> Environment:
        """The environment flags are currently evaluated for."""
        return self._environment

    def evaluate(self, flag_name: str, user_id: str | None = None) -> FlagDecision:
        """Evaluate a flag and report why it is on or off.

        Args:
            flag_name: Name of the flag.
            user_id: Identity of the caller, if any.

        Returns:
            FlagDecision with the result and its reason.
        """
        table = self._table
        environment = self._environment
        rule = table.get(flag_name)

        if rule is None:
            logger.warning(
                "Feature flag '%s' not found in configuration, defaulting to disabled",
                flag_name,
                extra=_diagnostic_fields(flag_name, environment, user_id),
            )
            reason = DecisionReason.FLAG_NOT_FOUND
        elif rule.environments and environment not in rule.environments:
            reason = DecisionReason.ENVIRONMENT_NOT_ALLOWED
        elif rule.users and user_id is None:
            reason = DecisionReason.USER_REQUIRED
        elif rule.users and user_id not in rule.users:
            reason = DecisionReason.USER_NOT_ALLOWED
        else:
            reason = DecisionReason.ENABLED

        return FlagDecision(
            flag_name=flag_name,
            enabled=reason is DecisionReason.ENABLED,
            reason=reason,
            environment=environment,
            user_id=user_id,
        )

    def is_enabled(self, flag_name: str, user_id: str | None = None) -> bool:
        """Check whether a flag is enabled for the current environment and user.

        Unknown flags are disabled and logged at WARNING level.
        """
        return self.evaluate(flag_name, user_id).enabled

    def set_environment(self, environment: Environment | str) -> None:
        """Change the environment used by subsequent evaluations.

        Raises:
            InvalidEnvironmentError: If the environment is not a known one.
        """
        parsed = parse_environment(environment)
        with self._write_lock:
            previous, self._environment = self._environment, parsed
        logger.debug(
            "Environment changed: %s -> %s",
            previous.value,
            parsed.value,
            extra={"environment": parsed.value},
        )

    def get_flag_rule(self, flag_name: str) -> FlagRule | None:
        """Return the rule for a flag, or None if the flag is unknown."""
        return self._table.get(flag_name)

    def get_all_flags(self) -> dict[str, FlagRule]:
        """Return a copy of the flag table.

        Rules are immutable, so changes to the returned dict never reach
        the evaluator.
        """
        return dict(self._table)

    def replace_table(
        self, new_table: Mapping[str, FlagRule | Mapping[str, Any]]
    ) -> None:
        """Replace the whole flag table.

        Flags absent from new_table no longer exist afterwards.

        Raises:
            InvalidConfigurationError: If new_table is absent, empty or malformed.
        """
        snapshot = MappingProxyType(build_flag_table(new_table))
        with self._write_lock:
            self._table = snapshot
        logger.debug("Flag table replaced (%d flags)", len(snapshot))

    def upsert_flag(
        self, flag_name: str, partial_rule: FlagRule | Mapping[str, Any]
    ) -> FlagRule:
        """Create or update a single flag.

        Fields present in partial_rule overwrite the stored value wholesale;
        omitted fields keep their prior value.

        Args:
            flag_name: Name of the flag to create or update.
            partial_rule: Mapping with any of "environments" and "users",
                or a complete FlagRule.

        Returns:
            The rule now stored for the flag.

        Raises:
            InvalidConfigurationError: If the flag name or update is malformed.
        """
        if not isinstance(flag_name, str) or not flag_name.strip():
            raise InvalidConfigurationError(
                f"Flag names must be non-blank strings, got {flag_name!r}"
            )
        with self._write_lock:
            current = self._table
            rule = merge_rule(flag_name, current.get(flag_name), partial_rule)
            updated = dict(current)
            updated[flag_name] = rule
            self._table = MappingProxyType(updated)
        logger.debug(
            "Flag '%s' upserted: %s",
            flag_name,
            rule.to_dict(),
            extra={"flag": flag_name},
        )
        return rule

    def __contains__(self, flag_name: object) -> bool:
        return flag_name in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)
