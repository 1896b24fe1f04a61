"""Flag rule and decision types.

FlagRule is immutable, so a table of rules can be shared between readers
and copied shallowly without leaking mutations.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import ValidationError

from envgate.environment import Environment
from envgate.exceptions import InvalidConfigurationError
from envgate.schema import FlagRuleModel, format_validation_error


@dataclass(frozen=True)
class FlagRule:
    """Environment and user restrictions attached to one flag.

    An empty set places no restriction on its dimension.
    """

    environments: frozenset[Environment] = field(default_factory=frozenset)
    users: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_model(cls, model: FlagRuleModel) -> FlagRule:
        """Build a FlagRule from a validated FlagRuleModel."""
        return cls(
            environments=frozenset(model.environments or ()),
            users=frozenset(model.users or ()),
        )

    def to_dict(self) -> dict[str, list[str]]:
        """Render the rule as plain sorted lists (for JSON/YAML output)."""
        order = Environment.values()
        return {
            "environments": sorted(
                (e.value for e in self.environments), key=order.index
            ),
            "users": sorted(self.users),
        }


class DecisionReason(str, Enum):
    """Why a flag evaluated the way it did."""

    ENABLED = "enabled"
    FLAG_NOT_FOUND = "flag_not_found"
    ENVIRONMENT_NOT_ALLOWED = "environment_not_allowed"
    USER_REQUIRED = "user_required"
    USER_NOT_ALLOWED = "user_not_allowed"


@dataclass(frozen=True)
class FlagDecision:
    """Outcome of evaluating one flag."""

    flag_name: str
    enabled: bool
    reason: DecisionReason
    environment: Environment
    user_id: str | None = None


def _validate_rule(flag_name: str, data: Mapping[str, Any]) -> FlagRuleModel:
    try:
        return FlagRuleModel.model_validate(dict(data))
    except ValidationError as e:
        raise InvalidConfigurationError(
            format_validation_error(e, prefix=flag_name)
        ) from e


def parse_rule(flag_name: str, raw: FlagRule | Mapping[str, Any]) -> FlagRule:
    """Validate one raw rule.

    Args:
        flag_name: Name of the flag (for error messages).
        raw: A FlagRule, or a mapping with optional environments/users keys.

    Returns:
        The validated FlagRule.

    Raises:
        InvalidConfigurationError: If the rule is malformed.
    """
    if isinstance(raw, FlagRule):
        # Hand-built rules get the same checks as raw mappings
        raw = {"environments": raw.environments, "users": raw.users}
    elif not isinstance(raw, Mapping):
        raise InvalidConfigurationError(
            f"Rule for flag '{flag_name}' must be a mapping, "
            f"got {type(raw).__name__}"
        )
    return FlagRule.from_model(_validate_rule(flag_name, raw))


def build_flag_table(raw: Mapping[str, Any] | None) -> dict[str, FlagRule]:
    """Validate a raw flag table and convert every rule to a FlagRule.

    Args:
        raw: Mapping of flag name to rule (FlagRule or mapping).

    Returns:
        A new dict of flag name to FlagRule.

    Raises:
        InvalidConfigurationError: If the table is absent, empty, not a
            mapping, or contains a malformed rule.
    """
    if raw is None:
        raise InvalidConfigurationError("Flag table is required")
    if not isinstance(raw, Mapping):
        raise InvalidConfigurationError(
            f"Flag table must be a mapping, got {type(raw).__name__}"
        )
    if not raw:
        raise InvalidConfigurationError("Flag table must not be empty")

    table: dict[str, FlagRule] = {}
    for name, rule in raw.items():
        if not isinstance(name, str) or not name.strip():
            raise InvalidConfigurationError(
                f"Flag names must be non-blank strings, got {name!r}"
            )
        table[name] = parse_rule(name, rule)
    return table


def merge_rule(
    flag_name: str,
    existing: FlagRule | None,
    partial: FlagRule | Mapping[str, Any],
) -> FlagRule:
    """Overlay a partial update onto an existing rule, field by field.

    Fields named in the update replace the prior value wholesale; fields it
    omits are kept. A FlagRule update names every field.

    Raises:
        InvalidConfigurationError: If the update is malformed.
    """
    if isinstance(partial, FlagRule):
        return parse_rule(flag_name, partial)
    base = existing or FlagRule()
    if not isinstance(partial, Mapping):
        raise InvalidConfigurationError(
            f"Update for flag '{flag_name}' must be a mapping, "
            f"got {type(partial).__name__}"
        )
    model = _validate_rule(flag_name, partial)
    update = FlagRule.from_model(model)
    return FlagRule(
        environments=(
            update.environments
            if "environments" in model.model_fields_set
            else base.environments
        ),
        users=update.users if "users" in model.model_fields_set else base.users,
    )
