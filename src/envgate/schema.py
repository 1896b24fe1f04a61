"""Pydantic models for validating raw flag configuration.

This module contains:
- FlagRuleModel: One flag's environment and user restrictions
- FlagFileModel: Top-level structure of a YAML flag file
- format_validation_error: Turn a ValidationError into a one-line message
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from envgate.environment import Environment


class FlagRuleModel(BaseModel):
    """Pydantic model for a single flag rule.

    Both fields are optional; a missing or null field means the rule does
    not restrict that dimension.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    environments: list[Environment] | None = None
    users: list[str] | None = None

    @field_validator("environments", mode="before")
    @classmethod
    def casefold_environments(cls, v: object) -> object:
        """Casefold environment names for case-insensitive matching."""
        if isinstance(v, (list, tuple, set, frozenset)):
            return [e.strip().casefold() if isinstance(e, str) else e for e in v]
        return v


class FlagFileModel(BaseModel):
    """Pydantic model for a flag file."""

    model_config = ConfigDict(extra="forbid")

    flags: dict[str, FlagRuleModel]

    @field_validator("flags", mode="before")
    @classmethod
    def empty_rules_to_mappings(cls, v: object) -> object:
        """Treat a flag declared with no body as an unrestricted rule."""
        if isinstance(v, dict):
            return {name: {} if rule is None else rule for name, rule in v.items()}
        return v

    @field_validator("flags")
    @classmethod
    def validate_flag_names(
        cls, v: dict[str, FlagRuleModel]
    ) -> dict[str, FlagRuleModel]:
        """Reject blank flag names."""
        for name in v:
            if not name.strip():
                raise ValueError("Flag names must not be blank")
        return v


def format_validation_error(error: Exception, prefix: str = "") -> str:
    """Format a Pydantic validation error into a user-friendly message."""
    label = "Flag validation failed"
    if isinstance(error, ValidationError):
        errors = error.errors()
        if errors:
            first_error = errors[0]
            loc = ".".join(
                str(x) for x in (prefix, *first_error.get("loc", ())) if x != ""
            )
            msg = first_error.get("msg", str(error))
            bad_input = first_error.get("input")
            if isinstance(bad_input, (str, int, float)) and first_error.get(
                "type"
            ) != "extra_forbidden":
                msg = f"{msg} (got {bad_input!r})"
            if loc:
                return f"{label}: {loc}: {msg}"
            return f"{label}: {msg}"

    return f"{label}: {error}"
