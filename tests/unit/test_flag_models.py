"""Tests for flag rule models and table validation."""

import pytest

from envgate.environment import Environment
from envgate.exceptions import InvalidConfigurationError
from envgate.models import FlagRule, build_flag_table, merge_rule, parse_rule
from envgate.schema import FlagFileModel, FlagRuleModel, format_validation_error


class TestFlagRule:
    """Tests for the FlagRule dataclass."""

    def test_defaults_are_unrestricted(self) -> None:
        """A default rule has empty sets."""
        rule = FlagRule()
        assert rule.environments == frozenset()
        assert rule.users == frozenset()

    def test_is_immutable(self) -> None:
        """Rules cannot be modified after creation."""
        rule = FlagRule()
        with pytest.raises(AttributeError):
            rule.users = frozenset({"x"})  # type: ignore[misc]

    def test_to_dict_sorts_values(self) -> None:
        """to_dict lists environments in enum order and users alphabetically."""
        rule = FlagRule(
            environments=frozenset({Environment.PROD, Environment.DEV}),
            users=frozenset({"zed", "amy"}),
        )
        assert rule.to_dict() == {"environments": ["dev", "prod"], "users": ["amy", "zed"]}

    def test_duplicates_collapse(self) -> None:
        """Repeated entries in raw data collapse into one."""
        rule = parse_rule("f", {"environments": ["dev", "dev"], "users": ["a", "a"]})
        assert rule.environments == frozenset({Environment.DEV})
        assert rule.users == frozenset({"a"})


class TestFlagRuleModel:
    """Tests for the pydantic rule schema."""

    def test_casefolds_environment_names(self) -> None:
        """Environment names are matched case-insensitively."""
        model = FlagRuleModel.model_validate({"environments": ["Dev", " PROD "]})
        assert model.environments == [Environment.DEV, Environment.PROD]

    def test_rejects_string_instead_of_list(self) -> None:
        """A bare string is not a valid user list."""
        with pytest.raises(ValueError):
            FlagRuleModel.model_validate({"users": "u1"})

    def test_rejects_non_string_users(self) -> None:
        """User ids must be strings."""
        with pytest.raises(ValueError):
            FlagRuleModel.model_validate({"users": [42]})

    def test_flag_file_model_rejects_blank_names(self) -> None:
        """Blank flag names are invalid in files."""
        with pytest.raises(ValueError):
            FlagFileModel.model_validate({"flags": {" ": {}}})


class TestFormatValidationError:
    """Tests for format_validation_error()."""

    def test_includes_location_and_input(self) -> None:
        """The message names the failing field and value."""
        with pytest.raises(ValueError) as exc_info:
            FlagRuleModel.model_validate({"environments": ["qa"]})
        message = format_validation_error(exc_info.value, prefix="myFlag")
        assert message.startswith("Flag validation failed: myFlag.environments.0:")
        assert "'qa'" in message

    def test_non_pydantic_error(self) -> None:
        """Other exceptions are rendered with str()."""
        assert format_validation_error(RuntimeError("boom")) == (
            "Flag validation failed: boom"
        )


class TestBuildFlagTable:
    """Tests for build_flag_table()."""

    def test_converts_raw_rules(self) -> None:
        """Raw mappings become FlagRule values."""
        table = build_flag_table({"a": {"environments": ["test"]}, "b": {}})
        assert table == {
            "a": FlagRule(environments=frozenset({Environment.TEST})),
            "b": FlagRule(),
        }

    def test_returns_new_dict(self) -> None:
        """The result is independent of the input mapping."""
        raw = {"a": FlagRule()}
        table = build_flag_table(raw)
        assert table is not raw

    @pytest.mark.parametrize(
        "raw,match",
        [
            (None, "required"),
            ({}, "empty"),
            ("flags", "mapping"),
            ({"a": "dev"}, "must be a mapping"),
            ({"": {}}, "non-blank"),
            ({1: {}}, "non-blank"),
            ({"a": {"environments": ["qa"]}}, "a.environments"),
        ],
    )
    def test_rejects_invalid_tables(self, raw, match: str) -> None:
        """Malformed tables raise InvalidConfigurationError."""
        with pytest.raises(InvalidConfigurationError, match=match):
            build_flag_table(raw)


class TestMergeRule:
    """Tests for merge_rule()."""

    def test_keeps_omitted_fields(self) -> None:
        """Fields not named in the update are retained."""
        existing = FlagRule(
            environments=frozenset({Environment.DEV}), users=frozenset({"a"})
        )
        merged = merge_rule("f", existing, {"environments": ["prod"]})
        assert merged == FlagRule(
            environments=frozenset({Environment.PROD}), users=frozenset({"a"})
        )

    def test_explicit_null_clears_field(self) -> None:
        """A null field in the update resets it to unrestricted."""
        existing = FlagRule(users=frozenset({"a"}))
        assert merge_rule("f", existing, {"users": None}).users == frozenset()

    def test_starts_from_empty_rule(self) -> None:
        """Without an existing rule the base is unrestricted."""
        assert merge_rule("f", None, {"users": ["a"]}) == FlagRule(
            users=frozenset({"a"})
        )


class TestParseRule:
    """Tests for parse_rule()."""

    def test_normalizes_hand_built_rule(self) -> None:
        """String environments in a FlagRule become Environment members."""
        rule = FlagRule(environments=frozenset({"Prod"}))  # type: ignore[arg-type]
        assert parse_rule("f", rule).environments == frozenset({Environment.PROD})

    def test_rejects_hand_built_rule(self) -> None:
        """A FlagRule holding an unknown environment is rejected."""
        rule = FlagRule(environments=frozenset({"staging"}))  # type: ignore[arg-type]
        with pytest.raises(InvalidConfigurationError, match="f.environments"):
            parse_rule("f", rule)

    def test_rejects_non_mapping(self) -> None:
        """Rules must be mappings or FlagRule instances."""
        with pytest.raises(InvalidConfigurationError, match="must be a mapping"):
            parse_rule("f", ["dev"])  # type: ignore[arg-type]
