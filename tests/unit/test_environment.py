"""Tests for environment parsing."""

import pytest

from envgate.environment import Environment, parse_environment
from envgate.exceptions import InvalidEnvironmentError


class TestEnvironment:
    """Tests for the Environment enum."""

    def test_values_in_declaration_order(self) -> None:
        """values() lists dev, test, prod."""
        assert Environment.values() == ("dev", "test", "prod")

    def test_members_compare_equal_to_strings(self) -> None:
        """Members are str subclasses."""
        assert Environment.DEV == "dev"


class TestParseEnvironment:
    """Tests for parse_environment()."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("dev", Environment.DEV),
            ("TEST", Environment.TEST),
            ("  prod\n", Environment.PROD),
            (Environment.PROD, Environment.PROD),
        ],
    )
    def test_valid_values(self, value, expected: Environment) -> None:
        """Known names parse regardless of case and padding."""
        assert parse_environment(value) is expected

    @pytest.mark.parametrize("value", ["staging", "", None, 1, ["dev"]])
    def test_invalid_values(self, value) -> None:
        """Anything else raises InvalidEnvironmentError."""
        with pytest.raises(InvalidEnvironmentError) as exc_info:
            parse_environment(value)
        assert exc_info.value.value == value
        assert exc_info.value.allowed == ("dev", "test", "prod")

    def test_error_message_lists_valid_environments(self) -> None:
        """The message names the bad value and the valid choices."""
        with pytest.raises(InvalidEnvironmentError, match="dev, test, prod"):
            parse_environment("qa")
