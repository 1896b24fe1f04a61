"""Shared test fixtures for envgate."""

import logging
from pathlib import Path

import pytest

from envgate.config.loader import clear_flag_file_cache

SAMPLE_FLAGS_YAML = """\
flags:
  featureA:
    environments: [dev, test]
    users: [user1, admin]
  featureB:
    environments: [prod]
  featureC:
    environments: [dev]
    users: [specificUser]
  featureD:
    environments: [dev, test, prod]
    users: []
"""


@pytest.fixture
def sample_table() -> dict:
    """Return a raw flag table covering each rule shape."""
    return {
        "featureA": {"environments": ["dev", "test"], "users": ["user1", "admin"]},
        "featureB": {"environments": ["prod"]},
        "featureC": {"environments": ["dev"], "users": ["specificUser"]},
        "featureD": {"environments": ["dev", "test", "prod"], "users": []},
    }


@pytest.fixture
def flags_file(tmp_path: Path) -> Path:
    """Write the sample flag table to a YAML file."""
    path = tmp_path / "flags.yaml"
    path.write_text(SAMPLE_FLAGS_YAML, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def reset_flag_file_cache():
    """Start every test with an empty flag file cache."""
    clear_flag_file_cache()
    yield
    clear_flag_file_cache()


@pytest.fixture
def reset_root_logger():
    """Save and restore root logger state around a test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in original_handlers:
            handler.close()
    root.handlers[:] = original_handlers
    root.setLevel(original_level)
