"""Tests for configuration settings."""
import os

import pytest

from vocabtrack.config import WORDS_PER_CHAPTER, Settings, settings


def test_settings_defaults():
    """Test default settings values."""
    assert WORDS_PER_CHAPTER == 10
    assert settings.records.default_mode == "normal"
    assert settings.database.url == "sqlite://"
    assert settings.logging.rotation == "midnight"
    assert settings.monitoring.enabled is False


def test_settings_validate_accepts_defaults():
    Settings().validate()


@pytest.mark.parametrize(
    "group,attribute,value",
    [
        ("logging", "level", "LOUD"),
        ("records", "default_mode", "spelling"),
        ("monitoring", "port", 0),
        ("monitoring", "port", 70000),
    ],
)
def test_settings_validate_rejects(group: str, attribute: str, value) -> None:
    test_settings = Settings()
    setattr(getattr(test_settings, group), attribute, value)

    with pytest.raises(ValueError):
        test_settings.validate()


def test_env_file_is_loaded():
    """The test environment file is in effect."""
    assert os.getenv("ENV") == "test"
