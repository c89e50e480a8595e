"""Tests for environment-driven settings and logging setup."""

import logging
import os
from pathlib import Path

import pytest

from dnd_charsheet.config import DEFAULT_API_BASE, Settings, load_settings
from dnd_charsheet.exceptions import ValidationError
from dnd_charsheet.logutils import configure_logging, logger


class TestLoadSettings:

    def test_defaults(self):
        settings = load_settings()
        assert settings.storage_file == Path("characters.json")
        assert settings.api_base == DEFAULT_API_BASE
        assert settings.api_timeout == 5.0
        assert settings.max_per_second == 5
        assert settings.enrich is True
        assert settings.spells_file is None

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DND_CHARSHEET_STORAGE_FILE", str(tmp_path / "party.json"))
        monkeypatch.setenv("DND_CHARSHEET_API_BASE", "https://www.dnd5eapi.co/api/2014/")
        monkeypatch.setenv("DND_CHARSHEET_API_TIMEOUT", "2.5")
        monkeypatch.setenv("DND_CHARSHEET_MAX_PER_SECOND", "10")
        monkeypatch.setenv("DND_CHARSHEET_LOG_LEVEL", "debug")
        settings = load_settings()
        assert settings.storage_file == tmp_path / "party.json"
        assert settings.api_base == "https://www.dnd5eapi.co/api/2014"
        assert settings.api_timeout == 2.5
        assert settings.max_per_second == 10
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("value,expected", [
        ("0", False), ("false", False), ("OFF", False), ("no", False),
        ("1", True), ("yes", True),
    ])
    def test_enrich_flag(self, monkeypatch, value, expected):
        monkeypatch.setenv("DND_CHARSHEET_ENRICH", value)
        assert load_settings().enrich is expected

    def test_env_file(self, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text("DND_CHARSHEET_MAX_PER_SECOND=3\n")
        try:
            assert load_settings(env_file).max_per_second == 3
        finally:
            os.environ.pop("DND_CHARSHEET_MAX_PER_SECOND", None)

    def test_invalid_environment_value(self, monkeypatch):
        monkeypatch.setenv("DND_CHARSHEET_MAX_PER_SECOND", "0")
        with pytest.raises(ValidationError) as exc_info:
            load_settings()
        assert exc_info.value.message.startswith("invalid configuration: DND_CHARSHEET_MAX_PER_SECOND:")

    def test_invalid_rate_rejected(self):
        with pytest.raises(ValueError):
            Settings(max_per_second=0)


class TestConfigureLogging:

    def test_level_name(self):
        configure_logging("debug")
        assert logger.level == logging.DEBUG
        configure_logging(logging.WARNING)
        assert logger.level == logging.WARNING

    def test_unknown_level_name_falls_back_to_warning(self):
        configure_logging("chatty")
        assert logger.level == logging.WARNING
