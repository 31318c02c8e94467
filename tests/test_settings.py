"""Tests for settings loading."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from depstore.domain import ConfigurationError
from depstore.settings import Settings, load_settings


class TestLoadSettings:
    def test_from_file(self, tmp_path: Path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"connection_string": "sqlite+aiosqlite:///a.db", "echo_sql": True}))
        settings = load_settings(path, env={})
        assert settings.connection_string == "sqlite+aiosqlite:///a.db"
        assert settings.echo_sql is True
        assert settings.log_level == "INFO"

    def test_env_overrides_file(self, tmp_path: Path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"connection_string": "sqlite+aiosqlite:///a.db"}))
        settings = load_settings(
            path,
            env={"DEPSTORE_CONNECTION_STRING": "sqlite+aiosqlite:///b.db", "DEPSTORE_LOG_JSON": "true"},
        )
        assert settings.connection_string == "sqlite+aiosqlite:///b.db"
        assert settings.log_json is True

    def test_missing_connection_string(self):
        with pytest.raises(ConfigurationError, match="Invalid settings"):
            load_settings(env={})

    def test_empty_connection_string(self):
        with pytest.raises(ConfigurationError):
            load_settings(env={"DEPSTORE_CONNECTION_STRING": ""})

    def test_unreadable_file(self, tmp_path: Path):
        with pytest.raises(ConfigurationError, match="Cannot read settings"):
            load_settings(tmp_path / "absent.json", env={})

    @pytest.mark.parametrize("content", ["[1, 2]", "null", '"x"', "3"])
    def test_non_object_file(self, tmp_path: Path, content: str):
        path = tmp_path / "settings.json"
        path.write_text(content)
        with pytest.raises(ConfigurationError, match="must hold a JSON object"):
            load_settings(path, env={"DEPSTORE_CONNECTION_STRING": "sqlite+aiosqlite://"})

    def test_frozen(self):
        settings = Settings(connection_string="sqlite+aiosqlite://")
        with pytest.raises(ValidationError):
            settings.echo_sql = True  # type: ignore[misc]
