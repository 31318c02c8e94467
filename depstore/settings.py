"""Configuration for depstore."""

import json
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from depstore.domain import ConfigurationError

ENV_PREFIX = "DEPSTORE_"


class Settings(BaseModel):
    """Process-wide configuration. Loaded once at startup, read-only afterwards."""

    model_config = ConfigDict(frozen=True)

    connection_string: str = Field(min_length=1)
    echo_sql: bool = False
    log_level: str = "INFO"
    log_json: bool = False


def _from_env(env: Mapping[str, str]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for name in Settings.model_fields:
        value = env.get(f"{ENV_PREFIX}{name.upper()}")
        if value is not None:
            overrides[name] = value
    return overrides


def load_settings(
    path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from an optional JSON file.

    Environment variables (DEPSTORE_CONNECTION_STRING, ...) override file
    values. A missing or empty connection string is fatal here, not at the
    first request.
    """
    env = os.environ if env is None else env
    data: dict[str, object] = {}

    if path is not None:
        try:
            with open(path) as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read settings from {path}: {e}") from e
        if not isinstance(loaded, dict):
            raise ConfigurationError(
                f"Settings file {path} must hold a JSON object, got {type(loaded).__name__}"
            )
        data = loaded

    data.update(_from_env(env))

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e


__all__ = ("Settings", "load_settings", "ENV_PREFIX")
