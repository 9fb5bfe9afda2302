"""Configuration file handling for linctl."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

from linctl.constants import (
    API_KEY_ENV,
    APP_DIRNAME,
    CACHE_FILENAME,
    CONFIG_DIR_ENV,
    CONFIG_FILENAME,
)
from linctl.errors import ConfigError, MissingApiKeyError


def get_config_dir() -> Path:
    """Return the per-user configuration directory.

    Precedence:
    1. ``$LINCTL_CONFIG_DIR``
    2. ``$XDG_CONFIG_HOME/linctl``
    3. ``~/.config/linctl``
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / APP_DIRNAME


def get_config_path() -> Path:
    """Get the path to config.toml."""
    return get_config_dir() / CONFIG_FILENAME


def get_cache_path() -> Path:
    """Get the path to the identifier cache file."""
    return get_config_dir() / CACHE_FILENAME


@dataclass
class Config:
    """Persisted settings."""

    api_key_value: str | None = None
    default_team: str | None = None

    def api_key(self) -> str:
        """Return the API key, with the environment taking precedence.

        Raises:
            MissingApiKeyError: If neither source provides a key.
        """
        env_key = os.environ.get(API_KEY_ENV, "").strip()
        if env_key:
            return env_key
        if self.api_key_value:
            return self.api_key_value
        raise MissingApiKeyError(API_KEY_ENV, get_config_path())

    def resolve_team(self, explicit: str | None) -> str | None:
        """Get team key, preferring an explicit argument over the default."""
        return explicit or self.default_team

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.api_key_value:
            data["api_key"] = self.api_key_value
        if self.default_team:
            data["default_team"] = self.default_team
        return data


def load_config(path: Path | None = None) -> Config:
    """Load configuration from config.toml.

    Args:
        path: Config file path (default: :func:`get_config_path`)

    Returns:
        Config, empty if no config file exists

    Raises:
        ConfigError: If the file exists but cannot be read or parsed
    """
    config_path = path or get_config_path()
    if not config_path.exists():
        return Config()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(config_path, str(e)) from e
    except OSError as e:
        raise ConfigError(config_path, e.strerror or str(e)) from e

    api_key = data.get("api_key")
    default_team = data.get("default_team")
    return Config(
        api_key_value=api_key if isinstance(api_key, str) and api_key else None,
        default_team=(
            default_team if isinstance(default_team, str) and default_team else None
        ),
    )


def save_config(config: Config, path: Path | None = None) -> Path:
    """Save configuration to config.toml.

    Returns:
        The path written
    """
    config_path = path or get_config_path()

    # Ensure directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with config_path.open("wb") as f:
        tomli_w.dump(config.to_dict(), f)
    return config_path
