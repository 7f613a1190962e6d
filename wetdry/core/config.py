"""
WetDry Configuration — loads and merges config from multiple sources.

Precedence (highest to lowest):
1. Explicit overrides (passed in code)
2. Environment variables (WETDRY_*)
3. Project config (./wetdry.toml)
4. User config (~/.wetdry/config.toml)
5. Defaults (hardcoded)

Environment variable mapping:
    WETDRY_APP_ORIGIN → app.origin
    WETDRY_CACHE_NAME → cache.name
    WETDRY_DEFAULT_URL → notifications.url
    WETDRY_LOG_DIR → logging.dir
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from wetdry.core.errors import ConfigError

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Config Sub-Models
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class AppConfig(BaseModel):
    """The web application the agent serves."""

    name: str = "Wet & Dry ERP"
    origin: str = "http://localhost:3000"
    version: str = "1.1.0"


class CacheConfig(BaseModel):
    """Versioned cache store. Every other store is deleted on activation."""

    name: str = "wetdry-erp-v1"


class NotificationDefaults(BaseModel):
    """Values used when a push payload omits a field."""

    title: str = "Wet & Dry ERP"
    body: str = "You have a new notification"
    icon: str = "/icon.svg"
    badge: str = "/icon.svg"
    tag: str = "default"
    priority: str = "medium"
    url: str = "/dashboard"


class SyncConfig(BaseModel):
    """Background sync hook."""

    tag: str = "sync-notifications"


class LoggingConfig(BaseModel):
    """Log output."""

    dir: str = "~/.wetdry/logs"
    console_level: str = "WARNING"
    log_events: bool = True


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Main Config
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class WorkerConfig(BaseModel):
    """Root configuration for the push agent."""

    app: AppConfig = Field(default_factory=AppConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    notifications: NotificationDefaults = Field(default_factory=NotificationDefaults)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @staticmethod
    def load(
        overrides: dict[str, Any] | None = None,
        project_path: Path | None = None,
        user_path: Path | None = None,
    ) -> WorkerConfig:
        """
        Load configuration from all sources and merge.

        Precedence: overrides > env vars > project toml > user toml > defaults
        """
        merged: dict[str, Any] = {}

        # Layer 1: User config (~/.wetdry/config.toml)
        user_config_path = user_path or Path.home() / ".wetdry" / "config.toml"
        if user_config_path.exists():
            _deep_merge(merged, _load_toml(user_config_path))

        # Layer 2: Project config (./wetdry.toml)
        project_config_path = project_path or Path.cwd() / "wetdry.toml"
        if project_config_path.exists():
            _deep_merge(merged, _load_toml(project_config_path))

        # Layer 3: Environment variables
        _deep_merge(merged, _load_from_env())

        # Layer 4: Explicit overrides
        if overrides:
            _deep_merge(merged, overrides)

        _substitute_env_vars(merged)

        try:
            return WorkerConfig(**merged)
        except Exception as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def get_log_dir(self) -> Path:
        """Resolved log directory."""
        return Path(self.logging.dir).expanduser()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Internal Helpers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file."""
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e


def _load_from_env() -> dict[str, Any]:
    """Load configuration from WETDRY_* environment variables."""
    result: dict[str, Any] = {}

    env_mapping = {
        "WETDRY_APP_NAME": ("app", "name"),
        "WETDRY_APP_ORIGIN": ("app", "origin"),
        "WETDRY_APP_VERSION": ("app", "version"),
        "WETDRY_CACHE_NAME": ("cache", "name"),
        "WETDRY_DEFAULT_TITLE": ("notifications", "title"),
        "WETDRY_DEFAULT_ICON": ("notifications", "icon"),
        "WETDRY_DEFAULT_URL": ("notifications", "url"),
        "WETDRY_SYNC_TAG": ("sync", "tag"),
        "WETDRY_LOG_DIR": ("logging", "dir"),
        "WETDRY_LOG_LEVEL": ("logging", "console_level"),
        "WETDRY_LOG_EVENTS": ("logging", "log_events"),
    }

    for env_var, (section, key) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            if section not in result:
                result[section] = {}
            result[section][key] = _convert_value(value)

    return result


def _convert_value(value: str) -> Any:
    """Convert boolean-looking strings. Everything else stays a string."""
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False
    return value


def _deep_merge(base: dict, override: dict) -> None:
    """Deep merge override into base (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def _substitute_env_vars(data: dict) -> None:
    """Recursively substitute ${ENV_VAR} patterns in string values."""
    pattern = re.compile(r"\$\{([^}]+)\}")

    def substitute(value: str) -> str:
        for var_name in pattern.findall(value):
            value = value.replace(f"${{{var_name}}}", os.environ.get(var_name, ""))
        return value

    for key, value in data.items():
        if isinstance(value, dict):
            _substitute_env_vars(value)
        elif isinstance(value, str):
            data[key] = substitute(value)
        elif isinstance(value, list):
            data[key] = [substitute(v) if isinstance(v, str) else v for v in value]
