"""
kvbridge configuration — loads and merges config from multiple sources.

Precedence (highest to lowest):
1. Explicit overrides (passed in code)
2. Environment variables (KVBRIDGE_*)
3. Project config (./kvbridge.toml)
4. User config (~/.kvbridge/config.toml)
5. Defaults (hardcoded)

Environment variable mapping:
    KVBRIDGE_STORAGE_BACKEND → storage.backend
    KVBRIDGE_STORAGE_PATH → storage.path
    KVBRIDGE_STORAGE_QUOTA_BYTES → storage.quota_bytes ("none" for no limit)
    KVBRIDGE_DELIVERY_CHANNEL → delivery.channel
    KVBRIDGE_DELIVERY_UNAVAILABLE → delivery.unavailable
"""

from __future__ import annotations

import os
import re
import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from kvbridge.core.errors import ConfigError

# Browsers settle on roughly 5 MiB per origin for Web Storage
DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Config Sub-Models
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class StorageConfig(BaseModel):
    """Which backend plays the role of the host's key-value store."""

    backend: Literal["memory", "sqlite", "none"] = "sqlite"
    path: str = "~/.kvbridge/storage.db"
    quota_bytes: int | None = DEFAULT_QUOTA_BYTES


class DeliveryConfig(BaseModel):
    """How envelopes reach callers."""

    channel: Literal["direct", "bus"] = "direct"
    # "drop": no envelope when storage is missing; "report": send `unavailable`
    unavailable: Literal["drop", "report"] = "drop"


class LoggingConfig(BaseModel):
    """Log file location and envelope journaling."""

    dir: str = "~/.kvbridge/logs"
    # bus delivery only; direct callbacks never touch the bus
    log_envelopes: bool = False


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Main Config
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class BridgeConfig(BaseModel):
    """Root configuration for kvbridge."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    delivery: DeliveryConfig = Field(default_factory=DeliveryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @staticmethod
    def load(
        overrides: dict[str, Any] | None = None,
        project_path: Path | None = None,
        user_path: Path | None = None,
    ) -> BridgeConfig:
        """
        Load configuration from all sources and merge.

        Precedence: overrides > env vars > project toml > user toml > defaults
        """
        merged: dict[str, Any] = {}

        user_config_path = user_path or Path.home() / ".kvbridge" / "config.toml"
        if user_config_path.exists():
            _deep_merge(merged, _load_toml(user_config_path))

        project_config_path = project_path or Path.cwd() / "kvbridge.toml"
        if project_config_path.exists():
            _deep_merge(merged, _load_toml(project_config_path))

        _deep_merge(merged, _load_from_env())

        if overrides:
            _deep_merge(merged, overrides)

        _substitute_env_vars(merged)

        try:
            return BridgeConfig(**merged)
        except Exception as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def get_storage_path(self) -> Path:
        """Resolved path of the SQLite database file."""
        return Path(self.storage.path).expanduser()

    def get_log_dir(self) -> Path:
        return Path(self.logging.dir).expanduser()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Internal Helpers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e


def _load_from_env() -> dict[str, Any]:
    """Load configuration from KVBRIDGE_* environment variables."""
    result: dict[str, Any] = {}

    env_mapping = {
        "KVBRIDGE_STORAGE_BACKEND": ("storage", "backend", str),
        "KVBRIDGE_STORAGE_PATH": ("storage", "path", str),
        "KVBRIDGE_STORAGE_QUOTA_BYTES": ("storage", "quota_bytes", _to_optional_int),
        "KVBRIDGE_DELIVERY_CHANNEL": ("delivery", "channel", str),
        "KVBRIDGE_DELIVERY_UNAVAILABLE": ("delivery", "unavailable", str),
        "KVBRIDGE_LOGGING_DIR": ("logging", "dir", str),
        "KVBRIDGE_LOGGING_LOG_ENVELOPES": ("logging", "log_envelopes", _to_bool),
    }

    for env_var, (section, key, convert) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            result.setdefault(section, {})[key] = convert(value)

    return result


def _to_bool(value: str) -> Any:
    """Boolean flag. Unparseable values pass through so validation reports them."""
    lowered = value.strip().lower()
    if lowered in ("true", "yes", "1", "on"):
        return True
    if lowered in ("false", "no", "0", "off"):
        return False
    return value


def _to_optional_int(value: str) -> Any:
    """Integer, or None for "none"/"null"/empty (no limit)."""
    stripped = value.strip()
    if stripped.lower() in ("", "none", "null"):
        return None
    try:
        return int(stripped)
    except ValueError:
        return value


def _deep_merge(base: dict, override: dict) -> None:
    """Deep merge override into base (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


def _substitute(value: str) -> str:
    for var_name in _ENV_PATTERN.findall(value):
        value = value.replace(f"${{{var_name}}}", os.environ.get(var_name, ""))
    return value


def _substitute_env_vars(data: dict) -> None:
    """Recursively substitute ${ENV_VAR} patterns in string values."""
    for key, value in data.items():
        if isinstance(value, dict):
            _substitute_env_vars(value)
        elif isinstance(value, str):
            data[key] = _substitute(value)
        elif isinstance(value, list):
            data[key] = [_substitute(v) if isinstance(v, str) else v for v in value]
