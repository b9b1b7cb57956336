"""Configuration loading and validation for the fee forecaster."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any

from .constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_DEDUP_WINDOW_MS,
    DEFAULT_HTTP_TIMEOUT_SECS,
    DEFAULT_LOG_BACKUP_COUNT,
    DEFAULT_LOG_MAX_BYTES,
    DEFAULT_MAX_HISTORY,
    DEFAULT_STORAGE_KEY,
)

STORAGE_BACKENDS = ("json", "sqlite", "memory")


class Config:
    """Configuration container with environment variable overrides."""

    def __init__(self, config_path: str = None, create_if_missing: bool = True):
        """
        Load configuration from YAML file with environment variable overrides.

        Configuration precedence (highest to lowest):
        1. Environment variables (FF_* prefix)
        2. config.local.yaml (if exists, local overrides)
        3. config.yaml (main config file)
        4. Default values

        Args:
            config_path: Path to config.yaml. If None, searches for config.yaml
                        in current directory and parent directories.
            create_if_missing: If True and config_path is None, create default config
                              if not found. If config_path is explicitly provided,
                              this is ignored (file must exist).
        """
        if config_path is None:
            config_path = self._find_config_file()
            if create_if_missing and not Path(config_path).exists():
                self._create_default_config(config_path)
        elif not Path(config_path).exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        if Path(config_path).exists():
            with open(config_path, 'r') as f:
                self._raw = yaml.safe_load(f) or {}
        else:
            self._raw = {}

        local_config_path = Path(config_path).parent / "config.local.yaml"
        if local_config_path.exists():
            with open(local_config_path, 'r') as f:
                local_config = yaml.safe_load(f) or {}
                self._deep_merge(self._raw, local_config)

        self._apply_env_overrides()
        self._validate()

    def _find_config_file(self) -> str:
        """Find config.yaml in current directory or parents."""
        current = Path.cwd()
        for path in [current] + list(current.parents):
            config_file = path / "config.yaml"
            if config_file.exists():
                return str(config_file)
        return str(current / "config.yaml")

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        """Recursively merge override dict into base dict."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _create_default_config(self, path: str):
        """Create a default config.yaml file."""
        default_config = {
            "source": {
                "base_url": DEFAULT_API_BASE_URL,
                "timeout_secs": DEFAULT_HTTP_TIMEOUT_SECS
            },
            "storage": {
                "backend": "json",
                "json_path": "state/fee_history.json",
                "db_path": "state/fee_history.db",
                "key": DEFAULT_STORAGE_KEY
            },
            "history": {
                "max_points": DEFAULT_MAX_HISTORY,
                "dedup_window_secs": DEFAULT_DEDUP_WINDOW_MS // 1000
            },
            "logging": {
                "level": "INFO",
                "logfile": "",
                "log_dir": "logs",
                "console_level": "WARNING",
                "rotation": {
                    "max_bytes": DEFAULT_LOG_MAX_BYTES,
                    "backup_count": DEFAULT_LOG_BACKUP_COUNT,
                    "when": "midnight"
                }
            },
            "structured_output": {
                "enabled": False,
                "base_dir": "logs/structured",
                "observations_filename": "observations.jsonl",
                "predictions_filename": "predictions.jsonl"
            }
        }
        with open(path, 'w') as f:
            yaml.dump(default_config, f, default_flow_style=False, sort_keys=False)

    def _apply_env_overrides(self):
        """Apply environment variable overrides using FF_ prefix."""
        # Explorer API
        if os.getenv("FF_API_URL"):
            self._raw.setdefault("source", {})["base_url"] = os.getenv("FF_API_URL")
        if os.getenv("FF_API_TIMEOUT_SECS"):
            self._raw.setdefault("source", {})["timeout_secs"] = int(os.getenv("FF_API_TIMEOUT_SECS"))

        # Storage
        if os.getenv("FF_STORAGE_BACKEND"):
            self._raw.setdefault("storage", {})["backend"] = os.getenv("FF_STORAGE_BACKEND")
        if os.getenv("FF_STORAGE_JSON_PATH"):
            self._raw.setdefault("storage", {})["json_path"] = os.getenv("FF_STORAGE_JSON_PATH")
        if os.getenv("FF_STORAGE_DB_PATH"):
            self._raw.setdefault("storage", {})["db_path"] = os.getenv("FF_STORAGE_DB_PATH")

        # History
        if os.getenv("FF_MAX_HISTORY"):
            self._raw.setdefault("history", {})["max_points"] = int(os.getenv("FF_MAX_HISTORY"))
        if os.getenv("FF_DEDUP_WINDOW_SECS"):
            self._raw.setdefault("history", {})["dedup_window_secs"] = int(os.getenv("FF_DEDUP_WINDOW_SECS"))

        # Logging
        if os.getenv("FF_LOG_DIR"):
            self._raw.setdefault("logging", {})["log_dir"] = os.getenv("FF_LOG_DIR")
        if os.getenv("FF_LOG_LEVEL"):
            self._raw.setdefault("logging", {})["level"] = os.getenv("FF_LOG_LEVEL")
        if os.getenv("FF_CONSOLE_LEVEL"):
            self._raw.setdefault("logging", {})["console_level"] = os.getenv("FF_CONSOLE_LEVEL")

    def _validate(self):
        """Validate and normalize configuration values."""
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unknown storage backend {self.storage_backend!r}, "
                f"expected one of {', '.join(STORAGE_BACKENDS)}"
            )
        if self.max_history < 1:
            raise ValueError(f"history.max_points must be positive, got {self.max_history}")
        if self.dedup_window_ms < 0:
            raise ValueError("history.dedup_window_secs must not be negative")

    @property
    def api_base_url(self) -> str:
        return self._raw.get("source", {}).get("base_url", DEFAULT_API_BASE_URL)

    @property
    def api_timeout_secs(self) -> int:
        return int(self._raw.get("source", {}).get("timeout_secs", DEFAULT_HTTP_TIMEOUT_SECS))

    @property
    def storage_backend(self) -> str:
        return self._raw.get("storage", {}).get("backend", "json")

    @property
    def storage_json_path(self) -> str:
        return self._raw.get("storage", {}).get("json_path", "state/fee_history.json")

    @property
    def storage_db_path(self) -> str:
        return self._raw.get("storage", {}).get("db_path", "state/fee_history.db")

    @property
    def storage_key(self) -> str:
        return self._raw.get("storage", {}).get("key", DEFAULT_STORAGE_KEY)

    @property
    def max_history(self) -> int:
        return int(self._raw.get("history", {}).get("max_points", DEFAULT_MAX_HISTORY))

    @property
    def dedup_window_ms(self) -> int:
        secs = self._raw.get("history", {}).get("dedup_window_secs", DEFAULT_DEDUP_WINDOW_MS // 1000)
        return int(secs) * 1000

    @property
    def log_level(self) -> str:
        return self._raw.get("logging", {}).get("level", "INFO")

    @property
    def logfile(self) -> str:
        return self._raw.get("logging", {}).get("logfile", "")

    @property
    def log_dir(self) -> str:
        return self._raw.get("logging", {}).get("log_dir", "logs")

    @property
    def console_level(self) -> str:
        return self._raw.get("logging", {}).get("console_level", "WARNING")

    @property
    def log_rotation(self) -> Dict[str, Any]:
        """Get log rotation configuration with defaults."""
        rotation = self._raw.get("logging", {}).get("rotation", {})
        return {
            "max_bytes": rotation.get("max_bytes", DEFAULT_LOG_MAX_BYTES),
            "backup_count": rotation.get("backup_count", DEFAULT_LOG_BACKUP_COUNT),
            "when": rotation.get("when", "midnight")
        }

    @property
    def structured_output_config(self) -> Dict[str, Any]:
        """Get structured output configuration with defaults."""
        cfg = self._raw.get("structured_output", {})
        return {
            "enabled": cfg.get("enabled", False),
            "base_dir": cfg.get("base_dir", str(Path(self.log_dir) / "structured")),
            "observations_filename": cfg.get("observations_filename", "observations.jsonl"),
            "predictions_filename": cfg.get("predictions_filename", "predictions.jsonl"),
        }
