"""Simple YAML configuration loader for TypePace."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path.home() / ".local" / "share" / "typepace"

DEFAULTS: Dict[str, Any] = {
    "storage": {
        "log_file": str(DEFAULT_DATA_DIR / "wpm-tracker.csv"),
    },
    "tracking": {
        "average_window": 10,        # Number of sessions to average over
        "min_session_length": 5000,  # Only record sessions at least this long (ms)
        "update_interval": 1000,     # Live WPM refresh interval (ms)
        "idle_timeout": 5000,        # Stop tracking after this much inactivity (ms)
        "history_reload_interval": 30,  # Focus-sync fallback (s)
    },
    "charts": {
        "height": 15,
    },
    "logging": {
        "level": "INFO",
        "file_path": str(DEFAULT_DATA_DIR / "logs" / "typepace.log"),
        "console_output": True,
    },
}

_POSITIVE_INT_KEYS = (
    "tracking.average_window",
    "tracking.update_interval",
    "tracking.idle_timeout",
    "tracking.history_reload_interval",
    "charts.height",
)


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class TypePaceConfig:
    """TypePace configuration loader."""

    def __init__(self, config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, built-in defaults
                        are used for every setting.
            overrides: Optional nested dict applied on top of file values
        """
        self.config_file = Path(config_path) if config_path else None

        if self.config_file is not None and not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        if self.config_file is not None:
            logger.info(f"Loading configuration from: {self.config_file}")
            loaded = self._load_config()
        else:
            logger.info("No configuration file given, using defaults")
            loaded = {}

        self.config = _merge(DEFAULTS, loaded)
        if overrides:
            self.config = _merge(self.config, overrides)
        self._resolve_paths(self.config)
        self._validate(self.config)

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ValueError(f"Failed to load configuration: {e}")

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping")

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Expand ~ and resolve relative paths against the config file location."""
        config_dir = self.config_file.parent if self.config_file else Path.cwd()

        for section, key in (("storage", "log_file"), ("logging", "file_path")):
            raw = config.get(section, {}).get(key)
            if not raw:
                continue
            path = os.path.expanduser(str(raw))
            if not os.path.isabs(path):
                path = str(config_dir / path)
            config[section][key] = path

    def _validate(self, config: Dict[str, Any]) -> None:
        """Reject settings that would break the tracker."""
        for key_path in _POSITIVE_INT_KEYS:
            value = self.get(key_path)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"Configuration key '{key_path}' must be a positive integer, got {value!r}")

        min_length = self.get("tracking.min_session_length")
        if isinstance(min_length, bool) or not isinstance(min_length, int) or min_length < 0:
            raise ValueError(
                f"Configuration key 'tracking.min_session_length' must be a non-negative integer, got {min_length!r}"
            )

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'tracking.idle_timeout').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'tracking.average_window')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_log_file(self) -> str:
        """Get metric log file path."""
        return str(Path(self.get('storage.log_file')).absolute())

    def get_average_window(self) -> int:
        return self.get('tracking.average_window')

    def get_min_session_seconds(self) -> float:
        return self.get('tracking.min_session_length') / 1000.0

    def get_update_interval_seconds(self) -> float:
        return self.get('tracking.update_interval') / 1000.0

    def get_idle_timeout_seconds(self) -> float:
        return self.get('tracking.idle_timeout') / 1000.0

    def get_history_reload_seconds(self) -> float:
        return float(self.get('tracking.history_reload_interval'))

    def get_chart_height(self) -> int:
        return self.get('charts.height')
