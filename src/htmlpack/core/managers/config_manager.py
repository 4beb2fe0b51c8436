# src/htmlpack/core/managers/config_manager.py
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from htmlpack.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """
    A singleton class to manage the application's configuration.
    It loads the packaged settings.json, merges the optional user file
    (~/.htmlpack/settings.json) over it and allows for in-memory modifications.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Loads the configuration from the file."""
        self._config: Dict[str, Any] = {}
        self.reset()
        logger.debug("ConfigManager initialized.")

    def get_all(self) -> Dict[str, Any]:
        """Returns the entire current configuration dictionary."""
        return self._config

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """
        Safely retrieves a nested value from the configuration.
        e.g., 'packer.stop_on_error'.
        """
        keys = key_path.split('.')
        value = self._config
        for key in keys:
            if isinstance(value, dict):
                value = value.get(key)
            else:
                return default
        return value if value is not None else default

    def set_nested(self, key_path: str, value: Any) -> bool:
        """
        Sets a nested value in the in-memory configuration.
        e.g., 'debug.level', 'INFO'
        """
        keys = key_path.split('.')
        d = self._config
        for key in keys[:-1]:
            d = d.setdefault(key, {})
            if not isinstance(d, dict):
                logger.error("Cannot set value: '%s' is not a dictionary.", key)
                return False

        # Cast the new value to the type of the old one where possible
        original_value = d.get(keys[-1])
        if original_value is not None:
            value = self._cast_like(original_value, value, key_path)

        d[keys[-1]] = value
        logger.info("Configuration updated: %s = %s", key_path, value)
        return True

    @staticmethod
    def _cast_like(original: Any, value: Any, key_path: str) -> Any:
        if isinstance(original, bool) and isinstance(value, str):
            # bool("false") is True, so strings need an explicit mapping
            lowered = value.strip().lower()
            if lowered in ("true", "1", "yes", "on"):
                return True
            if lowered in ("false", "0", "no", "off"):
                return False
            logger.warning("Could not cast '%s' to bool for '%s'. Storing as string.", value, key_path)
            return value
        try:
            return type(original)(value)
        except (ValueError, TypeError):
            logger.warning(
                "Could not cast new value for '%s' to type %s. Storing as string.",
                key_path, type(original).__name__
            )
            return value

    def _load_file(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load %s: %s", path, e, exc_info=True)
            return {}
        if not isinstance(data, dict):
            logger.error("Ignoring %s: top-level value is not an object.", path)
            return {}
        return data

    def reset(self):
        """Resets the in-memory configuration from the settings files."""
        config_path = PathUtils.get_settings_file()
        if not config_path.exists():
            logger.warning("settings.json not found at %s. Using empty config.", config_path)
            self._config = {}
        else:
            self._config = self._load_file(config_path)

        user_path = PathUtils.get_user_settings_file()
        if user_path.exists():
            self._config = _deep_merge(self._config, self._load_file(user_path))
            logger.debug("Merged user settings from %s.", user_path)

        logger.debug("Configuration has been (re)loaded.")


# The global singleton instance that the entire application will use.
config_manager = ConfigManager()
