"""Settings persistence for editor preferences.

Preferences are stored as JSON in an OS-appropriate config directory and
survive application restarts. Logging for the terminal editor is configured
here too, writing to the platform log directory so log output never lands
on the full-screen display.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .constants import EditorConstants

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    'default_link_target': EditorConstants.DEFAULT_LINK_TARGET,
    'log_level': EditorConstants.DEFAULT_LOG_LEVEL,
    'line_length': EditorConstants.DOCUMENT_WIDTH,
}

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def validate_setting(key: str, value: Any) -> bool:
    """Validate a setting value.

    Args:
        key: Setting key name.
        value: Setting value to validate.

    Returns:
        True if setting is valid, False otherwise.
    """
    if key == 'default_link_target':
        return isinstance(value, str) and bool(value.strip())

    if key == 'log_level':
        return isinstance(value, str) and value.upper() in LOG_LEVELS

    if key == 'line_length':
        # bool is an int subclass
        if not isinstance(value, int) or isinstance(value, bool):
            return False
        return EditorConstants.MIN_LINE_LENGTH <= value <= EditorConstants.MAX_LINE_LENGTH

    # Unknown settings are considered valid (forward compatibility)
    return True


class SettingsStore:
    """Manages persistent storage of editor preferences.

    Unknown keys found on disk are kept and written back unchanged.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        self._config_dir = Path(config_dir or platformdirs.user_config_dir(EditorConstants.APP_NAME))
        self._settings_file = self._config_dir / "settings.json"
        self._settings_cache: Optional[Dict[str, Any]] = None

    @property
    def path(self) -> Path:
        return self._settings_file

    def _ensure_config_dir(self) -> None:
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not create config directory {self._config_dir}: {e}")

    def load(self) -> Dict[str, Any]:
        """Load settings from disk, falling back to defaults.

        Returns:
            Copy of the settings with every known key present and valid.
        """
        if self._settings_cache is None:
            self._settings_cache = self._read()
        return self._settings_cache.copy()

    def _read(self) -> Dict[str, Any]:
        settings = dict(DEFAULTS)
        if not self._settings_file.exists():
            return settings

        try:
            with open(self._settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load settings from {self._settings_file}: {e}")
            return settings

        if not isinstance(data, dict):
            logger.warning("Settings file has invalid format (not a dict), ignoring")
            return settings

        for key, value in data.items():
            if validate_setting(key, value):
                settings[key] = value
            else:
                logger.warning(f"Invalid value for setting {key}: {value!r}, using default")
        return settings

    def get(self, key: str) -> Any:
        return self.load().get(key, DEFAULTS.get(key))

    def set(self, key: str, value: Any) -> bool:
        """Validate and persist one setting.

        Returns:
            True if the value was valid and saved.
        """
        if not validate_setting(key, value):
            logger.warning(f"Refusing invalid value for setting {key}: {value!r}")
            return False
        settings = self.load()
        settings[key] = value
        return self.save(settings)

    def save(self, settings: Dict[str, Any]) -> bool:
        """Save all settings to disk atomically.

        Returns:
            True if save was successful, False otherwise.
        """
        self._ensure_config_dir()
        temp_file = self._settings_file.with_suffix(EditorConstants.ATOMIC_SAVE_SUFFIX)

        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(settings, f, indent=2)
            temp_file.replace(self._settings_file)
        except OSError as e:
            logger.warning(f"Could not save settings to {self._settings_file}: {e}")
            if temp_file.exists():
                temp_file.unlink()
            return False

        self._settings_cache = dict(settings)
        return True

    def clear_cache(self) -> None:
        """Clear the in-memory cache of settings."""
        self._settings_cache = None


# Global instance
_store: Optional[SettingsStore] = None


def get_settings_store() -> SettingsStore:
    """Get the global settings store instance."""
    global _store
    if _store is None:
        _store = SettingsStore()
    return _store


def configure_logging(level: Optional[str] = None, log_dir: Optional[Path] = None) -> Path:
    """Send log records to a file in the platform log directory.

    Args:
        level: Level name; defaults to the stored log_level setting.
        log_dir: Directory for the log file; defaults to the platform one.

    Returns:
        Path of the log file.
    """
    level = (level or get_settings_store().get('log_level')).upper()
    log_dir = Path(log_dir or platformdirs.user_log_dir(EditorConstants.APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / EditorConstants.LOG_FILE_NAME

    logging.basicConfig(
        filename=str(log_file),
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )
    return log_file
