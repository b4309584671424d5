"""Persisted user preferences for Photo Renamer."""

import json
import logging
import os
from typing import Any, Dict, Optional

from photorenamer.core.patterns import DEFAULT_PATTERN_ID

logger = logging.getLogger(__name__)

APP_DIR_NAME = "photorenamer"


def get_config_dir() -> str:
    """Get the per-user config directory for Photo Renamer."""
    if os.name == "nt":  # Windows
        base = os.environ.get("APPDATA", os.path.expanduser("~"))
    else:  # macOS/Linux
        base = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return os.path.join(base, APP_DIR_NAME)


class Settings:
    """Manages application settings persistence."""

    DEFAULT_SETTINGS = {
        "last_folder": "",
        "last_pattern_id": DEFAULT_PATTERN_ID,
        "recursive_scan": False,
    }

    def __init__(self, config_path: Optional[str] = None):
        """Initialize settings.

        Args:
            config_path: Settings file. Defaults to settings.json in the
                user config directory.
        """
        self._settings: Dict[str, Any] = self.DEFAULT_SETTINGS.copy()
        self._config_path = config_path or os.path.join(get_config_dir(), "settings.json")
        self.load()

    @property
    def path(self) -> str:
        return self._config_path

    def load(self) -> None:
        """Load settings from file."""
        try:
            if os.path.exists(self._config_path):
                with open(self._config_path, "r", encoding="utf-8") as f:
                    loaded = json.load(f)
                    if isinstance(loaded, dict):
                        self._settings.update(loaded)
        except Exception as e:
            logger.debug(f"Error loading settings from {self._config_path}: {e}")

    def save(self) -> None:
        """Save settings to file."""
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self._config_path)), exist_ok=True)
            with open(self._config_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, indent=2)
        except Exception as e:
            logger.debug(f"Error saving settings to {self._config_path}: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """Get a setting value."""
        return self._settings.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a setting value."""
        self._settings[key] = value

    @property
    def last_folder(self) -> str:
        return self._settings.get("last_folder") or ""

    @property
    def last_pattern_id(self) -> str:
        return self._settings.get("last_pattern_id") or DEFAULT_PATTERN_ID

    @property
    def recursive_scan(self) -> bool:
        return bool(self._settings.get("recursive_scan"))

    def update_last_folder(self, folder: str) -> None:
        self.set("last_folder", folder)
        self.save()

    def update_selected_pattern(self, pattern_id: str) -> None:
        self.set("last_pattern_id", pattern_id)
        self.save()

    def update_recursive_scan(self, recursive: bool) -> None:
        self.set("recursive_scan", recursive)
        self.save()
