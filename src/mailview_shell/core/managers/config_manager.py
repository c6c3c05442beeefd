# src/mailview_shell/core/managers/config_manager.py
import json
import logging
from typing import Any, Dict, Optional

from mailview_shell.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

_TRUE_WORDS = ("1", "true", "yes", "on")


def _cast_like(current: Any, value: Any, key_path: str) -> Any:
    """Coerces a command line string to the type of the value it replaces."""
    if current is None or not isinstance(value, str):
        return value
    if isinstance(current, bool):
        return value.strip().lower() in _TRUE_WORDS
    try:
        return type(current)(value)
    except (ValueError, TypeError):
        logger.warning("'%s' expects %s; keeping %r as text.", key_path, type(current).__name__, value)
        return value


class ConfigManager:
    """
    Process-wide settings for mailview, read from the packaged settings.json.

    Sections in use: preferences (paranoid, compact, zoom), preview, images,
    transport, strings and debug. Changes made through `set_nested` live in memory
    only; `reset` rereads the file.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._config = {}
            cls._instance.reset()
        return cls._instance

    def get_all(self) -> Dict[str, Any]:
        return self._config

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """'images.icon_dp' -> value, or `default` when any segment is missing."""
        node: Any = self._config
        for key in key_path.split('.'):
            if not isinstance(node, dict):
                return default
            node = node.get(key)
        return default if node is None else node

    def set_nested(self, key_path: str, value: Any) -> bool:
        *parents, leaf = key_path.split('.')
        section = self._config
        for key in parents:
            section = section.setdefault(key, {})
            if not isinstance(section, dict):
                logger.error("Cannot set '%s': '%s' is not a section.", key_path, key)
                return False

        section[leaf] = _cast_like(section.get(leaf), value, key_path)
        logger.info("Configuration updated: %s = %s", key_path, section[leaf])
        return True

    def reset(self) -> None:
        settings_file = PathUtils.get_settings_file()
        if not settings_file.exists():
            logger.warning("No settings.json at %s; running with an empty configuration.", settings_file)
            self._config = {}
            return
        try:
            with open(settings_file, "r", encoding="utf-8") as f:
                self._config = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Cannot read %s: %s", settings_file, e)
            self._config = {}
            return
        logger.info("Configuration has been (re)loaded from settings.json.")


config_manager = ConfigManager()
