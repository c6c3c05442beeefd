# src/mailview_shell/core/services/preference_service.py
import logging
from typing import Any, Dict, Optional

from mailview_shell.core.managers.config_manager import ConfigManager, config_manager

logger = logging.getLogger(__name__)


class ConfigPreferenceStore:
    """
    Read-only preference store backed by the 'preferences' section of the configuration.
    Defaults are supplied by the caller, as the rendering core decides them.
    """

    def __init__(self, manager: Optional[ConfigManager] = None, section: str = "preferences"):
        self.manager = manager or config_manager
        self.section = section

    def _raw(self, name: str) -> Any:
        return self.manager.get_nested(f"{self.section}.{name}")

    def get_bool(self, name: str, default: bool) -> bool:
        value = self._raw(name)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)

    def get_int(self, name: str, default: int) -> int:
        value = self._raw(name)
        if value is None or isinstance(value, bool):
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Preference '%s' is not an integer (%r); using %d.", name, value, default)
            return default


class DictPreferenceStore:
    """Preference store over a plain mapping, used for one-off overrides."""

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self.values = dict(values or {})

    def get_bool(self, name: str, default: bool) -> bool:
        value = self.values.get(name)
        return default if value is None else bool(value)

    def get_int(self, name: str, default: int) -> int:
        value = self.values.get(name)
        return default if value is None else int(value)
