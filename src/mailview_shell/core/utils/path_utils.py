# src/mailview_shell/core/utils/path_utils.py
import logging
from typing import Optional
from pathlib import Path

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving important package and user paths.
    """

    # --- Package specific paths

    @staticmethod
    def get_shell_package_root() -> Path:
        """Returns the directory of the installed 'mailview_shell' package (holds settings.json)."""
        return Path(__file__).resolve().parents[2]

    @staticmethod
    def get_settings_file() -> Path:
        return PathUtils.get_shell_package_root() / "settings.json"

    # --- User specific paths ---

    @staticmethod
    def get_user_config_dir() -> Path:
        """
        Returns the path to the user's .mailview config directory.
        (e.g., ~/.mailview/)
        """
        return Path.home() / ".mailview"

    @staticmethod
    def get_cache_root() -> Path:
        """
        Returns the root directory for the application cache in the user's home directory.
        (e.g., ~/.mailview_cache)
        """
        return Path.home() / ".mailview_cache"

    # --- Helper methods ---

    @staticmethod
    def get_image_cache_dir(base_dir: Optional[Path] = None) -> Path:
        """
        Returns the directory holding downloaded remote images.
        Creates the directory if it doesn't exist.
        """
        root = Path(base_dir) if base_dir else PathUtils.get_cache_root() / "images"
        root.mkdir(parents=True, exist_ok=True)
        return root
