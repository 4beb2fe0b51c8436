# src/htmlpack/core/utils/path_utils.py
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving important package and user paths.
    """

    @staticmethod
    def get_shell_package_root() -> Path:
        """Returns the directory of the 'htmlpack' package (where settings.json lives)."""
        return Path(__file__).resolve().parent.parent.parent

    @staticmethod
    def get_settings_file() -> Path:
        return PathUtils.get_shell_package_root() / "settings.json"

    @staticmethod
    def get_user_config_dir() -> Path:
        """
        Returns the path to the user's .htmlpack config directory.
        (e.g., ~/.htmlpack/)
        """
        return Path.home() / ".htmlpack"

    @staticmethod
    def get_user_settings_file() -> Path:
        """Optional per-user overrides, merged over the packaged settings.json."""
        return PathUtils.get_user_config_dir() / "settings.json"
