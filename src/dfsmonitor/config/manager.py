"""
Settings management and singleton pattern.

This module provides the main settings loading interface, implementing a
singleton pattern so the bootstrap settings file is read only once per
process.
"""

import logging
from pathlib import Path
from typing import Optional

from ..models.settings import ServiceSettings
from ..validation import handle_config_error, ErrorSeverity
from .loader import load_settings_file
from .validators import validate_service_settings

logger = logging.getLogger(__name__)

# --- Global Singleton for Settings ---

_SETTINGS: Optional[ServiceSettings] = None

# Default settings file, relative to the repository root. Overridden by the
# CLI --config option and by tests.
_SETTINGS_FILE_PATH = Path(__file__).parent.parent.parent.parent / "conf" / "config.toml"


def set_settings_path(settings_path: Path) -> None:
    """
    Set a custom settings file path.

    Clears any cached settings so the next `get_settings` call reloads.
    """
    global _SETTINGS_FILE_PATH, _SETTINGS
    _SETTINGS_FILE_PATH = Path(settings_path)
    _SETTINGS = None
    logger.info(f"Settings path set to: {settings_path}")


def clear_settings_cache() -> None:
    global _SETTINGS
    _SETTINGS = None
    logger.debug("Settings cache cleared")


def _load_settings(settings_path: Path) -> ServiceSettings:
    """
    Load and validate the service settings file.

    Relative paths inside the file are resolved against its directory.

    Raises:
        FileNotFoundError: If the settings file is missing
        ValidationError: If validation fails
        tomllib.TOMLDecodeError: If the file is malformed
    """
    try:
        data = load_settings_file(settings_path)
        settings = validate_service_settings(data, base_dir=settings_path.parent)
        logger.info(
            f"Loaded service settings: config={settings.storage.config_path}, "
            f"cache={settings.storage.local_cache_root}, provider={settings.provider.type}"
        )
        return settings
    except FileNotFoundError as e:
        handle_config_error(
            error=e,
            context="loading settings file",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise
    except Exception as e:
        handle_config_error(
            error=e,
            context="processing settings",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise


def get_settings() -> ServiceSettings:
    """
    Get the global service settings, loading them if necessary.

    Returns:
        The singleton ServiceSettings instance
    """
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = _load_settings(_SETTINGS_FILE_PATH)
    return _SETTINGS


def is_settings_loaded() -> bool:
    return _SETTINGS is not None


def get_settings_info() -> dict:
    """Get information about the current settings state."""
    return {
        "settings_loaded": is_settings_loaded(),
        "settings_path": str(_SETTINGS_FILE_PATH),
        "provider": _SETTINGS.provider.type if _SETTINGS else None,
    }
