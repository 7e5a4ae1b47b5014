"""
Configuration management for the dfsmonitor package.

This module provides the service settings interface (TOML files with
singleton pattern management), validation of the monitor configuration
document and the remote-first `ConfigStore` that persists it.
"""

# Main settings interface
from .manager import (
    clear_settings_cache,
    get_settings,
    get_settings_info,
    is_settings_loaded,
    set_settings_path,
)

# For advanced usage - direct access to loaders and validators
from .loader import (
    load_inventory_file,
    load_settings_file,
    load_toml_file,
)
from .validators import (
    validate_monitor_config,
    validate_service_settings,
)

# Monitor configuration document persistence
from .store import ConfigStore

__all__ = [
    # Main interface
    "get_settings",
    "set_settings_path",
    "clear_settings_cache",
    "is_settings_loaded",
    "get_settings_info",
    # Advanced interface
    "load_toml_file",
    "load_settings_file",
    "load_inventory_file",
    "validate_monitor_config",
    "validate_service_settings",
    # Store
    "ConfigStore",
]
