"""
Configuration file loading utilities.

This module handles the low-level loading and parsing of the TOML files used
by the service: the bootstrap settings file and the static topology
inventory.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict

from ..validation import handle_config_error, ErrorSeverity

logger = logging.getLogger(__name__)


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Load and parse a TOML file with error handling.

    Args:
        file_path: Path to the TOML file to load
        description: Human-readable description for error messages

    Returns:
        Parsed TOML data as a dictionary

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is malformed
    """
    logger.info(f"Loading {description} from: {file_path}")

    if not file_path.exists():
        logger.error(f"{description} not found: {file_path}")
        raise FileNotFoundError(f"{description} not found: {file_path}")

    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {description}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise


def load_settings_file(settings_path: Path) -> Dict[str, Any]:
    """Load the service settings file (config.toml)."""
    return load_toml_file(settings_path, "service settings file")


def load_inventory_file(inventory_path: Path) -> Dict[str, Any]:
    """Load a static topology inventory file."""
    return load_toml_file(inventory_path, "topology inventory file")
