"""
Validation and error handling for the dfsmonitor package.

This module provides input validation, the error taxonomy shared by the
collectors and stores, and the retry strategy used for provider queries.
"""

# Core exception classes and error handling
from .exceptions import (
    DfsMonitorError,
    ErrorSeverity,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
    handle_file_error,
)

# Collection and persistence errors
from .errors import (
    ConfigConflictError,
    CollectionCancelledError,
    ConfigCorruptError,
    LockTimeoutError,
    ProviderError,
    StoreError,
)

# Retry strategy
from .strategies import DEFAULT_BACKOFF_SECONDS, async_retry

# Validation functions
from .validators import (
    validate_bool,
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
)

__all__ = [
    # Core functionality
    "DfsMonitorError",
    "ErrorSeverity",
    "ValidationError",
    "handle_cli_error",
    "handle_config_error",
    "handle_error",
    "handle_file_error",
    # Errors
    "ConfigConflictError",
    "CollectionCancelledError",
    "ConfigCorruptError",
    "LockTimeoutError",
    "ProviderError",
    "StoreError",
    # Strategies
    "DEFAULT_BACKOFF_SECONDS",
    "async_retry",
    # Validators
    "validate_bool",
    "validate_enum_choice",
    "validate_non_empty_string",
    "validate_positive_float",
    "validate_positive_integer",
]
