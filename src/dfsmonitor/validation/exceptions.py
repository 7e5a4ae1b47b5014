"""
Exception base classes and the shared error reporting helper.

`handle_error` is the single place where caught exceptions are logged with
a context string and a severity, and optionally re-raised. The thin
`handle_*_error` wrappers only prefix the context for their area.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """How loudly `handle_error` reports an exception."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


# Severity -> (logging level, attach traceback)
_LOG_LEVELS = {
    ErrorSeverity.DEBUG: (logging.DEBUG, True),
    ErrorSeverity.INFO: (logging.INFO, False),
    ErrorSeverity.WARNING: (logging.WARNING, False),
    ErrorSeverity.ERROR: (logging.ERROR, True),
    ErrorSeverity.CRITICAL: (logging.CRITICAL, True),
}


class DfsMonitorError(Exception):
    """Base class for all errors raised by the monitoring service."""


class ValidationError(DfsMonitorError):
    """
    A settings file or monitor configuration document holds an invalid value.

    ``field_name`` is the dotted path of the offending key, for example
    ``collection.thresholds.criticalBacklog``.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log ``error`` as ``Error in <context>: <error>`` and optionally re-raise it.

    Args:
        error: The caught exception
        context: What was being done when it happened
        severity: ErrorSeverity member or its lower-case name
        reraise: Re-raise ``error`` after logging
        logger: Logger of the calling module (defaults to this module's)
    """
    target = logger or globals()['logger']
    if isinstance(severity, str):
        severity = ErrorSeverity(severity.lower())
    level, with_traceback = _LOG_LEVELS[severity]

    target.log(level, f"Error in {context}: {error}", exc_info=with_traceback)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """`handle_error` for settings and configuration loading."""
    handle_error(error, f"config {context}", **kwargs)


def handle_file_error(error: Exception, context: str, **kwargs) -> None:
    """`handle_error` for local state files."""
    handle_error(error, f"file {context}", **kwargs)


def handle_cli_error(error: Exception, context: str, exit_code: int = 1,
                     include_traceback: bool = False, **kwargs) -> None:
    """Log a command line error and exit with ``exit_code``."""
    severity = kwargs.pop('severity', ErrorSeverity.ERROR if include_traceback else ErrorSeverity.WARNING)
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)
    sys.exit(exit_code)
