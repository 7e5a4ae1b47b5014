"""
Runtime state persistence.

A single small record describing the last collection run. Only the worker
loop writes it, so there is no locking and no history.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ..models.runtime import RuntimeState
from ..models.serialization import utc_now
from ..validation import ErrorSeverity, handle_file_error
from .atomic import read_json, write_json

logger = logging.getLogger(__name__)


class RuntimeStateStore:
    """Loads and saves the runtime state record under a local root."""

    @staticmethod
    def _path(root: Union[str, Path], relative_path: Union[str, Path]) -> Path:
        return Path(root) / relative_path

    def load(self, root: Union[str, Path], relative_path: Union[str, Path]) -> RuntimeState:
        """
        Load the runtime state, or the zero-value record if there is none.

        A missing file is the normal "never ran" case. A corrupt file is
        logged and also treated as the zero value.
        """
        path = self._path(root, relative_path)
        if not path.exists():
            return RuntimeState()
        try:
            data = read_json(path)
            if not isinstance(data, dict):
                raise ValueError("runtime state is not a JSON object")
            return RuntimeState.from_dict(data)
        except (OSError, ValueError, json.JSONDecodeError) as e:
            handle_file_error(
                error=e,
                context=f"reading runtime state {path}, using defaults",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )
            return RuntimeState()

    def save(
        self,
        root: Union[str, Path],
        relative_path: Union[str, Path],
        state: RuntimeState,
        now: Optional[datetime] = None,
    ) -> RuntimeState:
        """Stamp ``updated_at`` and atomically overwrite the record."""
        state.updated_at = now or utc_now()
        write_json(self._path(root, relative_path), state.to_dict())
        return state
