"""
Crash-safe file writes.

Every store writes through `atomic_write`: the content goes to a uniquely
named temporary file in the destination directory, is flushed to disk and
then renamed over the destination. Readers therefore see either the previous
file or the complete new one, never a truncated file.
"""

import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Union

logger = logging.getLogger(__name__)

FILE_MODE = 0o644


def atomic_write(path: Union[str, Path], data: Union[bytes, str]) -> None:
    """
    Atomically replace ``path`` with ``data``.

    Parent directories are created as needed. Any I/O error is raised
    unchanged and the temporary file is removed.

    Args:
        path: Destination file
        data: Bytes, or text encoded as UTF-8
    """
    path = Path(path)
    if isinstance(data, str):
        data = data.encode("utf-8")

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(
        dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(temp_path, FILE_MODE)
        os.replace(temp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(temp_path)
        raise
    logger.debug(f"Wrote {len(data)} bytes to {path}")


def dumps_json(document: Any) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def write_json(path: Union[str, Path], document: Any) -> None:
    """Atomically write a JSON document."""
    atomic_write(path, dumps_json(document))


def read_json(path: Union[str, Path]) -> Any:
    """
    Read a JSON document.

    Raises:
        OSError: If the file cannot be read
        json.JSONDecodeError: If the content is not valid JSON
    """
    return json.loads(Path(path).read_text(encoding="utf-8"))
