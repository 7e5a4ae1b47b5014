"""
Durable collect-now command intake.

Each command is one JSON file whose name embeds a sortable UTC timestamp and
the command id, so names are unique and sort chronologically. Consumers read
and delete files in name order. A file that cannot be deleted is delivered
again on the next drain: delivery is at-least-once.
"""

import json
import logging
from pathlib import Path
from typing import List, Union

from ..models.runtime import CollectNowCommand
from .atomic import read_json, write_json

logger = logging.getLogger(__name__)

COMMAND_PREFIX = "collect-now-"
COMMAND_GLOB = f"{COMMAND_PREFIX}*.json"
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S%f"


class CommandQueue:
    """File-per-command queue in a single directory."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def command_filename(self, command: CollectNowCommand) -> str:
        stamp = command.requested_at.strftime(TIMESTAMP_FORMAT)
        return f"{COMMAND_PREFIX}{stamp}-{command.id}.json"

    def enqueue(self, command: CollectNowCommand) -> Path:
        """Persist a command and return the file it was written to."""
        path = self.directory / self.command_filename(command)
        write_json(path, command.to_dict())
        logger.info(f"Queued collect-now command {command.id} from {command.requested_by}")
        return path

    def _pending_files(self) -> List[Path]:
        if not self.directory.is_dir():
            return []
        return sorted(self.directory.glob(COMMAND_GLOB), key=lambda p: p.name)

    def pending_count(self) -> int:
        return len(self._pending_files())

    def dequeue_all(self) -> List[CollectNowCommand]:
        """
        Read and remove every queued command, oldest first.

        Malformed files are skipped but still removed when possible. Files
        that cannot be removed stay queued for the next call.
        """
        commands: List[CollectNowCommand] = []
        for path in self._pending_files():
            try:
                data = read_json(path)
                if not isinstance(data, dict):
                    raise ValueError("command is not a JSON object")
                commands.append(CollectNowCommand.from_dict(data))
            except FileNotFoundError:
                # Taken by a concurrent consumer.
                continue
            except (OSError, ValueError, json.JSONDecodeError) as e:
                logger.warning(f"Skipping malformed command file {path.name}: {e}")

            try:
                path.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(f"Could not remove command file {path.name}, will retry: {e}")

        if commands:
            logger.info(f"Dequeued {len(commands)} collect-now command(s)")
        return commands
