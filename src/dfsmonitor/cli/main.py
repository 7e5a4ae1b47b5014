"""
Command-line interface for the dfsmonitor collection service.

This module provides the `dfsmonitor` entry point: running the worker loop,
running a single collection, queueing a collect-now command, printing the
current status and exporting the latest target report.
"""

import argparse
import asyncio
import json
import logging
import logging.handlers
import sys
import tomllib
from pathlib import Path
from typing import List, Optional

from ..config import get_settings, set_settings_path
from ..models.settings import LoggingSettings, ServiceSettings
from ..orchestration import SignalHandler
from ..reporting import SUPPORTED_FORMATS
from ..service import MonitorService
from ..validation import ValidationError, handle_cli_error

# --- Logging Setup ---
LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    datefmt=LOG_DATEFMT,
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

LOG_FILENAME = "service.log"


def configure_logging(settings: LoggingSettings, level_override: Optional[str] = None) -> None:
    """
    Apply the ``[logging]`` settings to the root logger.

    Adds a daily rotating ``service.log`` when ``log_dir`` is configured.
    """
    root = logging.getLogger()
    root.setLevel((level_override or settings.level).upper())

    if settings.log_dir is not None:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
        log_file = settings.log_dir / LOG_FILENAME
        if not any(
            isinstance(h, logging.handlers.TimedRotatingFileHandler)
            and Path(h.baseFilename) == log_file.resolve()
            for h in root.handlers
        ):
            handler = logging.handlers.TimedRotatingFileHandler(
                log_file, when="midnight", backupCount=settings.retention_days, encoding="utf-8"
            )
            handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
            root.addHandler(handler)
            logger.info(f"Logging to {log_file}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dfsmonitor",
        description="Collect namespace and replication health snapshots.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to the service settings file (default: conf/config.toml).",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("run", help="Run the collection worker until interrupted.")
    subparsers.add_parser("collect", help="Run a single collection and print its summary.")

    collect_now = subparsers.add_parser("collect-now", help="Ask a running worker to collect immediately.")
    collect_now.add_argument("--requested-by", default="cli", help="Name recorded with the command.")
    collect_now.add_argument("--reason", help="Optional reason recorded with the command.")

    subparsers.add_parser("status", help="Print the health summary and last run outcome.")

    export = subparsers.add_parser("export", help="Export the latest snapshot as a target report.")
    export.add_argument("path", type=Path, help="Destination file.")
    export.add_argument(
        "-f", "--format", choices=list(SUPPORTED_FORMATS), default="csv", help="Report format."
    )
    return parser


def _print_json(document) -> None:
    print(json.dumps(document, indent=2, ensure_ascii=False))


def _run_worker(service: MonitorService) -> int:
    worker = service.create_worker()
    handler = SignalHandler()
    handler.register_worker(id(worker), worker)
    handler.setup_signal_handlers()
    try:
        asyncio.run(worker.run())
    finally:
        handler.cleanup_signal_handlers()
        handler.unregister_worker(id(worker))
    return 0


def _collect_once(service: MonitorService) -> int:
    snapshot = asyncio.run(service.run_collection())
    _print_json(
        {
            "createdAt": snapshot.to_dict()["createdAt"],
            "overallHealth": snapshot.overall_health.value,
            "namespaces": len(snapshot.namespaces),
            "replicationGroups": len(snapshot.replication_groups),
            "errors": snapshot.errors,
        }
    )
    return 0


def main_cli(argv: Optional[List[str]] = None) -> int:
    """
    Main command-line interface for the dfsmonitor service.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    if args.config:
        set_settings_path(args.config)

    try:
        settings: ServiceSettings = get_settings()
    except (FileNotFoundError, tomllib.TOMLDecodeError, ValidationError) as e:
        handle_cli_error(
            error=e,
            context="settings loading",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )

    configure_logging(settings.logging, args.log_level)

    try:
        service = MonitorService.from_settings(settings)
    except (FileNotFoundError, ValidationError) as e:
        handle_cli_error(
            error=e,
            context="provider setup",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )

    with service:
        if args.command == "run":
            logger.info("Starting dfsmonitor collection worker")
            return _run_worker(service)
        if args.command == "collect":
            return _collect_once(service)
        if args.command == "collect-now":
            command = service.enqueue_collect_now(requested_by=args.requested_by, reason=args.reason)
            _print_json(command.to_dict())
            return 0
        if args.command == "status":
            _print_json(
                {
                    "summary": service.get_health_summary(),
                    "runtime": service.get_runtime_state().to_dict(),
                }
            )
            return 0
        if args.command == "export":
            rows = service.export_report(args.path, args.format)
            print(f"Exported {rows} row(s) to {args.path}")
            return 0

    return 1


def main() -> None:
    sys.exit(main_cli())


if __name__ == "__main__":
    main()
