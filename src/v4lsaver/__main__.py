"""
v4l-saver CLI entry point.

This module provides the command-line interface for saving, loading and
listing V4L2 device controls.
"""

import argparse
import os
import sys
from collections import Counter
from pathlib import Path
from typing import List, Optional, Sequence

from v4lsaver.core.capture import DeviceManager
from v4lsaver.core.catalog import print_table, render_json
from v4lsaver.core.dependencies import INSTALL_HINTS, check_dependencies
from v4lsaver.core.errors import DeviceNotFoundError, MissingDependencyError
from v4lsaver.core.gateway import V4L2CtlGateway
from v4lsaver.core.logging import get_logger, setup_logging
from v4lsaver.core.settings import ControlSnapshotStore, get_default_config_dir
from v4lsaver.core.version import DISTRIBUTION_NAME, get_version

APP_NAME = DISTRIBUTION_NAME
APP_VERSION = get_version()
APP_DESCRIPTION = "Save and load V4L2 device controls by serial number"

# Spellings accepted for compatibility with the shell version of the tool
LEGACY_FLAGS = {
    "--save": "save",
    "--load": "load",
    "--list": "list",
    "--json": "list-json",
}

logger = get_logger(__name__)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description=f"{APP_NAME} - {APP_DESCRIPTION}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Device can be specified as:
  - Device path: /dev/video0, /dev/video2, etc.
  - Serial number: 1234ABCD, 5678EFGH, etc.

Snapshots are stored in {get_default_config_dir()} unless --config-dir is given.

Examples:
  # Save all usable devices
  {APP_NAME} save

  # Save a specific device
  {APP_NAME} save /dev/video0

  # Load the device with serial 1234ABCD
  {APP_NAME} load 1234ABCD
        """,
    )

    parser.add_argument(
        "--config-dir",
        type=Path,
        metavar="PATH",
        help="Directory holding saved snapshots",
    )

    parser.add_argument(
        "--v4l2-ctl",
        type=str,
        default="v4l2-ctl",
        metavar="PATH",
        help="v4l2-ctl executable to use (default: v4l2-ctl)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        metavar="LEVEL",
        help="Logging level (default: INFO)",
    )

    parser.add_argument("--log-file", type=Path, metavar="PATH", help="Also log to this file")

    parser.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    save_parser = subparsers.add_parser(
        "save", help="Save controls for all or one device (JSON format)"
    )
    save_parser.add_argument("device", nargs="?", help="Device path or serial number")

    load_parser = subparsers.add_parser(
        "load", help="Load controls for all or one device (JSON format)"
    )
    load_parser.add_argument("device", nargs="?", help="Device path or serial number")

    subparsers.add_parser("list", help="List available video devices in table format")
    subparsers.add_parser("list-json", help="List available video devices in JSON format")
    subparsers.add_parser("help", help="Show this help message")

    return parser


def normalize_argv(argv: Sequence[str]) -> List[str]:
    """Rewrite the first legacy ``--save``-style flag into its command name."""
    args = list(argv)
    for index, arg in enumerate(args):
        if arg in LEGACY_FLAGS:
            args[index] = LEGACY_FLAGS[arg]
            break
    return args


def _log_outcomes(results) -> None:
    counts = Counter(result.outcome.value for result in results)
    if not results:
        logger.info("No video devices to process")
        return
    summary = ", ".join(f"{count} {outcome}" for outcome, count in sorted(counts.items()))
    logger.debug(f"Processed {len(results)} device(s): {summary}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the v4l-saver CLI.

    Returns:
        Exit code using os.EX_* constants:
        - os.EX_OK (0): Success, including runs where devices were skipped
        - os.EX_NOINPUT (66): Explicitly named device or serial not found
        - os.EX_UNAVAILABLE (69): v4l2-ctl is not installed
        - os.EX_CANTCREAT (73): Snapshot directory cannot be created
    """
    parser = create_argument_parser()
    args = parser.parse_args(normalize_argv(sys.argv[1:] if argv is None else argv))

    setup_logging(log_level=args.log_level, log_file=args.log_file)
    logger.debug(f"Command-line arguments: {args}")

    if args.command in (None, "help"):
        parser.print_help()
        return os.EX_OK

    try:
        check_dependencies((args.v4l2_ctl,))
    except MissingDependencyError as e:
        logger.error(f"Error: {e}")
        for line in INSTALL_HINTS.splitlines():
            logger.error(line)
        return os.EX_UNAVAILABLE

    devices = DeviceManager(V4L2CtlGateway(executable=args.v4l2_ctl))

    try:
        if args.command == "list":
            print_table(devices.describe_all())
        elif args.command == "list-json":
            print(render_json(devices.describe_all()))
        else:
            try:
                store = ControlSnapshotStore(devices, config_dir=args.config_dir)
            except OSError as e:
                logger.error(f"Error: Cannot use snapshot directory: {e}")
                return os.EX_CANTCREAT
            if args.command == "save":
                _log_outcomes(store.save_all(args.device))
            else:
                _log_outcomes(store.load_all(args.device))

    except DeviceNotFoundError as e:
        logger.error(f"Error: {e}")
        return os.EX_NOINPUT

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return os.EX_OK

    return os.EX_OK


if __name__ == "__main__":
    sys.exit(main())
