#!/usr/bin/env python3
"""
FasterTrack CLI tool

Command line interface for starting the terminal dashboard and inspecting
run snapshots.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from fastertrack.config import DashboardConfig
from fastertrack.exceptions import SnapshotDecodeError
from fastertrack.logger import setup_logger


def build_config(
    url: str | None = None,
    namespace: str | None = None,
    default_experiment: str | None = None,
) -> DashboardConfig:
    """
    Build the dashboard configuration from the environment and command line overrides

    Args:
        url: Gateway base URL override
        namespace: Namespace code override
        default_experiment: Default experiment id override (empty string disables it)

    Returns:
        Dashboard configuration
    """
    config = DashboardConfig.from_env()
    overrides: dict[str, str | None] = {}
    if url is not None:
        overrides["base_url"] = url
    if namespace is not None:
        overrides["namespace"] = namespace or None
    if default_experiment is not None:
        overrides["default_experiment_id"] = default_experiment or None
    if not overrides:
        return config
    return DashboardConfig.model_validate({**config.model_dump(), **overrides})


def run_tui(
    url: str | None = None,
    namespace: str | None = None,
    default_experiment: str | None = None,
    log_file: str | None = None,
    debug: bool = False,
) -> None:
    """
    Start TUI dashboard

    Args:
        url: Gateway base URL. Defaults to FASTERTRACK_URL or http://localhost:5000
        namespace: Namespace code. Defaults to FASTERTRACK_NAMESPACE
        default_experiment: Experiment id selected on startup
        log_file: Write logs to this file instead of the Textual devtools console
        debug: Enable debug logging
    """
    from textual.logging import TextualHandler

    handler: logging.Handler = logging.FileHandler(log_file) if log_file else TextualHandler()
    setup_logger(level=logging.DEBUG if debug else logging.INFO, handler=handler)

    config = build_config(url=url, namespace=namespace, default_experiment=default_experiment)

    from fastertrack.tui import run_tui as _run_tui

    _run_tui(config=config)


def run_decode(path: str | None = None) -> int:
    """
    Decode a run snapshot and print its schema and rows

    Args:
        path: Snapshot file. Reads stdin when None or "-"

    Returns:
        Process exit code
    """
    from fastertrack.snapshot import decode_snapshot, describe_schema

    try:
        payload = sys.stdin.buffer.read() if path in (None, "-") else Path(path).read_bytes()
        df = decode_snapshot(payload)
    except (OSError, SnapshotDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("Schema:")
    for name, dtype in describe_schema(df):
        print(f"  {name}: {dtype}")
    print()
    print(df)
    return 0


def main(argv: list[str] | None = None) -> None:
    """
    CLI main entry point
    """
    parser = argparse.ArgumentParser(description="FasterTrack experiment dashboard")
    subparsers = parser.add_subparsers(dest="command", help="Subcommands")

    tui_parser = subparsers.add_parser("tui", help="Start terminal UI dashboard (default)")
    tui_parser.add_argument("--url", default=None, help="Gateway base URL (default: FASTERTRACK_URL or http://localhost:5000)")
    tui_parser.add_argument("--namespace", default=None, help="Namespace code (default: FASTERTRACK_NAMESPACE)")
    tui_parser.add_argument(
        "--default-experiment",
        default=None,
        help='Experiment id selected on startup (default: "0"; pass an empty string to disable)',
    )
    tui_parser.add_argument("--log-file", default=None, help="Write logs to this file")
    tui_parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    decode_parser = subparsers.add_parser("decode", help="Decode an Arrow run snapshot and print it")
    decode_parser.add_argument("file", nargs="?", default=None, help="Snapshot file (default: stdin)")

    args = parser.parse_args(argv)

    if args.command == "decode":
        sys.exit(run_decode(args.file))
    elif args.command == "tui":
        run_tui(
            url=args.url,
            namespace=args.namespace,
            default_experiment=args.default_experiment,
            log_file=args.log_file,
            debug=args.debug,
        )
    else:
        run_tui()


if __name__ == "__main__":
    main()
