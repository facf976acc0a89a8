"""
Command-line interface for the application.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import functools
import http.server
import logging
import sys
from pathlib import Path

from occurrence_cleaner import __version__
from occurrence_cleaner.config import get_settings
from occurrence_cleaner.exceptions import OccurrenceCleanerError
from occurrence_cleaner.flows.clean import clean_all
from occurrence_cleaner.flows.report import build_report, site_dir
from occurrence_cleaner.schemas import RunConfig

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="occurrence-cleaner",
        description="Fetch GBIF occurrences, flag suspicious coordinates, and report clean records",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_species(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--species",
            type=str,
            default=None,
            help="Scientific name (default: OCCURRENCE_CLEANER_SPECIES)",
        )

    def add_fetch_options(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--limit",
            type=int,
            default=None,
            help="Maximum records to fetch (default: limit from settings)",
        )
        p.add_argument(
            "--allow-missing-coords",
            action="store_true",
            help="Also fetch records without coordinates (they are dropped during cleaning)",
        )

    # 'clean' command - fetch and clean
    clean_parser = subparsers.add_parser("clean", help="Fetch and clean occurrences")
    add_species(clean_parser)
    add_fetch_options(clean_parser)

    # 'report' command - render report from cleaned tables
    report_parser = subparsers.add_parser("report", help="Build the report from cleaned tables")
    add_species(report_parser)

    # 'run' command - clean then report
    run_parser = subparsers.add_parser("run", help="Clean and build the report")
    add_species(run_parser)
    add_fetch_options(run_parser)

    subparsers.add_parser("info", help="Show application info")

    # 'serve' command - serve built report locally
    serve_parser = subparsers.add_parser("serve", help="Serve a built report locally")
    add_species(serve_parser)
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to serve on (default: api_port from settings)",
    )

    return parser


def configure_logging(debug: bool = False) -> None:
    """Configure root logging from --debug or the log_level setting."""
    level = logging.DEBUG if debug else getattr(logging, get_settings().log_level.upper(), None)
    logging.basicConfig(level=level or logging.INFO, format=LOG_FORMAT)


def _run_config(args: argparse.Namespace) -> RunConfig:
    require_coords = None
    if getattr(args, "allow_missing_coords", False):
        require_coords = False
    return get_settings().run_config(
        species=args.species,
        limit=getattr(args, "limit", None),
        require_coords=require_coords,
    )


def cmd_clean(args: argparse.Namespace) -> int:
    """Handle the 'clean' command."""
    config = _run_config(args)
    if args.debug:
        print(f"Debug mode enabled. Config: {config}")

    result = clean_all(config)
    print(
        f"{result['clean']} clean, {result['flagged']} flagged, "
        f"{result['rejected']} rejected of {result['fetched']} fetched -> {result['output']}"
    )
    return 0


def cmd_report(args: argparse.Namespace) -> int:
    """Handle the 'report' command."""
    result = build_report(_run_config(args))
    if "error" in result:
        print("No cleaned data found. Run 'occurrence-cleaner clean' first.", file=sys.stderr)
        return 1
    print(f"Report: {result['output']}")
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    """Handle the 'run' command: clean then report."""
    exit_code = cmd_clean(args)
    if exit_code != 0:
        return exit_code
    return cmd_report(args)


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Debug: {settings.debug}")
    print(f"Data directory: {settings.data_dir}")
    print(f"Species: {settings.species or '(not set)'}")
    print(f"Fetch limit: {settings.limit}")
    print(f"Flag tests: {', '.join(t.value for t in settings.flag_tests)}")
    print(f"Max coordinate uncertainty: {settings.uncertainty_threshold_km} km")
    print(f"Accepted basis of record: {', '.join(sorted(settings.accepted_basis))}")
    upper = settings.count_max if settings.count_max is not None else "none"
    print(f"Individual count: > {settings.count_min}, < {upper}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Handle the 'serve' command: serve the built report locally."""
    settings = get_settings()
    port = args.port if args.port is not None else settings.api_port
    report_dir: Path = site_dir(_run_config(args))

    if not report_dir.exists():
        print(
            "No report directory found. Run 'occurrence-cleaner run' first.",
            file=sys.stderr,
        )
        return 1

    handler = functools.partial(http.server.SimpleHTTPRequestHandler, directory=str(report_dir))

    with http.server.HTTPServer(("", port), handler) as server:
        print(f"Serving report on http://localhost:{port}/ (Ctrl+C to stop)")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            print("\nServer stopped.")

    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging(args.debug)

    commands = {
        "clean": cmd_clean,
        "report": cmd_report,
        "run": cmd_run,
        "info": cmd_info,
        "serve": cmd_serve,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1
    try:
        return handler(args)
    except (OccurrenceCleanerError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
