# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""CLI harness for tracing provider discovery, validation and caching."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, TextIO

from rich.console import Console
from rich.logging import RichHandler
from rich.style import Style
from rich.table import Table

from tps.analyzer import AnalyzerError, DiscoveredProvider, ProviderDiagnostic
from tps.analyzers import ProviderAnalyzer
from tps.database import SQLiteSpecCache
from tps.errors import FormatError
from tps.persistence import PersistenceError
from tps.scanner import DEFAULT_MARKER_NAMES, find_name_collisions
from tps.serialization import to_dict

logger = logging.getLogger(__name__)

TABLE_COLUMN_RATIOS: dict[str, int] = {
    "file_path": 2,
    "line": 1,
    "name": 2,
    "unique_name": 3,
    "probes": 4,
}


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="tps")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser("scan")
    scan_parser.add_argument("--path", required=True, help="Root path to analyze.")
    scan_parser.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format.",
    )
    scan_parser.add_argument(
        "--output",
        required=False,
        help="Optional output file path for raw JSON when --format json is used.",
    )
    scan_parser.add_argument(
        "--marker",
        action="append",
        default=None,
        help="Decorator name marking provider classes (repeatable, default: tracer).",
    )
    scan_parser.add_argument(
        "--cache",
        required=False,
        help="Optional SQLite file to cache discovered specifications in.",
    )

    check_parser = subparsers.add_parser("check")
    check_parser.add_argument("--path", required=True, help="Root path to analyze.")
    check_parser.add_argument(
        "--marker",
        action="append",
        default=None,
        help="Decorator name marking provider classes (repeatable, default: tracer).",
    )

    show_parser = subparsers.add_parser("show")
    show_parser.add_argument("--cache", required=True, help="SQLite cache file.")
    show_parser.add_argument(
        "--name", required=False, help="Unique provider name; lists names if omitted."
    )
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2
    if args.command == "scan":
        return _run_scan(args=args, stdout=stdout, stderr=stderr)
    if args.command == "check":
        return _run_check(args=args, stdout=stdout, stderr=stderr)
    if args.command == "show":
        return _run_show(args=args, stdout=stdout, stderr=stderr)

    logger.warning(f"Unsupported command (command={args.command})")
    stderr.write(f"Unsupported command: {args.command}\n")
    return 2


def _run_scan(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run scan command.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    root_path = Path(args.path)
    if not root_path.exists():
        logger.warning(f"Path does not exist (path={root_path})")
        stderr.write(f"Path does not exist: {root_path}\n")
        return 2

    analyzer = ProviderAnalyzer(marker_names=args.marker or DEFAULT_MARKER_NAMES)
    providers, errors = analyzer.analyze(root_path)
    _write_errors(errors=errors, stderr=stderr)
    for collision in find_name_collisions(provider.spec for provider in providers):
        stderr.write(
            f"name_collision: {collision.name} -> {', '.join(collision.unique_names)}\n"
        )

    if args.cache:
        try:
            SQLiteSpecCache(db_path=Path(args.cache)).store(providers)
        except PersistenceError as exc:
            stderr.write(f"Failed to write cache: {exc}\n")
            return 2

    if args.format == "json":
        payload = _json_payload(providers=providers, errors=errors)
        if args.output:
            try:
                output_path = Path(args.output)
                output_path.parent.mkdir(parents=True, exist_ok=True)
                output_path.write_text(
                    json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
                )
            except OSError as exc:
                logger.warning(
                    f"Failed to write JSON output file (output_path={args.output} error={exc})"
                )
                stderr.write(f"Failed to write JSON output file: {args.output}\n")
                return 2
        else:
            _write_json(payload=payload, stdout=stdout)
    else:
        _write_table(providers=providers, stdout=stdout)
    return 0


def _run_check(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run check command.

    Returns:
        Exit code 0 when every marked class is a valid provider, 1 otherwise.
    """
    root_path = Path(args.path)
    if not root_path.exists():
        logger.warning(f"Path does not exist (path={root_path})")
        stderr.write(f"Path does not exist: {root_path}\n")
        return 2

    analyzer = ProviderAnalyzer(marker_names=args.marker or DEFAULT_MARKER_NAMES)
    diagnostics, errors = analyzer.diagnose(root_path)
    _write_errors(errors=errors, stderr=stderr)
    _write_diagnostics(diagnostics=diagnostics, stdout=stdout)
    return 1 if diagnostics else 0


def _run_show(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run show command.

    Returns:
        Exit code.
    """
    cache_path = Path(args.cache)
    if not cache_path.exists():
        logger.warning(f"Cache does not exist (path={cache_path})")
        stderr.write(f"Cache does not exist: {cache_path}\n")
        return 2
    cache = SQLiteSpecCache(db_path=cache_path)
    try:
        if not args.name:
            _write_json(payload=cache.list_unique_names(), stdout=stdout)
            return 0
        spec = cache.load(args.name)
    except PersistenceError as exc:
        stderr.write(f"Failed to read cache: {exc}\n")
        return 2
    except FormatError as exc:
        logger.warning(f"Cached provider is corrupted (name={args.name} error={exc})")
        stderr.write(f"Cached provider is corrupted: {exc}\n")
        return 2
    if spec is None:
        stderr.write(f"Provider not found: {args.name}\n")
        return 1
    _write_json(payload=to_dict(spec), stdout=stdout)
    return 0


def _write_errors(errors: list[AnalyzerError], stderr: TextIO) -> None:
    """Write analyzer errors to stderr.

    Args:
        errors: Recoverable analyzer errors.
        stderr: Standard error stream.
    """
    for error in errors:
        stderr.write(f"analyzer_error: {error}\n")


def _json_payload(
    providers: list[DiscoveredProvider], errors: list[AnalyzerError]
) -> dict[str, Any]:
    return {
        "providers": [
            {
                "file_path": provider.file_path,
                "lineno": provider.lineno,
                "unique_name": provider.spec.unique_name,
                "spec": to_dict(provider.spec),
            }
            for provider in providers
        ],
        "errors": [
            {"file_path": error.file_path, "message": error.message}
            for error in errors
        ],
    }


def _write_json(payload: Any, stdout: TextIO) -> None:
    """Write a JSON payload to stdout.

    Args:
        payload: JSON-compatible payload.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.print(
        json.dumps(payload, indent=2, sort_keys=True),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def _write_table(providers: list[DiscoveredProvider], stdout: TextIO) -> None:
    """Write providers as a table.

    Args:
        providers: Discovered providers.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.rule("providers", style=Style(color="cyan"), characters="-")
    table = Table(show_header=True, show_lines=True, expand=True)
    for column, ratio in TABLE_COLUMN_RATIOS.items():
        table.add_column(
            column,
            ratio=ratio,
            justify="right" if column == "line" else "left",
            overflow="fold",
        )
    for provider in providers:
        probes = "\n".join(
            f"{probe.name}({', '.join(arg.arg_type.c_type for arg in probe.args)})"
            for probe in provider.spec.probes
        )
        table.add_row(
            provider.file_path,
            str(provider.lineno),
            provider.spec.name,
            provider.spec.unique_name,
            probes,
        )
    console.print(table)


def _write_diagnostics(diagnostics: list[ProviderDiagnostic], stdout: TextIO) -> None:
    """Write provider diagnostics, one per line.

    Args:
        diagnostics: Rejected provider candidates.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    for diagnostic in diagnostics:
        console.print(
            f"{diagnostic.file_path}:{diagnostic.lineno}: {diagnostic.class_name}: {diagnostic.message}",
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
    if not diagnostics:
        console.print("All provider candidates are valid.", markup=False, highlight=False)


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
