"""CLI entrypoint for typelense."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from . import __version__
from .cancellation import cancel_on_interrupt
from .checkers.tsc import TscDiagnosticSource
from .collector import DiagnosticCollector
from .config import ConfigError, TypeLenseConfig, load_config
from .detectors import detect_monorepo, discover_detectors
from .logging import configure_logging, get_logger
from .models import DiagnosticRecord, MonorepoInfo
from .report import count_by_package, write_tsv

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

logger = get_logger("cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="typelense",
        description="Collect TypeScript errors across every package of a monorepo into a TSV report.",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory to scan for TypeScript errors (defaults to current directory).",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output path for the TSV file (default: typescript-errors.tsv).",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a .typelense.yml file (defaults to the scanned directory).",
    )
    parser.add_argument(
        "--tsc",
        default=None,
        help="TypeScript compiler executable (defaults to the nearest node_modules/.bin/tsc).",
    )
    parser.add_argument(
        "--errors-only",
        action="store_true",
        help="Drop warning, suggestion and message diagnostics.",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Skip packages whose name matches the glob pattern (repeatable).",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write detailed logs to this file.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for typelense."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(args.quiet),
        log_file=Path(args.log_file) if args.log_file else None,
    )

    target = Path(args.directory).expanduser().resolve()
    if not target.is_dir():
        parser.exit(EXIT_FAILURE, f"{target} is not a directory\n")

    try:
        config = load_config(Path(args.config) if args.config else target)
    except ConfigError as exc:
        parser.exit(EXIT_FAILURE, f"{exc}\n")

    output_path = Path(args.output or config.output).expanduser().resolve()

    try:
        exit_code = run(target, output_path, config, args)
    except KeyboardInterrupt:
        parser.exit(EXIT_INTERRUPTED, "\nInterrupted.\n")
    except Exception as exc:
        logger.debug("Unhandled failure", exc_info=True)
        parser.exit(EXIT_FAILURE, f"typelense failed: {exc}\nRun with --verbose for more details.\n")
    if exit_code != EXIT_OK:
        sys.exit(exit_code)


def run(
    target: Path,
    output_path: Path,
    config: TypeLenseConfig,
    args: argparse.Namespace,
) -> int:
    """Detect, collect and write the report; return the process exit code."""
    quiet = bool(args.quiet)
    if not quiet:
        print(f"[DIR] Scanning directory: {target}")
        print(f"[OUT] Output file: {output_path}\n")

    detectors = discover_detectors(config.detectors.enabled)
    info = detect_monorepo(target, detectors=detectors)
    if not quiet:
        _print_detection(info)

    source = TscDiagnosticSource(
        args.tsc or config.checker.executable,
        extra_args=config.checker.args,
        timeout=config.checker.timeout,
    )
    collector = DiagnosticCollector(
        source,
        config_filename=config.tsconfig,
        include_warnings=config.include_warnings and not args.errors_only,
        exclude_packages=[*config.exclude_packages, *args.exclude],
    )

    def _on_progress(label: str, current: int, total: int) -> None:
        if not quiet:
            print(f"  [{current}/{total}] Checking {label}", flush=True)

    with cancel_on_interrupt(collector.token):
        records = collector.collect(target, info, on_progress=_on_progress)

    if not quiet:
        _print_summary(records)

    write_tsv(records, output_path)
    if not quiet:
        print(f"Results saved to: {output_path}")

    if collector.interrupted:
        logger.warning("Interrupted by user; the report contains partial results")
        return EXIT_INTERRUPTED
    return EXIT_OK


def _print_detection(info: MonorepoInfo) -> None:
    if not info.is_monorepo:
        print("Single package detected")
        return
    print(f"Detected {info.type} monorepo with {len(info.packages)} package(s)")
    if info.packages:
        print("  Packages:")
        for package in info.packages:
            version = f" ({package.version})" if package.version else ""
            print(f"    * {package.name}{version}")
    print()


def _print_summary(records: Sequence[DiagnosticRecord]) -> None:
    if not records:
        print("No TypeScript errors found")
        return
    print(f"Found {len(records)} TypeScript error(s)")
    print("  Error breakdown:")
    for package, count in count_by_package(records).items():
        print(f"    * {package}: {count} error(s)")
    print()


if __name__ == "__main__":
    main(sys.argv[1:])
