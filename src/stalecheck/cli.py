"""CLI entry point: ``stalecheck check``."""

from __future__ import annotations

# Phase 1: Singleton logging before anything else logs
from stalecheck.logging_config import setup_logging

setup_logging()

import argparse  # noqa: E402
import logging  # noqa: E402
import sys  # noqa: E402
from collections.abc import Sequence  # noqa: E402
from pathlib import Path  # noqa: E402

from pydantic import ValidationError  # noqa: E402

from stalecheck import __version__  # noqa: E402
from stalecheck.config import Settings  # noqa: E402
from stalecheck.constants import ExitCode, ReportFormat  # noqa: E402
from stalecheck.errors import StaleCheckError  # noqa: E402

logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"stalecheck {__version__}")
        return ExitCode.SUCCESS

    if args.command == "check":
        return _run_check(args)

    parser.print_help()
    return ExitCode.SUCCESS


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="stalecheck",
        description=(
            "Audit useApiQuery/useApiMutation calls for a staleTime "
            "that matches the caching policy."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    check = sub.add_parser(
        "check",
        help="Audit a project",
    )
    check.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Project root (default: current directory)",
    )
    check.add_argument(
        "--tsconfig",
        default=None,
        help=(
            "tsconfig.json for import aliases "
            "(default: <root>/tsconfig.json if present)"
        ),
    )
    check.add_argument(
        "--format",
        "-f",
        choices=[f.value for f in ReportFormat],
        default=ReportFormat.TEXT.value,
        help="Report format (default: text)",
    )
    check.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


def _run_check(args: argparse.Namespace) -> int:
    """Execute the check command."""
    from stalecheck.analysis import run_audit
    from stalecheck.report import write_report

    try:
        settings = Settings()
    except ValidationError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return ExitCode.SETUP_FAILURE

    if args.verbose:
        setup_logging("DEBUG", force=True)
    elif settings.log_level != "INFO":
        setup_logging(settings.log_level, force=True)

    if args.tsconfig:
        settings = settings.model_copy(
            update={"tsconfig_path": Path(args.tsconfig)}
        )

    root = Path(args.root).resolve()
    try:
        result = run_audit(root, settings)
    except StaleCheckError as e:
        logger.error("Setup failed: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return ExitCode.SETUP_FAILURE
    except Exception as e:  # noqa: BLE001
        logger.exception("Audit failed")
        print(f"Error: audit failed: {e}", file=sys.stderr)
        return ExitCode.SETUP_FAILURE

    write_report(
        result,
        ReportFormat(args.format),
        stdout=sys.stdout,
        stderr=sys.stderr,
    )
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
