"""
Requirement Annotation Linter — Main Entry Point

Lint a documentation tree (CLI):
    python -m reqlint lint docs/
    python -m reqlint lint docs/ --format json --output report.json

Publish the requirement index:
    python -m reqlint index docs/ --output requirements.json

Run as an API server:
    python -m reqlint serve --port 8000

Or import and run programmatically:
    from reqlint.main import run
    report = run("docs/")
"""

from __future__ import annotations

import argparse
import logging
import sys

from reqlint.config import get_settings
from reqlint.models.enums import OutputFormat, Severity
from reqlint.models.schemas import LintReport
from reqlint.orchestration.runner import LintRunner, exit_code
from reqlint.services.report_service import ReportService
from reqlint.utils.logger import setup_logging

logger = logging.getLogger(__name__)

EXIT_USAGE = 2


def run(root: str, config_path: str | None = None) -> LintReport:
    """Lint a documentation root and return the report."""
    return LintRunner(config_path=config_path).run(root)


def serve(host: str | None = None, port: int | None = None) -> None:
    """Start the FastAPI server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run("reqlint.api:app", host=host, port=port)


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="reqlint",
        description="Lint requirement annotations (MUST/SHOULD/MAY/MUSTNOT/SHOULDNOT) in guideline docs",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help=f"Logging level (default: {settings.log_level})",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    lint = sub.add_parser("lint", help="Lint a documentation tree")
    lint.add_argument("root", help="Documentation root directory")
    lint.add_argument("--config", help="Path to a lint config JSON file")
    lint.add_argument(
        "--format",
        choices=[f.value for f in OutputFormat],
        default=settings.output_format,
        help=f"Report format (default: {settings.output_format})",
    )
    lint.add_argument(
        "--fail-on",
        choices=[Severity.ERROR.value, Severity.WARNING.value],
        default=settings.fail_on,
        help=f"Lowest severity that fails the run (default: {settings.fail_on})",
    )
    lint.add_argument("--output", help="Write the report to a file instead of stdout")

    index = sub.add_parser("index", help="Export the requirement index as JSON")
    index.add_argument("root", help="Documentation root directory")
    index.add_argument("--config", help="Path to a lint config JSON file")
    index.add_argument("--output", help="Write the index to a file instead of stdout")

    srv = sub.add_parser("serve", help="Run the HTTP API")
    srv.add_argument("--host", default=settings.api_host)
    srv.add_argument("--port", type=int, default=settings.api_port)

    return parser


def _emit(content: str, output: str | None) -> None:
    if output:
        ReportService.write(content, output)
    else:
        sys.stdout.write(content)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.command == "serve":
        serve(args.host, args.port)
        return 0

    runner = LintRunner(config_path=args.config)
    try:
        if args.command == "index":
            entries = runner.build_index(args.root)
            _emit(ReportService.format_index(entries), args.output)
            return 0

        report = runner.run(args.root)
    except (FileNotFoundError, NotADirectoryError, ValueError) as e:
        logger.error(str(e))
        return EXIT_USAGE

    _emit(ReportService.render(report, args.format), args.output)
    return exit_code(report, args.fail_on)


if __name__ == "__main__":
    sys.exit(main())
