"""
Report Service — renders lint results for humans (text) and tools (JSON).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from reqlint.models.enums import OutputFormat
from reqlint.models.schemas import LintReport, RequirementIndexEntry

logger = logging.getLogger(__name__)


class ReportService:
    """Formats LintReport / requirement index and writes them out."""

    @staticmethod
    def format_text(report: LintReport) -> str:
        lines = [
            f"{v.document}:{v.line}:{v.column}: {v.severity.value} [{v.rule.value}] {v.message}"
            for v in report.violations
        ]
        s = report.summary
        if s.clean:
            lines.append(f"{s.documents} documents, {s.requirements} requirements: no problems found")
        else:
            lines.append(
                f"{s.documents} documents, {s.requirements} requirements: "
                f"{s.errors} errors, {s.warnings} warnings, {s.infos} infos"
            )
        return "\n".join(lines) + "\n"

    @staticmethod
    def format_json(report: LintReport) -> str:
        return report.model_dump_json(indent=2) + "\n"

    @classmethod
    def render(cls, report: LintReport, output_format: OutputFormat | str = OutputFormat.TEXT) -> str:
        fmt = OutputFormat(output_format)
        if fmt == OutputFormat.JSON:
            return cls.format_json(report)
        return cls.format_text(report)

    @staticmethod
    def format_index(entries: list[RequirementIndexEntry]) -> str:
        return json.dumps([e.model_dump(mode="json") for e in entries], indent=2) + "\n"

    @staticmethod
    def write(content: str, destination: str | Path) -> str:
        """Write rendered output to a file and return its path."""
        path = Path(destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.info(f"Wrote report to {path}")
        return str(path)
