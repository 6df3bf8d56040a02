"""
Data schemas shared by the scanner, the rules and the reporters.
Each schema represents a clearly-bounded data object produced by one stage.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field

from .enums import IncludeKind, RequirementKeyword, RuleName, Severity


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Scanner output ───────────────────────────────────────


class RequirementAnnotation(BaseModel):
    """One `{% include requirement/KEYWORD id="..." %}` tag."""
    document: str
    line: int
    column: int
    raw_keyword: str
    keyword: Optional[RequirementKeyword] = None  # None when raw_keyword is invalid
    requirement_id: str = ""
    attributes: dict[str, str] = {}
    text: str = ""


class IncludeDirective(BaseModel):
    """A non-requirement include: `{% include path %}` or `{% include_relative path %}`."""
    document: str
    line: int
    column: int
    kind: IncludeKind = IncludeKind.INCLUDE
    target: str
    dynamic: bool = False  # target contains Liquid output and cannot be resolved statically


class CrossReference(BaseModel):
    """A Markdown link whose target is local to the corpus."""
    document: str
    line: int
    column: int
    raw_target: str
    page: str = ""  # empty = same document
    anchor: str = ""
    absolute: bool = False  # site-root relative ("/x.html" or "{{ site.baseurl }}/x.html")


class Heading(BaseModel):
    level: int
    title: str
    slug: str
    line: int


class ScannedDocument(BaseModel):
    """Everything the scanner extracted from a single Markdown file."""
    path: str
    permalink: str = ""
    annotations: list[RequirementAnnotation] = []
    includes: list[IncludeDirective] = []
    references: list[CrossReference] = []
    headings: list[Heading] = []
    html_anchors: list[str] = []
    line_count: int = 0

    @property
    def stem(self) -> str:
        name = self.path.rsplit("/", 1)[-1]
        return name.rsplit(".", 1)[0]

    @property
    def anchors(self) -> set[str]:
        """All fragment ids that resolve inside this document when rendered."""
        found = {h.slug for h in self.headings}
        found.update(self.html_anchors)
        found.update(a.requirement_id for a in self.annotations if a.requirement_id)
        return found


# ── Rule output ──────────────────────────────────────────


class Violation(BaseModel):
    rule: RuleName
    severity: Severity = Severity.ERROR
    document: str
    line: int = 0
    column: int = 0
    message: str
    requirement_id: str = ""

    def sort_key(self) -> tuple[str, int, int, str]:
        return (self.document, self.line, self.column, self.rule.value)


class LintSummary(BaseModel):
    documents: int = 0
    requirements: int = 0
    errors: int = 0
    warnings: int = 0
    infos: int = 0
    by_rule: dict[str, int] = {}
    by_keyword: dict[str, int] = {}

    @property
    def clean(self) -> bool:
        return self.errors == 0 and self.warnings == 0 and self.infos == 0


class LintReport(BaseModel):
    root: str = ""
    corpus_hash: str = ""
    generated_at: datetime = Field(default_factory=_utcnow)
    violations: list[Violation] = []
    summary: LintSummary = Field(default_factory=LintSummary)


# ── Requirement index ────────────────────────────────────


class RequirementIndexEntry(BaseModel):
    """A requirement as published for cross-referencing by the site generator."""
    requirement_id: str
    keyword: RequirementKeyword
    document: str
    line: int
    text: str = ""
