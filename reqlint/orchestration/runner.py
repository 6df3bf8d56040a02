"""
Lint Runner — scan → annotation rules → uniqueness → references → report.

Runs over a documentation root on disk (CLI) or over an in-memory
{path: text} mapping (HTTP API). Both paths share the same rule engines.
"""

from __future__ import annotations

import logging
import posixpath
import time
from collections import Counter
from pathlib import Path
from typing import Callable

from reqlint.models.enums import RuleName, Severity
from reqlint.models.schemas import (
    LintReport,
    LintSummary,
    RequirementAnnotation,
    RequirementIndexEntry,
    ScannedDocument,
    Violation,
)
from reqlint.rules import (
    AnnotationRules,
    LintRulesConfig,
    ReferenceRules,
    RulesConfigStore,
    UniquenessRules,
)
from reqlint.services.scanning_service import CorpusScan, ScanningService
from reqlint.utils.hashing import corpus_hash
from reqlint.utils.paths import escapes_root

logger = logging.getLogger(__name__)


class LintRunner:
    """Drives one lint pass. Config is resolved per corpus unless given explicitly."""

    def __init__(
        self,
        config: LintRulesConfig | None = None,
        config_path: str | Path | None = None,
        store: RulesConfigStore | None = None,
    ):
        self._config = config
        self._config_path = config_path
        self._store = store or RulesConfigStore()

    def config_for(self, root: str | Path | None = None) -> LintRulesConfig:
        if self._config is not None:
            return self._config
        return self._store.load(root=root, config_path=self._config_path)

    # ── On-disk corpus ───────────────────────────────────

    def scan(self, root: str | Path) -> tuple[LintRulesConfig, CorpusScan]:
        config = self.config_for(root)
        return config, ScanningService(config).scan_corpus(root)

    def run(self, root: str | Path) -> LintReport:
        """Lint every document under root."""
        base = Path(root)
        config, corpus = self.scan(base)
        return self._lint(
            config,
            corpus,
            exists=lambda rel: (base / rel).is_file(),
            root_label=str(base),
        )

    def build_index(self, root: str | Path) -> list[RequirementIndexEntry]:
        config, corpus = self.scan(root)
        return requirement_index(config, corpus.documents)

    # ── In-memory corpus ─────────────────────────────────

    def scan_documents(self, documents: dict[str, str]) -> tuple[LintRulesConfig, CorpusScan]:
        if not documents:
            raise ValueError("No documents supplied")

        config = self.config_for()
        corpus = CorpusScan()
        for raw_path, text in documents.items():
            path = normalize_document_path(raw_path)
            if path in corpus.texts:
                raise ValueError(f"Document path given twice: {raw_path}")
            corpus.texts[path] = text

        for path in sorted(corpus.texts):
            corpus.documents.append(ScanningService.scan_text(path, corpus.texts[path]))
        return config, corpus

    def run_documents(self, documents: dict[str, str]) -> LintReport:
        """Lint documents supplied as {relative path: markdown text}."""
        config, corpus = self.scan_documents(documents)
        known = set(corpus.texts)
        return self._lint(config, corpus, exists=known.__contains__, root_label="<memory>")

    def index_documents(self, documents: dict[str, str]) -> list[RequirementIndexEntry]:
        config, corpus = self.scan_documents(documents)
        return requirement_index(config, corpus.documents)

    # ── Pipeline ─────────────────────────────────────────

    def _lint(
        self,
        config: LintRulesConfig,
        corpus: CorpusScan,
        exists: Callable[[str], bool],
        root_label: str,
    ) -> LintReport:
        t0 = time.perf_counter()
        documents = corpus.documents

        violations: list[Violation] = _unreadable_violations(config, corpus.unreadable)
        violations += AnnotationRules(config).check_annotation_rules(documents)
        violations += UniquenessRules(config).check_uniqueness_rules(documents)
        violations += ReferenceRules(config, exists).check_reference_rules(documents)
        violations.sort(key=Violation.sort_key)

        report = LintReport(
            root=root_label,
            corpus_hash=corpus_hash(corpus.texts.items()),
            violations=violations,
            summary=summarize(config, documents, violations, len(corpus.unreadable)),
        )

        elapsed = time.perf_counter() - t0
        s = report.summary
        logger.info(
            f"Linted {s.documents} documents, {s.requirements} requirements in {elapsed:.3f}s: "
            f"{s.errors} errors, {s.warnings} warnings"
        )
        for rule, count in sorted(s.by_rule.items()):
            logger.debug(f"  {rule}: {count}")
        return report


# ── Helpers ──────────────────────────────────────────────


def normalize_document_path(raw_path: str) -> str:
    """Turn a client-supplied path into a corpus-relative POSIX path."""
    path = posixpath.normpath(raw_path.replace("\\", "/").strip()).lstrip("/")
    if not path or path == "." or escapes_root(path):
        raise ValueError(f"Invalid document path: {raw_path!r}")
    return path


def summarize(
    config: LintRulesConfig,
    documents: list[ScannedDocument],
    violations: list[Violation],
    unreadable: int = 0,
) -> LintSummary:
    severities = Counter(v.severity for v in violations)
    keywords = Counter(
        a.keyword.value for d in documents for a in d.annotations if _counts_as_keyword(config, a)
    )
    return LintSummary(
        documents=len(documents) + unreadable,
        requirements=sum(len(d.annotations) for d in documents),
        errors=severities[Severity.ERROR],
        warnings=severities[Severity.WARNING],
        infos=severities[Severity.INFO],
        by_rule=dict(Counter(v.rule.value for v in violations)),
        by_keyword=dict(keywords),
    )


def requirement_index(
    config: LintRulesConfig,
    documents: list[ScannedDocument],
) -> list[RequirementIndexEntry]:
    """Every well-formed requirement (configured keyword and an id), sorted by id."""
    entries = [
        RequirementIndexEntry(
            requirement_id=a.requirement_id,
            keyword=a.keyword,
            document=a.document,
            line=a.line,
            text=a.text,
        )
        for d in documents
        for a in d.annotations
        if _counts_as_keyword(config, a) and a.requirement_id
    ]
    entries.sort(key=lambda e: (e.requirement_id, e.document, e.line))
    return entries


def exit_code(report: LintReport, fail_on: Severity | str = Severity.ERROR) -> int:
    """0 when no violation reaches fail_on, else 1."""
    threshold = Severity(fail_on).rank
    failing = any(v.severity.rank >= threshold for v in report.violations)
    return 1 if failing else 0


def _unreadable_violations(config: LintRulesConfig, unreadable: dict[str, str]) -> list[Violation]:
    if not config.enabled(RuleName.UNREADABLE_DOCUMENT):
        return []
    return [
        Violation(
            rule=RuleName.UNREADABLE_DOCUMENT,
            severity=config.severity_for(RuleName.UNREADABLE_DOCUMENT),
            document=path,
            message=f"Document could not be read: {reason}",
        )
        for path, reason in sorted(unreadable.items())
    ]


def _counts_as_keyword(config: LintRulesConfig, annotation: RequirementAnnotation) -> bool:
    return annotation.keyword is not None and annotation.raw_keyword in config.keywords
