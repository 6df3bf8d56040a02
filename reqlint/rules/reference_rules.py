"""
Reference Rules — build-validity checks across documents.
Every include directive must resolve to a file, and every local link must
land on a known page and, when it carries a fragment, on an anchor that
page actually renders (heading, explicit id, HTML anchor or requirement id).
"""

from __future__ import annotations

import logging
import posixpath
from typing import Callable

from reqlint.models.enums import IncludeKind, RuleName
from reqlint.models.schemas import (
    CrossReference,
    IncludeDirective,
    RequirementAnnotation,
    ScannedDocument,
    Violation,
)
from reqlint.rules.rules_config import LintRulesConfig
from reqlint.rules.uniqueness_rules import first_declarations
from reqlint.utils.paths import escapes_root, join_relative

logger = logging.getLogger(__name__)

_PAGE_SUFFIXES = (".md", ".markdown", ".html", ".htm")


def _html_name(path: str) -> str:
    root, ext = posixpath.splitext(path)
    return f"{root}.html" if ext in (".md", ".markdown") else path


class PageIndex:
    """Resolves link targets (source path, rendered .html path or permalink) to documents."""

    def __init__(self, documents: list[ScannedDocument]):
        self._by_path: dict[str, ScannedDocument] = {}
        self._by_name: dict[str, ScannedDocument] = {}

        for document in documents:
            keys = [document.path, _html_name(document.path)]
            if document.permalink:
                keys.append(posixpath.normpath(document.permalink.lstrip("/")))
            for key in keys:
                self._by_path.setdefault(key, document)
                self._by_name.setdefault(posixpath.basename(key), document)

    def resolve(self, ref: CrossReference) -> ScannedDocument | None:
        if not ref.page:
            return self._by_path.get(ref.document)

        page = ref.page.rstrip("/")
        candidates = [posixpath.normpath(page)]
        if not ref.absolute:
            candidates.insert(0, join_relative(ref.document, page))

        for candidate in candidates:
            for key in (candidate, _html_name(candidate)):
                if key in self._by_path:
                    return self._by_path[key]

        # Permalinks flatten pages; fall back to the file name
        name = posixpath.basename(page)
        return self._by_name.get(name) or self._by_name.get(_html_name(name))


class ReferenceRules:
    """Include and cross-reference resolution checks."""

    def __init__(self, config: LintRulesConfig, exists: Callable[[str], bool]):
        """
        Args:
            config: Lint rule configuration
            exists: Predicate telling whether a corpus-relative POSIX path is a file
        """
        self.config = config
        self.exists = exists

    def check_reference_rules(self, documents: list[ScannedDocument]) -> list[Violation]:
        pages = PageIndex(documents)
        declared = first_declarations(documents)
        violations: list[Violation] = []

        for document in documents:
            if self.config.enabled(RuleName.UNRESOLVED_INCLUDE):
                for include in document.includes:
                    violation = self._check_include(include)
                    if violation is not None:
                        violations.append(violation)

            for ref in document.references:
                violation = self._check_reference(ref, pages, declared)
                if violation is not None and self.config.enabled(violation.rule):
                    violations.append(violation)

        return violations

    # ── Includes ─────────────────────────────────────────

    def _include_path(self, include: IncludeDirective) -> str:
        if include.kind == IncludeKind.INCLUDE_RELATIVE:
            return join_relative(include.document, include.target)
        includes_dir = self.config.resolved_includes_dir()
        return posixpath.normpath(posixpath.join(includes_dir, include.target))

    def _check_include(self, include: IncludeDirective) -> Violation | None:
        if include.dynamic:
            return None

        resolved = self._include_path(include)
        if not escapes_root(resolved) and self.exists(resolved):
            return None

        return Violation(
            rule=RuleName.UNRESOLVED_INCLUDE,
            severity=self.config.severity_for(RuleName.UNRESOLVED_INCLUDE),
            document=include.document,
            line=include.line,
            column=include.column,
            message=f"{include.kind.value} target '{include.target}' not found (looked for {resolved})",
        )

    # ── Links ────────────────────────────────────────────

    def _check_reference(
        self,
        ref: CrossReference,
        pages: PageIndex,
        declared: dict[str, RequirementAnnotation],
    ) -> Violation | None:
        if ref.page and not ref.page.lower().endswith(_PAGE_SUFFIXES):
            return None

        target = pages.resolve(ref)
        if target is None:
            if not self.config.check_page_links:
                return None
            return self._violation(
                RuleName.UNKNOWN_PAGE, ref,
                f"Link target '{ref.raw_target}' does not match any document",
            )

        if not ref.anchor or ref.anchor in target.anchors:
            return None

        message = f"Anchor '#{ref.anchor}' not found in {target.path}"
        owner = declared.get(ref.anchor.casefold())
        if owner is None:
            return self._violation(RuleName.UNKNOWN_ANCHOR, ref, message)
        if owner.document != target.path:
            message += f"; requirement '{owner.requirement_id}' is declared in {owner.document}"
        return self._violation(RuleName.UNKNOWN_ANCHOR, ref, message, owner.requirement_id)

    def _violation(
        self,
        rule: RuleName,
        ref: CrossReference,
        message: str,
        requirement_id: str = "",
    ) -> Violation:
        return Violation(
            rule=rule,
            severity=self.config.severity_for(rule),
            document=ref.document,
            line=ref.line,
            column=ref.column,
            message=message,
            requirement_id=requirement_id,
        )
