"""
Annotation Rules — per-annotation checks on requirement markup.
Detects invalid keywords, missing or malformed IDs, ID prefix drift,
unknown attributes and annotations with no guideline text.
"""

from __future__ import annotations

import logging
import re

from reqlint.models.enums import RuleName
from reqlint.models.schemas import RequirementAnnotation, ScannedDocument, Violation
from reqlint.rules.rules_config import LintRulesConfig
from reqlint.utils.paths import path_matches

logger = logging.getLogger(__name__)


class AnnotationRules:
    """Checks that only need one annotation (and its document) at a time."""

    def __init__(self, config: LintRulesConfig):
        self.config = config
        self._id_re = re.compile(config.id_pattern)

    def check_annotation_rules(self, documents: list[ScannedDocument]) -> list[Violation]:
        """
        Apply annotation checks to every document.
        Returns list of violations.
        """
        violations: list[Violation] = []
        for document in documents:
            prefix = self._required_prefix(document.path)
            for annotation in document.annotations:
                violations.extend(self._check(annotation, prefix))
        return violations

    # ── Individual checks ────────────────────────────────

    def _check(self, annotation: RequirementAnnotation, prefix: str | None) -> list[Violation]:
        found: list[Violation] = []
        req_id = annotation.requirement_id

        # ── Keyword ──────────────────────────────────────
        if annotation.raw_keyword not in self.config.keywords:
            detail = f"Unknown requirement keyword '{annotation.raw_keyword}'"
            upper = annotation.raw_keyword.upper()
            if upper in self.config.keywords:
                detail += f" (did you mean '{upper}'?)"
            elif not annotation.raw_keyword:
                detail = "Requirement annotation has no keyword"
            else:
                detail += f"; expected one of {', '.join(self.config.keywords)}"
            found.append(self._violation(RuleName.INVALID_KEYWORD, annotation, detail))

        # ── ID presence and shape ────────────────────────
        if not req_id:
            found.append(self._violation(
                RuleName.MISSING_ID, annotation,
                f"{annotation.raw_keyword or 'Requirement'} annotation has no id attribute",
            ))
        else:
            if not self._id_re.fullmatch(req_id):
                found.append(self._violation(
                    RuleName.MALFORMED_ID, annotation,
                    f"Requirement id '{req_id}' does not match pattern {self.config.id_pattern}",
                ))
            elif len(req_id) > self.config.max_id_length:
                found.append(self._violation(
                    RuleName.MALFORMED_ID, annotation,
                    f"Requirement id '{req_id}' is {len(req_id)} characters "
                    f"(max: {self.config.max_id_length})",
                ))

            if prefix and not req_id.startswith(prefix):
                found.append(self._violation(
                    RuleName.ID_PREFIX_MISMATCH, annotation,
                    f"Requirement id '{req_id}' should start with '{prefix}' in {annotation.document}",
                ))

        # ── Attributes ───────────────────────────────────
        for name in annotation.attributes:
            if name not in self.config.allowed_attributes:
                found.append(self._violation(
                    RuleName.UNKNOWN_ATTRIBUTE, annotation,
                    f"Unknown attribute '{name}' on requirement annotation",
                ))

        # ── Guideline text ───────────────────────────────
        if not annotation.text:
            found.append(self._violation(
                RuleName.EMPTY_REQUIREMENT, annotation,
                f"Requirement '{req_id or '?'}' has no guideline text",
            ))

        return [v for v in found if self.config.enabled(v.rule)]

    def _required_prefix(self, path: str) -> str | None:
        for pattern, prefix in self.config.id_prefixes.items():
            if path_matches(path, pattern):
                return prefix
        return None

    def _violation(self, rule: RuleName, annotation: RequirementAnnotation, message: str) -> Violation:
        return Violation(
            rule=rule,
            severity=self.config.severity_for(rule),
            document=annotation.document,
            line=annotation.line,
            column=annotation.column,
            message=message,
            requirement_id=annotation.requirement_id,
        )
