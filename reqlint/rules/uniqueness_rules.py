"""
Uniqueness Rules — every requirement ID is declared exactly once in the corpus.
IDs are compared case-insensitively.
"""

from __future__ import annotations

import logging

from reqlint.models.enums import RuleName
from reqlint.models.schemas import RequirementAnnotation, ScannedDocument, Violation
from reqlint.rules.rules_config import LintRulesConfig

logger = logging.getLogger(__name__)


def first_declarations(documents: list[ScannedDocument]) -> dict[str, RequirementAnnotation]:
    """Map casefolded requirement id -> its first declaration in corpus order."""
    declared: dict[str, RequirementAnnotation] = {}
    for document in documents:
        for annotation in document.annotations:
            key = annotation.requirement_id.casefold()
            if key and key not in declared:
                declared[key] = annotation
    return declared


class UniquenessRules:

    def __init__(self, config: LintRulesConfig):
        self.config = config

    def check_uniqueness_rules(self, documents: list[ScannedDocument]) -> list[Violation]:
        if not self.config.enabled(RuleName.DUPLICATE_ID):
            return []

        first = first_declarations(documents)
        violations: list[Violation] = []

        for document in documents:
            for annotation in document.annotations:
                key = annotation.requirement_id.casefold()
                if not key:
                    continue
                original = first[key]
                if original is annotation:
                    continue
                violations.append(Violation(
                    rule=RuleName.DUPLICATE_ID,
                    severity=self.config.severity_for(RuleName.DUPLICATE_ID),
                    document=annotation.document,
                    line=annotation.line,
                    column=annotation.column,
                    message=(
                        f"Duplicate requirement id '{annotation.requirement_id}' "
                        f"(first declared at {original.document}:{original.line})"
                    ),
                    requirement_id=annotation.requirement_id,
                ))

        if violations:
            logger.info(f"Found {len(violations)} duplicate requirement declarations")
        return violations
