"""Models — enums and pydantic schemas for scanned documents and lint results."""

from reqlint.models.enums import (
    IncludeKind,
    OutputFormat,
    RequirementKeyword,
    RuleName,
    Severity,
)
from reqlint.models.schemas import (
    CrossReference,
    Heading,
    IncludeDirective,
    LintReport,
    LintSummary,
    RequirementAnnotation,
    RequirementIndexEntry,
    ScannedDocument,
    Violation,
)

__all__ = [
    "IncludeKind",
    "OutputFormat",
    "RequirementKeyword",
    "RuleName",
    "Severity",
    "CrossReference",
    "Heading",
    "IncludeDirective",
    "LintReport",
    "LintSummary",
    "RequirementAnnotation",
    "RequirementIndexEntry",
    "ScannedDocument",
    "Violation",
]
