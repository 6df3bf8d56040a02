"""Rules — configuration store and the lint rule engines."""

from reqlint.rules.rules_config import LintRulesConfig, RulesConfigStore
from reqlint.rules.annotation_rules import AnnotationRules
from reqlint.rules.uniqueness_rules import UniquenessRules
from reqlint.rules.reference_rules import ReferenceRules

__all__ = [
    "LintRulesConfig",
    "RulesConfigStore",
    "AnnotationRules",
    "UniquenessRules",
    "ReferenceRules",
]
