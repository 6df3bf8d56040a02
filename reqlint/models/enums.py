from enum import Enum

class RequirementKeyword(str, Enum):
    MUST = "MUST"
    SHOULD = "SHOULD"
    MAY = "MAY"
    MUSTNOT = "MUSTNOT"
    SHOULDNOT = "SHOULDNOT"

class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return {"info": 0, "warning": 1, "error": 2}[self.value]

class RuleName(str, Enum):
    INVALID_KEYWORD = "invalid_keyword"
    MISSING_ID = "missing_id"
    MALFORMED_ID = "malformed_id"
    DUPLICATE_ID = "duplicate_id"
    ID_PREFIX_MISMATCH = "id_prefix_mismatch"
    UNKNOWN_ATTRIBUTE = "unknown_attribute"
    EMPTY_REQUIREMENT = "empty_requirement"
    UNRESOLVED_INCLUDE = "unresolved_include"
    UNKNOWN_PAGE = "unknown_page"
    UNKNOWN_ANCHOR = "unknown_anchor"
    UNREADABLE_DOCUMENT = "unreadable_document"

class IncludeKind(str, Enum):
    INCLUDE = "include"
    INCLUDE_RELATIVE = "include_relative"

class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"
