"""
Rules Config Store — loads lint rule configuration from a JSON file.

Project-level setting: the config lives next to the documentation as
`.reqlint.json` (name configurable via REQLINT_CONFIG_FILE_NAME) and is
cached per path. Falls back to sensible defaults when no file exists.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from pydantic import BaseModel, ValidationError, field_validator

from reqlint.config import get_settings
from reqlint.models.enums import RequirementKeyword, RuleName, Severity

logger = logging.getLogger(__name__)


# ── Config models ────────────────────────────────────────

DEFAULT_SEVERITIES: dict[RuleName, Severity] = {
    RuleName.INVALID_KEYWORD: Severity.ERROR,
    RuleName.MISSING_ID: Severity.ERROR,
    RuleName.MALFORMED_ID: Severity.ERROR,
    RuleName.DUPLICATE_ID: Severity.ERROR,
    RuleName.ID_PREFIX_MISMATCH: Severity.WARNING,
    RuleName.UNKNOWN_ATTRIBUTE: Severity.WARNING,
    RuleName.EMPTY_REQUIREMENT: Severity.WARNING,
    RuleName.UNRESOLVED_INCLUDE: Severity.ERROR,
    RuleName.UNKNOWN_PAGE: Severity.WARNING,
    RuleName.UNKNOWN_ANCHOR: Severity.ERROR,
    RuleName.UNREADABLE_DOCUMENT: Severity.ERROR,
}


class LintRulesConfig(BaseModel):
    """Lint rule configuration."""
    include: list[str] = ["**/*.md"]
    exclude: list[str] = ["_site/**", "node_modules/**", ".git/**", "vendor/**"]
    includes_dir: str = ""  # empty = Settings.includes_dir
    keywords: list[str] = [k.value for k in RequirementKeyword]
    id_pattern: str = r"^[a-z][a-z0-9]*(?:-[a-z0-9]+)*$"
    max_id_length: int = 100
    id_prefixes: dict[str, str] = {}  # document glob -> required id prefix
    allowed_attributes: list[str] = ["id"]
    severity: dict[RuleName, Severity] = {}
    disabled_rules: list[RuleName] = []
    check_page_links: bool = True

    @field_validator("id_pattern")
    @classmethod
    def _compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"id_pattern is not a valid regex: {exc}") from exc
        return value

    @field_validator("keywords")
    @classmethod
    def _known_keywords(cls, value: list[str]) -> list[str]:
        known = {k.value for k in RequirementKeyword}
        unknown = [k for k in value if k not in known]
        if unknown:
            raise ValueError(f"unknown requirement keywords: {', '.join(unknown)}")
        return value

    def severity_for(self, rule: RuleName) -> Severity:
        return self.severity.get(rule, DEFAULT_SEVERITIES[rule])

    def enabled(self, rule: RuleName) -> bool:
        return rule not in self.disabled_rules

    def resolved_includes_dir(self) -> str:
        return self.includes_dir or get_settings().includes_dir


# ── Store class ──────────────────────────────────────────

class RulesConfigStore:
    """
    Loads rule configs from JSON files. Falls back to defaults when the
    corpus carries no config. Cached after first load for the lifetime of
    the process.
    """

    def __init__(self):
        self.settings = get_settings()
        self._cache: dict[str, LintRulesConfig] = {}

    def _read(self, path: Path) -> LintRulesConfig:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {path}: {exc}") from exc

        if not isinstance(raw, dict):
            raise ValueError(f"{path} must contain a JSON object")

        try:
            return LintRulesConfig(**raw)
        except ValidationError as exc:
            raise ValueError(f"Invalid lint config in {path}: {exc}") from exc

    def load(
        self,
        root: str | Path | None = None,
        config_path: str | Path | None = None,
    ) -> LintRulesConfig:
        """
        Load config for a corpus.

        An explicit config_path must exist. Otherwise `<root>/<config_file_name>`
        is used when present, else defaults.
        """
        if config_path is not None:
            path = Path(config_path)
            if not path.is_file():
                raise FileNotFoundError(f"Config file not found: {path}")
        elif root is not None:
            path = Path(root) / self.settings.config_file_name
            if not path.is_file():
                logger.debug(f"No {self.settings.config_file_name} under {root}, using defaults")
                return self.defaults()
        else:
            return self.defaults()

        key = str(path.resolve())
        if key in self._cache:
            return self._cache[key]

        config = self._read(path)
        self._cache[key] = config
        logger.info(f"Loaded lint config from {path}")
        return config

    def defaults(self) -> LintRulesConfig:
        if "<defaults>" not in self._cache:
            self._cache["<defaults>"] = LintRulesConfig()
        return self._cache["<defaults>"]

    def invalidate(self) -> None:
        self._cache.clear()
