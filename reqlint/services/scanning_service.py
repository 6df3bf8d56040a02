"""
Scanning Service — structured extraction from guideline Markdown documents.

Extracts, with 1-based line/column positions:
  • Requirement annotations  {% include requirement/MUST id="..." %} + their text
  • Include directives       {% include path %} / {% include_relative path %}
  • Cross-references         [text](page.html#anchor), [label]: target
  • Headings and anchors     ATX headings, {#explicit-id}, <a name="...">
  • Front-matter permalink

Does NOT:
  • Scan fenced code blocks, inline code spans or YAML front matter
  • Render Liquid or resolve anything (that is the rules' job)
  • Report violations
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from urllib.parse import unquote

import yaml
from pydantic import BaseModel

from reqlint.models.enums import IncludeKind, RequirementKeyword
from reqlint.models.schemas import (
    CrossReference,
    Heading,
    IncludeDirective,
    RequirementAnnotation,
    ScannedDocument,
)
from reqlint.rules.rules_config import LintRulesConfig
from reqlint.utils.paths import path_matches
from reqlint.utils.slugs import SlugRegistry

logger = logging.getLogger(__name__)

# ── Regex patterns ───────────────────────────────────────

_FENCE_OPEN_RE = re.compile(r"^([ \t]*)(`{3,}|~{3,})(.*)$")
_FENCE_CLOSE_RE = re.compile(r"^([ \t]*)(`{3,}|~{3,})\s*$")
_INLINE_CODE_RE = re.compile(r"(`+)(.+?)\1")
_HTML_COMMENT_RE = re.compile(r"<!--.*?-->")
_TAG_RE = re.compile(r"\{%-?\s*(include_relative|include)\s+(.*?)\s*-?%\}")
_REQUIREMENT_ARGS_RE = re.compile(r"^requirement/([^\s%]*)(.*)$", re.DOTALL)
_INCLUDE_TARGET_RE = re.compile(r"(?:\{\{.*?\}\}|\S)+")
_ATTR_RE = re.compile(r"""([A-Za-z_][\w-]*)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"']+))""")
_INLINE_LINK_RE = re.compile(
    r"(!?)\[(?:[^\[\]]|\[[^\]]*\])*\]"
    r"\(\s*<?((?:\{\{[^}]*\}\}|\{(?!\{)|[^)\s>{])+)>?(?:\s+(?:\"[^\"]*\"|'[^']*'))?\s*\)"
)
_REF_DEF_RE = re.compile(r"^\s{0,3}\[[^\]]+\]:\s*<?((?:\{\{[^}]*\}\}|\{(?!\{)|[^\s{])+?)>?(?:\s+.*)?$")
_HEADING_RE = re.compile(r"^\s{0,3}(#{1,6})\s+(.*?)(?:\s+#+)?\s*$")
_HEADING_ID_RE = re.compile(r"\s*\{:?\s*#([\w-]+)\s*\}\s*$")
_HTML_ANCHOR_RE = re.compile(r"<a\s[^>]*?\b(?:name|id)\s*=\s*[\"']([^\"']+)[\"']", re.IGNORECASE)
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")
_BASEURL_RE = re.compile(r"^\{\{\s*site\.baseurl\s*\}\}")

_VALID_KEYWORDS = {k.value for k in RequirementKeyword}


class CorpusScan(BaseModel):
    """Result of scanning a whole corpus."""
    documents: list[ScannedDocument] = []
    texts: dict[str, str] = {}
    unreadable: dict[str, str] = {}  # path -> reason


class _Line:
    __slots__ = ("number", "raw", "masked")

    def __init__(self, number: int, raw: str, masked: str):
        self.number = number
        self.raw = raw
        self.masked = masked


class ScanningService:
    """
    Extract structured markup from guideline documents.

    Primary interface:
        paths    = ScanningService(config).discover(root)
        document = ScanningService.scan_text("python/design.md", text)
        corpus   = ScanningService(config).scan_corpus(root)
    """

    def __init__(self, config: LintRulesConfig | None = None):
        self.config = config or LintRulesConfig()

    # ── Discovery ────────────────────────────────────────

    def discover(self, root: str | Path) -> list[str]:
        """Return sorted POSIX paths (relative to root) of every document to lint."""
        base = Path(root)
        if not base.exists():
            raise FileNotFoundError(f"Documentation root not found: {base}")
        if not base.is_dir():
            raise NotADirectoryError(f"Documentation root is not a directory: {base}")

        found: set[str] = set()
        for pattern in self.config.include:
            for path in base.glob(pattern):
                if not path.is_file():
                    continue
                rel = path.relative_to(base).as_posix()
                if any(path_matches(rel, ex) for ex in self.config.exclude):
                    continue
                found.add(rel)

        paths = sorted(found)
        logger.debug(f"Discovered {len(paths)} documents under {base}")
        return paths

    # ── Corpus scan ──────────────────────────────────────

    def scan_corpus(self, root: str | Path) -> CorpusScan:
        base = Path(root)
        result = CorpusScan()

        for rel in self.discover(base):
            try:
                text = (base / rel).read_text(encoding="utf-8-sig")
            except UnicodeDecodeError as exc:
                logger.warning(f"Skipping {rel}: not valid UTF-8 ({exc.reason})")
                result.unreadable[rel] = f"not valid UTF-8: {exc.reason}"
                continue
            except OSError as exc:
                logger.warning(f"Skipping {rel}: {exc}")
                result.unreadable[rel] = str(exc)
                continue

            result.texts[rel] = text
            result.documents.append(self.scan_text(rel, text))

        total = sum(len(d.annotations) for d in result.documents)
        logger.info(
            f"Scanned {len(result.documents)} documents under {base} "
            f"({total} requirement annotations, {len(result.unreadable)} unreadable)"
        )
        return result

    # ── Single document ──────────────────────────────────

    @staticmethod
    def scan_text(path: str, text: str) -> ScannedDocument:
        """Parse one Markdown document into a ScannedDocument."""
        if text.startswith("\ufeff"):
            text = text[1:]
        lines, permalink = _prepare_lines(text)
        document = ScannedDocument(
            path=path,
            permalink=permalink,
            line_count=len(text.splitlines()),
        )
        slugs = SlugRegistry()

        for idx, line in enumerate(lines):
            if line is None:
                continue

            heading = _parse_heading(line, slugs)
            if heading is not None:
                document.headings.append(heading)

            for match in _HTML_ANCHOR_RE.finditer(line.masked):
                document.html_anchors.append(match.group(1))

            for match in _TAG_RE.finditer(line.masked):
                kind, args = match.group(1), match.group(2)
                column = match.start() + 1
                req = _REQUIREMENT_ARGS_RE.match(args) if kind == "include" else None
                if req is not None:
                    document.annotations.append(
                        _build_annotation(path, line, match, req, lines, idx)
                    )
                    continue

                target_match = _INCLUDE_TARGET_RE.match(args)
                if target_match is None:
                    continue
                target = target_match.group(0)
                document.includes.append(
                    IncludeDirective(
                        document=path,
                        line=line.number,
                        column=column,
                        kind=IncludeKind(kind),
                        target=target,
                        dynamic="{{" in target,
                    )
                )

            document.references.extend(_parse_references(path, line))

        logger.debug(
            f"{path}: {len(document.annotations)} annotations, "
            f"{len(document.includes)} includes, {len(document.references)} references, "
            f"{len(document.headings)} headings"
        )
        return document


# ── Helpers ──────────────────────────────────────────────


def _mask(raw: str) -> str:
    """Blank out inline code spans and one-line HTML comments, keeping columns."""
    masked = _INLINE_CODE_RE.sub(lambda m: " " * len(m.group(0)), raw)
    return _HTML_COMMENT_RE.sub(lambda m: " " * len(m.group(0)), masked)


def _prepare_lines(text: str) -> tuple[list[_Line | None], str]:
    """
    Split text into scannable lines. Lines inside front matter or fenced
    code come back as None so indices stay aligned with line numbers.
    """
    raw_lines = text.splitlines()
    lines: list[_Line | None] = []
    permalink = ""

    start = 0
    if raw_lines and raw_lines[0].strip() == "---":
        for end in range(1, len(raw_lines)):
            if raw_lines[end].strip() in ("---", "..."):
                permalink = _front_matter_permalink(raw_lines[1:end])
                lines.extend([None] * (end + 1))
                start = end + 1
                break

    fence: tuple[str, int] | None = None  # (fence marker, indent)
    for number, raw in enumerate(raw_lines[start:], start=start + 1):
        if fence is not None:
            if _closes_fence(raw, fence):
                fence = None
            lines.append(None)
            continue
        opening = _FENCE_OPEN_RE.match(raw)
        if opening and not (opening.group(2)[0] == "`" and "`" in opening.group(3)):
            fence = (opening.group(2), len(opening.group(1).expandtabs(4)))
            lines.append(None)
            continue
        lines.append(_Line(number, raw, _mask(raw)))

    return lines, permalink


def _closes_fence(raw: str, fence: tuple[str, int]) -> bool:
    """A closing fence is bare fence characters, at least as long as the opener."""
    match = _FENCE_CLOSE_RE.match(raw)
    if match is None:
        return False
    marker, indent = fence
    closing = match.group(2)
    return (
        closing[0] == marker[0]
        and len(closing) >= len(marker)
        and len(match.group(1).expandtabs(4)) < indent + 4
    )


def _front_matter_permalink(front_matter: list[str]) -> str:
    try:
        data = yaml.safe_load("\n".join(front_matter))
    except yaml.YAMLError as exc:
        logger.warning(f"Ignoring unparseable front matter: {exc}")
        return ""
    if not isinstance(data, dict):
        return ""
    permalink = data.get("permalink")
    return permalink.strip() if isinstance(permalink, str) else ""


def _parse_heading(line: _Line, slugs: SlugRegistry) -> Heading | None:
    match = _HEADING_RE.match(line.raw)
    if match is None:
        return None
    level = len(match.group(1))
    title = match.group(2).strip()
    if not title:
        return None

    explicit = _HEADING_ID_RE.search(title)
    if explicit:
        title = title[:explicit.start()].rstrip()
        slug = explicit.group(1)
    else:
        slug = slugs.unique(title)
    return Heading(level=level, title=title, slug=slug, line=line.number)


def _build_annotation(
    path: str,
    line: _Line,
    tag: re.Match,
    req: re.Match,
    lines: list[_Line | None],
    idx: int,
) -> RequirementAnnotation:
    raw_keyword = req.group(1)
    attributes: dict[str, str] = {}
    for attr in _ATTR_RE.finditer(req.group(2)):
        value = next((g for g in attr.groups()[1:] if g is not None), "")
        attributes[attr.group(1)] = value

    following = _TAG_RE.search(line.masked, tag.end())
    end = following.start() if following else len(line.raw)
    text = line.raw[tag.end():end].strip()
    if not text:
        text = _continuation_text(lines, idx + 1)

    return RequirementAnnotation(
        document=path,
        line=line.number,
        column=tag.start() + 1,
        raw_keyword=raw_keyword,
        keyword=RequirementKeyword(raw_keyword) if raw_keyword in _VALID_KEYWORDS else None,
        requirement_id=attributes.get("id", "").strip(),
        attributes=attributes,
        text=text,
    )


def _continuation_text(lines: list[_Line | None], start: int) -> str:
    """Gather the rest of the paragraph following an annotation on its own line."""
    parts: list[str] = []
    for line in lines[start:]:
        if line is None or not line.raw.strip():
            break
        if _HEADING_RE.match(line.raw) or _TAG_RE.search(line.masked):
            break
        parts.append(line.raw.strip())
    return " ".join(parts)


def _parse_references(path: str, line: _Line) -> list[CrossReference]:
    refs: list[CrossReference] = []

    for match in _INLINE_LINK_RE.finditer(line.masked):
        if match.group(1):  # image
            continue
        ref = _build_reference(path, line.number, match.start(2) + 1, match.group(2))
        if ref is not None:
            refs.append(ref)

    ref_def = _REF_DEF_RE.match(line.masked)
    if ref_def:
        ref = _build_reference(path, line.number, ref_def.start(1) + 1, ref_def.group(1))
        if ref is not None:
            refs.append(ref)

    return refs


def _build_reference(path: str, line_no: int, column: int, raw_target: str) -> CrossReference | None:
    """Normalise a link target; None for external or dynamic targets."""
    raw = raw_target.strip()
    target = _BASEURL_RE.sub("", raw)
    if "{{" in target or "{%" in target:
        return None
    if _SCHEME_RE.match(target) or target.startswith("//"):
        return None

    absolute = target.startswith("/")
    target = target.lstrip("/")
    page, _, anchor = target.partition("#")
    page = page.split("?", 1)[0]
    if not page and not anchor:
        return None

    return CrossReference(
        document=path,
        line=line_no,
        column=column,
        raw_target=raw_target,
        page=unquote(page),
        anchor=unquote(anchor),
        absolute=absolute,
    )
