"""
Heading anchor generation (GitHub / kramdown auto-id style).
"""

from __future__ import annotations

import re

_MARKUP_RE = re.compile(r"[`*~]|<[^>]+>")
_LINK_RE = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_STRIP_RE = re.compile(r"[^\w\- ]", re.UNICODE)


def heading_slug(title: str) -> str:
    """Convert a heading title into its rendered anchor id."""
    text = _LINK_RE.sub(r"\1", title)
    text = _MARKUP_RE.sub("", text)
    text = _STRIP_RE.sub("", text.strip().lower())
    return text.replace(" ", "-")


class SlugRegistry:
    """Hands out unique slugs per document: foo, foo-1, foo-2 ..."""

    def __init__(self):
        self._seen: dict[str, int] = {}

    def unique(self, title: str) -> str:
        base = heading_slug(title)
        slug = base
        while slug in self._seen:
            self._seen[base] += 1
            slug = f"{base}-{self._seen[base]}"
        self._seen.setdefault(slug, 0)
        return slug
