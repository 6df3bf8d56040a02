"""
Path helpers shared by discovery and the rules.
All corpus paths are POSIX strings relative to the documentation root.
"""

from __future__ import annotations

import posixpath
from fnmatch import fnmatch


def path_matches(rel_path: str, pattern: str) -> bool:
    """Glob match on a relative path; a leading `**/` also matches top-level files."""
    if fnmatch(rel_path, pattern):
        return True
    return pattern.startswith("**/") and fnmatch(rel_path, pattern[3:])


def join_relative(document: str, target: str) -> str:
    """Resolve target against the directory of document, normalised."""
    base = posixpath.dirname(document)
    return posixpath.normpath(posixpath.join(base, target))


def escapes_root(rel_path: str) -> bool:
    return rel_path == ".." or rel_path.startswith("../")
