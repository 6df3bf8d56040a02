"""
Hashing utilities for corpus fingerprints in lint reports.
"""

from __future__ import annotations

import hashlib
from typing import Iterable


def sha256_hash(content: str | bytes) -> str:
    """Return the SHA-256 hex digest of the given content."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def corpus_hash(documents: Iterable[tuple[str, str]]) -> str:
    """
    Fingerprint a set of (path, text) pairs.

    Order-independent: documents are hashed sorted by path.
    """
    digest = hashlib.sha256()
    for path, text in sorted(documents):
        digest.update(path.encode("utf-8"))
        digest.update(b"\0")
        digest.update(sha256_hash(text).encode("ascii"))
        digest.update(b"\n")
    return digest.hexdigest()
