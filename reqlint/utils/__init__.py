from .logger import setup_logging
from .hashing import sha256_hash, corpus_hash
from .slugs import heading_slug, SlugRegistry

__all__ = ["setup_logging", "sha256_hash", "corpus_hash", "heading_slug", "SlugRegistry"]
