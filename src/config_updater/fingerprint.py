"""Content fingerprints for byte-equality comparison."""

from __future__ import annotations

import hashlib


def fingerprint(data: bytes) -> str:
    """Return the SHA-256 hex digest of *data*."""
    return hashlib.sha256(data).hexdigest()


def short_fingerprint(digest: str) -> str:
    """Abbreviate a digest for log lines."""
    return digest[:8]
