"""
Digest helpers.

Digests are always SHA-256. Prefixed digests use the "sha256:<hex>" form the
log server uses for roots, package digests and key fingerprints.
"""

import hashlib
import re

DIGEST_ALGORITHM = "sha256"
DIGEST_SIZE = 32

_PREFIXED_RE = re.compile(r"^sha256:[0-9a-f]{64}$")


def sha256_digest(data: bytes) -> bytes:
    """Raw 32-byte SHA-256 digest of data."""
    return hashlib.sha256(data).digest()


def prefixed_digest(data: bytes) -> str:
    """
    SHA-256 of data in prefixed hex form.

    Example:
        prefixed_digest(b"abc") -> "sha256:ba7816bf..."
    """
    return f"{DIGEST_ALGORITHM}:{hashlib.sha256(data).hexdigest()}"


def is_prefixed_digest(value: str) -> bool:
    """True if value looks like "sha256:" followed by 64 lowercase hex chars."""
    return isinstance(value, str) and _PREFIXED_RE.match(value) is not None
