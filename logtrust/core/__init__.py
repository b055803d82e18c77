"""
Core trust-verification primitives.

This module provides the foundations shared by the checkpoint hasher and the
validation engine:
- Errors: Verification error taxonomy
- Canonical: Deterministic serialization
- IDs: Stable digest generation
"""

from .canonical import canonicalize, canonical_json_bytes, canonical_json_str
from .ids import sha256_digest, prefixed_digest, is_prefixed_digest
from .errors import (
    TrustError,
    UnknownKeyError,
    MalformedCheckpointError,
    SignatureInvalidError,
    UnsupportedAlgorithmError,
    RegistryError,
    WireFormatError,
)

__all__ = [
    "canonicalize",
    "canonical_json_bytes",
    "canonical_json_str",
    "sha256_digest",
    "prefixed_digest",
    "is_prefixed_digest",
    "TrustError",
    "UnknownKeyError",
    "MalformedCheckpointError",
    "SignatureInvalidError",
    "UnsupportedAlgorithmError",
    "RegistryError",
    "WireFormatError",
]
