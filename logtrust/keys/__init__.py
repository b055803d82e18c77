"""
Key material, signatures and the key registry.

Provides:
- PublicKey and "<algorithm>:<base64>" encodings
- Signature decoding and verification (ed25519, ecdsa-p256)
- KeyRegistry interface with in-memory and file-backed implementations
- SigningKey for producing signatures in tooling and tests
"""

from .algorithms import (
    ED25519,
    ECDSA_P256,
    SUPPORTED_ALGORITHMS,
    PublicKey,
    decode_signature,
    verify_signature,
)
from .registry import (
    KeyEntry,
    KeyRegistry,
    InMemoryKeyRegistry,
    FileKeyRegistry,
    write_registry_file,
    append_to_registry_file,
)
from .signer import SigningKey, ensure_keypair

__all__ = [
    "ED25519",
    "ECDSA_P256",
    "SUPPORTED_ALGORITHMS",
    "PublicKey",
    "decode_signature",
    "verify_signature",
    "KeyEntry",
    "KeyRegistry",
    "InMemoryKeyRegistry",
    "FileKeyRegistry",
    "write_registry_file",
    "append_to_registry_file",
    "SigningKey",
    "ensure_keypair",
]
