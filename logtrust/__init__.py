"""
Transparency Log Trust Anchor

Client-side verification for a package transparency log: signed checkpoint
hashing and batch signature validation of package log records.
"""

__version__ = "0.1.0"

from .checkpoint import hash_checkpoint, CheckpointHasher, RootIdentifier, SignedCheckpoint
from .validation import validate, ValidationEngine, PackageLogRecord

__all__ = [
    "__version__",
    "hash_checkpoint",
    "CheckpointHasher",
    "RootIdentifier",
    "SignedCheckpoint",
    "validate",
    "ValidationEngine",
    "PackageLogRecord",
]
