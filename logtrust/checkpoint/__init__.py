"""
Signed checkpoint verification.

Provides:
- Checkpoint body format with deterministic canonicalization
- SignedCheckpoint / RootIdentifier models
- CheckpointHasher: signature verification + root identifier derivation
"""

from .format import CheckpointBody, parse_checkpoint, canonicalize_checkpoint
from .model import SignedCheckpoint, RootIdentifier, VerifiedCheckpoint
from .hasher import CheckpointHasher, hash_checkpoint, compute_root_identifier, sign_checkpoint

__all__ = [
    "CheckpointBody",
    "parse_checkpoint",
    "canonicalize_checkpoint",
    "SignedCheckpoint",
    "RootIdentifier",
    "VerifiedCheckpoint",
    "CheckpointHasher",
    "hash_checkpoint",
    "compute_root_identifier",
    "sign_checkpoint",
]
