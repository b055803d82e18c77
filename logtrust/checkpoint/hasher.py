"""
Checkpoint Hasher.

Verifies a signed checkpoint and derives its RootIdentifier:

1. Parse and canonicalize content (malformed content fails before any
   key lookup or signature work)
2. Resolve key id in the registry
3. Verify signature over the canonical bytes
4. Digest canonical content bound to the verified key id and signature

The identifier is a SHA-256 over canonical JSON of
{"checkpoint": <canonical text>, "key_id": <key id>, "signature": <hex>}.
Identical triples give identical identifiers; changing any of content, key id
or signature bytes gives a different one.
"""

import logging

from ..core.canonical import canonical_json_bytes
from ..core.errors import (
    MalformedCheckpointError,
    SignatureInvalidError,
    TrustError,
    UnknownKeyError,
    UnsupportedAlgorithmError,
)
from ..core.ids import sha256_digest
from ..keys.algorithms import verify_signature
from ..keys.registry import KeyRegistry
from ..keys.signer import SigningKey
from ..metrics import track_checkpoint
from .format import CheckpointBody, parse_checkpoint
from .model import RootIdentifier, SignedCheckpoint, VerifiedCheckpoint

logger = logging.getLogger(__name__)

_OUTCOMES = {
    UnknownKeyError: "unknown_key",
    MalformedCheckpointError: "malformed",
    SignatureInvalidError: "signature_invalid",
    UnsupportedAlgorithmError: "unsupported_algorithm",
}


def compute_root_identifier(
    body: CheckpointBody,
    key_id: str,
    signature: bytes,
) -> RootIdentifier:
    """
    Digest of canonical checkpoint bound to key id and signature bytes.

    Only meaningful for a body whose signature already verified under key_id.
    """
    material = {
        "checkpoint": body.to_text(),
        "key_id": key_id,
        "signature": signature.hex(),
    }
    return RootIdentifier(digest=sha256_digest(canonical_json_bytes(material)))


class CheckpointHasher:
    """
    Verifies signed checkpoints against a key registry.

    Stateless apart from the registry reference; safe to share across threads.
    """

    def __init__(self, registry: KeyRegistry):
        self.registry = registry

    def verify(self, content: bytes, key_id: str, signature: str) -> VerifiedCheckpoint:
        """
        Verify checkpoint and return parsed body with its root identifier.

        Raises:
            MalformedCheckpointError: Content fails structural parse
            UnknownKeyError: key_id has no active registry entry
            UnsupportedAlgorithmError: Key algorithm not verifiable here
            SignatureInvalidError: Signature malformed or does not verify
        """
        try:
            result = self._verify(content, key_id, signature)
        except TrustError as e:
            track_checkpoint(_OUTCOMES.get(type(e), "signature_invalid"))
            logger.warning("Checkpoint verification failed (key_id=%s): %s", key_id, e)
            raise

        track_checkpoint("ok")
        logger.debug(
            "Checkpoint verified: origin=%s size=%d key_id=%s root=%s",
            result.body.origin,
            result.body.size,
            key_id,
            result.root,
        )
        return result

    def _verify(self, content: bytes, key_id: str, signature: str) -> VerifiedCheckpoint:
        body = parse_checkpoint(content)

        if not isinstance(key_id, str) or not key_id:
            raise UnknownKeyError(str(key_id))
        if not isinstance(signature, str) or not signature:
            raise SignatureInvalidError("Signature must be a non-empty string")

        public_key = self.registry.resolve(key_id)
        if public_key is None:
            raise UnknownKeyError(key_id)

        signature_bytes = verify_signature(public_key, body.to_bytes(), signature)

        return VerifiedCheckpoint(
            body=body,
            key_id=key_id,
            root=compute_root_identifier(body, key_id, signature_bytes),
        )

    def hash_checkpoint(self, content: bytes, key_id: str, signature: str) -> RootIdentifier:
        """Verify checkpoint and return its RootIdentifier."""
        return self.verify(content, key_id, signature).root

    def hash_signed(self, checkpoint: SignedCheckpoint) -> RootIdentifier:
        """hash_checkpoint() for a SignedCheckpoint value."""
        return self.hash_checkpoint(checkpoint.content, checkpoint.key_id, checkpoint.signature)


def hash_checkpoint(
    content: bytes,
    key_id: str,
    signature: str,
    registry: KeyRegistry,
) -> RootIdentifier:
    """
    Verify a signed checkpoint and derive its RootIdentifier.

    Args:
        content: Checkpoint body bytes
        key_id: Signing key identifier
        signature: "<algorithm>:<base64>" signature
        registry: Key registry to resolve key_id

    Returns:
        RootIdentifier (deterministic for identical inputs)

    Raises:
        MalformedCheckpointError, UnknownKeyError, UnsupportedAlgorithmError,
        SignatureInvalidError
    """
    return CheckpointHasher(registry).hash_checkpoint(content, key_id, signature)


def sign_checkpoint(
    body: bytes,
    key_id: str,
    signing_key: SigningKey,
    canonicalize: bool = True,
) -> SignedCheckpoint:
    """
    Produce a SignedCheckpoint for body using signing_key.

    The signature always covers the canonical bytes. With canonicalize=True
    (default) the returned content is the canonical form; otherwise the
    original bytes are carried as-is.
    """
    parsed = parse_checkpoint(body)
    canonical = parsed.to_bytes()
    return SignedCheckpoint(
        content=canonical if canonicalize else bytes(body),
        key_id=key_id,
        signature=signing_key.sign_encoded(canonical),
    )
