"""
Signature algorithms and encodings.

Supported algorithms:
- ed25519: 32-byte raw public key, 64-byte raw signature
- ecdsa-p256: SEC1 public point, DER-encoded ECDSA/SHA-256 signature

Public keys and signatures travel as "<algorithm>:<base64>" strings.
"""

import base64
import binascii
from dataclasses import dataclass
from typing import Tuple, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from ..core.errors import SignatureInvalidError, UnsupportedAlgorithmError
from ..core.ids import prefixed_digest

ED25519 = "ed25519"
ECDSA_P256 = "ecdsa-p256"

SUPPORTED_ALGORITHMS = (ED25519, ECDSA_P256)

ED25519_KEY_SIZE = 32
ED25519_SIGNATURE_SIZE = 64

CryptoPublicKey = Union[Ed25519PublicKey, ec.EllipticCurvePublicKey]


def _split_encoded(text: str) -> Tuple[str, str]:
    algorithm, sep, payload = text.partition(":")
    if not sep or not algorithm or not payload:
        raise ValueError(f"Expected '<algorithm>:<base64>', got {text!r}")
    return algorithm, payload


def _b64decode_strict(payload: str) -> bytes:
    return base64.b64decode(payload.encode("ascii"), validate=True)


def encode_b64(algorithm: str, raw: bytes) -> str:
    """Encode raw bytes as "<algorithm>:<base64>"."""
    return f"{algorithm}:{base64.b64encode(raw).decode('ascii')}"


@dataclass(frozen=True)
class PublicKey:
    """
    Public key material tagged with its algorithm.

    Construction does not require the algorithm to be supported; that is
    checked when the key is used for verification.
    """
    algorithm: str
    key_bytes: bytes

    @classmethod
    def from_string(cls, text: str) -> "PublicKey":
        """
        Parse "<algorithm>:<base64>".

        Raises:
            ValueError: If text is not in the expected form
        """
        algorithm, payload = _split_encoded(text)
        try:
            key_bytes = _b64decode_strict(payload)
        except (binascii.Error, UnicodeEncodeError) as e:
            raise ValueError(f"Public key is not valid base64: {e}") from e
        return cls(algorithm=algorithm, key_bytes=key_bytes)

    def __str__(self) -> str:
        return encode_b64(self.algorithm, self.key_bytes)

    def fingerprint(self) -> str:
        """Key id derived from the encoded key ("sha256:<hex>")."""
        return prefixed_digest(str(self).encode("utf-8"))

    def is_supported(self) -> bool:
        return self.algorithm in SUPPORTED_ALGORITHMS

    def load(self) -> CryptoPublicKey:
        """
        Load key material into a cryptography public key object.

        Raises:
            UnsupportedAlgorithmError: If algorithm is not verifiable here
            ValueError: If key bytes are invalid for the algorithm
        """
        if self.algorithm == ED25519:
            if len(self.key_bytes) != ED25519_KEY_SIZE:
                raise ValueError(
                    f"ed25519 public key must be {ED25519_KEY_SIZE} bytes, got {len(self.key_bytes)}"
                )
            return Ed25519PublicKey.from_public_bytes(self.key_bytes)
        if self.algorithm == ECDSA_P256:
            return ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256R1(), self.key_bytes)
        raise UnsupportedAlgorithmError(self.algorithm)


def decode_signature(text: str) -> Tuple[str, bytes]:
    """
    Decode "<algorithm>:<base64>" signature text.

    Returns:
        (algorithm, signature_bytes) tuple

    Raises:
        SignatureInvalidError: On any structural problem
    """
    if not isinstance(text, str) or not text:
        raise SignatureInvalidError("Signature must be a non-empty string")
    try:
        algorithm, payload = _split_encoded(text)
        raw = _b64decode_strict(payload)
    except (ValueError, UnicodeEncodeError) as e:
        # binascii.Error is a ValueError
        raise SignatureInvalidError(f"Malformed signature: {e}") from e
    if not raw:
        raise SignatureInvalidError("Signature payload is empty")
    if algorithm == ED25519 and len(raw) != ED25519_SIGNATURE_SIZE:
        raise SignatureInvalidError(
            f"ed25519 signature must be {ED25519_SIGNATURE_SIZE} bytes, got {len(raw)}"
        )
    return algorithm, raw


def verify_signature(public_key: PublicKey, data: bytes, signature: str) -> bytes:
    """
    Verify encoded signature over data with public_key.

    Returns:
        The decoded signature bytes that verified

    Raises:
        UnsupportedAlgorithmError: If the key's algorithm is not verifiable here
        SignatureInvalidError: If the signature is malformed, was produced with
            a different algorithm, or fails the cryptographic check
    """
    if not public_key.is_supported():
        raise UnsupportedAlgorithmError(public_key.algorithm)

    algorithm, raw = decode_signature(signature)
    if algorithm != public_key.algorithm:
        raise SignatureInvalidError(
            f"Signature algorithm {algorithm!r} does not match key algorithm {public_key.algorithm!r}"
        )

    try:
        crypto_key = public_key.load()
    except ValueError as e:
        raise SignatureInvalidError(f"Key material unusable: {e}") from e

    try:
        if isinstance(crypto_key, Ed25519PublicKey):
            crypto_key.verify(raw, data)
        else:
            crypto_key.verify(raw, data, ec.ECDSA(hashes.SHA256()))
    except (InvalidSignature, ValueError) as e:
        raise SignatureInvalidError("Signature does not verify") from e
    return raw
