"""
Signing keys for checkpoints and package log records.

The verifier never needs private keys; SigningKey exists for tooling (the CLI
and tests) that produces signed checkpoints and records.

Key management:
- Dev mode: ~/.logtrust/keys/
- Otherwise: explicit PEM paths
"""

import os
from pathlib import Path
from typing import Optional, Tuple, Union

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from ..core.errors import UnsupportedAlgorithmError
from .algorithms import ED25519, ECDSA_P256, PublicKey, encode_b64

CryptoPrivateKey = Union[Ed25519PrivateKey, ec.EllipticCurvePrivateKey]


class SigningKey:
    """
    Private key wrapper producing "<algorithm>:<base64>" signatures.

    Provides:
    - Key generation (ed25519, ecdsa-p256)
    - PEM load/save
    - Signing raw bytes
    - Public key and key id derivation
    """

    def __init__(self, private_key: CryptoPrivateKey):
        if isinstance(private_key, Ed25519PrivateKey):
            self.algorithm = ED25519
        elif isinstance(private_key, ec.EllipticCurvePrivateKey) and isinstance(
            private_key.curve, ec.SECP256R1
        ):
            self.algorithm = ECDSA_P256
        else:
            raise ValueError("Signing key must be Ed25519 or ECDSA P-256")
        self.private_key = private_key

    @classmethod
    def generate(cls, algorithm: str = ED25519) -> "SigningKey":
        """
        Generate a new keypair.

        Raises:
            UnsupportedAlgorithmError: If algorithm is not supported
        """
        if algorithm == ED25519:
            return cls(Ed25519PrivateKey.generate())
        if algorithm == ECDSA_P256:
            return cls(ec.generate_private_key(ec.SECP256R1()))
        raise UnsupportedAlgorithmError(algorithm)

    @classmethod
    def load_from_file(cls, path: str) -> "SigningKey":
        """
        Load private key from PEM file.

        Raises:
            FileNotFoundError: If key file doesn't exist
            ValueError: If key format is invalid
        """
        with open(path, "rb") as f:
            private_key = serialization.load_pem_private_key(f.read(), password=None)
        return cls(private_key)

    def save_to_file(self, path: str, public_path: Optional[str] = None) -> None:
        """
        Save private key (PKCS8 PEM) and optionally the public key (SPKI PEM).
        """
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

        private_pem = self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        with open(path, "wb") as f:
            f.write(private_pem)

        if public_path:
            public_pem = self.private_key.public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
            with open(public_path, "wb") as f:
                f.write(public_pem)

    @property
    def public_key(self) -> PublicKey:
        """Public half in registry form."""
        crypto_public = self.private_key.public_key()
        if self.algorithm == ED25519:
            raw = crypto_public.public_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PublicFormat.Raw,
            )
        else:
            raw = crypto_public.public_bytes(
                encoding=serialization.Encoding.X962,
                format=serialization.PublicFormat.CompressedPoint,
            )
        return PublicKey(algorithm=self.algorithm, key_bytes=raw)

    def get_key_id(self) -> str:
        """Fingerprint of the public key ("sha256:<hex>")."""
        return self.public_key.fingerprint()

    def sign(self, data: bytes) -> bytes:
        """Sign raw bytes; returns the raw signature."""
        if self.algorithm == ED25519:
            return self.private_key.sign(data)
        return self.private_key.sign(data, ec.ECDSA(hashes.SHA256()))

    def sign_encoded(self, data: bytes) -> str:
        """Sign raw bytes; returns "<algorithm>:<base64>"."""
        return encode_b64(self.algorithm, self.sign(data))


def get_default_key_path() -> Path:
    """Default key path (~/.logtrust/keys/signing_ed25519)."""
    return Path.home() / ".logtrust" / "keys" / "signing_ed25519"


def ensure_keypair(key_path: Optional[str] = None, algorithm: str = ED25519) -> Tuple[str, str]:
    """
    Ensure keypair exists (generate if missing).

    Returns:
        (private_key_path, public_key_path) tuple
    """
    if key_path is None:
        key_path = str(get_default_key_path())

    public_key_path = key_path + ".pub"

    if not os.path.exists(key_path):
        signing_key = SigningKey.generate(algorithm)
        signing_key.save_to_file(key_path, public_key_path)

    return key_path, public_key_path
