"""
Checkpoint models.

A signed checkpoint is the triple (content, key_id, signature) as served by
the log. Verifying it yields a RootIdentifier that scopes later log queries.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict

from ..core.errors import WireFormatError
from ..core.ids import DIGEST_ALGORITHM, DIGEST_SIZE
from .format import CheckpointBody

_ROOT_ID_RE = re.compile(r"^sha256:([0-9a-f]{64})$")


@dataclass(frozen=True)
class SignedCheckpoint:
    """
    Signed log state snapshot.

    Fields:
        content: Checkpoint body bytes (see checkpoint.format)
        key_id: Signing key identifier, resolved in a KeyRegistry
        signature: "<algorithm>:<base64>" signature over canonical content

    None of the three can be swapped independently without invalidating the
    signature.
    """
    content: bytes
    key_id: str
    signature: str

    def to_dict(self) -> Dict[str, Any]:
        """Wire form: {"contents", "keyId", "signature"}."""
        return {
            "contents": self.content.decode("utf-8"),
            "keyId": self.key_id,
            "signature": self.signature,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SignedCheckpoint":
        """
        Build from the wire form.

        Raises:
            WireFormatError: On missing or non-string fields
        """
        if not isinstance(data, dict):
            raise WireFormatError(f"checkpoint: expected object, got {type(data).__name__}")
        for name in ("contents", "keyId", "signature"):
            if name not in data:
                raise WireFormatError(f"checkpoint.{name}: missing")
            if not isinstance(data[name], str):
                raise WireFormatError(
                    f"checkpoint.{name}: expected string, got {type(data[name]).__name__}"
                )
        return cls(
            content=data["contents"].encode("utf-8"),
            key_id=data["keyId"],
            signature=data["signature"],
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> "SignedCheckpoint":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise WireFormatError(f"checkpoint: invalid JSON: {e}") from e
        return cls.from_dict(data)


@dataclass(frozen=True)
class RootIdentifier:
    """
    Opaque identifier of a verified checkpoint.

    Rendered as "sha256:<hex>"; that string is what goes back to the log
    server as the query root.
    """
    digest: bytes
    algorithm: str = DIGEST_ALGORITHM

    def __post_init__(self) -> None:
        if self.algorithm != DIGEST_ALGORITHM or len(self.digest) != DIGEST_SIZE:
            raise ValueError(f"RootIdentifier must be a {DIGEST_SIZE}-byte {DIGEST_ALGORITHM} digest")

    @property
    def hex(self) -> str:
        return self.digest.hex()

    def __str__(self) -> str:
        return f"{self.algorithm}:{self.hex}"

    @classmethod
    def parse(cls, text: str) -> "RootIdentifier":
        """
        Parse "sha256:<hex>".

        Raises:
            ValueError: If text is not a sha256 root identifier
        """
        m = _ROOT_ID_RE.match(text) if isinstance(text, str) else None
        if not m:
            raise ValueError(f"Not a root identifier: {text!r}")
        return cls(digest=bytes.fromhex(m.group(1)))


@dataclass(frozen=True)
class VerifiedCheckpoint:
    """
    Result of successful checkpoint verification.

    Fields:
        body: Parsed canonical checkpoint
        key_id: Key that verified the signature
        root: Identifier bound to body and key_id
    """
    body: CheckpointBody
    key_id: str
    root: RootIdentifier
