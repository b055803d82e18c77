"""
Package log record model.

One entry of a package's transparency log: content bytes plus the detached
signature and the id of the key that allegedly produced it.
"""

import base64
import binascii
from dataclasses import dataclass
from typing import Any, Dict

from ..core.errors import WireFormatError

WIRE_FIELDS = ("contentBytes", "keyId", "signature")


@dataclass(frozen=True)
class PackageLogRecord:
    """
    Immutable log record (ProtoEnvelopeBody).

    Fields:
        content_bytes: Attested record body
        key_id: Key that allegedly produced signature
        signature: "<algorithm>:<base64>" signature over content_bytes

    Validity depends only on these three fields; records carry no
    cross-record dependency.
    """
    content_bytes: bytes
    key_id: str
    signature: str

    def to_dict(self) -> Dict[str, Any]:
        """Wire form; content is carried as base64 text."""
        return {
            "contentBytes": base64.b64encode(self.content_bytes).decode("ascii"),
            "keyId": self.key_id,
            "signature": self.signature,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str = "record") -> "PackageLogRecord":
        """
        Build from the wire form, base64-decoding contentBytes.

        Args:
            data: {"contentBytes": str, "keyId": str, "signature": str}
            path: Location used in error messages

        Raises:
            WireFormatError: On missing or non-string fields, or contentBytes
                that is not strict base64
        """
        if not isinstance(data, dict):
            raise WireFormatError(f"{path}: expected object, got {type(data).__name__}")
        for name in WIRE_FIELDS:
            if name not in data:
                raise WireFormatError(f"{path}.{name}: missing")
            if not isinstance(data[name], str):
                raise WireFormatError(
                    f"{path}.{name}: expected string, got {type(data[name]).__name__}"
                )
        try:
            content = base64.b64decode(data["contentBytes"].encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError) as e:
            raise WireFormatError(f"{path}.contentBytes: not valid base64: {e}") from e
        return cls(
            content_bytes=content,
            key_id=data["keyId"],
            signature=data["signature"],
        )
