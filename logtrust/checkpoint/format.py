"""
Checkpoint body text format.

A checkpoint body is a list of "key: value" lines:

    origin: example-log
    size: 42
    root: 5f2a...(64 hex chars)
    <extension>: <value>        (optional, any number)

Signatures are byte-exact, so both signer and verifier sign/verify the
canonical form produced here:
- UTF-8, no NUL bytes
- "\\r\\n" and lone "\\r" become "\\n"
- trailing spaces/tabs stripped from each line, trailing blank lines dropped
- value trimmed, line rebuilt as key + ": " + value
- root hash kept verbatim, no case folding
- exactly one trailing "\\n"
"""

import re
from dataclasses import dataclass, field
from typing import List, Tuple

from ..core.errors import MalformedCheckpointError

ORIGIN = "origin"
SIZE = "size"
ROOT = "root"
REQUIRED_FIELDS = (ORIGIN, SIZE, ROOT)

ROOT_HASH_HEX_LEN = 64

_KEY_RE = re.compile(r"^[a-z][a-z0-9_.-]*$")
_SIZE_RE = re.compile(r"^(0|[1-9][0-9]*)$")
_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


@dataclass(frozen=True)
class CheckpointBody:
    """
    Parsed checkpoint body.

    Fields:
        origin: Log origin label
        size: Tree size (number of leaves)
        root_hash: 32-byte root hash as hex, case preserved
        extensions: Additional (key, value) lines in original order
    """
    origin: str
    size: int
    root_hash: str
    extensions: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def lines(self) -> List[str]:
        out = [
            f"{ORIGIN}: {self.origin}",
            f"{SIZE}: {self.size}",
            f"{ROOT}: {self.root_hash}",
        ]
        out.extend(f"{k}: {v}" for k, v in self.extensions)
        return out

    def to_text(self) -> str:
        """Canonical text form."""
        return "\n".join(self.lines()) + "\n"

    def to_bytes(self) -> bytes:
        """Canonical bytes (the exact bytes that get signed)."""
        return self.to_text().encode("utf-8")

    @property
    def root_bytes(self) -> bytes:
        return bytes.fromhex(self.root_hash)


def _split_line(index: int, line: str) -> Tuple[str, str]:
    key, sep, value = line.partition(":")
    if not sep:
        raise MalformedCheckpointError(f"Line {index + 1}: expected 'key: value', got {line!r}")
    if not _KEY_RE.match(key):
        raise MalformedCheckpointError(f"Line {index + 1}: invalid key {key!r}")
    value = value.strip(" \t")
    if not value:
        raise MalformedCheckpointError(f"Line {index + 1}: empty value for {key!r}")
    return key, value


def _normalized_lines(content: bytes) -> List[str]:
    if b"\x00" in content:
        raise MalformedCheckpointError("Checkpoint contains NUL byte")
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedCheckpointError(f"Checkpoint is not valid UTF-8: {e}") from e

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = [line.rstrip(" \t") for line in text.split("\n")]
    while lines and not lines[-1]:
        lines.pop()

    if not lines:
        raise MalformedCheckpointError("Checkpoint is empty")
    for i, line in enumerate(lines):
        if not line:
            raise MalformedCheckpointError(f"Line {i + 1}: blank line inside checkpoint")
    return lines


def parse_checkpoint(content: bytes) -> CheckpointBody:
    """
    Parse checkpoint content into a CheckpointBody.

    Args:
        content: Raw checkpoint bytes as received

    Returns:
        CheckpointBody (canonical)

    Raises:
        MalformedCheckpointError: If content is structurally invalid
    """
    if not isinstance(content, (bytes, bytearray)):
        raise MalformedCheckpointError(
            f"Checkpoint content must be bytes, got {type(content).__name__}"
        )
    if not content:
        raise MalformedCheckpointError("Checkpoint content is empty")

    pairs = [_split_line(i, line) for i, line in enumerate(_normalized_lines(bytes(content)))]

    if len(pairs) < len(REQUIRED_FIELDS):
        raise MalformedCheckpointError(
            f"Checkpoint needs {', '.join(REQUIRED_FIELDS)} lines, got {len(pairs)} line(s)"
        )
    for i, expected in enumerate(REQUIRED_FIELDS):
        if pairs[i][0] != expected:
            raise MalformedCheckpointError(
                f"Line {i + 1}: expected {expected!r}, got {pairs[i][0]!r}"
            )

    origin = pairs[0][1]

    size_text = pairs[1][1]
    if not _SIZE_RE.match(size_text):
        raise MalformedCheckpointError(f"Invalid tree size {size_text!r}")
    size = int(size_text)

    root_hash = pairs[2][1]
    if len(root_hash) != ROOT_HASH_HEX_LEN or not _HEX_RE.match(root_hash):
        raise MalformedCheckpointError(
            f"Root hash must be {ROOT_HASH_HEX_LEN} hex characters, got {root_hash!r}"
        )

    extensions = pairs[len(REQUIRED_FIELDS):]
    seen = set(REQUIRED_FIELDS)
    for key, _ in extensions:
        if key in seen:
            raise MalformedCheckpointError(f"Duplicate checkpoint field {key!r}")
        seen.add(key)

    return CheckpointBody(
        origin=origin,
        size=size,
        root_hash=root_hash,
        extensions=tuple(extensions),
    )


def canonicalize_checkpoint(content: bytes) -> bytes:
    """Parse and return canonical checkpoint bytes."""
    return parse_checkpoint(content).to_bytes()
