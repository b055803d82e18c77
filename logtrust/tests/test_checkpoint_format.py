"""
Tests for checkpoint body parsing and canonicalization.

Signature verification is byte-exact, so the canonical form must be stable
under line-ending and whitespace variation and reject anything ambiguous.
"""

import pytest

from logtrust.checkpoint import CheckpointBody, canonicalize_checkpoint, parse_checkpoint
from logtrust.core.errors import MalformedCheckpointError

from .conftest import BODY, ROOT_HEX


def test_parse_basic_body():
    """Required fields parse into typed values."""
    body = parse_checkpoint(BODY)

    assert body.origin == "example-log"
    assert body.size == 42
    assert body.root_hash == ROOT_HEX
    assert body.extensions == ()
    assert len(body.root_bytes) == 32


def test_canonical_form_is_identity_for_canonical_input():
    """Already-canonical content round-trips byte for byte."""
    assert canonicalize_checkpoint(BODY) == BODY


def test_line_endings_and_trailing_whitespace_normalized():
    """CRLF, lone CR, trailing blanks and trailing empty lines all normalize away."""
    variants = [
        BODY.replace(b"\n", b"\r\n"),
        BODY.replace(b"\n", b"\r"),
        BODY.replace(b"\n", b"  \t\n"),
        BODY + b"\n\n",
        BODY.rstrip(b"\n"),
        BODY.replace(b": ", b":   "),
    ]
    for variant in variants:
        assert canonicalize_checkpoint(variant) == BODY, variant


def test_root_hash_case_preserved():
    """Root hash case is not folded; uppercase content stays distinct."""
    upper = BODY.replace(ROOT_HEX.encode(), ROOT_HEX.upper().encode())

    assert parse_checkpoint(upper).root_hash == ROOT_HEX.upper()
    assert canonicalize_checkpoint(upper) == upper
    assert canonicalize_checkpoint(upper) != BODY
    assert parse_checkpoint(upper).root_bytes == parse_checkpoint(BODY).root_bytes


def test_extensions_preserved_in_order():
    """Extension lines follow the required fields in original order."""
    content = BODY + b"timestamp: 1700000000\nwitness: w1\n"
    body = parse_checkpoint(content)

    assert body.extensions == (("timestamp", "1700000000"), ("witness", "w1"))
    assert body.to_bytes() == content


def test_to_text_builds_canonical_body():
    """CheckpointBody renders the same bytes the parser accepts."""
    body = CheckpointBody(origin="example-log", size=42, root_hash=ROOT_HEX)

    assert body.to_bytes() == BODY
    assert parse_checkpoint(body.to_bytes()) == body


@pytest.mark.parametrize(
    "content",
    [
        b"",
        b"\n\n",
        b"origin: example-log\nsize: 42\n",
        b"size: 42\norigin: example-log\nroot: " + ROOT_HEX.encode() + b"\n",
        b"origin: example-log\nsize: -1\nroot: " + ROOT_HEX.encode() + b"\n",
        b"origin: example-log\nsize: 042\nroot: " + ROOT_HEX.encode() + b"\n",
        b"origin: example-log\nsize: 4x\nroot: " + ROOT_HEX.encode() + b"\n",
        b"origin: example-log\nsize: 42\nroot: abc\n",
        b"origin: example-log\nsize: 42\nroot: " + b"g" * 64 + b"\n",
        b"origin: \nsize: 42\nroot: " + ROOT_HEX.encode() + b"\n",
        b"origin example-log\nsize: 42\nroot: " + ROOT_HEX.encode() + b"\n",
        b"origin: example-log\n\nsize: 42\nroot: " + ROOT_HEX.encode() + b"\n",
        BODY + b"Bad Key: x\n",
        BODY + b"origin: again\n",
        BODY + b"note: a\nnote: b\n",
        BODY.replace(b"example", b"exa\x00mple"),
        b"origin: \xff\xfe\nsize: 42\nroot: " + ROOT_HEX.encode() + b"\n",
    ],
)
def test_malformed_content_rejected(content):
    """Structurally invalid checkpoints raise MalformedCheckpointError."""
    with pytest.raises(MalformedCheckpointError):
        parse_checkpoint(content)


def test_non_bytes_rejected():
    """Text instead of bytes is a malformed checkpoint."""
    with pytest.raises(MalformedCheckpointError):
        parse_checkpoint(BODY.decode("utf-8"))


def test_size_zero_allowed():
    """An empty log (size 0) is well-formed."""
    body = parse_checkpoint(BODY.replace(b"size: 42", b"size: 0"))

    assert body.size == 0
