"""
Tests for conversion between log server documents and core inputs.
"""

import base64
import hashlib

import pytest

from logtrust.checkpoint import RootIdentifier, SignedCheckpoint
from logtrust.core.errors import WireFormatError
from logtrust.wire import (
    build_log_query,
    checkpoint_from_wire,
    load_json,
    records_for_package,
    records_from_log_response,
)

PKG_A = "sha256:" + hashlib.sha256(b"pkg-a").hexdigest()
PKG_B = "sha256:" + hashlib.sha256(b"pkg-b").hexdigest()


def _entry(text: str, key_id: str = "K1") -> dict:
    return {
        "contentBytes": base64.b64encode(text.encode("utf-8")).decode("ascii"),
        "keyId": key_id,
        "signature": "ed25519:AAAA",
    }


def test_checkpoint_from_wire(body):
    cp = checkpoint_from_wire(
        {"contents": body.decode("utf-8"), "keyId": "K1", "signature": "ed25519:AAAA"}
    )

    assert isinstance(cp, SignedCheckpoint)
    assert cp.content == body
    assert cp.key_id == "K1"


@pytest.mark.parametrize(
    "doc",
    [
        [],
        {"keyId": "K1", "signature": "s"},
        {"contents": "c", "keyId": 1, "signature": "s"},
    ],
)
def test_checkpoint_from_wire_rejects(doc):
    with pytest.raises(WireFormatError):
        checkpoint_from_wire(doc)


def test_build_log_query():
    root = RootIdentifier(digest=b"\x11" * 32)

    query = build_log_query(root, [PKG_A, PKG_B])

    assert query == {"root": "sha256:" + "11" * 32, "packages": {PKG_A: None, PKG_B: None}}
    assert build_log_query(str(root), [PKG_A])["root"] == str(root)


def test_build_log_query_rejects():
    root = RootIdentifier(digest=b"\x11" * 32)

    with pytest.raises(ValueError):
        build_log_query("sha256:abc", [PKG_A])
    with pytest.raises(ValueError):
        build_log_query(root, ["md5:abc"])
    with pytest.raises(ValueError):
        build_log_query(root, [])


def test_records_from_log_response_keeps_order():
    doc = {"packages": {PKG_A: [_entry("a0"), _entry("a1", "K2")], PKG_B: []}}

    by_pkg = records_from_log_response(doc)

    assert [r.content_bytes for r in by_pkg[PKG_A]] == [b"a0", b"a1"]
    assert [r.key_id for r in by_pkg[PKG_A]] == ["K1", "K2"]
    assert by_pkg[PKG_B] == []


@pytest.mark.parametrize(
    "doc",
    [
        "packages",
        {},
        {"packages": []},
        {"packages": {PKG_A: {}}},
        {"packages": {PKG_A: [{"contentBytes": "a", "keyId": "K1"}]}},
        {"packages": {PKG_A: [{"contentBytes": b"a", "keyId": "K1", "signature": "s"}]}},
        {"packages": {PKG_A: [{"contentBytes": "not base64!", "keyId": "K1", "signature": "s"}]}},
        {"packages": {PKG_A: [{"contentBytes": "YWI", "keyId": "K1", "signature": "s"}]}},
    ],
)
def test_records_from_log_response_rejects(doc):
    with pytest.raises(WireFormatError):
        records_from_log_response(doc)


def test_records_for_package():
    doc = {"packages": {PKG_A: [_entry("a0")]}}

    assert len(records_for_package(doc, PKG_A)) == 1
    with pytest.raises(WireFormatError):
        records_for_package(doc, PKG_B)


def test_load_json_errors():
    assert load_json('{"a": 1}') == {"a": 1}
    with pytest.raises(WireFormatError):
        load_json("{", "logs")
