"""
Tests for key material, signature encodings and the key registry.
"""

import json
import threading

import pytest

from logtrust.core.errors import RegistryError, SignatureInvalidError, UnsupportedAlgorithmError
from logtrust.keys import (
    ECDSA_P256,
    ED25519,
    FileKeyRegistry,
    InMemoryKeyRegistry,
    KeyEntry,
    PublicKey,
    SigningKey,
    append_to_registry_file,
    decode_signature,
    ensure_keypair,
    verify_signature,
    write_registry_file,
)


@pytest.mark.parametrize("algorithm", [ED25519, ECDSA_P256])
def test_sign_and_verify(algorithm):
    """Both algorithms produce signatures that verify with the public half."""
    key = SigningKey.generate(algorithm)
    sig = key.sign_encoded(b"payload")

    assert sig.startswith(algorithm + ":")
    verify_signature(key.public_key, b"payload", sig)
    with pytest.raises(SignatureInvalidError):
        verify_signature(key.public_key, b"payload!", sig)


def test_public_key_sizes():
    """ed25519 keys are 32 raw bytes; P-256 keys are compressed points."""
    assert len(SigningKey.generate(ED25519).public_key.key_bytes) == 32
    assert len(SigningKey.generate(ECDSA_P256).public_key.key_bytes) == 33


def test_public_key_string_roundtrip(k1):
    """PublicKey renders and parses "<algorithm>:<base64>"."""
    text = str(k1.public_key)

    assert PublicKey.from_string(text) == k1.public_key
    assert k1.get_key_id() == k1.public_key.fingerprint()
    assert k1.get_key_id().startswith("sha256:")


@pytest.mark.parametrize("text", ["ed25519", "ed25519:", ":AAAA", "ed25519:@@@@"])
def test_public_key_from_bad_string(text):
    with pytest.raises(ValueError):
        PublicKey.from_string(text)


@pytest.mark.parametrize(
    "text",
    ["", "garbage", "ed25519:", "ed25519:***", "ed25519:AAAA", "ecdsa-p256:"],
)
def test_decode_signature_rejects(text):
    """Malformed signature strings are SignatureInvalidError."""
    with pytest.raises(SignatureInvalidError):
        decode_signature(text)


def test_decode_signature_non_string():
    with pytest.raises(SignatureInvalidError):
        decode_signature(b"ed25519:AAAA")


def test_verify_unsupported_algorithm():
    """Keys with an unknown algorithm are reported as unsupported."""
    key = PublicKey(algorithm="rsa-pss-sha256", key_bytes=b"\x00" * 32)

    with pytest.raises(UnsupportedAlgorithmError):
        verify_signature(key, b"x", "rsa-pss-sha256:AAAA")


def test_generate_unsupported_algorithm():
    with pytest.raises(UnsupportedAlgorithmError):
        SigningKey.generate("dsa")


@pytest.mark.parametrize("algorithm", [ED25519, ECDSA_P256])
def test_save_and_load_pem(tmp_path, algorithm):
    """Saved private keys load back with the same public key."""
    key = SigningKey.generate(algorithm)
    path = str(tmp_path / "keys" / "signing.pem")

    key.save_to_file(path, path + ".pub")
    loaded = SigningKey.load_from_file(path)

    assert loaded.algorithm == algorithm
    assert loaded.public_key == key.public_key
    assert (tmp_path / "keys" / "signing.pem.pub").read_bytes().startswith(b"-----BEGIN PUBLIC KEY-----")


def test_ensure_keypair_creates_once(tmp_path):
    """ensure_keypair generates on first call and reuses afterwards."""
    path = str(tmp_path / "signing_ed25519")

    private_path, public_path = ensure_keypair(path)
    first = SigningKey.load_from_file(private_path).public_key
    ensure_keypair(path)

    assert public_path == path + ".pub"
    assert SigningKey.load_from_file(private_path).public_key == first


def test_registry_resolve_and_contains(registry, k1):
    assert registry.resolve("K1") == k1.public_key
    assert registry.resolve("nope") is None
    assert "K1" in registry
    assert "nope" not in registry
    assert len(registry) == 2


def test_registry_rejects_duplicate_active_id(k1, k2):
    reg = InMemoryKeyRegistry()
    reg.add_key("K1", k1.public_key)

    with pytest.raises(RegistryError):
        reg.add_key("K1", k2.public_key)


def test_registry_rotation_keeps_inactive_entries(k1, k2):
    """An inactive entry never resolves; a new active key may take its id."""
    reg = InMemoryKeyRegistry()
    reg.add_key("K1", k1.public_key, active=False)
    reg.add_key("K1", k2.public_key)

    assert reg.resolve("K1") == k2.public_key
    assert [e.active for e in reg.entries()] == [False, True]


def test_registry_rejects_bad_key_material():
    reg = InMemoryKeyRegistry()

    with pytest.raises(RegistryError):
        reg.add_key("K1", PublicKey(algorithm=ED25519, key_bytes=b"\x01" * 31))
    with pytest.raises(RegistryError):
        reg.add_key("K2", PublicKey(algorithm=ECDSA_P256, key_bytes=b"\x05" * 33))


def test_key_entry_from_dict_errors():
    with pytest.raises(RegistryError):
        KeyEntry.from_dict({"publicKey": "ed25519:AAAA"})
    with pytest.raises(RegistryError):
        KeyEntry.from_dict({"keyId": "K1", "publicKey": 7})
    with pytest.raises(RegistryError):
        KeyEntry.from_dict({"keyId": "K1", "publicKey": "ed25519:AAAA", "active": "yes"})
    with pytest.raises(RegistryError):
        KeyEntry.from_dict({"keyId": "K1", "publicKey": "no-colon"})


def test_file_registry_roundtrip(tmp_path, k1, k2):
    """Registry files written with write_registry_file load back."""
    path = str(tmp_path / "keys.json")
    write_registry_file(
        path,
        [
            KeyEntry("K1", k1.public_key),
            KeyEntry("K0", k2.public_key, active=False),
        ],
    )

    reg = FileKeyRegistry(path)

    assert reg.resolve("K1") == k1.public_key
    assert reg.resolve("K0") is None
    assert len(reg.reload()) == 2

    copy_path = str(tmp_path / "copy.json")
    assert reg.save(copy_path) == copy_path
    assert json.loads((tmp_path / "copy.json").read_text()) == json.loads((tmp_path / "keys.json").read_text())


def test_append_to_registry_file(tmp_path, k1, k2):
    """Appends add entries and refuse a second active id."""
    path = str(tmp_path / "keys.json")

    append_to_registry_file(path, KeyEntry("K1", k1.public_key))
    append_to_registry_file(path, KeyEntry("K2", k2.public_key))

    reg = FileKeyRegistry(path)
    assert reg.resolve("K2") == k2.public_key
    with pytest.raises(RegistryError):
        append_to_registry_file(path, KeyEntry("K1", k2.public_key))


def test_concurrent_appends_keep_every_entry(tmp_path):
    """Parallel appends to one registry file never drop an entry."""
    path = str(tmp_path / "keys.json")
    keys = {f"K{i}": SigningKey.generate(ED25519).public_key for i in range(8)}
    barrier = threading.Barrier(len(keys))
    errors = []

    def worker(key_id):
        barrier.wait()
        try:
            append_to_registry_file(path, KeyEntry(key_id, keys[key_id]))
        except Exception as e:  # noqa: BLE001
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(key_id,)) for key_id in keys]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    reg = FileKeyRegistry(path)
    assert all(reg.resolve(key_id) == public for key_id, public in keys.items())
    assert not (tmp_path / "keys.json.tmp").exists()


def test_file_registry_errors(tmp_path):
    """Missing, unparseable or keyless registry files are rejected."""
    with pytest.raises(FileNotFoundError):
        FileKeyRegistry(str(tmp_path / "missing.json"))

    bad_json = tmp_path / "bad.json"
    bad_json.write_text("{not json")
    with pytest.raises(RegistryError):
        FileKeyRegistry(str(bad_json))

    no_keys = tmp_path / "nokeys.json"
    no_keys.write_text('{"entries": []}')
    with pytest.raises(RegistryError):
        FileKeyRegistry(str(no_keys))
