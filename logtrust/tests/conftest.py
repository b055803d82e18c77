"""
Shared fixtures: signing keys, a populated registry and a sample checkpoint.
"""

import hashlib
import logging

import pytest

from logtrust.keys import ECDSA_P256, ED25519, InMemoryKeyRegistry, SigningKey

ROOT_HEX = hashlib.sha256(b"example-log tree").hexdigest()
BODY = f"origin: example-log\nsize: 42\nroot: {ROOT_HEX}\n".encode("utf-8")


@pytest.fixture(scope="session")
def k1() -> SigningKey:
    return SigningKey.generate(ED25519)


@pytest.fixture(scope="session")
def k2() -> SigningKey:
    return SigningKey.generate(ECDSA_P256)


@pytest.fixture
def registry(k1, k2) -> InMemoryKeyRegistry:
    reg = InMemoryKeyRegistry()
    reg.add_key("K1", k1.public_key)
    reg.add_key("K2", k2.public_key)
    return reg


@pytest.fixture
def body() -> bytes:
    return BODY


@pytest.fixture
def restore_root_logger():
    """Undo handler changes made by setup_logging()."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
