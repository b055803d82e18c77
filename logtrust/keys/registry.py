"""
Key registry: key id -> public key + algorithm.

The verification core only reads a registry. Population (adding keys, loading
files, rotation) belongs to callers.

File format (JSON):
    {"keys": [{"keyId": "K1", "publicKey": "ed25519:<base64>", "active": true}]}
"""

import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional

from ..core.errors import RegistryError
from ..core.fileio import locked, write_json_atomic
from .algorithms import PublicKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyEntry:
    """
    Registry entry.

    Fields:
        key_id: Identifier records and checkpoints refer to
        public_key: Key material and algorithm
        active: Inactive (revoked) entries never resolve
    """
    key_id: str
    public_key: PublicKey
    active: bool = True

    def to_dict(self) -> Dict[str, object]:
        return {
            "keyId": self.key_id,
            "publicKey": str(self.public_key),
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "KeyEntry":
        """
        Build entry from its JSON form.

        Raises:
            RegistryError: On missing or ill-typed fields
        """
        if not isinstance(data, dict):
            raise RegistryError(f"Key entry must be an object, got {type(data).__name__}")
        key_id = data.get("keyId")
        public_key = data.get("publicKey")
        active = data.get("active", True)
        if not isinstance(key_id, str) or not key_id:
            raise RegistryError("Key entry requires a non-empty string 'keyId'")
        if not isinstance(public_key, str):
            raise RegistryError(f"Key entry {key_id!r} requires a string 'publicKey'")
        if not isinstance(active, bool):
            raise RegistryError(f"Key entry {key_id!r} has non-boolean 'active'")
        try:
            parsed = PublicKey.from_string(public_key)
        except ValueError as e:
            raise RegistryError(f"Key entry {key_id!r}: {e}") from e
        return cls(key_id=key_id, public_key=parsed, active=active)


class KeyRegistry(ABC):
    """
    Abstract key registry.

    Implementations must guarantee:
    - resolve() is safe to call concurrently
    - at most one active key per key id
    """

    @abstractmethod
    def resolve(self, key_id: str) -> Optional[PublicKey]:
        """
        Resolve key id to its active public key.

        Returns:
            PublicKey, or None if the id is unknown or only has inactive entries
        """
        ...

    def __contains__(self, key_id: object) -> bool:
        return isinstance(key_id, str) and self.resolve(key_id) is not None


class InMemoryKeyRegistry(KeyRegistry):
    """
    Dict-backed registry.

    Writers take a lock; readers go lock-free against the dict, which is only
    ever replaced per key.
    """

    def __init__(self, entries: Iterable[KeyEntry] = ()):
        self._active: Dict[str, PublicKey] = {}
        self._entries: List[KeyEntry] = []
        self._lock = threading.Lock()
        for entry in entries:
            self.add(entry)

    def add(self, entry: KeyEntry) -> None:
        """
        Register an entry.

        Key material for supported algorithms is validated here so that
        verification never sees unusable keys. Entries for unsupported
        algorithms are kept; they fail at verification time.

        Raises:
            RegistryError: On duplicate active key id or invalid key material
        """
        if entry.public_key.is_supported():
            try:
                entry.public_key.load()
            except ValueError as e:
                raise RegistryError(f"Invalid key material for {entry.key_id!r}: {e}") from e

        with self._lock:
            if entry.active and entry.key_id in self._active:
                raise RegistryError(f"Duplicate active key id: {entry.key_id!r}")
            self._entries.append(entry)
            if entry.active:
                self._active[entry.key_id] = entry.public_key

        logger.debug(
            "Registered key %s (%s, active=%s)",
            entry.key_id,
            entry.public_key.algorithm,
            entry.active,
        )

    def add_key(self, key_id: str, public_key: PublicKey, active: bool = True) -> KeyEntry:
        """Convenience wrapper around add()."""
        entry = KeyEntry(key_id=key_id, public_key=public_key, active=active)
        self.add(entry)
        return entry

    def resolve(self, key_id: str) -> Optional[PublicKey]:
        return self._active.get(key_id)

    def entries(self) -> Iterator[KeyEntry]:
        """All entries in insertion order, including inactive ones."""
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


class FileKeyRegistry(InMemoryKeyRegistry):
    """
    Registry loaded from a JSON file.

    The file is read once at construction; call reload() to pick up changes.
    """

    def __init__(self, path: str):
        self.path = path
        super().__init__(self._read_entries(path))

    @staticmethod
    def _read_entries(path: str) -> List[KeyEntry]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise
        except (OSError, json.JSONDecodeError) as e:
            raise RegistryError(f"Cannot read key registry {path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("keys"), list):
            raise RegistryError(f"Key registry {path} must be an object with a 'keys' list")

        return [KeyEntry.from_dict(item) for item in data["keys"]]

    def reload(self) -> "FileKeyRegistry":
        """Return a fresh registry read from the same path."""
        return FileKeyRegistry(self.path)

    def save(self, path: Optional[str] = None) -> str:
        """
        Write entries back as JSON.

        Returns:
            Path written
        """
        target = path or self.path
        write_registry_file(target, self.entries())
        return target


def _payload(entries: Iterable[KeyEntry]) -> Dict[str, object]:
    return {"keys": [entry.to_dict() for entry in entries]}


def write_registry_file(path: str, entries: Iterable[KeyEntry]) -> None:
    """Atomically write entries to path in registry file format."""
    payload = _payload(entries)
    with locked(path):
        write_json_atomic(path, payload)


def append_to_registry_file(path: str, entry: KeyEntry) -> None:
    """
    Add entry to a registry file, creating the file if missing.

    The read, the duplicate check and the write happen under one exclusive
    lock, so concurrent appends never drop an entry.

    Raises:
        RegistryError: If the entry conflicts with an existing active key
    """
    with locked(path):
        if os.path.exists(path):
            registry = FileKeyRegistry(path)
        else:
            registry = InMemoryKeyRegistry()
        registry.add(entry)
        write_json_atomic(path, _payload(registry.entries()))
