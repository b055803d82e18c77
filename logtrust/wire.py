"""
Upstream document shapes exchanged with the log server.

The network layer is not part of this package; these helpers convert the JSON
it fetches into core inputs (and build the log query body it sends). Shape
checks happen here, once, so the core only ever sees typed values.

Checkpoint response:
    {"contents": str, "keyId": str, "signature": str}

Log query (request body):
    {"root": "sha256:<hex>", "packages": {"sha256:<hex>": null, ...}}

Log response:
    {"packages": {"sha256:<hex>": [{"contentBytes": <base64>, "keyId": str, "signature": str}, ...]}}
"""

import json
from typing import Any, Dict, Iterable, List, Union

from .checkpoint.model import RootIdentifier, SignedCheckpoint
from .core.errors import WireFormatError
from .core.ids import is_prefixed_digest
from .validation.model import PackageLogRecord


def load_json(text: Union[str, bytes], what: str = "document") -> Any:
    """
    Parse JSON text, mapping decode errors to WireFormatError.
    """
    try:
        return json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise WireFormatError(f"{what}: invalid JSON: {e}") from e


def checkpoint_from_wire(obj: Dict[str, Any]) -> SignedCheckpoint:
    """Convert a checkpoint response into a SignedCheckpoint."""
    return SignedCheckpoint.from_dict(obj)


def build_log_query(root: Union[RootIdentifier, str], package_digests: Iterable[str]) -> Dict[str, Any]:
    """
    Build the log query body for a verified root.

    Raises:
        ValueError: If root or a package digest is not "sha256:<hex>"
    """
    root_text = str(root)
    RootIdentifier.parse(root_text)

    packages: Dict[str, None] = {}
    for digest in package_digests:
        if not is_prefixed_digest(digest):
            raise ValueError(f"Package digest must be 'sha256:<64 hex>', got {digest!r}")
        packages[digest] = None
    if not packages:
        raise ValueError("Log query needs at least one package digest")

    return {"root": root_text, "packages": packages}


def records_from_log_response(obj: Dict[str, Any]) -> Dict[str, List[PackageLogRecord]]:
    """
    Convert a log response into records per package digest.

    Record order within each package is preserved.

    Raises:
        WireFormatError: If the response does not have the expected shape
    """
    if not isinstance(obj, dict):
        raise WireFormatError(f"logs: expected object, got {type(obj).__name__}")
    packages = obj.get("packages")
    if not isinstance(packages, dict):
        raise WireFormatError("logs.packages: expected object")

    result: Dict[str, List[PackageLogRecord]] = {}
    for digest, entries in packages.items():
        path = f"logs.packages[{digest!r}]"
        if not isinstance(entries, list):
            raise WireFormatError(f"{path}: expected list of records, got {type(entries).__name__}")
        result[digest] = [
            PackageLogRecord.from_dict(entry, path=f"{path}[{i}]")
            for i, entry in enumerate(entries)
        ]
    return result


def records_for_package(obj: Dict[str, Any], package_digest: str) -> List[PackageLogRecord]:
    """
    Records for one package digest from a log response.

    Raises:
        WireFormatError: If the response is malformed or lacks the package
    """
    by_package = records_from_log_response(obj)
    if package_digest not in by_package:
        raise WireFormatError(f"logs.packages: no entry for {package_digest!r}")
    return by_package[package_digest]
