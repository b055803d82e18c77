"""
Record commands: sign, validate
"""

import os
from typing import Dict, List, Optional

import typer
from rich.table import Table

from logtrust.core.errors import RegistryError, WireFormatError
from logtrust.core.fileio import locked, write_json_atomic
from logtrust.core.ids import is_prefixed_digest
from logtrust.keys import SigningKey
from logtrust.logging_config import get_logger
from logtrust.settings import Settings
from logtrust.validation import PackageLogRecord, ValidationEngine
from logtrust.wire import load_json, records_for_package, records_from_log_response
from logtrust.cli.commands import (
    EXIT_ERROR,
    EXIT_INVALID,
    EXIT_OK,
    console,
    emit_json,
    fail,
    load_registry,
    read_text,
)

app = typer.Typer()


@app.command()
def sign(
    content_path: str = typer.Argument(..., help="Record content file (raw bytes)"),
    package: str = typer.Option(..., "--package", "-p", help="Package digest (sha256:<hex>)"),
    logs_path: str = typer.Option(..., "--logs", "-l", help="Log response JSON to append to (created if missing)"),
    key_path: str = typer.Option(..., "--key", "-k", help="Signing key (private key PEM)"),
    key_id: Optional[str] = typer.Option(
        None,
        "--key-id",
        help="Key id to embed (default: public key fingerprint)",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Sign record content and append it to a log response document.

    Examples:
        logtrust records sign record.txt --package sha256:0221... --logs logs.json --key k1.pem
    """
    if not is_prefixed_digest(package):
        fail(f"Package digest must be 'sha256:<64 hex>', got {package!r}", EXIT_ERROR, json_output)

    try:
        with open(content_path, "rb") as f:
            content_bytes = f.read()
        signing_key = SigningKey.load_from_file(key_path)
    except (OSError, ValueError) as e:
        fail(str(e), EXIT_ERROR, json_output)

    record = PackageLogRecord(
        content_bytes=content_bytes,
        key_id=key_id or signing_key.get_key_id(),
        signature=signing_key.sign_encoded(content_bytes),
    )

    try:
        with locked(logs_path):
            if os.path.exists(logs_path):
                document = load_json(read_text(logs_path), "logs")
                records_from_log_response(document)
            else:
                document = {"packages": {}}
            entries = document["packages"].setdefault(package, [])
            entries.append(record.to_dict())
            write_json_atomic(logs_path, document)
    except (OSError, ValueError, WireFormatError) as e:
        fail(str(e), EXIT_ERROR, json_output)

    if json_output:
        emit_json({"success": True, "package": package, "index": len(entries) - 1, "record": record.to_dict()})
    else:
        console.print("[green]✓ Record signed[/green]")
        console.print(f"  Package: {package}")
        console.print(f"  Index: {len(entries) - 1}")
        console.print(f"  Key id: {record.key_id}")


@app.command()
def validate(
    logs_path: str = typer.Argument(..., help="Log response JSON ({'packages': {digest: [records]}})"),
    registry_path: Optional[str] = typer.Option(
        None,
        "--registry",
        "-r",
        help="Key registry file (default: LOGTRUST_REGISTRY)",
    ),
    package: Optional[str] = typer.Option(
        None,
        "--package",
        "-p",
        help="Only validate this package digest",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        help="Validation threads (default: LOGTRUST_MAX_WORKERS)",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Verify record signatures in a log response.

    Exit codes: 0 all records valid, 1 at least one invalid, 2 input error.

    Examples:
        logtrust records validate logs.json --registry keys.json
        logtrust records validate logs.json --package sha256:0221... --json
    """
    try:
        settings = Settings.from_env()
        document = load_json(read_text(logs_path), "logs")
        if package:
            batches: Dict[str, List[PackageLogRecord]] = {
                package: records_for_package(document, package)
            }
        else:
            batches = records_from_log_response(document)
        registry = load_registry(registry_path)
    except FileNotFoundError as e:
        fail(f"File not found: {e}", EXIT_ERROR, json_output)
    except (OSError, ValueError, WireFormatError, RegistryError) as e:
        fail(str(e), EXIT_ERROR, json_output)

    if workers is not None and workers < 1:
        fail("--workers must be >= 1", EXIT_ERROR, json_output)

    engine = ValidationEngine(
        registry,
        max_workers=workers or settings.pool_size,
        parallel_threshold=settings.parallel_threshold,
    )

    results: Dict[str, List[bool]] = {}
    for digest, batch in batches.items():
        results[digest] = engine.validate(batch)
        get_logger(__name__, trace_id=digest).info(
            "Validated %d record(s), %d invalid",
            len(batch),
            results[digest].count(False),
        )
    all_valid = all(all(verdicts) for verdicts in results.values())

    if json_output:
        emit_json(
            {
                "success": all_valid,
                "packages": {
                    digest: [
                        {"index": i, "keyId": record.key_id, "valid": verdict}
                        for i, (record, verdict) in enumerate(zip(batches[digest], verdicts))
                    ]
                    for digest, verdicts in results.items()
                },
            }
        )
    else:
        table = Table(title=f"Record verdicts: {logs_path}")
        table.add_column("Package", style="cyan")
        table.add_column("#", justify="right")
        table.add_column("Key id", style="yellow")
        table.add_column("Verdict")

        for digest, verdicts in results.items():
            for i, (record, verdict) in enumerate(zip(batches[digest], verdicts)):
                table.add_row(
                    f"{digest[:19]}...",
                    str(i),
                    record.key_id,
                    "[green]valid[/green]" if verdict else "[red]invalid[/red]",
                )

        console.print(table)
        total = sum(len(v) for v in results.values())
        invalid = sum(v.count(False) for v in results.values())
        console.print(f"{total} record(s), {invalid} invalid")

    raise typer.Exit(EXIT_OK if all_valid else EXIT_INVALID)
