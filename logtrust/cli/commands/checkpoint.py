"""
Checkpoint commands: sign, verify
"""

from typing import Optional

import typer

from logtrust.checkpoint import CheckpointHasher, SignedCheckpoint, sign_checkpoint
from logtrust.core.errors import (
    MalformedCheckpointError,
    RegistryError,
    TrustError,
    WireFormatError,
)
from logtrust.keys import SigningKey
from logtrust.logging_config import get_logger
from logtrust.cli.commands import (
    EXIT_ERROR,
    EXIT_INVALID,
    console,
    emit_json,
    fail,
    load_registry,
    read_text,
)

app = typer.Typer()


@app.command()
def sign(
    body_path: str = typer.Argument(..., help="Checkpoint body file (origin/size/root lines)"),
    key_path: str = typer.Option(..., "--key", "-k", help="Signing key (private key PEM)"),
    key_id: Optional[str] = typer.Option(
        None,
        "--key-id",
        help="Key id to embed (default: public key fingerprint)",
    ),
    output: Optional[str] = typer.Option(None, "--out", "-o", help="Write checkpoint JSON here"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Sign a checkpoint body.

    Examples:
        logtrust checkpoint sign body.txt --key k1.pem --key-id K1
        logtrust checkpoint sign body.txt --key k1.pem --out checkpoint.json
    """
    try:
        with open(body_path, "rb") as f:
            body = f.read()
        signing_key = SigningKey.load_from_file(key_path)
    except (OSError, ValueError) as e:
        fail(str(e), EXIT_ERROR, json_output)

    try:
        signed = sign_checkpoint(body, key_id or signing_key.get_key_id(), signing_key)
    except MalformedCheckpointError as e:
        fail(str(e), EXIT_ERROR, json_output)

    if output:
        try:
            with open(output, "w", encoding="utf-8") as f:
                f.write(signed.to_json())
                f.write("\n")
        except OSError as e:
            fail(str(e), EXIT_ERROR, json_output)

    if json_output:
        emit_json({"success": True, "checkpoint": signed.to_dict(), "path": output})
    elif output:
        console.print("[green]✓ Checkpoint signed[/green]")
        console.print(f"  File: [cyan]{output}[/cyan]")
        console.print(f"  Key id: {signed.key_id}")
    else:
        print(signed.to_json())


@app.command()
def verify(
    checkpoint_path: str = typer.Argument(..., help="Checkpoint JSON (contents/keyId/signature)"),
    registry_path: Optional[str] = typer.Option(
        None,
        "--registry",
        "-r",
        help="Key registry file (default: LOGTRUST_REGISTRY)",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Verify a signed checkpoint and print its root identifier.

    Exit codes: 0 verified, 1 verification failed, 2 input error.

    Examples:
        logtrust checkpoint verify checkpoint.json --registry keys.json
        logtrust checkpoint verify checkpoint.json --json
    """
    try:
        checkpoint = SignedCheckpoint.from_json(read_text(checkpoint_path))
        registry = load_registry(registry_path)
    except FileNotFoundError as e:
        fail(f"File not found: {e}", EXIT_ERROR, json_output)
    except (OSError, ValueError, WireFormatError, RegistryError) as e:
        fail(str(e), EXIT_ERROR, json_output)

    if not json_output:
        console.print("[bold]Verifying checkpoint...[/bold]")

    try:
        verified = CheckpointHasher(registry).verify(
            checkpoint.content, checkpoint.key_id, checkpoint.signature
        )
    except TrustError as e:
        fail(str(e), EXIT_INVALID, json_output, error_type=type(e).__name__)

    get_logger(__name__, trace_id=str(verified.root)).info(
        "Checkpoint verified: origin=%s size=%d key_id=%s",
        verified.body.origin,
        verified.body.size,
        verified.key_id,
    )

    if json_output:
        emit_json(
            {
                "success": True,
                "root": str(verified.root),
                "key_id": verified.key_id,
                "origin": verified.body.origin,
                "size": verified.body.size,
                "root_hash": verified.body.root_hash,
            }
        )
    else:
        console.print("[green]✓ Checkpoint signature valid[/green]")
        console.print(f"  Root id: [cyan]{verified.root}[/cyan]")
        console.print(f"  Origin: {verified.body.origin}")
        console.print(f"  Size: {verified.body.size}")
        console.print(f"  Key id: {verified.key_id}")
