"""
Key commands: generate
"""

from typing import Optional

import typer

from logtrust.core.errors import RegistryError, UnsupportedAlgorithmError
from logtrust.keys import ED25519, KeyEntry, SigningKey, append_to_registry_file
from logtrust.cli.commands import EXIT_ERROR, console, emit_json, fail

app = typer.Typer()


@app.command()
def generate(
    out: str = typer.Option(..., "--out", "-o", help="Private key PEM path (public key goes to <out>.pub)"),
    algorithm: str = typer.Option(ED25519, "--algorithm", "-a", help="ed25519 or ecdsa-p256"),
    key_id: Optional[str] = typer.Option(
        None,
        "--key-id",
        help="Registry key id (default: public key fingerprint)",
    ),
    registry_path: Optional[str] = typer.Option(
        None,
        "--registry",
        "-r",
        help="Add the public key to this registry file (created if missing)",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Generate a signing keypair.

    Examples:
        logtrust keys generate --out keys/k1.pem
        logtrust keys generate --out keys/k1.pem --key-id K1 --registry keys.json
        logtrust keys generate --out keys/p256.pem --algorithm ecdsa-p256
    """
    try:
        signing_key = SigningKey.generate(algorithm)
    except UnsupportedAlgorithmError as e:
        fail(str(e), EXIT_ERROR, json_output)

    public_path = out + ".pub"
    try:
        signing_key.save_to_file(out, public_path)
    except OSError as e:
        fail(str(e), EXIT_ERROR, json_output)

    resolved_key_id = key_id or signing_key.get_key_id()
    public_key = str(signing_key.public_key)

    if registry_path:
        entry = KeyEntry(key_id=resolved_key_id, public_key=signing_key.public_key)
        try:
            append_to_registry_file(registry_path, entry)
        except (OSError, RegistryError) as e:
            fail(str(e), EXIT_ERROR, json_output)

    if json_output:
        emit_json(
            {
                "success": True,
                "private_key_path": out,
                "public_key_path": public_path,
                "key_id": resolved_key_id,
                "public_key": public_key,
                "registry": registry_path,
            }
        )
    else:
        console.print("[green]✓ Keypair generated[/green]")
        console.print(f"  Private key: [cyan]{out}[/cyan]")
        console.print(f"  Public key: [cyan]{public_path}[/cyan]")
        console.print(f"  Key id: {resolved_key_id}")
        console.print(f"  Public key: {public_key}")
        if registry_path:
            console.print(f"  Registry: [cyan]{registry_path}[/cyan]")
