#!/usr/bin/env python3
"""
logtrust CLI - Transparency Log Trust Anchor

Main entrypoint for the logtrust command-line tool.
"""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from logtrust import __version__
from logtrust.cli.commands import EXIT_ERROR, checkpoint, fail, keys, records
from logtrust.logging_config import setup_logging
from logtrust.metrics import start_metrics_server
from logtrust.settings import Settings

app = typer.Typer(
    name="logtrust",
    help="Package transparency log verification CLI",
    add_completion=False,
)

console = Console()

app.add_typer(keys.app, name="keys", help="Signing key management")
app.add_typer(checkpoint.app, name="checkpoint", help="Signed checkpoint operations")
app.add_typer(records.app, name="records", help="Package log record operations")


@app.callback()
def configure(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Override LOGTRUST_LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)",
    ),
):
    """Configure logging and metrics from the environment."""
    try:
        settings = Settings.from_env()
    except ValueError as e:
        fail(str(e), EXIT_ERROR, False)
    setup_logging(log_level or settings.log_level, settings.log_format)
    start_metrics_server(settings.metrics_enabled, settings.metrics_port)


@app.command()
def version():
    """Show version information."""
    table = Table(show_header=False, box=None)
    table.add_row("[bold]logtrust[/bold]", f"v{__version__}")
    table.add_row("Algorithms", "ed25519, ecdsa-p256")
    table.add_row("Root id", "sha256")

    console.print(table)


def main():
    """Main entrypoint."""
    app()


if __name__ == "__main__":
    main()
