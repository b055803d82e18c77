"""
Command groups and shared helpers.
"""

import json
from typing import Any, NoReturn, Optional

import typer
from rich.console import Console

from logtrust.keys import FileKeyRegistry
from logtrust.settings import Settings

console = Console()

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_ERROR = 2


def emit_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2))


def fail(message: str, code: int, json_output: bool, **details: Any) -> NoReturn:
    """Report an error in the requested format and exit with code."""
    if json_output:
        emit_json({"success": False, "error": message, **details})
    else:
        label = "Verification failed" if code == EXIT_INVALID else "Error"
        console.print(f"[red]{label}:[/red] {message}")
    raise typer.Exit(code)


def load_registry(path: Optional[str]) -> FileKeyRegistry:
    """Load registry from path, or LOGTRUST_REGISTRY when path is None."""
    return FileKeyRegistry(path or Settings.from_env().registry_path)


def read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()
