"""
kvbridge CLI entry point.

Commands:
    kvbridge set KEY VALUE   — store a value
    kvbridge get KEY         — read a value
    kvbridge remove KEY      — delete a key
    kvbridge length          — count entries
    kvbridge keys            — list keys
    kvbridge commands        — show the command table

Storage commands print the result envelope as JSON. Exit code is 0 on
success, 1 on any other outcome, 2 when storage is unavailable and no
envelope came back.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="kvbridge",
    help="kvbridge — callback-style key-value storage bridge.",
    add_completion=False,
)

console = Console()


def _run(method: str, *args: Any, verbose: bool = False) -> None:
    """Run one command through a direct-delivery bridge and print its envelope."""
    from kvbridge.core.bridge import Bridge
    from kvbridge.core.config import BridgeConfig
    from kvbridge.core.errors import ConfigError
    from kvbridge.core.types import ResultEnvelope
    from kvbridge.middleware.logging import setup_logging

    try:
        # Callbacks must fire before the process exits, so no bus here
        config = BridgeConfig.load(overrides={"delivery": {"channel": "direct"}})
    except ConfigError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    setup_logging(
        log_dir=config.get_log_dir(),
        console_level=logging.DEBUG if verbose else logging.WARNING,
    )

    received: list[ResultEnvelope] = []
    with Bridge(config) as bridge:
        bridge.call(method, *args, callback=received.append)

    if not received:
        console.print("[red]Storage is not available on this host.[/red]")
        raise typer.Exit(2)

    envelope = received[0]
    console.print_json(json.dumps(envelope.to_dict()))
    raise typer.Exit(0 if envelope.ok else 1)


_VERBOSE = typer.Option(False, "--verbose", "-v", help="Show debug output")


@app.command("set")
def set_item(
    key: str = typer.Argument(..., help="Key to write"),
    value: str = typer.Argument(..., help="Value to store"),
    verbose: bool = _VERBOSE,
) -> None:
    """Store VALUE under KEY."""
    _run("setItem", key, value, verbose=verbose)


@app.command("get")
def get_item(
    key: str = typer.Argument(..., help="Key to read"),
    verbose: bool = _VERBOSE,
) -> None:
    """Print the value stored under KEY."""
    _run("getItem", key, verbose=verbose)


@app.command("remove")
def remove_item(
    key: str = typer.Argument(..., help="Key to delete"),
    verbose: bool = _VERBOSE,
) -> None:
    """Delete KEY. Succeeds even if KEY is absent."""
    _run("removeItem", key, verbose=verbose)


@app.command()
def length(verbose: bool = _VERBOSE) -> None:
    """Print the number of stored entries."""
    _run("length", verbose=verbose)


@app.command()
def keys(verbose: bool = _VERBOSE) -> None:
    """Print all stored keys."""
    _run("getAllKeys", verbose=verbose)


@app.command()
def commands() -> None:
    """Show the command table exposed to dispatchers."""
    from kvbridge.bridge.commands import describe

    table = Table(title="storage")
    table.add_column("Command", style="cyan")
    table.add_column("Arguments")
    for entry in describe()["storage"]:
        table.add_row(entry["name"], ", ".join(entry["args"]))
    console.print(table)


@app.command()
def version() -> None:
    """Show kvbridge version."""
    from kvbridge import __version__

    console.print(f"kvbridge {__version__}")


if __name__ == "__main__":
    app()
