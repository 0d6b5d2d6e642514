"""Typer CLI for the Stitch client."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from stitch_client.client import StitchClient
from stitch_client.config.loader import load_client_config
from stitch_client.config.models import ClientConfig
from stitch_client.errors import StitchError, StitchRejectedError
from stitch_client.logs import configure_logging
from stitch_client.message import Action, StitchMessage
from stitch_client.transport import HttpTransport

logger = structlog.get_logger()
console = Console()
app = typer.Typer(name="stitch", help="Push records to the Stitch import pipeline")

_MESSAGE_FIELDS = frozenset(
    {"table_name", "key_names", "action", "table_version", "sequence", "data"}
)


@app.callback()
def main(
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON log lines"),
    log_level: str = typer.Option("warning", "--log-level", help="Minimum log level"),
) -> None:
    configure_logging(json_logs=json_logs, level=log_level)


def _load(config_path: str) -> ClientConfig:
    path = Path(config_path)
    if not path.exists():
        console.print(f"[red]Config file not found: {path}[/red]")
        raise typer.Exit(1)
    return load_client_config(path)


def parse_message(record: dict[str, Any]) -> StitchMessage:
    """Turn one decoded JSON-lines record into a :class:`StitchMessage`."""
    unknown = set(record) - _MESSAGE_FIELDS
    if unknown:
        msg = f"Unknown message field(s): {', '.join(sorted(unknown))}"
        raise ValueError(msg)
    action = record.get("action")
    if action is not None and not isinstance(action, str):
        msg = f"action must be a string, got {type(action).__name__}"
        raise ValueError(msg)
    return StitchMessage(
        table_name=record.get("table_name"),
        key_names=record.get("key_names"),
        action=Action(action.upper()) if action is not None else None,
        table_version=record.get("table_version"),
        sequence=record.get("sequence"),
        data=record.get("data"),
    )


def read_messages(path: Path) -> list[StitchMessage]:
    """Read a JSON-lines file of message objects; blank lines are skipped."""
    messages: list[StitchMessage] = []
    with path.open() as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                record = json.loads(line)
                if not isinstance(record, dict):
                    msg = f"expected a JSON object, got {type(record).__name__}"
                    raise ValueError(msg)
                messages.append(parse_message(record))
            except ValueError as exc:
                msg = f"{path}:{lineno}: {exc}"
                raise ValueError(msg) from exc
    return messages


@app.command()
def validate(
    config_path: str = typer.Argument(..., help="Path to client YAML"),
) -> None:
    """Validate a client configuration file."""
    try:
        config = _load(config_path)
    except (ValueError, TypeError, FileNotFoundError) as exc:
        console.print(f"[red]Validation error:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc

    table = Table(title="Stitch Client Config")
    table.add_column("Option", style="cyan")
    table.add_column("Value")
    for name, value in config.model_dump().items():
        table.add_row(name, escape(str(value)))
    console.print(table)
    console.print("[green]Valid[/green]")


@app.command()
def push(
    config_path: str = typer.Argument(..., help="Path to client YAML"),
    records_path: str = typer.Argument(..., help="JSON-lines file of messages"),
) -> None:
    """Push every message in a JSON-lines file, then flush and close."""
    try:
        config = _load(config_path)
    except (ValueError, TypeError) as exc:
        console.print(f"[red]Invalid config:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc
    path = Path(records_path)
    if not path.exists():
        console.print(f"[red]Records file not found: {path}[/red]")
        raise typer.Exit(1)

    try:
        messages = read_messages(path)
    except ValueError as exc:
        console.print(f"[red]Invalid records:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc

    transport = HttpTransport(config)
    client = StitchClient(config, transport=transport)
    try:
        for message in messages:
            client.push(message)
        client.close()
    except StitchRejectedError as exc:
        detail = escape(str(exc.content))
        console.print(f"[red]Rejected:[/red] {exc.status_code} {exc.reason} {detail}")
        raise typer.Exit(1) from exc
    except StitchError as exc:
        console.print(f"[red]Push failed:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc
    finally:
        transport.close()

    console.print(f"[green]Pushed[/green] {len(messages)} message(s) to {config.url}")
