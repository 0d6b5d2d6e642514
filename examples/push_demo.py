#!/usr/bin/env python3
"""Runnable demo: push a handful of records through a buffered client.

Prerequisites:
    export STITCH_CLIENT_ID=... STITCH_TOKEN=...
    python examples/push_demo.py
"""

from __future__ import annotations

import sys
from pathlib import Path

from rich.console import Console

from stitch_client import StitchClient, StitchError, StitchMessage
from stitch_client.logs import configure_logging

console = Console()


def main() -> None:
    configure_logging(level="info")
    config_path = Path(__file__).parent / "client.yaml"

    try:
        with StitchClient.from_config_file(config_path) as client:
            for i in range(10):
                client.push(
                    StitchMessage.upsert({"id": i, "kind": "demo"}, sequence=i)
                )
            console.print(
                f"[bold]Buffered[/bold] {client.buffered_count} message(s), "
                f"{client.buffer_size_in_bytes} bytes"
            )
    except StitchError as exc:
        console.print(f"[red]Push failed:[/red] {exc}")
        sys.exit(1)

    console.print("[green]Done[/green]")


if __name__ == "__main__":
    main()
