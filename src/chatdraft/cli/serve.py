"""Run the HTTP API."""

from __future__ import annotations

import click

from chatdraft.cli.ui import console
from chatdraft.config import effective_reply_provider, settings


@click.command("serve")
@click.option("--host", default=None, help="Bind address (default: API_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: API_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes (development)")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the draft API server."""
    import uvicorn

    bind_host = host or settings.api_host
    bind_port = port or settings.api_port
    mode = effective_reply_provider(settings)  # type: ignore[arg-type]
    console.print(f"[green]Server running at http://{bind_host}:{bind_port}[/green]")
    console.print(f"  Backend: {settings.reply_backend} ({mode})")
    console.print(f"  Rate limit: {settings.analyze_rate_limit}")
    if mode == "fake":
        console.print("  [yellow]Mode: MOCK[/yellow]")

    uvicorn.run("chatdraft.api.server:app", host=bind_host, port=bind_port, reload=reload)


def register(cli: click.Group) -> None:
    cli.add_command(serve)
