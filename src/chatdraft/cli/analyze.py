"""Run one coordinator pass from the command line."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from chatdraft.api.dependencies import build_coordinator
from chatdraft.cli.ui import console, render_outcome
from chatdraft.drafting import TranscriptEvent, conversation_key


@click.command("analyze")
@click.argument("transcript_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--context", "user_context", default="", help="User-supplied context for the prompt")
@click.option("--conversation-id", default=None, help="Conversation id (default: derived)")
@click.option("--provider", default="generic", show_default=True, help="Chat provider name")
def analyze(
    transcript_file: Path, user_context: str, conversation_id: str | None, provider: str
) -> None:
    """Decide whether to draft a reply for TRANSCRIPT_FILE and print the outcome."""
    transcript = transcript_file.read_text(encoding="utf-8")
    event = TranscriptEvent(
        conversation_id=conversation_id or conversation_key(provider, str(transcript_file)),
        transcript=transcript,
        user_context=user_context,
        provider=provider,
    )
    coordinator = build_coordinator()
    outcome = asyncio.run(coordinator.handle(event))
    render_outcome(outcome)
    if outcome.action == "ERROR":
        console.print("[red]Draft generation failed[/red]")
        raise SystemExit(1)


def register(cli: click.Group) -> None:
    cli.add_command(analyze)
