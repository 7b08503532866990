"""Configuration CLI commands."""

from __future__ import annotations

import click
from rich.table import Table

from chatdraft.cli.ui import console
from chatdraft.config import effective_reply_provider, settings


@click.group()
def config() -> None:
    """Inspect configuration."""


@config.command("show")
def config_show() -> None:
    """Show key configuration settings."""
    table = Table(title="chatdraft Configuration", show_lines=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Environment", settings.environment)
    table.add_row("API", f"{settings.api_host}:{settings.api_port}")
    table.add_row("Reply backend", settings.reply_backend)
    table.add_row("Provider mode", effective_reply_provider(settings))  # type: ignore[arg-type]
    table.add_row(
        "Model",
        settings.gemini_model if settings.reply_backend == "gemini" else settings.llama_stack_model,
    )
    table.add_row("Gemini API key", "set" if settings.gemini_api_key else "missing")
    table.add_row("Throttle cooldown (s)", f"{settings.throttle_cooldown_seconds:g}")
    table.add_row("Draft cache TTL (s)", f"{settings.draft_cache_ttl_seconds:g}")
    table.add_row("Transcript lines", str(settings.max_transcript_lines))
    table.add_row(
        "Model timeout / attempts / backoff",
        f"{settings.model_timeout_seconds:g}s / {settings.model_retry_attempts}"
        f" / {settings.model_backoff_base_seconds:g}s",
    )
    table.add_row(
        "Similarity thresholds (question / answer)",
        f"{settings.duplicate_question_threshold:g} / {settings.stuck_answer_threshold:g}",
    )
    table.add_row("Analyze rate limit", settings.analyze_rate_limit)

    console.print(table)


def register(cli: click.Group) -> None:
    cli.add_command(config)
