"""Shared CLI UI helpers (Rich formatting)."""

from __future__ import annotations

from rich.console import Console

from chatdraft.drafting import Outcome

console = Console()

_ACTION_COLORS = {
    "DRAFT": "green",
    "WAITING": "grey62",
    "NEEDS_USER": "yellow",
    "ERROR": "red",
}


def format_action(action: str) -> str:
    """Return colorized action label for terminal output."""
    color = _ACTION_COLORS.get(action, "white")
    return f"[{color}]{action}[/{color}]"


def render_outcome(outcome: Outcome) -> None:
    console.print(f"{format_action(outcome.action)} [dim]({outcome.stage.value})[/dim]")
    console.print_json(data=outcome.to_payload())
