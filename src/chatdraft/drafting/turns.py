"""Transcript line helpers and the turn gate.

Transcripts arrive as newline-separated lines with a role prefix:
``Rep:``/``Agent:`` for the support agent and ``Me:``/``You:`` for the user
the assistant drafts for.
"""

from __future__ import annotations

AGENT_PREFIXES = ("Rep:", "Agent:")
USER_PREFIXES = ("Me:", "You:")


def split_lines(transcript: str | None) -> list[str]:
    """Return stripped, non-blank transcript lines."""
    if not transcript:
        return []
    return [line.strip() for line in transcript.split("\n") if line.strip()]


def last_line(transcript: str | None) -> str:
    lines = split_lines(transcript)
    return lines[-1] if lines else ""


def is_agent_line(line: str) -> bool:
    return line.startswith(AGENT_PREFIXES)


def is_user_line(line: str) -> bool:
    return line.startswith(USER_PREFIXES)


def user_lines(transcript: str | None) -> list[str]:
    return [line for line in split_lines(transcript) if is_user_line(line)]


def strip_role(line: str) -> str:
    """Drop a leading role prefix, if any."""
    for prefix in AGENT_PREFIXES + USER_PREFIXES:
        if line.startswith(prefix):
            return line[len(prefix) :].strip()
    return line.strip()


def is_assistant_turn(transcript: str | None) -> bool:
    """Decide whether a reply is due.

    Only the last line's role decides, unless it carries no known prefix; then
    the assistant speaks only when agent lines strictly outnumber user lines.
    """
    lines = split_lines(transcript)
    if not lines:
        return False

    final = lines[-1]
    if is_user_line(final):
        return False
    if is_agent_line(final):
        return True

    agent_count = sum(1 for line in lines if is_agent_line(line))
    user_count = sum(1 for line in lines if is_user_line(line))
    return agent_count > user_count
