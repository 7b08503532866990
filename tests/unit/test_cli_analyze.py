"""Unit tests for the analyze and serve CLI commands."""

from __future__ import annotations

from pathlib import Path

from click.testing import CliRunner

from chatdraft.backends.fake import MOCK_DRAFT
from chatdraft.cli.main import cli


def test_analyze_prints_draft(tmp_path: Path) -> None:
    transcript = tmp_path / "chat.txt"
    transcript.write_text("Me: Hi\nRep: Hello! How can I help today?\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["analyze", str(transcript), "--context", "Return a lamp"])

    assert result.exit_code == 0, result.output
    assert "DRAFT" in result.output
    assert MOCK_DRAFT in result.output


def test_analyze_waiting_on_user_turn(tmp_path: Path) -> None:
    transcript = tmp_path / "chat.txt"
    transcript.write_text("Rep: Hello!\nMe: Hi, I have a question", encoding="utf-8")

    result = CliRunner().invoke(cli, ["analyze", str(transcript)])

    assert result.exit_code == 0
    assert "WAITING" in result.output
    assert "turn_gate" in result.output


def test_analyze_exits_nonzero_on_error(tmp_path: Path) -> None:
    transcript = tmp_path / "chat.txt"
    transcript.write_text("Me: Hi\nRep: Hello!", encoding="utf-8")

    result = CliRunner().invoke(cli, ["analyze", str(transcript), "--context", "my password is x"])

    assert result.exit_code == 1
    assert "ERROR" in result.output


def test_serve_runs_uvicorn_with_settings(monkeypatch) -> None:
    calls: list[tuple[tuple, dict]] = []

    def fake_run(*args, **kwargs):
        calls.append((args, kwargs))

    monkeypatch.setattr("uvicorn.run", fake_run)

    result = CliRunner().invoke(cli, ["serve", "--port", "9999"])

    assert result.exit_code == 0, result.output
    assert "Server running at http://127.0.0.1:9999" in result.output
    assert calls == [
        (("chatdraft.api.server:app",), {"host": "127.0.0.1", "port": 9999, "reload": False})
    ]
