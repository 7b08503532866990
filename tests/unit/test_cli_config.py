"""Unit tests for config CLI commands."""

from __future__ import annotations

from click.testing import CliRunner

from chatdraft.cli.main import cli


def test_config_show_prints_table(monkeypatch) -> None:
    monkeypatch.setattr("chatdraft.cli.config.settings.api_host", "127.0.0.1")
    monkeypatch.setattr("chatdraft.cli.config.settings.api_port", 8787)
    monkeypatch.setattr("chatdraft.cli.config.settings.environment", "test")
    monkeypatch.setattr("chatdraft.cli.config.settings.gemini_api_key", "")

    result = CliRunner().invoke(cli, ["config", "show"])
    assert result.exit_code == 0
    assert "chatdraft Configuration" in result.output
    assert "127.0.0.1:8787" in result.output
    assert "missing" in result.output
