"""Tests for the Typer CLI."""

from typer.testing import CliRunner

from dealroom.cli import app

runner = CliRunner()


def test_personas_lists_default_seller():
    result = runner.invoke(app, ["personas"])
    assert result.exit_code == 0
    assert "seller" in result.stdout


def test_chat_rejects_bad_code(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    result = runner.invoke(
        app, ["chat", "--name", "Dana", "--email", "dana@example.com", "--code", "NOPE"]
    )
    assert result.exit_code == 1
    assert "Invalid access code" in result.stdout
