"""Tests for CLI entry point."""

from pathlib import Path

from typer.testing import CliRunner

from qq_bridge import __version__
from qq_bridge.cli import app

runner = CliRunner()


def test_cli_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"qq-bridge {__version__}" in result.stdout


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "check-config" in result.stdout


def test_check_config_defaults(tmp_path: Path):
    result = runner.invoke(app, ["check-config", "--config", str(tmp_path / "missing.yaml")])
    assert result.exit_code == 0
    assert "join" in result.stdout
    assert "off" in result.stdout
    assert "500 entries, 300s" in result.stdout


def test_check_config_reports_toggles(tmp_path: Path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("qq:\n  notify:\n    ban: true\n", encoding="utf-8")
    result = runner.invoke(app, ["check-config", "-c", str(config_path)])
    assert result.exit_code == 0
    ban_line = next(line for line in result.stdout.splitlines() if line.strip().startswith("ban"))
    assert ban_line.strip().endswith("on")


def test_check_config_invalid(tmp_path: Path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("qq:\n  cache:\n    member_info_size: 0\n", encoding="utf-8")
    result = runner.invoke(app, ["check-config", "-c", str(config_path)])
    assert result.exit_code == 1
    assert "Invalid config" in result.stdout


def test_preview_simple(tmp_path: Path):
    result = runner.invoke(
        app, ["preview", "-c", str(tmp_path / "missing.yaml"), "--nick", "bob", "--text", "hello there"]
    )
    assert result.exit_code == 0
    assert "[simple/message]" in result.stdout
    assert "[bob] hello there" in result.stdout


def test_preview_complex_action(tmp_path: Path):
    result = runner.invoke(
        app,
        [
            "preview",
            "-c",
            str(tmp_path / "missing.yaml"),
            "--client",
            "T",
            "--clients",
            "3",
            "--action",
            "--text",
            "waves",
        ],
    )
    assert result.exit_code == 0
    assert "[complex/action]" in result.stdout
    assert "* T - alice waves" in result.stdout
