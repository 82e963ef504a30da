"""Tests for CLI commands."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from valuelens.cli import cli
from valuelens.config import LANGUAGE_ENV_VAR


@pytest.fixture
def cli_runner(monkeypatch):
    """Create a Click CLI test runner."""
    monkeypatch.delenv(LANGUAGE_ENV_VAR, raising=False)
    return CliRunner()


def test_cli_help(cli_runner):
    """Test CLI help command."""
    result = cli_runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "valuelens" in result.output
    assert "simplify" in result.output
    assert "rank" in result.output


def test_cli_verbose(cli_runner):
    """Test CLI with verbose flag."""
    result = cli_runner.invoke(cli, ["--verbose", "--help"])

    assert result.exit_code == 0


def test_simplify_command_help(cli_runner):
    """Test simplify command help."""
    result = cli_runner.invoke(cli, ["simplify", "--help"])

    assert result.exit_code == 0
    assert "--max-depth" in result.output
    assert "--format" in result.output


def test_parse_command_json(cli_runner):
    """Test parse command prints the parsed value as JSON."""
    result = cli_runner.invoke(cli, ["parse", "0xc0000140a0", "-l", "go", "-t", "*int"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["isPointer"] is True
    assert data["memoryAddress"] == "0xc0000140a0"


def test_simplify_command_json(cli_runner):
    """Test simplify command with JSON output."""
    result = cli_runner.invoke(
        cli,
        ["simplify", '{Name: "Alice", Age: 30}', "-l", "dlv", "-t", "struct", "-f", "json"],
    )

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["children"]["Name"]["displayValue"] == "Alice"
    assert data["metadata"]["objectKeyCount"] == 2


def test_simplify_command_overrides(cli_runner):
    """Test that bound options on the command line apply."""
    result = cli_runner.invoke(
        cli,
        ["simplify", "[1, 2, 3, 4]", "-l", "python", "--max-array-length", "2", "-f", "json"],
    )

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["displayValue"] == "Array[4] (showing first 2)"
    assert list(data["children"]) == ["[0]", "[1]"]


def test_simplify_command_tree(cli_runner):
    """Test simplify command with tree output."""
    result = cli_runner.invoke(
        cli, ["simplify", '{Name: "Alice"}', "-l", "go", "-n", "user", "-t", "main.User"]
    )

    assert result.exit_code == 0
    assert "user" in result.output
    assert "Name" in result.output
    assert "Alice" in result.output


def test_simplify_default_language_from_config(cli_runner):
    """Test that [tool.valuelens] language is used when -l is omitted."""
    with cli_runner.isolated_filesystem():
        Path("pyproject.toml").write_text('[tool.valuelens]\nlanguage = "python"\n')
        result = cli_runner.invoke(cli, ["parse", "None"])

        assert result.exit_code == 0
        assert json.loads(result.output)["isNil"] is True


def test_unknown_language(cli_runner):
    """Test that an unknown language is a usage error."""
    result = cli_runner.invoke(cli, ["parse", "1", "-l", "cobol"])

    assert result.exit_code == 2
    assert "No handler registered for language 'cobol'" in result.output


def test_classify_command(cli_runner):
    """Test classify command prints the assessment."""
    result = cli_runner.invoke(cli, ["classify", "userAccount", '"active"', "-l", "go"])

    assert result.exit_code == 0
    assert "importance" in result.output
    assert "125" in result.output


def test_rank_command(cli_runner):
    """Test rank command orders variables by importance."""
    result = cli_runner.invoke(
        cli, ["rank", "autotmp_0=1", 'userAccount="active"', "-l", "go"]
    )

    assert result.exit_code == 0
    assert result.output.index("userAccount") < result.output.index("autotmp_0")


def test_rank_command_signal_only(cli_runner):
    """Test rank command drops noise with --signal-only."""
    result = cli_runner.invoke(
        cli, ["rank", "autotmp_0=1", 'userAccount="active"', "-l", "go", "--signal-only"]
    )

    assert result.exit_code == 0
    assert "userAccount" in result.output
    assert "autotmp_0" not in result.output


def test_rank_command_bad_pair(cli_runner):
    """Test rank command rejects arguments without a value."""
    result = cli_runner.invoke(cli, ["rank", "novalue", "-l", "go"])

    assert result.exit_code == 2
    assert "expected NAME=VALUE" in result.output


def test_detect_command(cli_runner, temp_dir: Path):
    """Test detect command with each signal."""
    result = cli_runner.invoke(cli, ["detect", "--debugger-type", "debugpy"])
    assert result.exit_code == 0
    assert result.output.strip() == "python"

    result = cli_runner.invoke(cli, ["detect", "--program", "main.go"])
    assert result.output.strip() == "go"

    (temp_dir / "pom.xml").write_text("<project/>\n")
    result = cli_runner.invoke(cli, ["detect", "--workspace", str(temp_dir)])
    assert result.output.strip() == "java"


def test_detect_command_no_signal(cli_runner):
    """Test detect command exits non-zero when nothing matches."""
    result = cli_runner.invoke(cli, ["detect"])

    assert result.exit_code == 1
    assert "No language detected" in result.output


def test_languages_command(cli_runner):
    """Test languages command lists the built-in handlers."""
    result = cli_runner.invoke(cli, ["languages"])

    assert result.exit_code == 0
    for tag in ("go", "cpp", "python", "java", "javascript"):
        assert tag in result.output
    assert "GoHandler" in result.output
