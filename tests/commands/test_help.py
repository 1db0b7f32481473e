"""Parametrized help tests for all CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from notewright.cli import cli

# (CLI args, expected keywords in output)
HELP_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["templates", "--help"], ["list", "show", "reload", "watch"]),
    (["templates", "show", "--help"], ["TEMPLATE_ID"]),
    (["templates", "watch", "--help"], ["--duration"]),
    (["presets", "--help"], ["list", "match"]),
    (["presets", "match", "--help"], ["TEMPLATE_ID"]),
    (["note", "--help"], ["insert", "update"]),
    (["note", "insert", "--help"], ["NOTE_PATH", "--preset", "--set"]),
    (["note", "update", "--help"], ["PRESET_ID", "--mode", "--set"]),
]


@pytest.mark.parametrize(("args", "keywords"), HELP_COMMANDS, ids=lambda v: " ".join(v) if v else "")
def test_help(cli_runner: CliRunner, args: list[str], keywords: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0, result.output
    for keyword in keywords:
        assert keyword in result.output
