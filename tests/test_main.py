from __future__ import annotations

from typer.testing import CliRunner

from guessmap.main import app


def test_help_lists_map_options() -> None:
    result = CliRunner().invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "--mode" in result.output
    assert "--guesses" in result.output
    assert "--no-controls" in result.output
