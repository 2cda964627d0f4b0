"""
Integration tests for the compile_markup developer CLI.

Loads scripts/compile_markup.py and drives its typer app with CliRunner.
"""

import importlib.util
from pathlib import Path

import pytest
from typer.testing import CliRunner

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "compile_markup.py"

runner = CliRunner()


@pytest.fixture(scope="module")
def cli_app():
    spec = importlib.util.spec_from_file_location("compile_markup_cli", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.app


@pytest.mark.integration
class TestValidateCommand:
    """Tests for `compile_markup.py validate`."""

    def test_valid_markup(self, cli_app, tmp_path, jake_source):
        tex_file = tmp_path / "resume.tex"
        tex_file.write_text(jake_source, encoding="utf-8")

        result = runner.invoke(cli_app, ["validate", str(tex_file)])

        assert result.exit_code == 0
        assert "structurally valid" in result.output

    def test_every_error_is_listed(self, cli_app, tmp_path):
        tex_file = tmp_path / "broken.tex"
        tex_file.write_text("\\documentclass{article}\n\\begin{document}\n{Hello\n", encoding="utf-8")

        result = runner.invoke(cli_app, ["validate", str(tex_file)])

        assert result.exit_code == 1
        assert "2 structural errors" in result.output
        assert "Missing \\end{document}" in result.output
        assert "1 unmatched opening" in result.output

    def test_missing_file(self, cli_app, tmp_path):
        result = runner.invoke(cli_app, ["validate", str(tmp_path / "absent.tex")])

        assert result.exit_code == 1
