"""
CLI tests for the growth report command-line interface.
"""

import logging
from pathlib import Path
import subprocess
import sys

from openpyxl import load_workbook
import pytest

from citygrowth import cli
from citygrowth.config.paths import PathManager

PROJECT_ROOT = Path(__file__).parent.parent.parent
SHEET = "Top 10 Growing Cities"


@pytest.fixture
def isolated_paths(tmp_path, monkeypatch):
    """Point the CLI's default data/results directories into tmp_path."""
    paths = PathManager(tmp_path / "project")
    monkeypatch.setattr(cli, "PathManager", lambda: paths)
    return paths


class TestCLIScript:
    """Invoking run_growth_report.py as a subprocess."""

    def test_cli_help_message(self):
        result = subprocess.run(
            [sys.executable, "run_growth_report.py", "--help"],
            capture_output=True,
            text=True,
            cwd=PROJECT_ROOT,
        )

        assert result.returncode == 0
        assert "Rank cities by population growth" in result.stdout
        assert "--input-file" in result.stdout
        assert "--latest-policy" in result.stdout
        assert "--dry-run" in result.stdout

    def test_cli_missing_required_args(self):
        result = subprocess.run(
            [sys.executable, "run_growth_report.py"],
            capture_output=True,
            text=True,
            cwd=PROJECT_ROOT,
        )

        assert result.returncode == 2
        assert "required" in result.stderr.lower()


class TestCLIMain:
    """Calling cli.main() in-process."""

    def test_run_with_output_file(self, population_workbook, tmp_path, isolated_paths, capsys):
        output = tmp_path / "report.xlsx"

        code = cli.main(["--input-file", str(population_workbook), "--output-file", str(output)])

        assert code == 0
        assert SHEET in load_workbook(output).sheetnames
        out = capsys.readouterr().out
        assert "New York" in out
        assert "1,168,515" in out
        assert str(output) in out

    def test_run_in_place(self, population_workbook, isolated_paths):
        assert cli.main(["--input-file", str(population_workbook)]) == 0

        assert load_workbook(population_workbook).sheetnames == ["Population", SHEET]

    def test_save_copy_uses_output_dir(self, population_workbook, isolated_paths):
        code = cli.main(["--input-file", str(population_workbook), "--save-copy"])

        assert code == 0
        expected = isolated_paths.get_output_workbook_path(population_workbook)
        assert SHEET in load_workbook(expected).sheetnames

    def test_overrides(self, population_workbook, tmp_path, isolated_paths):
        output = tmp_path / "report.xlsx"

        code = cli.main(
            [
                "--input-file", str(population_workbook),
                "--output-file", str(output),
                "--top-n", "3",
                "--sheet-name", "Fastest",
                "--preview",
            ]
        )

        assert code == 0
        ws = load_workbook(output)["Fastest"]
        assert [ws[f"C{row}"].value for row in (5, 6, 7)] == ["New York", "Houston", "Phoenix"]
        assert ws["C8"].value is None
        assert isolated_paths.get_preview_path(population_workbook).exists()

    def test_config_file(self, population_workbook, tmp_path, isolated_paths):
        config = tmp_path / "report.yaml"
        config.write_text("top_n: 2\nsheet_name: From Config\n")
        output = tmp_path / "report.xlsx"

        code = cli.main(
            [
                "--input-file", str(population_workbook),
                "--output-file", str(output),
                "--config", str(config),
                "--top-n", "4",
            ]
        )

        assert code == 0
        ws = load_workbook(output)["From Config"]
        assert ws.tables["Table1"].ref == "B4:D8"

    def test_dry_run(self, population_workbook, isolated_paths, capsys):
        code = cli.main(["--input-file", str(population_workbook), "--dry-run"])

        assert code == 0
        assert "Houston" in capsys.readouterr().out
        assert load_workbook(population_workbook).sheetnames == ["Population"]


class TestCLIErrors:
    def test_missing_table_reports_debug_info(self, population_workbook, isolated_paths, capsys, caplog):
        caplog.set_level(logging.INFO, logger="citygrowth.cli")

        code = cli.main(["--input-file", str(population_workbook), "--table", "Nope"])

        assert code == 1
        assert "Error: The table 'Nope' does not exist" in capsys.readouterr().err
        assert "Debug info: " in caplog.text
        assert "ItemNotFound" in caplog.text

    def test_reject_policy(self, tmp_path, isolated_paths, make_population_workbook, capsys, caplog):
        caplog.set_level(logging.INFO, logger="citygrowth.cli")
        path = make_population_workbook(
            tmp_path / "bad.xlsx", rows=[("A", "NY", "unknown", 50)]
        )

        code = cli.main(["--input-file", str(path), "--latest-policy", "reject"])

        assert code == 1
        assert "not a number" in capsys.readouterr().err
        assert '"row": 1' in caplog.text

    def test_missing_input_file(self, tmp_path, isolated_paths, capsys):
        code = cli.main(["--input-file", str(tmp_path / "missing.xlsx")])

        assert code == 1
        assert "Workbook not found" in capsys.readouterr().err

    def test_invalid_policy_is_argparse_error(self, population_workbook):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--input-file", str(population_workbook), "--latest-policy", "ignore"])

        assert exc_info.value.code == 2

    def test_invalid_top_n(self, population_workbook, isolated_paths, capsys):
        code = cli.main(["--input-file", str(population_workbook), "--top-n", "0"])

        assert code == 1
        assert "top_n" in capsys.readouterr().err
