# SPDX-License-Identifier: MIT
"""Tests for the pkg-extract extract command."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from pkg_extract_cli.main import cli


class TestExtractCommand:
    """Tests for pkg-extract extract."""

    def test_extract_from_pyproject(self, cli_runner: CliRunner, temp_project: Path) -> None:
        """Test that extract writes the relocated packages."""
        result = cli_runner.invoke(cli, ["-C", str(temp_project), "extract"])

        assert result.exit_code == 0
        assert "Extracted 3 packages" in result.output

        out_dir = temp_project / "build" / "out"
        assert (out_dir / "a" / "__init__.py").read_text() == (
            "import out.b as b\nimport c\nimport os\n"
        )
        assert (out_dir / "b" / "__init__.py").read_text() == "from out.d import value\n"
        assert (out_dir / "d" / "__init__.py").read_text() == "value = 42\n"
        assert not (out_dir / "c").exists()

    def test_extract_prefix_override(self, cli_runner: CliRunner, temp_project: Path) -> None:
        result = cli_runner.invoke(
            cli, ["-C", str(temp_project), "extract", "--prefix", "vendored"]
        )

        assert result.exit_code == 0
        assert (temp_project / "build" / "vendored" / "a" / "__init__.py").exists()

    def test_extract_custom_output_dir(
        self, cli_runner: CliRunner, temp_project: Path, tmp_path: Path
    ) -> None:
        output_dir = tmp_path / "custom"

        result = cli_runner.invoke(
            cli, ["-C", str(temp_project), "extract", "-o", str(output_dir), "-j", "2"]
        )

        assert result.exit_code == 0
        assert (output_dir / "out" / "b" / "__init__.py").exists()

    def test_extract_copy_data_files(self, cli_runner: CliRunner, temp_project: Path) -> None:
        result = cli_runner.invoke(cli, ["-C", str(temp_project), "extract", "--copy-data-files"])

        assert result.exit_code == 0
        assert (temp_project / "build" / "out" / "b" / "README.txt").read_text() == "b package\n"

    def test_extract_manifest(
        self, cli_runner: CliRunner, temp_project: Path, tmp_path: Path
    ) -> None:
        manifest_path = tmp_path / "manifest.json"

        result = cli_runner.invoke(
            cli, ["-C", str(temp_project), "extract", "--manifest", str(manifest_path)]
        )

        assert result.exit_code == 0
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
        assert sorted(manifest["packages"]) == ["a", "b", "d"]
        assert "c" in manifest["excluded"]

    def test_extract_verbose_output(self, cli_runner: CliRunner, temp_project: Path) -> None:
        result = cli_runner.invoke(cli, ["-v", "-C", str(temp_project), "extract"])

        assert result.exit_code == 0
        assert "Root: a" in result.output
        assert "a -> out.a" in result.output

    def test_extract_syntax_error(self, cli_runner: CliRunner, temp_project: Path) -> None:
        """Test extract fails gracefully on invalid Python."""
        (temp_project / "src" / "d" / "broken.py").write_text("def broken(:\n", encoding="utf-8")

        result = cli_runner.invoke(cli, ["-C", str(temp_project), "extract"])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "broken.py" in result.output

    def test_extract_invalid_config(self, cli_runner: CliRunner, temp_project: Path) -> None:
        result = cli_runner.invoke(cli, ["-C", str(temp_project), "extract", "--prefix", "bad/x"])

        assert result.exit_code == 1
        assert "Invalid prefix" in result.output

    def test_extract_uncovered_rename(self, cli_runner: CliRunner, renames_project: Path) -> None:
        result = cli_runner.invoke(cli, ["-C", str(renames_project), "extract"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Error: Cannot rename 'b'" in result.output
        assert not (renames_project / "build").exists()
