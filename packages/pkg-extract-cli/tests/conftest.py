# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for CLI tests."""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    """Create a source tree where a -> (b, c) and b -> d."""
    src = tmp_path / "project" / "src"
    _write(src / "a" / "__init__.py", "import b\nimport c\nimport os\n")
    _write(src / "b" / "__init__.py", "from d import value\n")
    _write(src / "b" / "README.txt", "b package\n")
    _write(src / "c" / "__init__.py", "thing = 1\n")
    _write(src / "d" / "__init__.py", "value = 42\n")
    return src


@pytest.fixture
def temp_project(source_tree: Path) -> Generator[Path, None, None]:
    """Create a project directory with a [tool.pkg-extract] table."""
    project_dir = source_tree.parent
    (project_dir / "pyproject.toml").write_text(
        """[project]
name = "demo"
version = "1.0.0"

[tool.pkg-extract]
root = "a"
prefix = "out"
search-paths = ["src"]
output-dir = "build"
exclude = ["c"]
""",
        encoding="utf-8",
    )
    yield project_dir


@pytest.fixture
def renames_project(source_tree: Path) -> Path:
    """Create a project that renames only the root package."""
    project_dir = source_tree.parent
    (project_dir / "pyproject.toml").write_text(
        """[tool.pkg-extract]
root = "a"
search-paths = ["src"]
output-dir = "build"

[tool.pkg-extract.renames]
a = "new_a"
""",
        encoding="utf-8",
    )
    return project_dir
