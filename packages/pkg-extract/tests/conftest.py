# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for pkg-extract tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from pkg_extract.errors import ResolutionError
from pkg_extract.resolver import Environment, ModuleMetadata, ModuleResolver

# package identifier -> {file name: content}
TreeSpec = dict[str, dict[str, str]]


def write_tree(root: Path, packages: TreeSpec) -> Path:
    """Create package directories and files under ``root``."""
    for identifier, files in packages.items():
        package_dir = root.joinpath(*identifier.split("."))
        package_dir.mkdir(parents=True, exist_ok=True)
        for name, content in files.items():
            (package_dir / name).write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[TreeSpec], Path]:
    """Return a helper that writes a source tree and returns its root."""

    def _make(packages: TreeSpec) -> Path:
        return write_tree(tmp_path / "src", packages)

    return _make


@pytest.fixture
def scenario_tree(make_tree: Callable[[TreeSpec], Path]) -> Path:
    """a -> (b, c), b -> d; c is meant to be excluded."""
    return make_tree(
        {
            "a": {
                "__init__.py": '"""Package a."""\n\nimport b\nimport c\n',
                "core.py": (
                    "# core of a\n"
                    "from b import helper  # uses b\n"
                    "from c import thing\n"
                    "\n"
                    "\n"
                    "def run():\n"
                    '    return helper(thing, "import b")\n'
                ),
            },
            "b": {
                "__init__.py": "from d import value\n\n\ndef helper(*args):\n    return value\n",
            },
            "c": {
                "__init__.py": "thing = 1\n",
            },
            "d": {
                "__init__.py": "value = 42\n",
                "data.json": '{"answer": 42}\n',
            },
        }
    )


@pytest.fixture
def scenario_resolver(scenario_tree: Path) -> ModuleResolver:
    return ModuleResolver(Environment.from_paths([scenario_tree]))


class DictResolver:
    """In-memory resolver over an adjacency dictionary, counting calls."""

    def __init__(self, graph: dict[str, list[str]], directory: Path = Path("/nonexistent")):
        self.graph = graph
        self.directory = directory
        self.calls: dict[str, int] = {}

    def resolve(self, identifier: str) -> ModuleMetadata:
        self.calls[identifier] = self.calls.get(identifier, 0) + 1
        if identifier not in self.graph:
            raise ResolutionError(identifier, "unknown package")
        return ModuleMetadata(
            identifier=identifier,
            directory=self.directory / identifier,
            files=[],
            dependencies=list(self.graph[identifier]),
        )


@pytest.fixture
def dict_resolver() -> Callable[[dict[str, list[str]]], DictResolver]:
    return DictResolver
