# SPDX-License-Identifier: MIT
"""Resolve package identifiers to source metadata.

The resolver looks packages up in an explicit :class:`Environment` (an ordered
list of source roots, searched like ``sys.path``) and reports the package's
source files and the identifiers its imports declare as dependencies.
Relative imports are made absolute against the importing package, so a
sub-package reached only through ``from .sub import x`` is a dependency too.
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

from .errors import ResolutionError
from .identifiers import identifier_to_path, is_valid_identifier, iter_prefixes

logger = logging.getLogger(__name__)

# Files left out of a package unless the environment asks for tests
TEST_FILE_PATTERNS = ("test_*.py", "*_test.py", "conftest.py")

# Compiled artefacts never copied as data files
COMPILED_SUFFIXES = frozenset({".pyc", ".pyo"})


@dataclass(frozen=True)
class Environment:
    """Where and how packages are looked up.

    Attributes:
        search_paths: Source roots, searched in order; the first match wins
        include_tests: Whether test modules count as package files
    """

    search_paths: tuple[Path, ...]
    include_tests: bool = False

    @classmethod
    def from_paths(cls, paths: Iterable[str | Path], include_tests: bool = False) -> Environment:
        return cls(
            search_paths=tuple(Path(p) for p in paths),
            include_tests=include_tests,
        )


@dataclass
class ModuleMetadata:
    """Resolved facts about one package.

    Attributes:
        identifier: Dotted package name
        directory: Directory holding the package sources
        files: Python source file names, sorted
        dependencies: Declared dependency identifiers, in first-seen order
        data_files: Non-Python file names in the package directory, sorted
    """

    identifier: str
    directory: Path
    files: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    data_files: list[str] = field(default_factory=list)


def _is_test_file(name: str) -> bool:
    path = Path(name)
    return any(path.match(pattern) for pattern in TEST_FILE_PATTERNS)


def _absolute_module(package: str, level: int, module: str | None) -> str | None:
    """Resolve a relative import made from a file of ``package``.

    Returns None when the import climbs above the top-level package.
    """
    parts = package.split(".")
    if level - 1 >= len(parts):
        return None
    base = ".".join(parts[: len(parts) - (level - 1)])
    return f"{base}.{module}" if module else base


def _iter_imports(tree: ast.AST, package: str) -> Iterator[tuple[str, list[str]]]:
    """Yield ``(module, imported_names)`` for every import, made absolute."""
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield alias.name, []
        elif isinstance(node, ast.ImportFrom):
            names = [a.name for a in node.names if a.name != "*"]
            if node.level == 0:
                if node.module:
                    yield node.module, names
                continue
            module = _absolute_module(package, node.level, node.module)
            if module is not None:
                yield module, names


class ModuleResolver:
    """Resolves identifiers against an :class:`Environment`.

    Results are not cached; the same identifier resolves to the same
    metadata as long as the source tree does not change.
    """

    def __init__(self, environment: Environment) -> None:
        self.environment = environment

    def find_directory(self, identifier: str) -> Path | None:
        """Return the first package directory for an identifier, if any."""
        rel_path = identifier_to_path(identifier)
        for root in self.environment.search_paths:
            candidate = root / rel_path
            if candidate.is_dir():
                return candidate
        return None

    def resolve(self, identifier: str) -> ModuleMetadata:
        """Resolve an identifier to its metadata.

        Raises:
            ResolutionError: If the identifier is invalid, no package directory
                exists for it, or one of its files cannot be read or parsed
        """
        if not is_valid_identifier(identifier):
            raise ResolutionError(identifier, "not a valid dotted package name")

        directory = self.find_directory(identifier)
        if directory is None:
            searched = ", ".join(str(p) for p in self.environment.search_paths) or "<none>"
            raise ResolutionError(identifier, f"no package directory in search paths ({searched})")

        files: list[str] = []
        data_files: list[str] = []
        for item in sorted(directory.iterdir(), key=lambda p: p.name):
            if not item.is_file():
                continue
            if item.suffix == ".py":
                if not self.environment.include_tests and _is_test_file(item.name):
                    continue
                files.append(item.name)
            elif item.suffix not in COMPILED_SUFFIXES:
                data_files.append(item.name)

        dependencies: list[str] = []
        seen: set[str] = {identifier}
        for file_name in files:
            for dep in self._file_dependencies(identifier, directory / file_name):
                if dep not in seen:
                    seen.add(dep)
                    dependencies.append(dep)

        logger.debug(
            "Resolved %s -> %s (%d files, %d dependencies)",
            identifier,
            directory,
            len(files),
            len(dependencies),
        )
        return ModuleMetadata(
            identifier=identifier,
            directory=directory,
            files=files,
            dependencies=dependencies,
            data_files=data_files,
        )

    def _file_dependencies(self, identifier: str, path: Path) -> Iterator[str]:
        try:
            source = path.read_bytes()
        except OSError as e:
            raise ResolutionError(identifier, f"cannot read {path}: {e}") from e
        try:
            tree = ast.parse(source, filename=str(path))
        except (SyntaxError, ValueError) as e:
            raise ResolutionError(identifier, f"cannot parse {path}: {e}") from e

        for module, names in _iter_imports(tree, identifier):
            yield self.declared_identifier(module)
            # `from pkg import sub` imports the sub-package pkg.sub
            for name in names:
                candidate = f"{module}.{name}"
                if self.find_directory(candidate) is not None:
                    yield candidate

    def declared_identifier(self, module: str) -> str:
        """Map an imported module name to the package it belongs to.

        This is the longest dotted prefix that is a package directory in the
        environment, or the full name for modules outside it.
        """
        for prefix, _ in iter_prefixes(module):
            if self.find_directory(prefix) is not None:
                return prefix
        return module
