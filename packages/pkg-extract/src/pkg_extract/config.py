# SPDX-License-Identifier: MIT
"""Extraction configuration.

This module provides the ExtractConfig dataclass, loaded from the
``[tool.pkg-extract]`` table of a pyproject.toml:

    [tool.pkg-extract]
    root = "acme.app"
    prefix = "vendored"
    output-dir = "build/extracted"
    search-paths = ["src", "third_party"]
    exclude = ["acme.testing"]
    workers = 4
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .identifiers import is_valid_identifier
from .resolver import Environment, ModuleResolver
from .strategies import (
    AllOf,
    InclusionPredicate,
    MappingRenamer,
    MemoizingRenamer,
    PrefixFilter,
    PrefixRenamer,
    Renamer,
    StdlibFilter,
)


class ConfigError(Exception):
    """Raised when extraction configuration is invalid."""

    pass


DEFAULT_OUTPUT_DIR = "extracted"
DEFAULT_SEARCH_PATHS = ["."]


@dataclass
class ExtractConfig:
    """Configuration for an extraction run.

    Attributes:
        root: Package to extract
        prefix: Namespace every extracted package is moved under
        output_dir: Root directory of the extracted tree
        search_paths: Source roots the packages are looked up in
        include: Only dependencies under these prefixes are extracted
        exclude: Dependencies under these prefixes are never extracted
        exclude_stdlib: Never extract standard library modules
        renames: Explicit renames, matched on the longest dotted prefix
        include_tests: Treat test modules as package files
        copy_data_files: Copy non-Python files of each package too
        workers: Number of packages extracted concurrently
        manifest: Where to write the JSON manifest, if anywhere
    """

    root: str
    output_dir: Path
    prefix: str = ""
    search_paths: list[Path] = field(default_factory=lambda: [Path(p) for p in DEFAULT_SEARCH_PATHS])
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    exclude_stdlib: bool = True
    renames: dict[str, str] = field(default_factory=dict)
    include_tests: bool = False
    copy_data_files: bool = False
    workers: int = 1
    manifest: Optional[Path] = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check the configuration for consistency.

        Raises:
            ConfigError: If a value is invalid
        """
        if not is_valid_identifier(self.root):
            raise ConfigError(f"Invalid root package name: '{self.root}'")
        if self.prefix and not is_valid_identifier(self.prefix):
            raise ConfigError(f"Invalid prefix: '{self.prefix}'")
        for original, target in self.renames.items():
            if not is_valid_identifier(original) or not is_valid_identifier(target):
                raise ConfigError(f"Invalid rename: '{original}' -> '{target}'")
        if not self.prefix and not self.renames:
            raise ConfigError("Either 'prefix' or 'renames' must be set")
        if not self.search_paths:
            raise ConfigError("At least one search path is required")
        if self.workers < 1:
            raise ConfigError(f"'workers' must be at least 1, got {self.workers}")

    @property
    def environment(self) -> Environment:
        return Environment.from_paths(self.search_paths, include_tests=self.include_tests)

    def build_resolver(self) -> ModuleResolver:
        return ModuleResolver(self.environment)

    def build_predicate(self) -> InclusionPredicate:
        prefix_filter = PrefixFilter(include=self.include, exclude=self.exclude)
        if self.exclude_stdlib:
            return AllOf(StdlibFilter(), prefix_filter)
        return prefix_filter

    def build_renamer(self) -> Renamer:
        if not self.renames:
            return PrefixRenamer(self.prefix)
        fallback = PrefixRenamer(self.prefix) if self.prefix else None
        return MemoizingRenamer(MappingRenamer(self.renames, fallback=fallback))

    @classmethod
    def from_pyproject(
        cls,
        pyproject_path: str | Path,
        overrides: Optional[dict[str, Any]] = None,
    ) -> "ExtractConfig":
        """Create an ExtractConfig from a pyproject.toml file.

        Args:
            pyproject_path: Path to pyproject.toml
            overrides: Values replacing those of the file (same keys as the table)

        Returns:
            ExtractConfig instance

        Raises:
            ConfigError: If the file is invalid or missing required fields
            FileNotFoundError: If the file doesn't exist
        """
        path = Path(pyproject_path)
        if not path.exists():
            raise FileNotFoundError(f"pyproject.toml not found: {path}")

        try:
            with open(path, "rb") as f:
                pyproject = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML syntax: {e}") from e

        return cls.from_pyproject_dict(pyproject, base_dir=path.parent, overrides=overrides)

    @classmethod
    def from_pyproject_dict(
        cls,
        pyproject: dict[str, Any],
        base_dir: str | Path,
        overrides: Optional[dict[str, Any]] = None,
    ) -> "ExtractConfig":
        """Create an ExtractConfig from a parsed pyproject.toml dictionary.

        Args:
            pyproject: Parsed pyproject.toml as a dictionary
            base_dir: Directory relative paths are resolved against

        Returns:
            ExtractConfig instance

        Raises:
            ConfigError: If required fields are missing or invalid
        """
        tool = pyproject.get("tool", {})
        table = tool.get("pkg-extract", tool.get("pkg_extract", {}))
        if not isinstance(table, dict):
            raise ConfigError("[tool.pkg-extract] must be a table")
        return cls.from_dict({**table, **(overrides or {})}, base_dir=base_dir)

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: str | Path) -> "ExtractConfig":
        """Create an ExtractConfig from a flat settings dictionary.

        Keys may use dashes or underscores.
        """
        base = Path(base_dir)
        settings = {key.replace("-", "_"): value for key, value in data.items() if value is not None}

        root = settings.get("root")
        if not root or not isinstance(root, str):
            raise ConfigError("Missing required field: root")

        def _path(value: Any, key: str) -> Path:
            if not isinstance(value, (str, Path)):
                raise ConfigError(f"'{key}' must be a path")
            p = Path(value)
            return p if p.is_absolute() else base / p

        def _str_list(key: str) -> list[str]:
            value = settings.get(key, [])
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"'{key}' must be a list of strings")
            return list(value)

        def _bool(key: str, default: bool) -> bool:
            value = settings.get(key, default)
            if not isinstance(value, bool):
                raise ConfigError(f"'{key}' must be a boolean")
            return value

        renames = settings.get("renames", {})
        if not isinstance(renames, dict):
            raise ConfigError("'renames' must be a table")

        workers = settings.get("workers", 1)
        if not isinstance(workers, int) or isinstance(workers, bool):
            raise ConfigError("'workers' must be an integer")

        prefix = settings.get("prefix", "")
        if not isinstance(prefix, str):
            raise ConfigError("'prefix' must be a string")

        search_paths = _str_list("search_paths") or DEFAULT_SEARCH_PATHS
        manifest = settings.get("manifest")

        return cls(
            root=root,
            prefix=prefix,
            output_dir=_path(settings.get("output_dir", DEFAULT_OUTPUT_DIR), "output-dir"),
            search_paths=[_path(p, "search-paths") for p in search_paths],
            include=_str_list("include"),
            exclude=_str_list("exclude"),
            exclude_stdlib=_bool("exclude_stdlib", True),
            renames={str(k): str(v) for k, v in renames.items()},
            include_tests=_bool("include_tests", False),
            copy_data_files=_bool("copy_data_files", False),
            workers=workers,
            manifest=_path(manifest, "manifest") if manifest else None,
        )
