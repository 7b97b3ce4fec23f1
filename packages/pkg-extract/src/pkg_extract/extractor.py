# SPDX-License-Identifier: MIT
"""Package extraction.

This module copies every package of a frozen identifier map into the output
tree under its relocated name, rewriting imports on the way, and ties the
discovery and extraction phases together in :func:`extract_package`.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from .errors import IdentifierMapError
from .identifiers import IdentifierMap, identifier_to_path
from .rewriter import rewrite_file
from .scanner import DependencyScanner, Resolver
from .storage import FileSystemStorage, Storage
from .strategies import InclusionPredicate, Renamer

logger = logging.getLogger(__name__)


@dataclass
class ExtractedFile:
    """One rewritten source file.

    Attributes:
        source_path: Original file
        output_path: Written file
        references_rewritten: Number of imports that were relocated
        references_preserved: Number of imports left unchanged
        modified: Whether the content differs from the original
        warnings: Rewriter warnings for this file
    """

    source_path: Path
    output_path: Path
    references_rewritten: int = 0
    references_preserved: int = 0
    modified: bool = False
    warnings: list[str] = field(default_factory=list)


@dataclass
class ExtractedPackage:
    """One package copied to its relocated destination."""

    original: str
    relocated: str
    destination: Path
    files: list[ExtractedFile] = field(default_factory=list)
    data_files: list[str] = field(default_factory=list)


@dataclass
class ExtractionResult:
    """Result of an extraction run.

    Attributes:
        output_root: Root of the extracted tree
        identifier_map: The frozen map the run used
        packages: Extracted packages, in map order
    """

    output_root: Path
    identifier_map: IdentifierMap
    packages: list[ExtractedPackage] = field(default_factory=list)

    @property
    def files_written(self) -> int:
        return sum(len(pkg.files) + len(pkg.data_files) for pkg in self.packages)

    @property
    def references_rewritten(self) -> int:
        return sum(f.references_rewritten for pkg in self.packages for f in pkg.files)

    @property
    def warnings(self) -> list[str]:
        return [w for pkg in self.packages for f in pkg.files for w in f.warnings]

    def get_package(self, original: str) -> ExtractedPackage | None:
        for pkg in self.packages:
            if pkg.original == original:
                return pkg
        return None


class PackageExtractor:
    """Extracts the packages of a frozen identifier map.

    Packages are independent once the map is frozen, so with ``workers > 1``
    they are extracted on a thread pool. The first failure stops the run.
    """

    def __init__(
        self,
        resolver: Resolver,
        output_root: str | Path,
        storage: Storage | None = None,
        *,
        copy_data_files: bool = False,
        workers: int = 1,
    ) -> None:
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self.resolver = resolver
        self.output_root = Path(output_root)
        self.storage = storage or FileSystemStorage()
        self.copy_data_files = copy_data_files
        self.workers = workers

    def extract_all(self, identifier_map: IdentifierMap) -> ExtractionResult:
        """Extract every package in the map.

        Raises:
            IdentifierMapError: If the map is not frozen
            ResolutionError: If a package cannot be resolved
            ParseError: If a source file is not valid Python
            RewriteError: If an import cannot be rewritten
            StorageError: If a directory or file cannot be created, read or written
        """
        if not identifier_map.frozen:
            raise IdentifierMapError("Identifier map must be frozen before extraction")

        items = identifier_map.items()
        result = ExtractionResult(output_root=self.output_root, identifier_map=identifier_map)

        if self.workers == 1 or len(items) <= 1:
            for original, relocated in items:
                result.packages.append(self.extract_one(original, relocated, identifier_map))
        else:
            extracted = self._extract_concurrently(items, identifier_map)
            result.packages.extend(extracted[original] for original, _ in items)

        logger.info(
            "Extracted %d packages (%d files) into %s",
            len(result.packages),
            result.files_written,
            self.output_root,
        )
        return result

    def _extract_concurrently(
        self,
        items: list[tuple[str, str]],
        identifier_map: IdentifierMap,
    ) -> dict[str, ExtractedPackage]:
        extracted: dict[str, ExtractedPackage] = {}
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = {
                executor.submit(self.extract_one, original, relocated, identifier_map): original
                for original, relocated in items
            }
            try:
                for future in as_completed(futures):
                    extracted[futures[future]] = future.result()
            except BaseException:
                for future in futures:
                    future.cancel()
                raise
        return extracted

    def extract_one(
        self,
        original: str,
        relocated: str,
        identifier_map: IdentifierMap,
    ) -> ExtractedPackage:
        """Extract a single package to its relocated destination."""
        metadata = self.resolver.resolve(original)
        destination = self.output_root / identifier_to_path(relocated)
        self.storage.ensure_location(destination)

        package = ExtractedPackage(original=original, relocated=relocated, destination=destination)

        for file_name in metadata.files:
            source_path = metadata.directory / file_name
            output_path = destination / file_name
            rewritten = rewrite_file(source_path, output_path, identifier_map, self.storage)
            package.files.append(
                ExtractedFile(
                    source_path=source_path,
                    output_path=output_path,
                    references_rewritten=rewritten.references_rewritten,
                    references_preserved=rewritten.references_preserved,
                    modified=rewritten.modified,
                    warnings=rewritten.warnings,
                )
            )

        if self.copy_data_files:
            for file_name in metadata.data_files:
                data = self.storage.read_file(metadata.directory / file_name)
                self.storage.write_file(destination / file_name, data)
                package.data_files.append(file_name)

        logger.debug("Extracted %s -> %s (%d files)", original, destination, len(package.files))
        return package


def extract_package(
    root: str,
    predicate: InclusionPredicate | Callable[[str], bool],
    renamer: Renamer | Callable[[str], str],
    output_root: str | Path,
    *,
    resolver: Resolver,
    storage: Storage | None = None,
    copy_data_files: bool = False,
    workers: int = 1,
    manifest_path: str | Path | None = None,
) -> ExtractionResult:
    """Extract ``root`` and its accepted dependencies under new names.

    Discovery runs to completion before any file is written.

    Args:
        root: Package to extract; always included
        predicate: Decides which dependencies are extracted too
        renamer: Produces the relocated identifier for each package
        output_root: Root directory of the extracted tree
        resolver: Resolves identifiers to package metadata
        storage: Storage to read and write through (default: local filesystem)
        copy_data_files: Also copy non-Python files of each package
        workers: Number of packages extracted concurrently
        manifest_path: If given, write a JSON manifest of the run there

    Returns:
        ExtractionResult describing everything written
    """
    storage = storage or FileSystemStorage()
    identifier_map = DependencyScanner(resolver).scan(root, predicate, renamer)

    extractor = PackageExtractor(
        resolver,
        output_root,
        storage,
        copy_data_files=copy_data_files,
        workers=workers,
    )
    result = extractor.extract_all(identifier_map)

    if manifest_path is not None:
        write_manifest(result, root, manifest_path, storage)

    return result


def build_manifest(result: ExtractionResult, root: str) -> dict:
    """Describe an extraction run as a JSON-serializable dictionary."""
    packages: dict[str, dict] = {}
    for pkg in result.packages:
        try:
            destination = pkg.destination.relative_to(result.output_root).as_posix()
        except ValueError:
            destination = pkg.destination.as_posix()
        packages[pkg.original] = {
            "relocated": pkg.relocated,
            "destination": destination,
            "files": [f.output_path.name for f in pkg.files],
            "rewritten_files": [f.output_path.name for f in pkg.files if f.modified],
            "data_files": list(pkg.data_files),
        }

    return {
        "root": root,
        "packages": packages,
        "excluded": sorted(result.identifier_map.excluded),
        "warnings": result.warnings,
    }


def write_manifest(
    result: ExtractionResult,
    root: str,
    output_path: str | Path,
    storage: Storage | None = None,
) -> None:
    """Write the manifest of an extraction run as JSON."""
    storage = storage or FileSystemStorage()
    output = Path(output_path)
    storage.ensure_location(output.parent)
    manifest = build_manifest(result, root)
    storage.write_file(output, (json.dumps(manifest, indent=2, sort_keys=True) + "\n").encode("utf-8"))

