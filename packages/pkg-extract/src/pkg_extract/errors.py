# SPDX-License-Identifier: MIT
"""Error types raised while extracting packages.

Every error aborts the run it was raised in. None of them are retried or
suppressed by the library; they carry the identifier and/or path needed to
diagnose the failure.
"""

from __future__ import annotations

from pathlib import Path


class PackageExtractError(Exception):
    """Base class for all extraction errors."""

    pass


class IdentifierMapError(PackageExtractError):
    """Raised when the append-only identifier map is misused."""

    pass


class ResolutionError(PackageExtractError):
    """Raised when a module identifier cannot be resolved to metadata.

    Attributes:
        identifier: The identifier that failed to resolve
    """

    def __init__(self, identifier: str, message: str):
        self.identifier = identifier
        super().__init__(f"Cannot resolve '{identifier}': {message}")


class ParseError(PackageExtractError):
    """Raised when a source file is not valid Python.

    Attributes:
        filename: File that failed to parse
    """

    def __init__(self, filename: str | Path, message: str):
        self.filename = str(filename)
        super().__init__(f"Syntax error in {filename}: {message}")


class RewriteError(PackageExtractError):
    """Raised when a reference cannot be decoded or re-encoded.

    Attributes:
        filename: File containing the reference
        reference: The offending module reference
    """

    def __init__(self, filename: str | Path, reference: str, message: str):
        self.filename = str(filename)
        self.reference = reference
        super().__init__(f"Cannot rewrite '{reference}' in {filename}: {message}")


class StorageError(PackageExtractError):
    """Raised when creating, reading or writing a location fails.

    Attributes:
        path: The path the storage operation was applied to
    """

    def __init__(self, path: str | Path, message: str):
        self.path = Path(path)
        super().__init__(f"{message}: {path}")


class RenameError(PackageExtractError):
    """Raised when the renamer has no new name for an identifier.

    Attributes:
        identifier: The identifier that could not be renamed
    """

    def __init__(self, identifier: str, message: str):
        self.identifier = identifier
        super().__init__(f"Cannot rename '{identifier}': {message}")
