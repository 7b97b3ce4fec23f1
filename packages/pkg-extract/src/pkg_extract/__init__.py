# SPDX-License-Identifier: MIT
"""Extract a Python package and its dependencies under new names.

This package computes the closure of a package's dependencies, copies every
package in it to a relocated location and rewrites the imports between them,
leaving imports of everything else untouched.

Relative imports are followed to find sub-packages but never rewritten, so
they stay valid as long as the renamer keeps sub-packages under their parent.
A dotted ``import a.b`` without an alias is rewritten to
``import new.a.b, new.a as a`` so that ``a`` stays bound; when ``a`` was not
relocated along with ``a.b`` the rewrite fails with RewriteError.

Example:
    >>> from pkg_extract import (
    ...     Environment, ModuleResolver, PrefixRenamer, StdlibFilter, extract_package,
    ... )
    >>>
    >>> resolver = ModuleResolver(Environment.from_paths(["src", "third_party"]))
    >>> result = extract_package(
    ...     "acme.app",
    ...     predicate=StdlibFilter(),
    ...     renamer=PrefixRenamer("vendored"),
    ...     output_root="build/extracted",
    ...     resolver=resolver,
    ... )
    >>> result.identifier_map.lookup("acme.app")
    'vendored.acme.app'
"""

__version__ = "0.1.0"

from .config import ConfigError, ExtractConfig
from .errors import (
    IdentifierMapError,
    PackageExtractError,
    ParseError,
    RenameError,
    ResolutionError,
    RewriteError,
    StorageError,
)
from .extractor import (
    ExtractedFile,
    ExtractedPackage,
    ExtractionResult,
    PackageExtractor,
    build_manifest,
    extract_package,
    write_manifest,
)
from .identifiers import IdentifierMap, identifier_to_path, is_valid_identifier
from .resolver import Environment, ModuleMetadata, ModuleResolver
from .rewriter import ReferenceRewriter, RewriteResult, rewrite_file, rewrite_source
from .scanner import DependencyScanner, scan_dependencies
from .storage import FileSystemStorage, Storage
from .strategies import (
    AllOf,
    FunctionPredicate,
    FunctionRenamer,
    InclusionPredicate,
    MappingRenamer,
    MemoizingRenamer,
    PrefixFilter,
    PrefixRenamer,
    Renamer,
    StdlibFilter,
)

__all__ = [
    # Config
    "ExtractConfig",
    "ConfigError",
    # Errors
    "PackageExtractError",
    "IdentifierMapError",
    "ResolutionError",
    "ParseError",
    "RenameError",
    "RewriteError",
    "StorageError",
    # Identifiers
    "IdentifierMap",
    "identifier_to_path",
    "is_valid_identifier",
    # Resolver
    "Environment",
    "ModuleMetadata",
    "ModuleResolver",
    # Scanner
    "DependencyScanner",
    "scan_dependencies",
    # Rewriter
    "ReferenceRewriter",
    "RewriteResult",
    "rewrite_file",
    "rewrite_source",
    # Extractor
    "PackageExtractor",
    "ExtractionResult",
    "ExtractedPackage",
    "ExtractedFile",
    "extract_package",
    "build_manifest",
    "write_manifest",
    # Storage
    "Storage",
    "FileSystemStorage",
    # Strategies
    "InclusionPredicate",
    "Renamer",
    "PrefixRenamer",
    "MappingRenamer",
    "MemoizingRenamer",
    "FunctionRenamer",
    "FunctionPredicate",
    "PrefixFilter",
    "StdlibFilter",
    "AllOf",
]
