# SPDX-License-Identifier: MIT
"""Discovery of the packages to extract.

The scanner walks the dependency graph breadth-first from a root package and
builds the complete identifier map before anything is extracted.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Protocol

from .errors import RenameError
from .identifiers import IdentifierMap
from .resolver import ModuleMetadata
from .strategies import InclusionPredicate, Renamer, as_predicate, as_renamer

logger = logging.getLogger(__name__)


class Resolver(Protocol):
    """Anything that resolves an identifier to :class:`ModuleMetadata`."""

    def resolve(self, identifier: str) -> ModuleMetadata: ...


def _rename(renamer: Renamer, identifier: str) -> str:
    try:
        return renamer.rename(identifier)
    except ValueError as e:
        raise RenameError(identifier, str(e)) from e


class DependencyScanner:
    """Breadth-first dependency scanner."""

    def __init__(self, resolver: Resolver) -> None:
        self.resolver = resolver

    def scan(
        self,
        root: str,
        predicate: InclusionPredicate | Callable[[str], bool],
        renamer: Renamer | Callable[[str], str],
    ) -> IdentifierMap:
        """Build the frozen identifier map for ``root`` and its dependencies.

        The root is always included, whatever the predicate says. Every other
        identifier is examined once: it is mapped and scanned further when the
        predicate accepts it, and recorded as excluded otherwise.

        Args:
            root: Package to extract
            predicate: Decides which dependencies are extracted too
            renamer: Produces the relocated identifier for each package

        Returns:
            Frozen IdentifierMap

        Raises:
            ResolutionError: If any visited package cannot be resolved
            RenameError: If the renamer has no new name for a mapped package
        """
        predicate = as_predicate(predicate)
        renamer = as_renamer(renamer)

        identifier_map = IdentifierMap()
        identifier_map.insert(root, _rename(renamer, root))

        frontier: deque[str] = deque([root])
        visited: set[str] = {root}

        while frontier:
            current = frontier.popleft()
            metadata = self.resolver.resolve(current)
            logger.debug("Scanning %s: %d dependencies", current, len(metadata.dependencies))

            for dep in metadata.dependencies:
                if dep in visited:
                    continue
                visited.add(dep)

                if predicate.include(dep):
                    identifier_map.insert(dep, _rename(renamer, dep))
                    frontier.append(dep)
                else:
                    identifier_map.exclude(dep)

        identifier_map.freeze()
        logger.info(
            "Discovered %d packages to extract from %s (%d excluded)",
            len(identifier_map),
            root,
            len(identifier_map.excluded),
        )
        return identifier_map


def scan_dependencies(
    root: str,
    resolver: Resolver,
    predicate: InclusionPredicate | Callable[[str], bool],
    renamer: Renamer | Callable[[str], str],
) -> IdentifierMap:
    """Convenience wrapper around :meth:`DependencyScanner.scan`."""
    return DependencyScanner(resolver).scan(root, predicate, renamer)
