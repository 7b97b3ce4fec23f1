# SPDX-License-Identifier: MIT
"""Module identifiers and the original -> relocated identifier map.

Identifiers are dotted Python package names (``"acme.lib.sub"``). The
:class:`IdentifierMap` is filled once during discovery and frozen before any
file is rewritten.
"""

from __future__ import annotations

import keyword
from pathlib import Path
from typing import Iterator

from .errors import IdentifierMapError


def is_valid_identifier(name: str) -> bool:
    """Check that every dotted component is a non-keyword Python identifier."""
    if not name:
        return False
    return all(part.isidentifier() and not keyword.iskeyword(part) for part in name.split("."))


def identifier_to_path(name: str) -> Path:
    """Return the relative directory for a dotted identifier."""
    return Path(*name.split("."))


def iter_prefixes(name: str) -> Iterator[tuple[str, str]]:
    """Yield ``(prefix, remainder)`` pairs from the longest prefix down.

    >>> list(iter_prefixes("a.b.c"))
    [('a.b.c', ''), ('a.b', 'c'), ('a', 'b.c')]
    """
    parts = name.split(".")
    for i in range(len(parts), 0, -1):
        yield ".".join(parts[:i]), ".".join(parts[i:])


class IdentifierMap:
    """Append-only mapping from original identifier to relocated identifier.

    Keys are inserted exactly once and never reassigned. Identifiers that were
    examined but rejected are recorded separately as ``excluded``; they are
    never keys, but they stop prefix relocation in :meth:`relocate`.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}
        self._excluded: set[str] = set()
        self._frozen = False

    def insert(self, original: str, relocated: str) -> None:
        """Add a new entry.

        Raises:
            IdentifierMapError: If the map is frozen or the key already exists
        """
        self._check_writable()
        if original in self._entries:
            raise IdentifierMapError(
                f"'{original}' is already mapped to '{self._entries[original]}'"
            )
        if original in self._excluded:
            raise IdentifierMapError(f"'{original}' was already excluded")
        self._entries[original] = relocated

    def exclude(self, original: str) -> None:
        """Record an identifier that was visited but left out of the map."""
        self._check_writable()
        if original in self._entries:
            raise IdentifierMapError(f"'{original}' is already mapped")
        self._excluded.add(original)

    def freeze(self) -> None:
        """Make the map read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def excluded(self) -> frozenset[str]:
        return frozenset(self._excluded)

    def lookup(self, original: str) -> str | None:
        """Return the relocated identifier for an exact key, if any."""
        return self._entries.get(original)

    def relocate(self, name: str) -> str | None:
        """Relocate a dotted module reference by its longest known prefix.

        ``a.b.mod`` with ``a.b -> out.a.b`` relocates to ``out.a.b.mod``. When
        the longest known prefix is an excluded identifier the reference is
        not relocated.

        Returns:
            The relocated reference, or None when it must stay unchanged
        """
        for prefix, remainder in iter_prefixes(name):
            if prefix in self._excluded:
                return None
            relocated = self._entries.get(prefix)
            if relocated is not None:
                return f"{relocated}.{remainder}" if remainder else relocated
        return None

    def items(self) -> list[tuple[str, str]]:
        return list(self._entries.items())

    def as_dict(self) -> dict[str, str]:
        return dict(self._entries)

    def _check_writable(self) -> None:
        if self._frozen:
            raise IdentifierMapError("Identifier map is frozen")

    def __contains__(self, original: object) -> bool:
        return original in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"IdentifierMap({self._entries!r}, {state})"
