# SPDX-License-Identifier: MIT
"""Inclusion and renaming strategies used during discovery.

The scanner asks an :class:`InclusionPredicate` whether a discovered
dependency belongs in the extraction, and a :class:`Renamer` for its new
identifier. Both are plain objects so implementations can keep state.
"""

from __future__ import annotations

import sys
from typing import Callable, Iterable, Mapping, Protocol, runtime_checkable

from .identifiers import is_valid_identifier, iter_prefixes


@runtime_checkable
class InclusionPredicate(Protocol):
    """Decides whether a dependency is extracted and scanned further."""

    def include(self, identifier: str) -> bool: ...


@runtime_checkable
class Renamer(Protocol):
    """Produces the relocated identifier for an original one.

    Must be deterministic and must not map distinct inputs to the same output.
    """

    def rename(self, identifier: str) -> str: ...


def _is_under(identifier: str, prefix: str) -> bool:
    return identifier == prefix or identifier.startswith(prefix + ".")


class PrefixRenamer:
    """Relocate every identifier under a common namespace.

    Example:
        >>> PrefixRenamer("vendored").rename("yaml.parser")
        'vendored.yaml.parser'
    """

    def __init__(self, prefix: str) -> None:
        prefix = prefix.strip(".")
        if not is_valid_identifier(prefix):
            raise ValueError(f"Invalid namespace prefix: '{prefix}'")
        self.prefix = prefix

    def rename(self, identifier: str) -> str:
        return f"{self.prefix}.{identifier}"

    def __repr__(self) -> str:
        return f"PrefixRenamer({self.prefix!r})"


class MappingRenamer:
    """Rename by explicit mapping, matched on the longest dotted prefix.

    ``{"acme": "thirdparty.acme"}`` turns ``acme.util`` into
    ``thirdparty.acme.util``. Identifiers not covered by the mapping go to
    ``fallback``.
    """

    def __init__(self, mapping: Mapping[str, str], fallback: Renamer | None = None) -> None:
        self.mapping = dict(mapping)
        self.fallback = fallback

    def rename(self, identifier: str) -> str:
        for prefix, remainder in iter_prefixes(identifier):
            if prefix in self.mapping:
                target = self.mapping[prefix]
                return f"{target}.{remainder}" if remainder else target
        if self.fallback is None:
            raise ValueError(f"No rename rule matches '{identifier}'")
        return self.fallback.rename(identifier)


class MemoizingRenamer:
    """Cache the results of another renamer."""

    def __init__(self, renamer: Renamer) -> None:
        self.renamer = renamer
        self._cache: dict[str, str] = {}

    def rename(self, identifier: str) -> str:
        if identifier not in self._cache:
            self._cache[identifier] = self.renamer.rename(identifier)
        return self._cache[identifier]


class FunctionRenamer:
    """Adapt a plain ``str -> str`` callable."""

    def __init__(self, func: Callable[[str], str]) -> None:
        self.func = func

    def rename(self, identifier: str) -> str:
        return self.func(identifier)


class FunctionPredicate:
    """Adapt a plain ``str -> bool`` callable."""

    def __init__(self, func: Callable[[str], bool]) -> None:
        self.func = func

    def include(self, identifier: str) -> bool:
        return bool(self.func(identifier))


class PrefixFilter:
    """Include identifiers under ``include`` prefixes and not under ``exclude``.

    An empty ``include`` list accepts every identifier not explicitly
    excluded.
    """

    def __init__(self, include: Iterable[str] = (), exclude: Iterable[str] = ()) -> None:
        self.include_prefixes = tuple(p.strip(".") for p in include if p.strip("."))
        self.exclude_prefixes = tuple(p.strip(".") for p in exclude if p.strip("."))

    def include(self, identifier: str) -> bool:
        if any(_is_under(identifier, p) for p in self.exclude_prefixes):
            return False
        if not self.include_prefixes:
            return True
        return any(_is_under(identifier, p) for p in self.include_prefixes)


class StdlibFilter:
    """Reject standard library modules and ``__future__``."""

    def __init__(self, stdlib_modules: Iterable[str] | None = None) -> None:
        if stdlib_modules is None:
            stdlib_modules = sys.stdlib_module_names
        self.stdlib_modules = frozenset(stdlib_modules) | {"__future__"}

    def include(self, identifier: str) -> bool:
        return identifier.split(".")[0] not in self.stdlib_modules


class AllOf:
    """Conjunction of several predicates."""

    def __init__(self, *predicates: InclusionPredicate) -> None:
        self.predicates = predicates

    def include(self, identifier: str) -> bool:
        return all(p.include(identifier) for p in self.predicates)


def as_predicate(value: InclusionPredicate | Callable[[str], bool]) -> InclusionPredicate:
    """Accept either a predicate object or a plain callable."""
    if isinstance(value, InclusionPredicate):
        return value
    return FunctionPredicate(value)


def as_renamer(value: Renamer | Callable[[str], str]) -> Renamer:
    """Accept either a renamer object or a plain callable."""
    if isinstance(value, Renamer):
        return value
    return FunctionRenamer(value)
