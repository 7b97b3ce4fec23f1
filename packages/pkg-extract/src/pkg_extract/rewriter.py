# SPDX-License-Identifier: MIT
"""CST-based import rewriting for extracted packages.

This module rewrites the absolute imports of a Python source file according
to a frozen :class:`~pkg_extract.identifiers.IdentifierMap`. It uses libcst,
so everything except the rewritten module names (comments, blank lines,
quoting, encoding) comes out byte-for-byte as it went in.

Example:
    With ``{"acme": "vendored.acme", "acme.util": "vendored.acme.util"}``:

        import acme                      ->  import vendored.acme as acme
        import acme.util                 ->  import vendored.acme.util, vendored.acme as acme
        import acme.util as u            ->  import vendored.acme.util as u
        from acme.util.text import slug  ->  from vendored.acme.util.text import slug
        from . import helpers            ->  unchanged (relative)
        import requests                  ->  unchanged (not extracted)

A dotted ``import a.b`` binds ``a``. It is rewritten only when ``a`` moved
too and ``a.b`` kept its place under it; the statement then also imports the
new ``a`` as ``a``, and binds the new top-level name as well. Any other
relocation of a dotted import raises :class:`RewriteError`, since no single
statement keeps the binding; alias the import in the source to extract it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Sequence, Union

import libcst as cst
from libcst.helpers import get_full_name_for_node

from .errors import ParseError, RewriteError
from .identifiers import IdentifierMap, is_valid_identifier

if TYPE_CHECKING:
    from .storage import Storage

logger = logging.getLogger(__name__)

ModuleName = Union[cst.Attribute, cst.Name]


@dataclass
class RewriteResult:
    """Result of rewriting the references in one source file.

    Attributes:
        filename: File name used in messages
        output: Rewritten source bytes
        references_rewritten: Number of references that were relocated
        references_preserved: Number of references left unchanged
        modified: Whether the output differs from the input
        warnings: References that were rewritten or kept with caveats
    """

    filename: str
    output: bytes
    references_rewritten: int = 0
    references_preserved: int = 0
    modified: bool = False
    warnings: list[str] = field(default_factory=list)


class ReferenceRewriter(cst.CSTTransformer):
    """CST transformer that relocates import references.

    This transformer handles:
    - ``import a`` -> ``import new.a as a`` (binding kept)
    - ``import a.b`` -> ``import new.a.b, new.a as a``
    - ``import a.b as x`` -> ``import new.a.b as x``
    - ``from a.b import c`` -> ``from new.a.b import c``
    - ``from a import b`` -> ``from new.a import b`` when only the
      sub-package ``a.b`` is relocated

    Relative imports and references outside the map are left untouched.
    """

    def __init__(self, identifier_map: IdentifierMap, filename: str = "<string>") -> None:
        super().__init__()
        self.identifier_map = identifier_map
        self.filename = filename
        self.references_rewritten = 0
        self.references_preserved = 0
        self.warnings: list[str] = []

    def _decode(self, node: cst.BaseExpression) -> str:
        name = get_full_name_for_node(node)
        if name is None:
            raise RewriteError(self.filename, type(node).__name__, "not a dotted module name")
        return name

    def _encode(self, reference: str, relocated: str) -> ModuleName:
        if not is_valid_identifier(relocated):
            raise RewriteError(
                self.filename,
                reference,
                f"relocated name '{relocated}' is not a valid module path",
            )
        parts = relocated.split(".")
        node: ModuleName = cst.Name(parts[0])
        for part in parts[1:]:
            node = cst.Attribute(value=node, attr=cst.Name(part))
        return node

    def _relocate(self, reference: str) -> str | None:
        relocated = self.identifier_map.relocate(reference)
        if relocated == reference:
            return None
        return relocated

    def _warn(self, message: str) -> None:
        self.warnings.append(message)
        logger.warning("%s: %s", self.filename, message)

    def leave_Import(self, original_node: cst.Import, updated_node: cst.Import) -> cst.Import:
        new_names: list[cst.ImportAlias] = []
        bound: set[str] = set()
        changed = False

        for alias in updated_node.names:
            reference = self._decode(alias.name)
            relocated = self._relocate(reference)
            if relocated is None:
                self.references_preserved += 1
                new_names.append(alias)
                continue

            self.references_rewritten += 1
            changed = True
            if alias.asname is not None:
                new_names.append(alias.with_changes(name=self._encode(reference, relocated)))
            elif "." not in reference:
                # Keep the name the module was bound to
                new_names.append(
                    alias.with_changes(
                        name=self._encode(reference, relocated),
                        asname=cst.AsName(name=cst.Name(reference)),
                    )
                )
            else:
                new_names.append(alias.with_changes(name=self._encode(reference, relocated)))
                top, relocated_top = self._top_level_binding(reference, relocated)
                if top not in bound:
                    bound.add(top)
                    new_names.append(
                        cst.ImportAlias(
                            name=self._encode(top, relocated_top),
                            asname=cst.AsName(name=cst.Name(top)),
                        )
                    )

        if not changed:
            return updated_node
        return updated_node.with_changes(names=new_names)

    def _top_level_binding(self, reference: str, relocated: str) -> tuple[str, str]:
        """Check that ``import a.b`` can keep binding ``a`` once relocated.

        That holds when ``a`` itself is relocated and ``a.b`` moved along with
        it; the statement then also imports the new ``a`` under its old name.
        """
        top, _, rest = reference.partition(".")
        relocated_top = self._relocate(top)
        if relocated_top is None or relocated != f"{relocated_top}.{rest}":
            raise RewriteError(
                self.filename,
                reference,
                f"'import {relocated}' would not bind '{top}'; "
                f"import it as 'import {reference} as <name>' instead",
            )
        return top, relocated_top

    def leave_ImportFrom(
        self, original_node: cst.ImportFrom, updated_node: cst.ImportFrom
    ) -> cst.ImportFrom:
        if updated_node.relative or updated_node.module is None:
            self.references_preserved += 1
            return updated_node

        reference = self._decode(updated_node.module)
        relocated = self._relocate(reference)
        if relocated is not None:
            self.references_rewritten += 1
            return updated_node.with_changes(module=self._encode(reference, relocated))

        if isinstance(updated_node.names, cst.ImportStar):
            self.references_preserved += 1
            return updated_node

        parent = self._common_relocated_parent(reference, updated_node.names)
        if parent is None:
            self.references_preserved += 1
            return updated_node

        self.references_rewritten += 1
        return updated_node.with_changes(module=self._encode(reference, parent))

    def _common_relocated_parent(
        self, reference: str, names: Sequence[cst.ImportAlias]
    ) -> str | None:
        """Find the relocated parent for ``from pkg import sub, ...``.

        Only applies when every imported name is a relocated sub-package that
        kept its last component and all of them share a parent.
        """
        parents: set[str] = set()
        matched = 0
        for alias in names:
            name = self._decode(alias.name)
            relocated = self._relocate(f"{reference}.{name}")
            if relocated is None:
                continue
            matched += 1
            parent, _, last = relocated.rpartition(".")
            parents.add(parent if last == name else "")

        if matched == 0:
            return None
        if matched == len(names) and len(parents) == 1 and "" not in parents:
            return parents.pop()

        self._warn(
            f"'from {reference} import ...' mixes relocated sub-packages with other "
            "names and was left unchanged",
        )
        return None


def rewrite_source(
    source: bytes,
    identifier_map: IdentifierMap,
    filename: str = "<string>",
) -> RewriteResult:
    """Rewrite the import references of one Python source file.

    Args:
        source: Source bytes, in whatever encoding the file declares
        identifier_map: Frozen map of relocated packages
        filename: Filename for error messages

    Returns:
        RewriteResult holding the new bytes and statistics

    Raises:
        ParseError: If the source is not valid Python
        RewriteError: If a reference cannot be decoded or re-encoded
    """
    try:
        module = cst.parse_module(source)
    except cst.ParserSyntaxError as e:
        raise ParseError(filename, str(e)) from e
    except (UnicodeDecodeError, LookupError) as e:
        raise ParseError(filename, f"cannot decode source ({e})") from e

    rewriter = ReferenceRewriter(identifier_map, filename=filename)
    new_module = module.visit(rewriter)

    result = RewriteResult(
        filename=filename,
        output=source,
        references_rewritten=rewriter.references_rewritten,
        references_preserved=rewriter.references_preserved,
        warnings=rewriter.warnings,
    )
    if rewriter.references_rewritten:
        result.output = new_module.bytes
        result.modified = result.output != source
    return result


def rewrite_file(
    source_path: Path,
    output_path: Path,
    identifier_map: IdentifierMap,
    storage: Storage,
) -> RewriteResult:
    """Rewrite one file from ``source_path`` into ``output_path``.

    Raises:
        ParseError: If the source is not valid Python
        RewriteError: If a reference cannot be rewritten
        StorageError: If reading or writing fails
    """
    source = storage.read_file(source_path)
    result = rewrite_source(source, identifier_map, filename=str(source_path))
    storage.write_file(output_path, result.output)
    return result
