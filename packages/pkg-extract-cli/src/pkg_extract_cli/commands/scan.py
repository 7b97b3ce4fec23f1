# SPDX-License-Identifier: MIT
"""Show which packages an extraction would copy, without writing anything."""

from __future__ import annotations

from typing import Any, Callable, Optional

import click

from pkg_extract import ConfigError, DependencyScanner, PackageExtractError

from ..main import Context, echo_error, echo_info, echo_success, pass_context


def selection_options(func: Callable) -> Callable:
    """Options shared by every command that runs discovery."""
    decorators = [
        click.argument("root", required=False),
        click.option("--prefix", help="Namespace the extracted packages are moved under."),
        click.option(
            "--search-path",
            "-p",
            "search_paths",
            multiple=True,
            help="Source root to look packages up in (repeatable).",
        ),
        click.option(
            "--include",
            multiple=True,
            help="Only extract dependencies under this prefix (repeatable).",
        ),
        click.option(
            "--exclude",
            multiple=True,
            help="Never extract dependencies under this prefix (repeatable).",
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def build_overrides(
    root: Optional[str],
    prefix: Optional[str],
    search_paths: tuple[str, ...],
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    **extra: Any,
) -> dict[str, Any]:
    """Turn command-line values into configuration overrides.

    Options that were not given are left out so the pyproject values apply.
    """
    overrides: dict[str, Any] = {
        "root": root,
        "prefix": prefix,
        "search-paths": list(search_paths) or None,
        "include": list(include) or None,
        "exclude": list(exclude) or None,
    }
    overrides.update(extra)
    return {key: value for key, value in overrides.items() if value is not None}


@click.command()
@selection_options
@pass_context
def scan(
    ctx: Context,
    root: Optional[str],
    prefix: Optional[str],
    search_paths: tuple[str, ...],
    include: tuple[str, ...],
    exclude: tuple[str, ...],
) -> None:
    """Print the package map of an extraction.

    \b
    Examples:
        pkg-extract scan acme.app --prefix vendored -p src
        pkg-extract scan --exclude acme.testing
    """
    overrides = build_overrides(root, prefix, search_paths, include, exclude)
    try:
        config = ctx.load_config(overrides)
    except (ConfigError, FileNotFoundError) as e:
        echo_error(str(e))
        raise SystemExit(1)

    scanner = DependencyScanner(config.build_resolver())
    try:
        identifier_map = scanner.scan(
            config.root, config.build_predicate(), config.build_renamer()
        )
    except PackageExtractError as e:
        echo_error(str(e))
        raise SystemExit(1)

    for original, relocated in identifier_map.items():
        echo_info(f"{original} -> {relocated}")

    if ctx.verbose and identifier_map.excluded:
        echo_info("")
        echo_info("Excluded:")
        for identifier in sorted(identifier_map.excluded):
            echo_info(f"  {identifier}")

    echo_success(f"{len(identifier_map)} packages would be extracted")
