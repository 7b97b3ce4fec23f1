# SPDX-License-Identifier: MIT
"""Extract a package and its dependencies."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from pkg_extract import ConfigError, PackageExtractError, extract_package

from ..main import Context, echo_error, echo_info, echo_success, echo_warning, pass_context
from .scan import build_overrides, selection_options


@click.command()
@selection_options
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    help="Root directory of the extracted tree.",
)
@click.option(
    "--workers",
    "-j",
    type=click.IntRange(min=1),
    help="Number of packages extracted concurrently.",
)
@click.option(
    "--copy-data-files/--no-copy-data-files",
    default=None,
    help="Also copy non-Python files of each package.",
)
@click.option(
    "--manifest",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write a JSON manifest of the extraction to this file.",
)
@pass_context
def extract(
    ctx: Context,
    root: Optional[str],
    prefix: Optional[str],
    search_paths: tuple[str, ...],
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    output_dir: Optional[Path],
    workers: Optional[int],
    copy_data_files: Optional[bool],
    manifest: Optional[Path],
) -> None:
    """Copy a package and its dependencies under new names.

    Every import between extracted packages is rewritten; imports of
    anything else are left as they are.

    \b
    Examples:
        pkg-extract extract acme.app --prefix vendored -p src
        pkg-extract extract -o build/extracted -j 4
        pkg-extract -C myproject extract --manifest build/extract.json
    """
    overrides = build_overrides(
        root,
        prefix,
        search_paths,
        include,
        exclude,
        **{
            "output-dir": str(output_dir) if output_dir else None,
            "workers": workers,
            "copy-data-files": copy_data_files,
            "manifest": str(manifest) if manifest else None,
        },
    )
    try:
        config = ctx.load_config(overrides)
    except (ConfigError, FileNotFoundError) as e:
        echo_error(str(e))
        raise SystemExit(1)

    if ctx.verbose:
        echo_info(f"Root: {config.root}")
        echo_info(f"Search paths: {', '.join(str(p) for p in config.search_paths)}")
        echo_info(f"Output directory: {config.output_dir}")

    try:
        result = extract_package(
            config.root,
            config.build_predicate(),
            config.build_renamer(),
            config.output_dir,
            resolver=config.build_resolver(),
            copy_data_files=config.copy_data_files,
            workers=config.workers,
            manifest_path=config.manifest,
        )
    except PackageExtractError as e:
        echo_error(str(e))
        raise SystemExit(1)

    for warning in result.warnings:
        echo_warning(warning)

    if ctx.verbose:
        for pkg in result.packages:
            echo_info(f"  {pkg.original} -> {pkg.relocated} ({len(pkg.files)} files)")

    echo_success(
        f"Extracted {len(result.packages)} packages ({result.files_written} files, "
        f"{result.references_rewritten} imports rewritten) into {config.output_dir}"
    )
