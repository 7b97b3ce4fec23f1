# SPDX-License-Identifier: MIT
"""CLI entry point for the pkg-extract command."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click

from pkg_extract import ConfigError, ExtractConfig, PackageExtractError


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.verbose: bool = False
        self.project_dir: Optional[Path] = None

    @property
    def base_dir(self) -> Path:
        return self.project_dir or Path.cwd()

    def load_config(self, overrides: dict[str, Any]) -> ExtractConfig:
        """Load configuration from pyproject.toml, applying command-line overrides.

        Without a pyproject.toml the overrides alone must form a valid
        configuration.
        """
        pyproject_path = self.base_dir / "pyproject.toml"
        if pyproject_path.exists():
            return ExtractConfig.from_pyproject(pyproject_path, overrides=overrides)
        return ExtractConfig.from_dict(overrides, base_dir=self.base_dir)


pass_context = click.make_pass_decorator(Context, ensure=True)


def echo_error(message: str) -> None:
    """Print an error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.secho(message, fg="green")


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.secho(f"Warning: {message}", fg="yellow", err=True)


def configure_logging(verbose: bool) -> None:
    """Send library log records to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


@click.group()
@click.version_option(package_name="pkg-extract")
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose output.",
)
@click.option(
    "-C",
    "--directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Project directory holding pyproject.toml (defaults to the current directory).",
)
@pass_context
def cli(ctx: Context, verbose: bool, directory: Optional[Path]) -> None:
    """Extract a Python package and its dependencies under new names.

    \b
    Examples:
        pkg-extract scan acme.app -p src
        pkg-extract extract acme.app --prefix vendored -p src -o build/extracted
        pkg-extract -C myproject extract
    """
    ctx.verbose = verbose
    ctx.project_dir = directory
    configure_logging(verbose)


# Import and register commands
from .commands import extract, scan

cli.add_command(scan.scan)
cli.add_command(extract.extract)


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except (ConfigError, PackageExtractError) as e:
        echo_error(str(e))
        sys.exit(1)
    except FileNotFoundError as e:
        echo_error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
