# SPDX-License-Identifier: MIT
"""CLI command implementations."""

from . import extract, scan

__all__ = ["extract", "scan"]
