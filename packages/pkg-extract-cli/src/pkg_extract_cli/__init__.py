# SPDX-License-Identifier: MIT
"""Command-line interface for pkg-extract."""

__version__ = "0.1.0"
