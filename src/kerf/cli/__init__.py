"""CLI module for kerf.

Provides the command-line interface for validating entity files and
reporting their extents.
"""

from __future__ import annotations

from kerf.cli.main import app

__all__ = ["app"]
