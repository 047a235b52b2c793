"""CLI package for auto-changelog."""

from __future__ import annotations

from ._core import VERSION_FLAGS, cli, main

__all__ = ["VERSION_FLAGS", "cli", "main"]
