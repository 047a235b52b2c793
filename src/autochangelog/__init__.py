"""Core package exports for auto-changelog."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as metadata_version
from typing import TYPE_CHECKING, Any

__all__ = [
    "__version__",
    "Collaborators",
    "build_timeline",
    "generate_changelog",
    "resolve_options",
    "run",
]

try:
    __version__ = metadata_version("autochangelog")
except PackageNotFoundError:  # pragma: no cover - fallback for editable installs
    __version__ = "0.0.0"

if TYPE_CHECKING:  # pragma: no cover
    from .api import Collaborators, generate_changelog, run
    from .options import resolve_options
    from .timeline import build_timeline


def __getattr__(name: str) -> Any:  # pragma: no cover - simple delegation
    if name in {"Collaborators", "generate_changelog", "run"}:
        from . import api

        return getattr(api, name)
    if name == "resolve_options":
        from .options import resolve_options as _resolve_options

        return _resolve_options
    if name == "build_timeline":
        from .timeline import build_timeline as _build_timeline

        return _build_timeline
    raise AttributeError(f"module 'autochangelog' has no attribute {name!r}")
