"""Exceptions raised while assembling a changelog."""

from __future__ import annotations

import click

__all__ = [
    "AutoChangelogError",
    "ConfigNotFoundError",
    "GitError",
    "InvalidVersionError",
    "OptionParseError",
    "PackageNotFoundError",
    "TemplateNotFoundError",
]


class AutoChangelogError(click.ClickException):
    """Base class for fatal errors that abort a changelog run."""


class OptionParseError(AutoChangelogError):
    """Raised when a command line or config value cannot be parsed."""


class InvalidVersionError(AutoChangelogError):
    """Raised when a version override is not a semantic version."""


class PackageNotFoundError(AutoChangelogError):
    """Raised when the requested package metadata file does not exist."""


class TemplateNotFoundError(AutoChangelogError):
    """Raised when no built-in template matches the requested name."""


class ConfigNotFoundError(AutoChangelogError):
    """Raised when an explicitly requested config file does not exist."""


class GitError(AutoChangelogError):
    """Raised when the git executable fails or is unavailable."""
