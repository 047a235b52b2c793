"""Version validation and latest-version derivation."""

from __future__ import annotations

import dataclasses
import re
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional

from packaging.version import InvalidVersion, Version

from .errors import InvalidVersionError
from .utils import log_debug

if TYPE_CHECKING:  # pragma: no cover
    from .commits import Commit
    from .options import ResolvedOptions

_IDENTIFIER = r"(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
SEMVER_PATTERN = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    rf"(?:-(?P<prerelease>{_IDENTIFIER}(?:\.{_IDENTIFIER})*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


def is_valid_version(value: str) -> bool:
    """Return True when ``value`` looks like ``[v]MAJOR.MINOR.PATCH``."""
    return SEMVER_PATTERN.match(value) is not None


def validate_version(value: str, *, option: str = "latest-version") -> str:
    """Return ``value`` unchanged or raise InvalidVersionError."""
    if not isinstance(value, str) or not is_valid_version(value):
        raise InvalidVersionError(f"--{option} must be a valid semver version, got '{value}'.")
    return value


def strip_release_prefix(version: str) -> str:
    """Convert release labels like v1.2.3 into package-manager version strings."""

    if version.startswith(("v", "V")):
        return version[1:]
    return version


def _parse(value: str | None) -> Optional[Version]:
    if not value:
        return None
    try:
        return Version(strip_release_prefix(value))
    except InvalidVersion:
        return None


def is_major_release(version: str | None, previous: str | None) -> bool:
    """Return True when ``version`` bumps the major number of ``previous``."""
    current_parsed = _parse(version)
    previous_parsed = _parse(previous)
    if current_parsed is None or previous_parsed is None:
        return False
    return current_parsed.major > previous_parsed.major


def tag_prefix(commits: Iterable[Commit]) -> str:
    """Return ``v`` when any tag in history carries the ``v`` prefix."""
    for commit in commits:
        if commit.tag and commit.tag.startswith("v"):
            return "v"
    return ""


def resolve_latest_version(
    options: ResolvedOptions,
    package_metadata: Mapping[str, Any] | None,
    commits: Iterable[Commit],
) -> ResolvedOptions:
    """Return options whose ``latest_version`` accounts for package metadata.

    An explicit ``latest_version`` always wins. Otherwise, when a package file
    was requested and declares a version, that version becomes the latest
    version, using the same ``v`` prefix convention as the history's tags.
    """
    if options.latest_version:
        validate_version(options.latest_version)
        return options
    if not options.package or not package_metadata:
        return options
    raw_version = package_metadata.get("version")
    if not raw_version:
        return options
    latest = f"{tag_prefix(commits)}{strip_release_prefix(str(raw_version))}"
    validate_version(latest)
    log_debug(f"using latest version {latest} from {options.package}")
    return dataclasses.replace(options, latest_version=latest)
