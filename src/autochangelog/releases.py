"""Partitioning of commit history into release entries."""

from __future__ import annotations

import heapq
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Iterator, Optional, Sequence

from .commits import Commit
from .options import CommitLimit, Limit, ResolvedOptions
from .utils import log_debug, log_warning
from .versions import strip_release_prefix

UNRELEASED_TITLE = "Unreleased"
HEAD_REF = "HEAD"


@dataclass(frozen=True)
class ReleaseEntry:
    """One version's worth of history, newest commit first.

    ``version`` is None only for the synthetic unreleased entry. ``tag`` keeps
    the tag found in history, which differs from ``version`` when a latest
    version override relabels the release.
    """

    version: Optional[str]
    date: datetime
    commits: tuple[Commit, ...] = ()
    is_unreleased: bool = False
    tag: Optional[str] = None
    boundary: Optional[Commit] = field(default=None, repr=False)
    compare_from: Optional[str] = None
    compare_to: Optional[str] = None
    title: str = ""
    href: Optional[str] = None
    summary: Optional[str] = None
    major: bool = False

    @property
    def merges(self) -> list[Commit]:
        return [commit for commit in self.commits if commit.merge is not None]

    @property
    def fixes(self) -> list[Commit]:
        return [commit for commit in self.commits if commit.fixes and commit.merge is None]

    @property
    def plain_commits(self) -> list[Commit]:
        return [commit for commit in self.commits if commit.merge is None and not commit.fixes]

    @property
    def breaking_commits(self) -> list[Commit]:
        return [commit for commit in self.commits if commit.breaking]


@dataclass(frozen=True)
class Timeline:
    """Release entries in history order, newest first."""

    releases: tuple[ReleaseEntry, ...] = ()

    def __iter__(self) -> Iterator[ReleaseEntry]:
        return iter(self.releases)

    def __len__(self) -> int:
        return len(self.releases)

    def __getitem__(self, index: int) -> ReleaseEntry:
        return self.releases[index]

    @property
    def unreleased(self) -> Optional[ReleaseEntry]:
        if self.releases and self.releases[0].is_unreleased:
            return self.releases[0]
        return None

    @property
    def versions(self) -> list[Optional[str]]:
        return [release.version for release in self.releases]


def truncate_commits(commits: Sequence[Commit], limit: CommitLimit) -> list[Commit]:
    """Apply a commit limit to the raw history before grouping."""
    if isinstance(limit, Limit):
        return list(commits[: limit.count])
    return list(commits)


def merge_branch_commits(
    commits: Sequence[Commit],
    branches: Iterable[Sequence[Commit]],
) -> list[Commit]:
    """Interleave commits from other branches into the main history by date.

    Each branch keeps its own order, the main history wins ties, and commits
    already present (by hash) are skipped.
    """
    merged = list(commits)
    seen = {commit.hash for commit in merged}
    for branch_commits in branches:
        unique: list[Commit] = []
        for commit in branch_commits:
            if commit.hash in seen:
                continue
            seen.add(commit.hash)
            unique.append(commit)
        if not unique:
            continue
        log_debug(f"merging {len(unique)} commits from an included branch")
        merged = list(heapq.merge(merged, unique, key=lambda commit: commit.date, reverse=True))
    return merged


def is_release_tag(tag: Optional[str], tag_pattern: Optional[re.Pattern[str]] = None) -> bool:
    """Return True when ``tag`` marks the top of a release."""
    if not tag:
        return False
    if tag_pattern is None:
        return True
    return tag_pattern.search(tag) is not None


def filter_starting_version(
    entries: Sequence[ReleaseEntry], starting_version: str
) -> list[ReleaseEntry]:
    """Keep entries from the newest down to and including ``starting_version``."""
    wanted = strip_release_prefix(starting_version)
    for index, entry in enumerate(entries):
        if entry.version and strip_release_prefix(entry.version) == wanted:
            return list(entries[: index + 1])
    log_warning(f"starting version {starting_version} not found in history, keeping all releases.")
    return list(entries)


def group_releases(
    commits: Sequence[Commit],
    options: ResolvedOptions,
    *,
    now: Optional[datetime] = None,
) -> list[ReleaseEntry]:
    """Split annotated commits, newest first, into release entries.

    A tagged commit opens a new release and is its first commit. Commits newer
    than the first tag go to the release named by ``latest_version``, to the
    unreleased entry when ``unreleased`` is set, or are dropped. Ignored
    commits never count as such newer commits. Without any
    tag there is nothing to anchor commits to, so the result is empty unless
    one of those options applies.
    """
    tag_pattern = re.compile(options.tag_pattern) if options.tag_pattern else None
    ignore_pattern = (
        re.compile(options.ignore_commit_pattern) if options.ignore_commit_pattern else None
    )

    head: list[Commit] = []
    groups: list[tuple[Commit, list[Commit]]] = []
    for commit in commits:
        if is_release_tag(commit.tag, tag_pattern):
            groups.append((commit, []))
        target = groups[-1][1] if groups else head
        if ignore_pattern is not None and ignore_pattern.search(commit.subject):
            log_debug(f"ignoring commit {commit.short_hash}: {commit.subject}")
            continue
        target.append(commit)

    entries: list[ReleaseEntry] = []
    relabel_newest = False
    if options.latest_version:
        if head:
            entries.append(
                ReleaseEntry(
                    version=options.latest_version,
                    date=head[0].date,
                    commits=tuple(head),
                )
            )
        else:
            relabel_newest = True
    elif options.unreleased and head:
        entries.append(
            ReleaseEntry(
                version=None,
                date=now or datetime.now(timezone.utc),
                commits=tuple(head),
                is_unreleased=True,
            )
        )
    elif head:
        log_debug("dropping commits newer than the latest tag; use --unreleased to include them")

    for index, (boundary, group_commits) in enumerate(groups):
        version = boundary.tag
        if relabel_newest and index == 0:
            version = options.latest_version
        entries.append(
            ReleaseEntry(
                version=version,
                date=boundary.date,
                commits=tuple(group_commits),
                tag=boundary.tag,
                boundary=boundary,
            )
        )

    return entries
