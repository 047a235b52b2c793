"""Assembly of release entries into the timeline handed to templates."""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Iterable, Mapping, Optional, Sequence

from .commits import Commit, annotate_commits
from .options import ResolvedOptions
from .releases import (
    HEAD_REF,
    UNRELEASED_TITLE,
    ReleaseEntry,
    Timeline,
    filter_starting_version,
    group_releases,
    merge_branch_commits,
    truncate_commits,
)
from .remote import RemoteInfo
from .utils import log_debug
from .versions import is_major_release, validate_version


def _release_summary(entry: ReleaseEntry, summaries: Mapping[str, str]) -> Optional[str]:
    if entry.tag and summaries.get(entry.tag):
        return summaries[entry.tag].strip()
    if entry.boundary is not None and entry.boundary.body:
        return entry.boundary.body
    return None


def assemble_timeline(
    entries: Sequence[ReleaseEntry],
    options: ResolvedOptions,
    remote: Optional[RemoteInfo] = None,
    *,
    summaries: Mapping[str, str] | None = None,
    initial_commit: Optional[str] = None,
) -> Timeline:
    """Attach titles, compare boundaries, summaries, and links to entries."""
    summary_lookup = summaries or {}
    assembled: list[ReleaseEntry] = []
    for index, entry in enumerate(entries):
        older = entries[index + 1] if index + 1 < len(entries) else None
        compare_to = entry.version or HEAD_REF
        compare_from = older.version if older is not None and older.version else initial_commit
        href = None
        if remote is not None and compare_from:
            href = remote.compare_url(compare_from, compare_to)
        summary = _release_summary(entry, summary_lookup) if options.release_summary else None
        assembled.append(
            dataclasses.replace(
                entry,
                title=entry.version or UNRELEASED_TITLE,
                compare_from=compare_from,
                compare_to=compare_to,
                href=href,
                summary=summary,
                major=is_major_release(entry.version, older.version if older else None),
            )
        )
    return Timeline(releases=tuple(assembled))


def build_timeline(
    commits: Sequence[Commit],
    options: ResolvedOptions,
    remote: Optional[RemoteInfo] = None,
    *,
    summaries: Mapping[str, str] | None = None,
    branches: Iterable[Sequence[Commit]] = (),
    now: Optional[datetime] = None,
) -> Timeline:
    """Turn raw history into a release timeline.

    ``branches`` holds the histories of included branches; they are merged
    into ``commits`` before the commit limit is applied. ``starting_version``
    trims releases after compare boundaries are assigned. Apart from the date
    of the unreleased entry, which defaults to the current time, the result
    depends only on the arguments.
    """
    if options.latest_version:
        validate_version(options.latest_version)
    if options.starting_version:
        validate_version(options.starting_version, option="starting-version")

    history = merge_branch_commits(commits, branches)
    history = truncate_commits(history, options.commit_limit)
    annotated = annotate_commits(history, options.breaking_pattern, options.issue_pattern)
    entries = group_releases(annotated, options, now=now)
    initial_commit = history[-1].hash if history else None
    timeline = assemble_timeline(
        entries,
        options,
        remote,
        summaries=summaries,
        initial_commit=initial_commit,
    )
    if options.starting_version:
        timeline = Timeline(
            releases=tuple(filter_starting_version(timeline.releases, options.starting_version))
        )
    log_debug(f"assembled {len(timeline)} releases from {len(history)} commits")
    return timeline
