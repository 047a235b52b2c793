"""Commit records and the annotations derived from their messages."""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from .options import DEFAULT_BREAKING_PATTERN, DEFAULT_ISSUE_PATTERN

SHORT_HASH_LENGTH = 7

MERGE_PATTERNS: tuple[re.Pattern[str], ...] = (
    # GitHub merge commit
    re.compile(r"Merge pull request #(?P<id>\d+) from .+\n\n(?P<message>.+)"),
    # GitHub squash merge
    re.compile(r"^(?P<message>.+) \(#(?P<id>\d+)\)(?:$|\n\n)"),
    # Bitbucket
    re.compile(r"Merged in .+ \(pull request #(?P<id>\d+)\)\n\n(?P<message>.+)"),
    # GitLab
    re.compile(
        r"Merge branch .+ into .+\n\n(?P<message>.+)[\S\s]+See merge request [^!]*!(?P<id>\d+)"
    ),
)

FIX_PATTERN = re.compile(
    r"(?:close[sd]?|fixe?[sd]?|resolve[sd]?)\s"
    r"(?:#(?P<id>\d+)|(?P<url>https?://.+?/(?:issues|pull|pull-requests|merge_requests)/(?P<url_id>\d+)))",
    re.IGNORECASE,
)

REVERT_PATTERN = re.compile(r'^Revert "(?P<subject>.+)"')


@dataclass(frozen=True)
class MergeInfo:
    """Pull or merge request that a commit merged."""

    id: str
    message: str


@dataclass(frozen=True)
class FixReference:
    """Issue closed by a commit, with an explicit URL when one was written."""

    id: str
    url: Optional[str] = None


@dataclass(frozen=True)
class Commit:
    """A single commit as read from history, plus derived annotations."""

    hash: str
    message: str
    date: datetime
    tag: Optional[str] = None
    author: str = ""
    email: str = ""
    breaking: bool = False
    issue_ids: tuple[str, ...] = ()
    merge: Optional[MergeInfo] = None
    fixes: tuple[FixReference, ...] = ()
    revert: Optional[str] = None

    @property
    def subject(self) -> str:
        first_line, _, _ = self.message.strip().partition("\n")
        return first_line.strip()

    @property
    def body(self) -> str:
        _, _, remainder = self.message.strip().partition("\n")
        return remainder.strip()

    @property
    def short_hash(self) -> str:
        return self.hash[:SHORT_HASH_LENGTH]


def _match_id(match: re.Match[str]) -> str:
    if match.re.groups:
        return next((group for group in match.groups() if group), match.group(0))
    return match.group(0)


def find_issue_ids(message: str, issue_pattern: str = DEFAULT_ISSUE_PATTERN) -> tuple[str, ...]:
    """Return issue references in order of appearance, duplicates included."""
    pattern = re.compile(issue_pattern)
    return tuple(_match_id(match) for match in pattern.finditer(message))


def find_merge(message: str) -> Optional[MergeInfo]:
    """Return merge details for known host merge message shapes."""
    for pattern in MERGE_PATTERNS:
        match = pattern.search(message)
        if match:
            return MergeInfo(id=match.group("id"), message=match.group("message").strip())
    return None


def find_fixes(message: str) -> tuple[FixReference, ...]:
    """Return the issues a message closes via ``fixes #1``-style keywords."""
    fixes: list[FixReference] = []
    for match in FIX_PATTERN.finditer(message):
        if match.group("id"):
            fixes.append(FixReference(id=match.group("id")))
        else:
            fixes.append(FixReference(id=match.group("url_id"), url=match.group("url")))
    return tuple(fixes)


def find_revert(message: str) -> Optional[str]:
    match = REVERT_PATTERN.match(message.strip())
    return match.group("subject") if match else None


def annotate_commit(
    commit: Commit,
    breaking_pattern: str = DEFAULT_BREAKING_PATTERN,
    issue_pattern: str = DEFAULT_ISSUE_PATTERN,
) -> Commit:
    """Return a copy of ``commit`` with its derived fields filled in.

    A commit that already arrives flagged as breaking stays breaking; the
    pattern can only add the flag.
    """
    message = commit.message
    breaking = commit.breaking or re.search(breaking_pattern, message) is not None
    return dataclasses.replace(
        commit,
        breaking=breaking,
        issue_ids=find_issue_ids(message, issue_pattern),
        merge=find_merge(message),
        fixes=find_fixes(message),
        revert=find_revert(message),
    )


def annotate_commits(
    commits: Iterable[Commit],
    breaking_pattern: str = DEFAULT_BREAKING_PATTERN,
    issue_pattern: str = DEFAULT_ISSUE_PATTERN,
) -> list[Commit]:
    """Annotate every commit once, keeping the input order."""
    return [annotate_commit(commit, breaking_pattern, issue_pattern) for commit in commits]
