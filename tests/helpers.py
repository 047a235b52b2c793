"""Builders shared by the test modules."""

from __future__ import annotations

from datetime import datetime, timezone

from autochangelog.commits import Commit


def make_commit(
    index: int,
    message: str,
    *,
    day: int,
    tag: str | None = None,
    month: int = 12,
    year: int = 2015,
) -> Commit:
    """Build a commit with a predictable hash and a UTC date."""
    return Commit(
        hash=f"{index:02d}" * 20,
        message=message,
        date=datetime(year, month, day, 12, 0, 0, tzinfo=timezone.utc),
        tag=tag,
        author="Octo Cat",
        email="octocat@example.com",
    )
