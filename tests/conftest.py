"""Shared fixtures for auto-changelog tests."""

from __future__ import annotations

import pytest

from autochangelog.commits import Commit
from autochangelog.remote import RemoteInfo, parse_remote_url

from helpers import make_commit


@pytest.fixture
def history() -> list[Commit]:
    """History with one unreleased commit above two tagged releases."""
    return [
        make_commit(1, "Unreleased work on the parser", day=29),
        make_commit(
            2,
            "Release v1.0.0\n\nThis is my major release description.\n\n- And a bullet point",
            day=28,
            tag="v1.0.0",
        ),
        make_commit(
            3,
            "Merge pull request #5 from user/feature\n\n"
            "Some breaking change\n\nBREAKING CHANGE: the config format changed",
            day=27,
        ),
        make_commit(4, "Fix crash on empty input\n\nFixes #4", day=26),
        make_commit(5, "Release v0.1.0", day=20, tag="v0.1.0"),
        make_commit(6, "Initial commit", day=15),
    ]


@pytest.fixture
def github_remote() -> RemoteInfo:
    remote = parse_remote_url("https://github.com/user/repo.git")
    assert remote is not None
    return remote
