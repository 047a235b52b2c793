"""End-to-end tests for changelog runs with injected collaborators."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import pytest

from autochangelog import Collaborators, generate_changelog, run
from autochangelog.commits import Commit
from autochangelog.errors import (
    ConfigNotFoundError,
    InvalidVersionError,
    OptionParseError,
    PackageNotFoundError,
    TemplateNotFoundError,
)
from autochangelog.options import ResolvedOptions
from autochangelog.remote import RemoteInfo, parse_remote_url

from helpers import make_commit

NOW = datetime(2016, 1, 2, 9, 30, tzinfo=timezone.utc)


@dataclass
class FakeRepository:
    """In-memory stand-in for git, the file system, and stdout."""

    commits: list[Commit]
    branches: dict[str, list[Commit]] = field(default_factory=dict)
    remote_url: Optional[str] = "https://github.com/user/repo"
    package: Optional[dict[str, Any]] = None
    config: Optional[dict[str, Any]] = None
    tag_summaries: dict[str, str] = field(default_factory=dict)
    written: dict[str, str] = field(default_factory=dict)
    stdout: list[str] = field(default_factory=list)
    branch_requests: list[Optional[str]] = field(default_factory=list)

    def fetch_remote(self, name: str) -> Optional[RemoteInfo]:
        return parse_remote_url(self.remote_url) if self.remote_url else None

    def fetch_commits(self, options: ResolvedOptions, branch: Optional[str]) -> list[Commit]:
        self.branch_requests.append(branch)
        if branch is None:
            return self.commits
        return self.branches.get(branch, [])

    def fetch_tag_summaries(self) -> dict[str, str]:
        return self.tag_summaries

    def read_package_metadata(self, path: Path) -> Optional[dict[str, Any]]:
        return self.package

    def read_config(self, path: Path) -> Optional[dict[str, Any]]:
        return self.config

    def file_exists(self, path: str) -> bool:
        return self.package is not None

    def write_file(self, path: str, content: str) -> None:
        self.written[path] = content

    def write_stdout(self, content: str) -> None:
        self.stdout.append(content)

    def collaborators(self) -> Collaborators:
        return Collaborators(
            fetch_remote=self.fetch_remote,
            fetch_commits=self.fetch_commits,
            fetch_tag_summaries=self.fetch_tag_summaries,
            read_package_metadata=self.read_package_metadata,
            read_config=self.read_config,
            file_exists=self.file_exists,
            write_file=self.write_file,
            write_stdout=self.write_stdout,
            now=lambda: NOW,
        )


def test_default_run_writes_changelog(history: list[Commit]) -> None:
    repo = FakeRepository(history)

    changelog = run([], repo.collaborators())

    assert repo.written == {"CHANGELOG.md": changelog}
    assert "[v1.0.0](https://github.com/user/repo/compare/v0.1.0...v1.0.0)" in changelog
    assert "Unreleased work on the parser" not in changelog


def test_run_is_repeatable(history: list[Commit]) -> None:
    repo = FakeRepository(history)

    assert run(["--unreleased"], repo.collaborators()) == run(
        ["--unreleased"], repo.collaborators()
    )


def test_package_version_becomes_latest_release(history: list[Commit]) -> None:
    repo = FakeRepository(history, package={"name": "demo", "version": "2.0.0"})

    changelog = run(["--package"], repo.collaborators())

    assert "[v2.0.0](https://github.com/user/repo/compare/v1.0.0...v2.0.0)" in changelog
    assert changelog.index("v2.0.0") < changelog.index("Unreleased work on the parser")


def test_package_version_without_tag_prefix() -> None:
    commits = [
        make_commit(3, "Add exporter", day=3),
        make_commit(2, "Release 1.0.0", day=2, tag="1.0.0"),
        make_commit(1, "Initial commit", day=1),
    ]
    repo = FakeRepository(commits, package={"version": "2.0.0"})

    changelog = run(["--package"], repo.collaborators())

    assert "2.0.0" in changelog
    assert "v2.0.0" not in changelog


def test_missing_package_file_raises(history: list[Commit]) -> None:
    repo = FakeRepository(history)

    with pytest.raises(PackageNotFoundError) as excinfo:
        run(["--package", "missing.json"], repo.collaborators())

    assert excinfo.value.message == "Package file 'missing.json' does not exist."
    assert repo.written == {}


def test_cli_output_beats_config_sources(history: list[Commit]) -> None:
    repo = FakeRepository(
        history,
        package={
            "adanic-auto-changelog": {"output": "from-package.md", "template": "keepachangelog"}
        },
        config={"output": "from-config.md"},
    )

    run([], repo.collaborators())
    run(["--output", "from-cli.md"], repo.collaborators())

    assert set(repo.written) == {"from-config.md", "from-cli.md"}
    assert repo.written["from-cli.md"].startswith("# Changelog")


def test_cli_output_beats_dotfile_config(history: list[Commit]) -> None:
    repo = FakeRepository(history)
    requested: list[Path] = []

    def read_config(path: Path) -> Optional[dict[str, Any]]:
        requested.append(path)
        if path == Path(".adanic-auto-changelog"):
            return {"output": "should-not-be-this.md"}
        return None

    collaborators = dataclasses.replace(repo.collaborators(), read_config=read_config)

    run(["--output", "should-be-this.md"], collaborators)
    run([], collaborators)

    assert requested == [Path(".adanic-auto-changelog")] * 2
    assert set(repo.written) == {"should-be-this.md", "should-not-be-this.md"}


def test_package_config_applies_without_config_file(history: list[Commit]) -> None:
    repo = FakeRepository(
        history, package={"adanic-auto-changelog": {"output": "from-package.md"}}
    )

    run([], repo.collaborators())

    assert list(repo.written) == ["from-package.md"]


def test_explicit_config_must_exist(history: list[Commit]) -> None:
    repo = FakeRepository(history)

    with pytest.raises(ConfigNotFoundError):
        run(["--config", "missing.json"], repo.collaborators())


def test_unreleased_and_included_branch(history: list[Commit]) -> None:
    backport = [make_commit(8, "Backport fix", day=22, tag="v0.2.0")]
    repo = FakeRepository(history, branches={"release/0.x": backport})

    changelog = run(
        ["--unreleased", "--include-branch", "release/0.x"], repo.collaborators()
    )

    assert repo.branch_requests == [None, "release/0.x"]
    assert "[Unreleased](https://github.com/user/repo/compare/v1.0.0...HEAD)" in changelog
    assert "[v0.2.0](https://github.com/user/repo/compare/v0.1.0...v0.2.0)" in changelog


def test_release_summary(history: list[Commit]) -> None:
    repo = FakeRepository(history)

    changelog = run(["--release-summary"], repo.collaborators())

    assert "This is my major release description." in changelog
    assert "- And a bullet point" in changelog


def test_breaking_changes_are_marked(history: list[Commit]) -> None:
    repo = FakeRepository(history)

    changelog = run([], repo.collaborators())

    assert "**Breaking change:** Some breaking change" in changelog


def test_unknown_template_fails_before_reading_history(history: list[Commit]) -> None:
    repo = FakeRepository(history)

    with pytest.raises(TemplateNotFoundError):
        run(["--template", "missing"], repo.collaborators())

    assert repo.branch_requests == []
    assert repo.written == {}


def test_invalid_latest_version_raises(history: list[Commit]) -> None:
    repo = FakeRepository(history)

    with pytest.raises(InvalidVersionError):
        run(["--latest-version", "invalid"], repo.collaborators())


def test_unknown_flag_raises(history: list[Commit]) -> None:
    repo = FakeRepository(history)

    with pytest.raises(OptionParseError):
        run(["--colour"], repo.collaborators())


def test_stdout_skips_file_output(history: list[Commit]) -> None:
    repo = FakeRepository(history)

    changelog = run(["--stdout", "--template", "json"], repo.collaborators())

    assert repo.stdout == [changelog]
    assert repo.written == {}
    assert changelog.lstrip().startswith("[")


def test_missing_remote_omits_links(history: list[Commit]) -> None:
    repo = FakeRepository(history, remote_url=None)

    changelog = run([], repo.collaborators())

    assert "### v1.0.0" in changelog
    assert "](" not in changelog


def test_generate_changelog_writes_output(history: list[Commit]) -> None:
    repo = FakeRepository(
        [make_commit(9, "Nightly build", day=30, tag="nightly"), *history[1:]]
    )

    changelog = generate_changelog("docs/CHANGES.md", r"^v", collaborators=repo.collaborators())

    assert repo.written == {"docs/CHANGES.md": changelog}
    assert "[v1.0.0](" in changelog
    assert "[nightly](" not in changelog


def test_generate_changelog_requires_output() -> None:
    with pytest.raises(ValueError, match="output should be a valid path"):
        generate_changelog("")
