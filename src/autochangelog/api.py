"""Python-friendly entry points that wire the engine to its collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

from . import git
from .commits import Commit
from .config import (
    PACKAGE_FILENAME,
    file_exists,
    load_config_content,
    read_config,
    read_package_metadata,
)
from .errors import PackageNotFoundError
from .options import ResolvedOptions, merge_options, parse_arguments
from .remote import RemoteInfo
from .render import get_renderer, render_timeline
from .timeline import build_timeline
from .utils import emit_output, log_debug, log_info, log_success
from .versions import resolve_latest_version

__all__ = ["Collaborators", "generate", "generate_changelog", "run"]


def _fetch_commits(options: ResolvedOptions, branch: Optional[str]) -> list[Commit]:
    return git.fetch_commits(tag_pattern=options.tag_pattern, branch=branch)


def _write_file(path: str, content: str) -> None:
    Path(path).write_text(content, encoding="utf-8")


def _write_stdout(content: str) -> None:
    emit_output(content, newline=False)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Collaborators:
    """I/O capabilities the changelog run depends on.

    Tests replace individual callables instead of patching modules.
    """

    fetch_remote: Callable[[str], Optional[RemoteInfo]] = git.fetch_remote
    fetch_commits: Callable[[ResolvedOptions, Optional[str]], list[Commit]] = _fetch_commits
    fetch_tag_summaries: Callable[[], dict[str, str]] = git.fetch_tag_summaries
    read_package_metadata: Callable[[Path], Optional[dict[str, Any]]] = read_package_metadata
    read_config: Callable[[Path], Optional[dict[str, Any]]] = read_config
    file_exists: Callable[[str], bool] = file_exists
    write_file: Callable[[str, str], None] = _write_file
    write_stdout: Callable[[str], None] = _write_stdout
    now: Callable[[], datetime] = _utc_now


def generate(
    cli_values: Mapping[str, Any],
    collaborators: Collaborators | None = None,
) -> str:
    """Produce and write a changelog from explicit command line values.

    Every error is raised before anything is written, so a failed run never
    leaves a partial changelog behind.
    """
    io = collaborators or Collaborators()

    config_path = cli_values.get("config")
    config = load_config_content(
        config_path,
        package_path=PACKAGE_FILENAME,
        explicit=config_path is not None,
        reader=io.read_config,
        package_reader=io.read_package_metadata,
    )
    options = merge_options(cli_values, config)
    get_renderer(options.template)

    package_metadata: Optional[dict[str, Any]] = None
    if options.package:
        if not io.file_exists(options.package):
            raise PackageNotFoundError(f"Package file '{options.package}' does not exist.")
        package_metadata = io.read_package_metadata(Path(options.package))

    remote = io.fetch_remote(options.remote)
    commits = io.fetch_commits(options, None)
    branches: list[list[Commit]] = []
    for branch in options.include_branch:
        log_debug(f"reading commits from branch {branch}")
        branches.append(io.fetch_commits(options, branch))

    history = [*commits, *(commit for branch_commits in branches for commit in branch_commits)]
    options = resolve_latest_version(options, package_metadata, history)

    summaries = io.fetch_tag_summaries() if options.release_summary else {}
    timeline = build_timeline(
        commits,
        options,
        remote,
        summaries=summaries,
        branches=branches,
        now=io.now(),
    )
    changelog = render_timeline(timeline, options, remote)

    if options.stdout:
        io.write_stdout(changelog)
    else:
        io.write_file(options.output, changelog)
        size = len(changelog.encode("utf-8"))
        log_success(f"{size} bytes written to {options.output}")
    return changelog


def run(argv: Sequence[str], collaborators: Collaborators | None = None) -> str:
    """Parse ``argv`` (without the program name) and generate a changelog."""
    return generate(parse_arguments(argv), collaborators)


def generate_changelog(
    output: str,
    tag_pattern: str = "",
    *,
    argv: Sequence[str] = (),
    collaborators: Collaborators | None = None,
) -> str:
    """Write a changelog to ``output``, optionally limited to matching tags."""
    if not output:
        raise ValueError("output should be a valid path")
    log_info(f"generating changelog at {output}")
    return run([*argv, "--output", output, "--tag-pattern", tag_pattern], collaborators)
