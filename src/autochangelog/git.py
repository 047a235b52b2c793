"""Read commits, tags, and remotes from a local git repository."""

from __future__ import annotations

import re
import subprocess
from pathlib import Path
from typing import Callable, Optional, Sequence

from .commits import Commit
from .errors import GitError
from .remote import RemoteInfo, parse_remote_url
from .utils import coerce_datetime, log_debug, log_warning

COMMIT_SEPARATOR = "__AUTO_CHANGELOG_COMMIT_SEPARATOR__"
MESSAGE_SEPARATOR = "__AUTO_CHANGELOG_MESSAGE_SEPARATOR__"
LOG_FORMAT = f"{COMMIT_SEPARATOR}%H%n%D%n%aI%n%an%n%ae%n{MESSAGE_SEPARATOR}%B{MESSAGE_SEPARATOR}"
TAG_FORMAT = "%(refname:short)%00%(objecttype)%00%(contents)%1e"

_TAG_REF = re.compile(r"(?:^|,\s*)tag: (?P<tag>[^,]+)")

GitRunner = Callable[[Sequence[str]], str]


def run_git(args: Sequence[str], *, cwd: Path | None = None) -> str:
    """Run a git command and return its standard output."""
    command = ["git", *args]
    log_debug(f"running {' '.join(command)}")
    try:
        result = subprocess.run(
            command,
            cwd=str(cwd) if cwd else None,
            check=True,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as exc:
        raise GitError("git is required to read history but was not found in PATH.") from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        raise GitError(
            f"git {args[0]} failed (exit status {exc.returncode})"
            + (f": {stderr}" if stderr else ".")
        ) from exc
    return result.stdout


def fetch_remote(name: str, runner: GitRunner = run_git) -> Optional[RemoteInfo]:
    """Return link templates for the named remote, or None when unavailable."""
    try:
        url = runner(["config", "--get", f"remote.{name}.url"]).strip()
    except GitError:
        url = ""
    if not url:
        log_warning(f"git remote {name} was not found, links will be omitted.")
        return None
    remote = parse_remote_url(url)
    if remote is None:
        log_warning(f"could not parse URL of git remote {name}: {url}")
    return remote


def _pick_tag(refs: str, tag_pattern: Optional[str]) -> Optional[str]:
    tags = [match.group("tag").strip() for match in _TAG_REF.finditer(refs)]
    if not tags:
        return None
    if tag_pattern:
        pattern = re.compile(tag_pattern)
        for tag in tags:
            if pattern.search(tag):
                return tag
    return tags[0]


def parse_log(output: str, tag_pattern: Optional[str] = None) -> list[Commit]:
    """Parse ``git log`` output produced with LOG_FORMAT."""
    commits: list[Commit] = []
    for chunk in output.split(COMMIT_SEPARATOR):
        if not chunk.strip():
            continue
        header, _, remainder = chunk.partition(MESSAGE_SEPARATOR)
        message, _, _ = remainder.partition(MESSAGE_SEPARATOR)
        lines = header.split("\n")
        if len(lines) < 5:
            raise GitError(f"unexpected git log output: {chunk[:80]!r}")
        commit_hash, refs, raw_date, author, email = (line.strip() for line in lines[:5])
        date = coerce_datetime(raw_date)
        if date is None:
            raise GitError(f"commit {commit_hash} has an unreadable date: {raw_date!r}")
        commits.append(
            Commit(
                hash=commit_hash,
                message=message.strip(),
                date=date,
                tag=_pick_tag(refs, tag_pattern),
                author=author,
                email=email,
            )
        )
    return commits


def fetch_commits(
    tag_pattern: Optional[str] = None,
    branch: Optional[str] = None,
    runner: GitRunner = run_git,
) -> list[Commit]:
    """Return the history of HEAD, or of ``branch``, newest first."""
    args = ["log", "--decorate=short", f"--pretty=format:{LOG_FORMAT}"]
    if branch:
        args.append(branch)
    return parse_log(runner(args), tag_pattern)


def parse_tag_summaries(output: str) -> dict[str, str]:
    """Parse ``git for-each-ref`` output produced with TAG_FORMAT."""
    summaries: dict[str, str] = {}
    for record in output.split("\x1e"):
        record = record.strip("\n")
        if not record:
            continue
        name, _, remainder = record.partition("\x00")
        object_type, _, contents = remainder.partition("\x00")
        if object_type != "tag":
            continue
        text = contents.strip()
        if text:
            summaries[name.strip()] = text
    return summaries


def fetch_tag_summaries(runner: GitRunner = run_git) -> dict[str, str]:
    """Return annotated tag messages keyed by tag name."""
    return parse_tag_summaries(runner(["for-each-ref", "refs/tags", f"--format={TAG_FORMAT}"]))
