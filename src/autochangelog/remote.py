"""Remote hosts and the links they provide for commits, issues, and releases."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

_SCP_LIKE_URL = re.compile(r"^(?:(?P<user>[^@/]+)@)?(?P<host>[^:/]+):(?P<path>[^/].*)$")


@dataclass(frozen=True)
class RemoteInfo:
    """Base URL of a repository plus host-specific link templates.

    Templates use ``{hash}``, ``{id}``, ``{from}``, and ``{to}`` placeholders.
    """

    url: str
    commit_template: str
    issue_template: str
    merge_template: str
    compare_template: str

    def commit_url(self, commit_hash: str) -> str:
        return self.commit_template.replace("{hash}", commit_hash)

    def issue_url(self, issue_id: str) -> str:
        return self.issue_template.replace("{id}", issue_id)

    def merge_url(self, merge_id: str) -> str:
        return self.merge_template.replace("{id}", merge_id)

    def compare_url(self, start: str, end: str) -> str:
        return self.compare_template.replace("{from}", start).replace("{to}", end)


def _split_remote_url(remote_url: str) -> Optional[tuple[str, str, str]]:
    """Return (scheme, host, repository path) for a git remote URL."""
    text = remote_url.strip()
    if not text:
        return None
    if "://" not in text:
        match = _SCP_LIKE_URL.match(text)
        if not match:
            return None
        return "https", match.group("host"), match.group("path")
    parsed = urlparse(text)
    if not parsed.hostname:
        return None
    scheme = "http" if parsed.scheme == "http" else "https"
    return scheme, parsed.hostname, parsed.path


def parse_remote_url(remote_url: str) -> Optional[RemoteInfo]:
    """Build a RemoteInfo for GitHub, GitLab, Bitbucket, Azure DevOps, or others."""
    parts = _split_remote_url(remote_url)
    if parts is None:
        return None
    scheme, host, path = parts
    repository = path.strip("/")
    if repository.endswith(".git"):
        repository = repository[: -len(".git")]
    if not repository:
        return None
    url = f"{scheme}://{host}/{repository}"

    if "gitlab" in host:
        return RemoteInfo(
            url=url,
            commit_template=f"{url}/commit/{{hash}}",
            issue_template=f"{url}/issues/{{id}}",
            merge_template=f"{url}/merge_requests/{{id}}",
            compare_template=f"{url}/compare/{{from}}...{{to}}",
        )
    if "bitbucket" in host:
        return RemoteInfo(
            url=url,
            commit_template=f"{url}/commits/{{hash}}",
            issue_template=f"{url}/issues/{{id}}",
            merge_template=f"{url}/pull-requests/{{id}}",
            compare_template=f"{url}/compare/{{to}}..{{from}}",
        )
    if "dev.azure.com" in host or "visualstudio.com" in host:
        # ssh.dev.azure.com:v3/org/project/repo and dev.azure.com/org/project/_git/repo
        segments = [segment for segment in repository.split("/") if segment and segment != "v3"]
        if "_git" in segments:
            segments.remove("_git")
        if len(segments) >= 3:
            org, project, repo = segments[0], segments[1], segments[-1]
            base = f"https://dev.azure.com/{org}/{project}"
            url = f"{base}/_git/{repo}"
            return RemoteInfo(
                url=url,
                commit_template=f"{url}/commit/{{hash}}",
                issue_template=f"{base}/_workitems/edit/{{id}}",
                merge_template=f"{url}/pullrequest/{{id}}",
                compare_template=f"{url}/branches?baseVersion=GT{{to}}&targetVersion=GT{{from}}&_a=commits",
            )
    return RemoteInfo(
        url=url,
        commit_template=f"{url}/commit/{{hash}}",
        issue_template=f"{url}/issues/{{id}}",
        merge_template=f"{url}/pull/{{id}}",
        compare_template=f"{url}/compare/{{from}}...{{to}}",
    )
