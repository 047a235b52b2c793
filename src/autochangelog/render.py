"""Built-in Markdown and JSON templates for release timelines."""

from __future__ import annotations

import json
from datetime import timezone
from typing import Callable, Optional

from .commits import Commit, MergeInfo
from .errors import TemplateNotFoundError
from .options import ResolvedOptions
from .releases import ReleaseEntry, Timeline
from .remote import RemoteInfo
from .utils import format_nice_date, normalize_markdown

__all__ = [
    "BREAKING_PREFIX",
    "TEMPLATES",
    "get_renderer",
    "render_compact",
    "render_json",
    "render_keepachangelog",
    "render_timeline",
    "timeline_to_dict",
]

BREAKING_PREFIX = "**Breaking change:** "

COMPACT_HEADER = (
    "### Changelog\n\n"
    "All notable changes to this project will be documented in this file. "
    "Dates are displayed in UTC."
)
KEEPACHANGELOG_HEADER = (
    "# Changelog\n\n"
    "All notable changes to this project will be documented in this file.\n\n"
    "The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.0.0/), "
    "and this project adheres to "
    "[Semantic Versioning](https://semver.org/spec/v2.0.0.html)."
)

Renderer = Callable[[Timeline, ResolvedOptions, Optional[RemoteInfo]], str]


def _issue_href(
    issue_id: str, options: ResolvedOptions, remote: Optional[RemoteInfo]
) -> Optional[str]:
    if options.issue_url:
        return options.issue_url.replace("{id}", issue_id)
    if remote is not None:
        return remote.issue_url(issue_id)
    return None


def _breaking(commit: Commit) -> str:
    return BREAKING_PREFIX if commit.breaking else ""


def _merge_bullet(commit: Commit, merge: MergeInfo, remote: Optional[RemoteInfo]) -> str:
    bullet = f"- {_breaking(commit)}{merge.message}"
    if remote is not None:
        bullet += f" [`#{merge.id}`]({remote.merge_url(merge.id)})"
    return bullet


def _merge_bullets(release: ReleaseEntry, remote: Optional[RemoteInfo]) -> list[str]:
    return [
        _merge_bullet(commit, commit.merge, remote)
        for commit in release.commits
        if commit.merge is not None
    ]


def _fix_bullet(commit: Commit, options: ResolvedOptions, remote: Optional[RemoteInfo]) -> str:
    bullet = f"- {_breaking(commit)}{commit.subject}"
    for fix in commit.fixes:
        href = fix.url or _issue_href(fix.id, options, remote)
        if href:
            bullet += f" [`#{fix.id}`]({href})"
    return bullet


def _commit_bullet(commit: Commit, remote: Optional[RemoteInfo]) -> str:
    bullet = f"- {_breaking(commit)}{commit.subject}"
    if remote is not None:
        bullet += f" [`{commit.short_hash}`]({remote.commit_url(commit.hash)})"
    return bullet


def _release_date(release: ReleaseEntry) -> str:
    return release.date.astimezone(timezone.utc).date().isoformat()


def render_compact(
    timeline: Timeline, options: ResolvedOptions, remote: Optional[RemoteInfo] = None
) -> str:
    """Render releases as headings followed by merge, fix, and commit bullets."""
    lines: list[str] = [COMPACT_HEADER, ""]

    for release in timeline:
        heading = "###" if release.major else "####"
        if release.href:
            lines.append(f"{heading} [{release.title}]({release.href})")
        else:
            lines.append(f"{heading} {release.title}")
        lines.append("")

        if not release.is_unreleased:
            lines.append(f"> {format_nice_date(release.date.astimezone(timezone.utc))}")
            lines.append("")

        if release.summary:
            lines.append(release.summary)
            lines.append("")

        bullets: list[str] = []
        bullets.extend(_merge_bullets(release, remote))
        bullets.extend(_fix_bullet(commit, options, remote) for commit in release.fixes)
        bullets.extend(_commit_bullet(commit, remote) for commit in release.plain_commits)
        if bullets:
            lines.extend(bullets)
            lines.append("")

    raw = "\n".join(lines).strip()
    normalized = normalize_markdown(raw)
    return f"{normalized}\n"


def render_keepachangelog(
    timeline: Timeline, options: ResolvedOptions, remote: Optional[RemoteInfo] = None
) -> str:
    """Render releases in the keepachangelog.com layout."""
    lines: list[str] = [KEEPACHANGELOG_HEADER, ""]

    for release in timeline:
        title = f"[{release.title}]({release.href})" if release.href else release.title
        if release.is_unreleased:
            lines.append(f"## {title}")
        else:
            lines.append(f"## {title} - {_release_date(release)}")
        lines.append("")

        if release.summary:
            lines.append(release.summary)
            lines.append("")

        sections = (
            ("Merged", _merge_bullets(release, remote)),
            ("Fixed", [_fix_bullet(commit, options, remote) for commit in release.fixes]),
            ("Commits", [_commit_bullet(commit, remote) for commit in release.plain_commits]),
        )
        for section_title, bullets in sections:
            if not bullets:
                continue
            lines.append(f"### {section_title}")
            lines.append("")
            lines.extend(bullets)
            lines.append("")

    raw = "\n".join(lines).strip()
    normalized = normalize_markdown(raw)
    return f"{normalized}\n"


def _commit_to_dict(
    commit: Commit, options: ResolvedOptions, remote: Optional[RemoteInfo]
) -> dict[str, object]:
    merge: Optional[dict[str, object]] = None
    if commit.merge is not None:
        merge = {
            "id": commit.merge.id,
            "message": commit.merge.message,
            "href": remote.merge_url(commit.merge.id) if remote else None,
        }
    return {
        "hash": commit.hash,
        "short_hash": commit.short_hash,
        "subject": commit.subject,
        "message": commit.message,
        "date": commit.date.isoformat(),
        "tag": commit.tag,
        "author": commit.author,
        "email": commit.email,
        "breaking": commit.breaking,
        "issue_ids": list(commit.issue_ids),
        "merge": merge,
        "fixes": [
            {"id": fix.id, "href": fix.url or _issue_href(fix.id, options, remote)}
            for fix in commit.fixes
        ],
        "revert": commit.revert,
        "href": remote.commit_url(commit.hash) if remote else None,
    }


def timeline_to_dict(
    timeline: Timeline, options: ResolvedOptions, remote: Optional[RemoteInfo] = None
) -> list[dict[str, object]]:
    """Return a JSON-serializable representation of the timeline."""
    releases: list[dict[str, object]] = []
    for release in timeline:
        releases.append(
            {
                "version": release.version,
                "title": release.title,
                "date": release.date.isoformat(),
                "is_unreleased": release.is_unreleased,
                "compare_from": release.compare_from,
                "compare_to": release.compare_to,
                "href": release.href,
                "summary": release.summary,
                "major": release.major,
                "commits": [_commit_to_dict(commit, options, remote) for commit in release.commits],
            }
        )
    return releases


def render_json(
    timeline: Timeline, options: ResolvedOptions, remote: Optional[RemoteInfo] = None
) -> str:
    """Render the timeline as indented JSON."""
    return json.dumps(timeline_to_dict(timeline, options, remote), indent=2) + "\n"


TEMPLATES: dict[str, Renderer] = {
    "compact": render_compact,
    "keepachangelog": render_keepachangelog,
    "json": render_json,
}


def get_renderer(name: str) -> Renderer:
    """Return the built-in template called ``name``."""
    renderer = TEMPLATES.get(name)
    if renderer is None:
        available = ", ".join(TEMPLATES)
        raise TemplateNotFoundError(f"Template '{name}' not found. Available templates: {available}")
    return renderer


def render_timeline(
    timeline: Timeline, options: ResolvedOptions, remote: Optional[RemoteInfo] = None
) -> str:
    """Render ``timeline`` with the template named by ``options.template``."""
    return get_renderer(options.template)(timeline, options, remote)
