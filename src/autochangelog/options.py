"""Resolution of command line flags, config file keys, and defaults."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Literal, Mapping, Optional, Sequence, TypeVar, Union

import click
from click.core import ParameterSource

from .config import CONFIG_FILENAME, PACKAGE_FILENAME
from .errors import OptionParseError
from .utils import camel_to_snake, log_debug, log_warning
from .versions import validate_version

F = TypeVar("F", bound=Callable[..., Any])

PROG_NAME = "auto-changelog"
OptionSource = Literal["cli", "config", "default"]

DEFAULT_OUTPUT = "CHANGELOG.md"
DEFAULT_TEMPLATE = "compact"
DEFAULT_REMOTE = "origin"
DEFAULT_ISSUE_PATTERN = r"#(\d+)"
DEFAULT_BREAKING_PATTERN = r"BREAKING[ -]CHANGE"

# Options that only make sense on the command line.
CLI_ONLY_OPTIONS = frozenset({"config", "debug"})


@dataclass(frozen=True)
class Unlimited:
    """Commit limit that keeps the whole history."""

    @property
    def value(self) -> bool:
        return False


@dataclass(frozen=True)
class Limit:
    """Commit limit that keeps the newest ``count`` commits."""

    count: int

    @property
    def value(self) -> int:
        return self.count


CommitLimit = Union[Unlimited, Limit]
UNLIMITED = Unlimited()


@dataclass(frozen=True)
class ResolvedOptions:
    """Options after merging CLI flags, config file keys, and defaults."""

    output: str = DEFAULT_OUTPUT
    config: Optional[str] = None
    template: str = DEFAULT_TEMPLATE
    remote: str = DEFAULT_REMOTE
    package: Optional[str] = None
    latest_version: Optional[str] = None
    starting_version: Optional[str] = None
    unreleased: bool = False
    commit_limit: CommitLimit = UNLIMITED
    issue_url: Optional[str] = None
    issue_pattern: str = DEFAULT_ISSUE_PATTERN
    breaking_pattern: str = DEFAULT_BREAKING_PATTERN
    ignore_commit_pattern: Optional[str] = None
    tag_pattern: Optional[str] = None
    include_branch: tuple[str, ...] = ()
    release_summary: bool = False
    stdout: bool = False
    debug: bool = False
    sources: dict[str, OptionSource] = field(default_factory=dict, compare=False)

    @property
    def config_path(self) -> str:
        return self.config or CONFIG_FILENAME


OPTION_NAMES: tuple[str, ...] = tuple(
    item.name for item in fields(ResolvedOptions) if item.name != "sources"
)


def changelog_options() -> Callable[[F], F]:
    """Attach every changelog flag to a click command.

    Used by the console entry point and by ``parse_arguments`` so both share
    one definition of the accepted flags. Defaults are left to
    ``merge_options`` so that config file values can fill in unset flags.
    """

    def decorator(f: F) -> F:
        options = [
            click.option("--output", "-o", help=f"Output file (default: {DEFAULT_OUTPUT})."),
            click.option(
                "--config",
                "-c",
                help=f"Config file to read (default: {CONFIG_FILENAME}).",
            ),
            click.option(
                "--template",
                "-t",
                help="Template to render: compact, keepachangelog, or json.",
            ),
            click.option("--remote", "-r", help="Git remote used to build links."),
            click.option(
                "--package",
                "-p",
                is_flag=False,
                flag_value=PACKAGE_FILENAME,
                default=None,
                help=f"Use the version of a package file (default: {PACKAGE_FILENAME}).",
            ),
            click.option(
                "--latest-version",
                "-v",
                help="Version label for the newest release.",
            ),
            click.option(
                "--starting-version",
                help="Only include releases from this version onwards.",
            ),
            click.option(
                "--unreleased",
                "-u",
                is_flag=True,
                default=False,
                help="Include an Unreleased section for commits after the latest tag.",
            ),
            click.option(
                "--commit-limit",
                "-l",
                help="Number of commits to read from history, or 'false' for all.",
            ),
            click.option(
                "--issue-url",
                "-i",
                help="Issue URL template with an {id} placeholder.",
            ),
            click.option("--issue-pattern", help="Regular expression matching issue references."),
            click.option(
                "--breaking-pattern",
                "-b",
                help="Regular expression marking breaking changes.",
            ),
            click.option(
                "--ignore-commit-pattern",
                help="Regular expression of commit subjects to leave out.",
            ),
            click.option("--tag-pattern", help="Regular expression of tags that mark releases."),
            click.option(
                "--include-branch",
                multiple=True,
                help="Additional branch to read commits from (repeatable).",
            ),
            click.option(
                "--release-summary",
                is_flag=True,
                default=False,
                help="Show the tag message or tagged commit body as a release summary.",
            ),
            click.option(
                "--stdout",
                is_flag=True,
                default=False,
                help="Write the changelog to stdout instead of a file.",
            ),
            click.option("--debug", "-d", is_flag=True, default=False, help="Enable debug logging."),
        ]
        for option in reversed(options):
            f = option(f)
        return f

    return decorator


@click.command(PROG_NAME, add_help_option=False)
@changelog_options()
def _argument_parser(**_: Any) -> None:
    """Command used only to parse arguments."""


def parse_arguments(argv: Sequence[str]) -> dict[str, Any]:
    """Return the options that were given explicitly on the command line.

    Unknown flags and missing values are rejected with OptionParseError.
    """
    try:
        ctx = _argument_parser.make_context(PROG_NAME, list(argv))
    except click.UsageError as exc:
        raise OptionParseError(exc.format_message()) from exc
    return explicit_parameters(ctx)


def explicit_parameters(ctx: click.Context) -> dict[str, Any]:
    """Return the parameters of ``ctx`` that were set on the command line."""
    explicit: dict[str, Any] = {}
    for name, value in ctx.params.items():
        if ctx.get_parameter_source(name) == ParameterSource.COMMANDLINE:
            explicit[name] = value
    return explicit


def parse_commit_limit(value: object) -> CommitLimit:
    """Convert ``"false"`` or an integer string into a CommitLimit."""
    if isinstance(value, (Unlimited, Limit)):
        return value
    if value is False:
        return UNLIMITED
    if isinstance(value, int) and not isinstance(value, bool):
        count = value
    else:
        text = str(value).strip()
        if text == "false":
            return UNLIMITED
        if not re.fullmatch(r"-?\d+", text):
            raise OptionParseError(
                f"--commit-limit must be a number or 'false', got '{value}'."
            )
        count = int(text)
    if count < 0:
        raise OptionParseError(f"--commit-limit must not be negative, got {count}.")
    return Limit(count)


def _flag_name(name: str) -> str:
    return "--" + name.replace("_", "-")


def _coerce_bool(name: str, value: object) -> bool:
    if not isinstance(value, bool):
        raise OptionParseError(f"Config option '{name}' must be a boolean.")
    return value


def _coerce_optional_str(name: str, value: object) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        raise OptionParseError(f"Config option '{name}' must be a string.")
    text = str(value).strip()
    return text or None


def _coerce_pattern(name: str, value: object) -> Optional[str]:
    pattern = _coerce_optional_str(name, value)
    if pattern is None:
        return None
    try:
        re.compile(pattern)
    except re.error as exc:
        raise OptionParseError(
            f"{_flag_name(name)} is not a valid regular expression: {exc}"
        ) from exc
    return pattern


def _coerce_package(value: object) -> Optional[str]:
    if value is True:
        return PACKAGE_FILENAME
    if value is None or value is False:
        return None
    text = str(value).strip()
    return text or PACKAGE_FILENAME


def _coerce_branches(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        candidates: Sequence[object] = [value]
    elif isinstance(value, (list, tuple)):
        candidates = value
    else:
        raise OptionParseError("Config option 'include_branch' must be a string or a list.")
    branches: list[str] = []
    for item in candidates:
        text = str(item).strip()
        if text and text not in branches:
            branches.append(text)
    return tuple(branches)


def _convert(name: str, value: object) -> object:
    if name == "commit_limit":
        return parse_commit_limit(value)
    if name == "package":
        return _coerce_package(value)
    if name == "include_branch":
        return _coerce_branches(value)
    if name in {"unreleased", "release_summary", "stdout", "debug"}:
        return _coerce_bool(name, value)
    if name in {"issue_pattern", "breaking_pattern", "ignore_commit_pattern", "tag_pattern"}:
        return _coerce_pattern(name, value)
    if name in {"latest_version", "starting_version"}:
        text = _coerce_optional_str(name, value)
        if text is None:
            return None
        return validate_version(text, option=name.replace("_", "-"))
    text = _coerce_optional_str(name, value)
    return text


def normalize_config(config: Mapping[str, Any]) -> dict[str, Any]:
    """Return config values keyed by option name, dropping unknown keys."""
    normalized: dict[str, Any] = {}
    for key, value in config.items():
        name = camel_to_snake(str(key))
        if name not in OPTION_NAMES or name in CLI_ONLY_OPTIONS:
            log_warning(f"ignoring unknown config option '{key}'.")
            continue
        normalized[name] = value
    return normalized


def merge_options(
    cli_values: Mapping[str, Any],
    config: Mapping[str, Any] | None = None,
) -> ResolvedOptions:
    """Merge explicit CLI values over config values over defaults."""
    config_values = normalize_config(config or {})
    defaults = ResolvedOptions()
    values: dict[str, Any] = {}
    sources: dict[str, OptionSource] = {}
    for name in OPTION_NAMES:
        source: OptionSource
        if name in cli_values:
            raw, source = cli_values[name], "cli"
        elif name in config_values:
            raw, source = config_values[name], "config"
        else:
            values[name] = getattr(defaults, name)
            sources[name] = "default"
            continue
        converted = _convert(name, raw)
        if converted is None and getattr(defaults, name) is not None:
            converted = getattr(defaults, name)
        values[name] = converted
        sources[name] = source
    options = ResolvedOptions(**values, sources=sources)
    for name in OPTION_NAMES:
        if sources[name] != "default":
            log_debug(f"option {name}={getattr(options, name)!r} from {sources[name]}")
    return options


def resolve_options(
    argv: Sequence[str],
    config: Mapping[str, Any] | None = None,
) -> ResolvedOptions:
    """Resolve command line arguments and config content into options."""
    return merge_options(parse_arguments(argv), config)
