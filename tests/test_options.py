"""Tests for command line and config option resolution."""

from __future__ import annotations

import pytest

from autochangelog.errors import InvalidVersionError, OptionParseError
from autochangelog.options import (
    DEFAULT_OUTPUT,
    UNLIMITED,
    Limit,
    ResolvedOptions,
    merge_options,
    parse_arguments,
    parse_commit_limit,
    resolve_options,
)


def test_defaults_without_arguments() -> None:
    options = resolve_options([])

    assert options == ResolvedOptions()
    assert options.output == DEFAULT_OUTPUT
    assert options.template == "compact"
    assert options.remote == "origin"
    assert options.commit_limit == UNLIMITED
    assert options.commit_limit.value is False
    assert options.include_branch == ()
    assert set(options.sources.values()) == {"default"}


def test_commit_limit_accepts_numbers_and_false() -> None:
    assert resolve_options(["--commit-limit", "10"]).commit_limit.value == 10
    assert resolve_options(["-l", "0"]).commit_limit == Limit(0)
    assert resolve_options(["--commit-limit", "false"]).commit_limit.value is False


@pytest.mark.parametrize("value", ["ten", "1.5", "False", "-3"])
def test_commit_limit_rejects_other_values(value: str) -> None:
    with pytest.raises(OptionParseError):
        parse_commit_limit(value)


def test_commit_limit_from_config_values() -> None:
    assert parse_commit_limit(False) == UNLIMITED
    assert parse_commit_limit(25) == Limit(25)
    with pytest.raises(OptionParseError):
        parse_commit_limit(True)


def test_short_and_long_flags_are_equivalent() -> None:
    url = "https://issues.example.com/browse/{id}"
    assert resolve_options(["-i", url]) == resolve_options(["--issue-url", url])
    assert resolve_options(["-o", "HISTORY.md"]).output == "HISTORY.md"
    assert resolve_options(["-u"]).unreleased is True
    assert resolve_options(["-v", "v2.0.0"]).latest_version == "v2.0.0"


def test_parse_arguments_returns_only_explicit_values() -> None:
    values = parse_arguments(["--output", "HISTORY.md", "--unreleased"])

    assert values == {"output": "HISTORY.md", "unreleased": True}


def test_unknown_flag_is_rejected() -> None:
    with pytest.raises(OptionParseError):
        parse_arguments(["--no-such-flag"])


def test_missing_flag_value_is_rejected() -> None:
    with pytest.raises(OptionParseError):
        parse_arguments(["--output"])


def test_invalid_latest_version_is_rejected() -> None:
    with pytest.raises(InvalidVersionError) as excinfo:
        resolve_options(["--latest-version", "invalid"])

    assert "--latest-version must be a valid semver version" in excinfo.value.message


def test_invalid_pattern_is_rejected() -> None:
    with pytest.raises(OptionParseError):
        resolve_options(["--tag-pattern", "v(["])


def test_package_flag_without_value_uses_package_json() -> None:
    assert resolve_options(["--package"]).package == "package.json"
    assert resolve_options(["--package", "pyproject.toml"]).package == "pyproject.toml"
    assert resolve_options([]).package is None


def test_include_branch_is_repeatable() -> None:
    options = resolve_options(["--include-branch", "release/1.x", "--include-branch", "beta"])

    assert options.include_branch == ("release/1.x", "beta")


def test_cli_values_take_precedence_over_config() -> None:
    options = resolve_options(
        ["--output", "cli-output.md"],
        {"output": "config-output.md", "template": "keepachangelog"},
    )

    assert options.output == "cli-output.md"
    assert options.template == "keepachangelog"
    assert options.sources["output"] == "cli"
    assert options.sources["template"] == "config"
    assert options.sources["remote"] == "default"


def test_config_keys_may_use_camel_case() -> None:
    options = merge_options(
        {},
        {
            "commitLimit": 5,
            "releaseSummary": True,
            "includeBranch": ["beta", "beta"],
            "tag_pattern": r"^v\d",
        },
    )

    assert options.commit_limit == Limit(5)
    assert options.release_summary is True
    assert options.include_branch == ("beta",)
    assert options.tag_pattern == r"^v\d"


def test_unknown_and_cli_only_config_keys_are_ignored() -> None:
    options = merge_options({}, {"notAnOption": 1, "debug": True, "config": "other"})

    assert options.debug is False
    assert options.config is None


def test_config_booleans_must_be_booleans() -> None:
    with pytest.raises(OptionParseError):
        merge_options({}, {"unreleased": "yes"})


def test_empty_string_falls_back_to_default() -> None:
    options = merge_options({"template": "  "})

    assert options.template == "compact"


def test_config_path_defaults_to_dotfile() -> None:
    assert ResolvedOptions().config_path == ".adanic-auto-changelog"
    assert ResolvedOptions(config="custom.yml").config_path == "custom.yml"
