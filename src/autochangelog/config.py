"""Configuration file and package metadata helpers."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Callable, MutableMapping

import yaml

from .errors import ConfigNotFoundError, OptionParseError
from .utils import log_debug

CONFIG_FILENAME = ".adanic-auto-changelog"
PACKAGE_FILENAME = "package.json"
PACKAGE_CONFIG_KEY = "adanic-auto-changelog"


def file_exists(path: str | Path) -> bool:
    """Return whether ``path`` points at an existing file."""
    return Path(path).is_file()


def _load_mapping(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        try:
            raw = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise OptionParseError(f"Failed to parse {path}: {exc}") from exc
    if raw is None:
        return {}
    if not isinstance(raw, MutableMapping):
        raise OptionParseError(f"{path} must contain a mapping at the top level")
    return dict(raw)


def read_package_metadata(path: str | Path) -> dict[str, Any] | None:
    """Load package metadata such as ``package.json``.

    JSON and YAML files are parsed with PyYAML. ``pyproject.toml`` files are
    read with ``tomllib`` and flattened so that the ``[project]`` table's
    ``version`` is exposed at the top level.
    """
    package_path = Path(path)
    if not package_path.is_file():
        return None
    if package_path.suffix == ".toml":
        with package_path.open("rb") as handle:
            try:
                raw = tomllib.load(handle)
            except tomllib.TOMLDecodeError as exc:
                raise OptionParseError(f"Failed to parse {package_path}: {exc}") from exc
        project = raw.get("project")
        data = dict(project) if isinstance(project, MutableMapping) else {}
        tool = raw.get("tool")
        if isinstance(tool, MutableMapping) and PACKAGE_CONFIG_KEY in tool:
            data[PACKAGE_CONFIG_KEY] = tool[PACKAGE_CONFIG_KEY]
        return data
    return _load_mapping(package_path)


def read_config(path: str | Path) -> dict[str, Any] | None:
    """Load an auto-changelog config file, returning None when absent."""
    config_path = Path(path)
    if not config_path.is_file():
        return None
    return _load_mapping(config_path)


def load_config_content(
    config_path: str | Path | None,
    *,
    package_path: str | Path = PACKAGE_FILENAME,
    explicit: bool = False,
    reader: Callable[[Path], dict[str, Any] | None] = read_config,
    package_reader: Callable[[Path], dict[str, Any] | None] = read_package_metadata,
) -> dict[str, Any]:
    """Merge config from package metadata and the config file.

    The ``adanic-auto-changelog`` key of the package metadata has the lowest
    precedence and is overlaid by the config file. A missing config file is
    only an error when it was requested explicitly.
    """
    merged: dict[str, Any] = {}

    package = package_reader(Path(package_path))
    if package:
        package_config = package.get(PACKAGE_CONFIG_KEY)
        if isinstance(package_config, MutableMapping):
            log_debug(f"using config from {package_path} key '{PACKAGE_CONFIG_KEY}'")
            merged.update(package_config)
        elif package_config is not None:
            raise OptionParseError(
                f"Key '{PACKAGE_CONFIG_KEY}' in {package_path} must be a mapping."
            )

    path = Path(config_path) if config_path else Path(CONFIG_FILENAME)
    content = reader(path)
    if content is None:
        if explicit:
            raise ConfigNotFoundError(f"Config file not found: {path}")
        return merged
    log_debug(f"using config file {path}")
    merged.update(content)
    return merged
