"""Shared utilities for logging, output, and value coercion."""

from __future__ import annotations

import logging
import sys
from datetime import date, datetime, timezone
from typing import NoReturn, Optional

import click
import mdformat

CHECKMARK = "\033[92;1m✔\033[0m"
CROSS = "\033[31m✘\033[0m"
INFO = "\033[94;1mi\033[0m"
WARNING = "○"
DEBUG_PREFIX = "\033[95m◆\033[0m"

CHECKMARK_PREFIX = f"{CHECKMARK} "
CROSS_PREFIX = f"{CROSS} "
INFO_PREFIX = f"{INFO} "
WARNING_PREFIX = f"{WARNING} "
DEBUG_PREFIX_WITH_SPACE = f"{DEBUG_PREFIX} "

_LOGGER_NAME = "autochangelog"
_LOGGER = logging.getLogger(_LOGGER_NAME)


def configure_logging(debug: bool = False) -> logging.Logger:
    """Configure the shared logger used across the CLI."""
    level = logging.DEBUG if debug else logging.INFO
    _LOGGER.setLevel(level)
    while _LOGGER.handlers:
        handler = _LOGGER.handlers.pop()
        handler.close()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(level)
    _LOGGER.addHandler(handler)
    _LOGGER.propagate = False
    return _LOGGER


def _log(prefix: str, message: str, level: int) -> None:
    logger = logging.getLogger(_LOGGER_NAME)
    lines = message.splitlines() or [""]
    for line in lines:
        if line:
            logger.log(level, f"{prefix}{line}")
        else:
            logger.log(level, prefix.rstrip())


def log_info(message: str) -> None:
    """Log an informational message with the standardized prefix."""
    _log(INFO_PREFIX, message, logging.INFO)


def log_success(message: str) -> None:
    """Log a success message with the standardized prefix."""
    _log(CHECKMARK_PREFIX, message, logging.INFO)


def log_error(message: str) -> None:
    """Log an error message with the standardized prefix."""
    _log(CROSS_PREFIX, message, logging.ERROR)


def log_warning(message: str) -> None:
    """Log a warning message with the standardized prefix."""
    _log(WARNING_PREFIX, message, logging.WARNING)


def log_debug(message: str) -> None:
    """Log a debug message with the standardized prefix."""
    _log(DEBUG_PREFIX_WITH_SPACE, message, logging.DEBUG)


def abort_on_user_interrupt(exc: BaseException | None = None) -> NoReturn:
    """Log a standardized cancellation message and exit the command."""

    log_error("operation cancelled by user (Ctrl+C).")
    raise click.exceptions.Exit(130) from exc


def emit_output(content: str, *, newline: bool = True) -> None:
    """Emit raw command output to stdout for machine consumption."""
    click.echo(content, nl=newline, err=False)


def coerce_datetime(value: object) -> Optional[datetime]:
    """Return a UTC-aware datetime object for ISO-like inputs, preserving None.

    Accepts datetime objects, date objects (converted to midnight UTC),
    and ISO-formatted strings (with or without time component, with or
    without a trailing ``Z``). All returned datetimes are timezone-aware.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt
    except ValueError:
        pass
    # git's %ai format separates the offset with a space
    try:
        dt = datetime.strptime(text, "%Y-%m-%d %H:%M:%S %z")
        return dt
    except ValueError:
        return None


def format_nice_date(value: datetime) -> str:
    """Return a long-form date such as ``15 December 2015``."""
    return f"{value.day} {value:%B %Y}"


def normalize_markdown(text: str) -> str:
    """Return Markdown with paragraphs normalized to single lines."""
    if not text.strip():
        return ""
    formatted = mdformat.text(text, options={"wrap": "no"})
    return formatted.rstrip("\n")


def camel_to_snake(name: str) -> str:
    """Convert ``camelCase`` config keys into ``snake_case`` option names."""
    chars: list[str] = []
    for char in name:
        if char.isupper():
            chars.append("_")
            chars.append(char.lower())
        elif char == "-":
            chars.append("_")
        else:
            chars.append(char)
    return "".join(chars).lstrip("_")
