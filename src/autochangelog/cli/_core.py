"""Command line entry point for auto-changelog."""

from __future__ import annotations

import sys
from importlib.metadata import PackageNotFoundError, version as metadata_version
from typing import Any

import click

from .. import __version__ as package_version
from ..api import Collaborators, generate
from ..options import PROG_NAME, changelog_options, explicit_parameters
from ..utils import abort_on_user_interrupt, configure_logging, log_debug

__all__ = ["VERSION_FLAGS", "cli", "main"]

VERSION_FLAGS = {"--version", "-V"}


def _resolve_cli_version() -> str:
    try:
        return metadata_version("autochangelog")
    except PackageNotFoundError:
        return package_version


@click.command(PROG_NAME, context_settings={"help_option_names": ["-h", "--help"]})
@changelog_options()
@click.version_option(_resolve_cli_version(), "--version", "-V")
@click.pass_context
def cli(ctx: click.Context, **params: Any) -> None:
    """Generate a changelog from git tags and commit history."""

    configure_logging(bool(params.get("debug")))
    collaborators = ctx.obj if isinstance(ctx.obj, Collaborators) else None
    cli_values = explicit_parameters(ctx)
    log_debug(f"command line options: {sorted(cli_values)}")
    generate(cli_values, collaborators)


def main(argv: list[str] | None = None) -> int:
    """Entry point for console_scripts."""
    args = list(argv) if argv is not None else list(sys.argv[1:])

    if any(flag in args for flag in VERSION_FLAGS):
        click.echo(_resolve_cli_version())
        return 0

    try:
        cli.main(args=args, prog_name=PROG_NAME, standalone_mode=False)
    except click.ClickException as exc:
        exc.show(file=sys.stderr)
        exit_code = getattr(exc, "exit_code", 1)
        return exit_code if isinstance(exit_code, int) else 1
    except click.exceptions.Exit as exc:
        return exc.exit_code if isinstance(exc.exit_code, int) else 0
    except (KeyboardInterrupt, click.exceptions.Abort) as exc:
        try:
            abort_on_user_interrupt(exc)
        except click.exceptions.Exit as exit_exc:
            exit_code = getattr(exit_exc, "exit_code", 130)
            return exit_code if isinstance(exit_code, int) else 130
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 0
    return 0
