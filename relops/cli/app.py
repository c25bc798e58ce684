from __future__ import annotations

import os
from pathlib import Path

import typer

from relops import __version__
from relops.cli.commands.index_cmd import index
from relops.cli.commands.notes_cmd import notes_app
from relops.cli.commands.release_cmd import hotfix, release
from relops.cli.context import REPO_ENV
from relops.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(release)
app.command()(hotfix)
app.command()(index)

# Sub-apps
app.add_typer(notes_app, name="notes")


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Show version and exit.",
    ),
    repo: Path | None = typer.Option(
        None,
        "--repo",
        help="Repository root (defaults to $RELOPS_REPO or the current directory)",
    ),
) -> None:
    del version
    if repo is not None:
        try:
            root = repo.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --repo: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not root.is_dir():
            typer.echo(f"error: --repo '{root}' is not a directory", err=True)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

        os.environ[REPO_ENV] = str(root)


def main() -> None:
    app()
