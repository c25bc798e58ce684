from __future__ import annotations

import typer

from relops.cli.commands._helpers import exit_on_error
from relops.cli.context import build_context
from relops.core.errors import ErrorCode
from relops.output.console import Style
from relops.release.gh import ensure_gh_available
from relops.release.notes import merge_release_notes

notes_app = typer.Typer(add_completion=False, no_args_is_help=True)


@notes_app.command("merge")
def merge(
    tag: str = typer.Argument(..., help="Release tag, e.g. v1.4.0"),
    target: str | None = typer.Option(
        None, "--target", help="Repository receiving the merged notes (owner/name)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the merged notes only"),
) -> None:
    """Merge the release notes of every configured source into the target release."""
    ctx = build_context()
    exit_on_error(ensure_gh_available(), ctx)

    notes = ctx.config.notes
    repo = target or notes.target
    if not repo:
        ctx.console.error("no target repository for release notes")
        ctx.console.print("hint: pass --target or set notes.target in relops.toml", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    result = merge_release_notes(
        cwd=ctx.settings.repo_root,
        tag=tag,
        target=repo,
        sources=notes.sources,
        console=ctx.console,
        dry_run=dry_run,
    )
    exit_on_error(result, ctx)
