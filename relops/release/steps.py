"""Shared building blocks for release runs: git error mapping and dry-run gating."""

from __future__ import annotations

from collections.abc import Callable

from relops.core.result import Err, Ok, Result
from relops.git.repository import GitError
from relops.output.console import ConsoleProtocol, Style
from relops.release.errors import ReleaseError


def git_failed(error: GitError, *, message: str | None = None) -> ReleaseError:
    return ReleaseError(
        kind="git_failed",
        message=message or f"git {error.command} failed",
        hint=error.message or None,
    )


def mutate(
    console: ConsoleProtocol,
    *,
    dry_run: bool,
    action: str,
    run: Callable[[], Result[None, GitError]],
) -> Result[None, ReleaseError]:
    """Run a mutating git action, or only report it during a dry run."""
    if dry_run:
        console.skipped(action)
        return Ok(None)

    console.print(action, Style.DIM)
    result = run()
    if isinstance(result, Err):
        return Err(git_failed(result.error, message=f"{action}: failed"))
    return Ok(None)
