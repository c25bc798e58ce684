"""Shared helpers for CLI commands."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, TypeVar

import typer

from relops.core.errors import ErrorCode
from relops.core.result import Err, Result
from relops.output.console import Style
from relops.release.errors import ReleaseError
from relops.release.remote import use_token_for_remote

if TYPE_CHECKING:
    from relops.cli.context import CLIContext

TOKEN_ENV = "GITHUB_PAT"

T = TypeVar("T")
E = TypeVar("E")


def release_error_code(kind: str) -> ErrorCode:
    if kind in {"gh_missing"}:
        return ErrorCode.ENV_ERROR
    if kind in {"git_failed", "gh_failed", "gradle_failed", "webhook_failed"}:
        return ErrorCode.NETWORK_ERROR
    if kind in {"properties_failed"}:
        return ErrorCode.IO_ERROR
    return ErrorCode.USER_ERROR


def exit_on_error(
    result: Result[T, E],
    ctx: CLIContext,
    error_code: ErrorCode | None = None,
) -> None:
    """Exit with error if result is Err, otherwise return.

    A ReleaseError picks its exit code from its kind unless ``error_code``
    is given. Other errors need a 'message' and optional 'hint' attribute.
    """
    if isinstance(result, Err):
        error = result.error
        message: str = getattr(error, "message", str(error))
        hint: str | None = getattr(error, "hint", None)
        ctx.console.error(message)
        if hint:
            ctx.console.print(f"hint: {hint}", Style.DIM)
        if error_code is None:
            error_code = (
                release_error_code(error.kind)
                if isinstance(error, ReleaseError)
                else ErrorCode.USER_ERROR
            )
        raise typer.Exit(code=int(error_code))


def apply_token(ctx: CLIContext, *, dry_run: bool) -> None:
    """Authenticate pushes with ``GITHUB_PAT`` when it is set."""
    token = os.environ.get(TOKEN_ENV)
    if not token or dry_run:
        return
    exit_on_error(
        use_token_for_remote(
            ctx.repo, remote=ctx.settings.remote, token=token, console=ctx.console
        ),
        ctx,
    )
