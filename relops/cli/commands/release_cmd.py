from __future__ import annotations

import typer

from relops.cli.commands._helpers import apply_token, exit_on_error
from relops.cli.context import CLIContext, build_context
from relops.core.result import Err, Ok, Result
from relops.release.bump import NothingToRelease
from relops.release.errors import ReleaseError
from relops.release.hotfix import apply_hotfix, new_hotfix_request
from relops.release.model import ReleaseRequest
from relops.release.semver import SemVer, parse_release_version, parse_version
from relops.release.service import run_release


def _parse_request(
    release_version: str,
    next_version: str | None,
    *,
    min_version: str | None,
    dry_run: bool,
) -> Result[ReleaseRequest, ReleaseError]:
    release = parse_release_version(release_version)
    if isinstance(release, Err):
        return release

    following: SemVer | None = None
    if next_version:
        parsed = parse_version(next_version)
        if isinstance(parsed, Err):
            return parsed
        following = parsed.value

    return Ok(
        ReleaseRequest(
            release_version=release.value,
            next_version=following,
            min_version=min_version or None,
            dry_run=dry_run,
        )
    )


def _run_hotfix(
    ctx: CLIContext,
    version: str,
    commits: str,
    *,
    min_version: str | None,
    dry_run: bool,
) -> None:
    request = new_hotfix_request(version, commits, min_version=min_version or None)
    exit_on_error(request, ctx)
    assert isinstance(request, Ok)

    apply_token(ctx, dry_run=dry_run)
    result = apply_hotfix(
        ctx.repo,
        request.value,
        settings=ctx.settings,
        console=ctx.console,
        dry_run=dry_run,
    )
    exit_on_error(result, ctx)


def release(
    release_version: str = typer.Argument(..., help="Version to release, e.g. 1.4.0"),
    next_version: str | None = typer.Argument(
        None,
        help="Next development version for MAJOR/MINOR releases, e.g. 1.5.0-SNAPSHOT",
    ),
    min_version: str | None = typer.Option(
        None, "--min-version", help="Override the minimum compatible core version"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report mutating actions only"),
    commits: str | None = typer.Option(
        None,
        "--commits",
        help="Comma-separated commits to hotfix onto the previous patch tag",
    ),
) -> None:
    """Release a MAJOR, MINOR or PATCH version (or a hotfix with --commits)."""
    ctx = build_context()

    if commits:
        if next_version:
            ctx.console.warning("next version is ignored for a hotfix")
        _run_hotfix(ctx, release_version, commits, min_version=min_version, dry_run=dry_run)
        return

    request = _parse_request(
        release_version, next_version, min_version=min_version, dry_run=dry_run
    )
    exit_on_error(request, ctx)
    assert isinstance(request, Ok)

    apply_token(ctx, dry_run=dry_run)
    result = run_release(ctx.repo, request.value, settings=ctx.settings, console=ctx.console)
    exit_on_error(result, ctx)
    assert isinstance(result, Ok)
    if isinstance(result.value, NothingToRelease):
        ctx.console.success("nothing to release")


def hotfix(
    version: str = typer.Argument(..., help="Hotfix version, e.g. 1.4.2"),
    commits: str = typer.Argument(..., help="Comma-separated commits, applied in order"),
    min_version: str | None = typer.Option(
        None, "--min-version", help="Override the minimum compatible core version"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report mutating actions only"),
) -> None:
    """Cherry-pick commits onto the previous patch tag and publish the new tag."""
    ctx = build_context()
    _run_hotfix(ctx, version, commits, min_version=min_version, dry_run=dry_run)
