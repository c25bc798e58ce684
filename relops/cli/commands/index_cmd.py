from __future__ import annotations

import typer

from relops.cli.commands._helpers import exit_on_error
from relops.cli.context import build_context
from relops.platform.http import UrllibHttpClient
from relops.release.index import index_plugin_releases
from relops.release.timeouts import WEBHOOK_TIMEOUT_SECONDS


def index(
    webhook_url: str = typer.Argument(..., help="Plugin index webhook URL"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print payloads only"),
) -> None:
    """Announce the checked-out plugin release(s) to the plugin index."""
    ctx = build_context()
    result = index_plugin_releases(
        vcs=ctx.repo,
        settings=ctx.settings,
        http=UrllibHttpClient(timeout=WEBHOOK_TIMEOUT_SECONDS),
        webhook_url=webhook_url,
        console=ctx.console,
        dry_run=dry_run,
    )
    exit_on_error(result, ctx)
