from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from relops.core.config import Config, load_config_or_default
from relops.core.errors import ErrorCode
from relops.core.result import Err
from relops.git.repository import Repository
from relops.output.console import ConsoleProtocol, RichConsole
from relops.release.model import ReleaseSettings
from relops.release.vcs import VersionControl

REPO_ENV = "RELOPS_REPO"


@dataclass(frozen=True, slots=True)
class CLIContext:
    repo: VersionControl
    config: Config
    settings: ReleaseSettings
    console: ConsoleProtocol


def resolve_repo_root() -> Path:
    override = os.environ.get(REPO_ENV)
    if override:
        return Path(override).expanduser().resolve()
    return Path.cwd()


def build_context() -> CLIContext:
    root = resolve_repo_root()
    repo = Repository(root)
    if not repo.exists():
        typer.echo(f"error: not a git repository: {root}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    config_result = load_config_or_default(root)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    config = config_result.value

    return CLIContext(
        repo=repo,
        config=config,
        settings=ReleaseSettings.from_config(root, config.release),
        console=RichConsole(),
    )
