"""Authenticated pushes through a personal access token."""

from __future__ import annotations

import re

from relops.core.result import Err, Ok, Result
from relops.output.console import ConsoleProtocol
from relops.release.errors import ReleaseError
from relops.release.steps import git_failed
from relops.release.vcs import VersionControl

_HTTPS_RE = re.compile(r"^https://([^@/]*@)?")


def token_remote_url(url: str, token: str) -> str | None:
    """``url`` with ``token`` as credentials; None for non-HTTPS remotes."""
    if _HTTPS_RE.match(url) is None:
        return None
    bare = _HTTPS_RE.sub("", url, count=1)
    return f"https://x-access-token:{token}@{bare}"


def use_token_for_remote(
    vcs: VersionControl,
    *,
    remote: str,
    token: str,
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    """Rewrite ``remote`` so pushes to protected branches authenticate with ``token``."""
    url = vcs.remote_url(remote)
    if isinstance(url, Err):
        return Err(git_failed(url.error, message=f"failed to read URL of remote {remote}"))

    authed = token_remote_url(url.value, token)
    if authed is None:
        console.warning(f"remote {remote} is not HTTPS; token not applied")
        return Ok(None)

    console.info("using GITHUB_PAT for authentication")
    updated = vcs.set_remote_url(remote, authed)
    if isinstance(updated, Err):
        # The message may echo the URL, which now carries the token.
        return Err(ReleaseError(kind="git_failed", message=f"failed to update remote {remote}"))
    return Ok(None)


def strip_credentials(url: str) -> str:
    return _HTTPS_RE.sub("https://", url, count=1)
