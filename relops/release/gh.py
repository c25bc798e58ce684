"""GitHub access through the ``gh`` CLI.

Reads are retried on transient failures (5xx, 429, timeouts); writes are
attempted once.
"""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass
from pathlib import Path
from time import sleep

from relops.core.result import Err, Ok, Result
from relops.core.structured import as_str_dict, get_int, get_str
from relops.platform.process import ProcessError
from relops.platform.process import run as run_process
from relops.release.errors import ReleaseError
from relops.release.timeouts import (
    GH_READ_RETRY_ATTEMPTS,
    GH_READ_RETRY_DELAY_SECONDS,
    GH_TIMEOUT_SECONDS,
)

_TRANSIENT_MARKERS = (
    "timed out",
    "timeout",
    "connection reset",
    "connection refused",
    "temporarily unavailable",
    "service unavailable",
    "bad gateway",
    "gateway timeout",
    "network is unreachable",
    "http 429",
    "http 500",
    "http 502",
    "http 503",
    "http 504",
)


@dataclass(frozen=True, slots=True)
class GhRelease:
    id: int
    tag: str
    body: str
    html_url: str | None


def _is_transient_gh_error(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    return any(marker in text for marker in _TRANSIENT_MARKERS)


def _is_not_found(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    return "http 404" in text or "not found" in text


def ensure_gh_available() -> Result[None, ReleaseError]:
    if shutil.which("gh") is None:
        return Err(
            ReleaseError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def run_gh_read(
    *,
    cwd: Path,
    cmd: list[str],
    timeout: float = GH_TIMEOUT_SECONDS,
    retry_attempts: int = GH_READ_RETRY_ATTEMPTS,
) -> Result[str, ProcessError]:
    attempts = max(1, retry_attempts)
    result: Result[str, ProcessError] = Err(
        ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr="not run")
    )
    for attempt in range(attempts):
        result = run_process(cmd, cwd=cwd, timeout=timeout)
        if isinstance(result, Ok):
            return result
        if attempt < attempts - 1 and _is_transient_gh_error(result.error):
            sleep(GH_READ_RETRY_DELAY_SECONDS * (attempt + 1))
            continue
        return result
    return result


def _decode_json(text: str, *, endpoint: str) -> Result[object, ReleaseError]:
    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(
            ReleaseError(
                kind="gh_failed",
                message=f"gh api returned invalid JSON: {e}",
                hint=endpoint,
            )
        )
    return Ok(obj)


def _parse_release(obj: object, *, endpoint: str) -> Result[GhRelease, ReleaseError]:
    data = as_str_dict(obj)
    release_id = get_int(data, "id") if data is not None else None
    tag = get_str(data, "tag_name") if data is not None else None
    if data is None or release_id is None or tag is None:
        return Err(
            ReleaseError(kind="gh_failed", message="unexpected release payload", hint=endpoint)
        )
    body = data.get("body")
    return Ok(
        GhRelease(
            id=release_id,
            tag=tag,
            body=body if isinstance(body, str) else "",
            html_url=get_str(data, "html_url"),
        )
    )


def get_release_by_tag(
    *, cwd: Path, repo: str, tag: str
) -> Result[GhRelease | None, ReleaseError]:
    """Release for ``tag`` in ``repo``; Ok(None) when GitHub answers 404."""
    endpoint = f"repos/{repo}/releases/tags/{tag}"
    result = run_gh_read(cwd=cwd, cmd=["gh", "api", endpoint])
    if isinstance(result, Err):
        if _is_not_found(result.error):
            return Ok(None)
        return Err(
            ReleaseError(
                kind="gh_failed",
                message=f"failed to fetch release {tag} from {repo}",
                hint=result.error.stderr.strip() or endpoint,
            )
        )

    obj = _decode_json(result.value, endpoint=endpoint)
    if isinstance(obj, Err):
        return obj
    parsed = _parse_release(obj.value, endpoint=endpoint)
    if isinstance(parsed, Err):
        return parsed
    return Ok(parsed.value)


def update_release_body(
    *, cwd: Path, repo: str, release_id: int, body: str
) -> Result[GhRelease, ReleaseError]:
    endpoint = f"repos/{repo}/releases/{release_id}"
    result = run_process(
        ["gh", "api", "-X", "PATCH", endpoint, "--input", "-"],
        cwd=cwd,
        timeout=GH_TIMEOUT_SECONDS,
        input_text=json.dumps({"body": body}),
    )
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="gh_failed",
                message=f"failed to update release {release_id} in {repo}",
                hint=result.error.stderr.strip() or endpoint,
            )
        )

    obj = _decode_json(result.value, endpoint=endpoint)
    if isinstance(obj, Err):
        return obj
    return _parse_release(obj.value, endpoint=endpoint)
