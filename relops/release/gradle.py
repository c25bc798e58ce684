"""Gradle wrapper invocations: the release task and project property queries."""

from __future__ import annotations

import re
from pathlib import Path

from relops.core.result import Err, Ok, Result
from relops.platform.process import run as run_process
from relops.platform.process import run_streaming
from relops.release.errors import ReleaseError
from relops.release.semver import SemVer
from relops.release.timeouts import GRADLE_QUERY_TIMEOUT_SECONDS

_SUBPROJECT_RE = re.compile(r"""project\s+'(:?)([^']+)'""")


def release_command(gradle: str, release: SemVer, next_version: SemVer) -> list[str]:
    return [
        gradle,
        "release",
        "-Prelease.useAutomaticVersion=true",
        f"-Prelease.releaseVersion={release}",
        f"-Prelease.newVersion={next_version}",
    ]


def gradle_release(
    *,
    root: Path,
    gradle: str,
    release: SemVer,
    next_version: SemVer,
) -> Result[None, ReleaseError]:
    """Run the release task; it tags, pushes and moves to ``next_version``."""
    cmd = release_command(gradle, release, next_version)
    result = run_streaming(cmd, cwd=root)
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="gradle_failed",
                message=f"gradle release failed (exit {result.error.returncode})",
                hint=" ".join(cmd),
            )
        )
    return Ok(None)


def parse_gradle_properties(output: str) -> dict[str, str]:
    """Parse ``key: value`` lines printed by ``gradle properties``."""
    out: dict[str, str] = {}
    for line in output.splitlines():
        key, sep, value = line.partition(":")
        if not sep or not key or key != key.strip():
            continue
        out[key] = value.strip()
    return out


def parse_subprojects(value: str) -> list[str]:
    """Subproject names from ``[project ':a', project ':b']``."""
    return [m.group(2) for m in _SUBPROJECT_RE.finditer(value)]


def gradle_properties(
    *, root: Path, gradle: str, project: str = ""
) -> Result[dict[str, str], ReleaseError]:
    task = f"{project}:properties" if project else "properties"
    result = run_process([gradle, "-q", task], cwd=root, timeout=GRADLE_QUERY_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="gradle_failed",
                message=f"gradle {task} failed",
                hint=result.error.detail(),
            )
        )
    return Ok(parse_gradle_properties(result.value))


def list_subprojects(*, root: Path, gradle: str) -> Result[list[str], ReleaseError]:
    props = gradle_properties(root=root, gradle=gradle)
    if isinstance(props, Err):
        return props
    return Ok(parse_subprojects(props.value.get("subprojects", "")))
