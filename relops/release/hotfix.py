"""Hotfix releases: replay explicit commits onto the previous patch tag.

``vX.Y.Z`` is built from ``vX.Y.(Z-1)`` plus the given commits, applied in
order. The run is all-or-nothing: the first commit that does not apply
cleanly rolls the working state back to the base tag and no tag is created.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from relops.core.result import Err, Ok, Result
from relops.output.console import ConsoleProtocol
from relops.release.errors import ReleaseError
from relops.release.model import ReleaseSettings
from relops.release.properties import set_properties
from relops.release.semver import SemVer, parse_release_version
from relops.release.steps import git_failed
from relops.release.vcs import VersionControl

__all__ = [
    "HotfixRequest",
    "apply_hotfix",
    "checkpoint",
    "new_hotfix_request",
    "parse_commit_ids",
]


@dataclass(frozen=True, slots=True)
class HotfixRequest:
    target_version: SemVer
    base_tag: str
    commit_ids: tuple[str, ...]
    min_version: str | None = None

    @property
    def tag(self) -> str:
        return self.target_version.to_tag()


def parse_commit_ids(text: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in text.split(",") if part.strip())


def new_hotfix_request(
    version_text: str,
    commit_ids_text: str,
    *,
    min_version: str | None = None,
) -> Result[HotfixRequest, ReleaseError]:
    version = parse_release_version(version_text)
    if isinstance(version, Err):
        return version

    base = version.value.previous_patch()
    if base is None:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"hotfix version {version.value} has no previous patch to build from",
                hint="A hotfix version must have a patch number greater than 0",
            )
        )

    commit_ids = parse_commit_ids(commit_ids_text)
    if not commit_ids:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message="no commit ids given for hotfix",
                hint="Pass a comma-separated list, e.g. abc123,def456",
            )
        )

    return Ok(
        HotfixRequest(
            target_version=version.value,
            base_tag=base.to_tag(),
            commit_ids=commit_ids,
            min_version=min_version,
        )
    )


@dataclass
class Checkpoint:
    """Rollback scope opened by :func:`checkpoint`."""

    ref: str
    committed: bool = False
    created_tags: list[str] = field(default_factory=list)

    def track_tag(self, tag: str) -> None:
        self.created_tags.append(tag)

    def commit(self) -> None:
        self.committed = True


@contextmanager
def checkpoint(
    vcs: VersionControl, ref: str, *, console: ConsoleProtocol
) -> Iterator[Checkpoint]:
    """Scope whose exit resets the working state to ``ref`` unless committed.

    Tags created inside the scope are deleted on rollback.
    """
    cp = Checkpoint(ref=ref)
    try:
        yield cp
    finally:
        if not cp.committed:
            for tag in reversed(cp.created_tags):
                deleted = vcs.delete_tag(tag)
                if isinstance(deleted, Err):
                    console.error(f"rollback: failed to delete tag {tag}: {deleted.error.message}")
            reset = vcs.reset_hard(ref)
            if isinstance(reset, Err):
                console.error(f"rollback: failed to reset to {ref}: {reset.error.message}")
            else:
                console.warning(f"rolled back to {ref}")


def _preflight(vcs: VersionControl, request: HotfixRequest) -> Result[None, ReleaseError]:
    if not vcs.is_clean():
        return Err(
            ReleaseError(
                kind="invalid_input",
                message="working tree has uncommitted changes",
                hint="Commit or stash them before a hotfix; rollback resets the tree",
            )
        )
    if not vcs.tag_exists(request.base_tag):
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"base tag '{request.base_tag}' does not exist",
                hint=f"A hotfix for {request.target_version} is built on {request.base_tag}",
            )
        )
    if vcs.tag_exists(request.tag):
        return Err(
            ReleaseError(
                kind="release_exists",
                message=f"tag '{request.tag}' already exists",
                hint="Pick a new version",
            )
        )
    return Ok(None)


def apply_hotfix(
    vcs: VersionControl,
    request: HotfixRequest,
    *,
    settings: ReleaseSettings,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[str, ReleaseError]:
    """Build and publish the hotfix tag.

    Returns:
        Ok(tag) once the tag is pushed (or would be, on a dry run).
        Err(ReleaseError) with kind ``conflict`` naming the commit that failed
        to apply; the working state is then back at the base tag.
    """
    ok = _preflight(vcs, request)
    if isinstance(ok, Err):
        return ok

    console.header(f"Hotfix {request.tag} from {request.base_tag}")
    for sha in request.commit_ids:
        console.print(f"  {sha}")

    if dry_run:
        console.skipped(f"git checkout --detach {request.base_tag}")
        for sha in request.commit_ids:
            console.skipped(f"git cherry-pick -x {sha}")
        console.skipped(f"update {settings.properties_file} to {request.target_version}")
        console.skipped(f"git tag -a {request.tag} -m {request.tag}")
        console.skipped(f"git push {settings.remote} {request.tag}")
        return Ok(request.tag)

    detached = vcs.checkout_detached(request.base_tag)
    if isinstance(detached, Err):
        return Err(git_failed(detached.error, message=f"failed to check out {request.base_tag}"))

    with checkpoint(vcs, request.base_tag, console=console) as cp:
        for sha in request.commit_ids:
            picked = vcs.cherry_pick(sha)
            if isinstance(picked, Err):
                aborted = vcs.abort_cherry_pick()
                if isinstance(aborted, Err):
                    console.warning(f"cherry-pick --abort failed: {aborted.error.message}")
                return Err(
                    ReleaseError(
                        kind="conflict",
                        message=f"commit {sha} does not apply cleanly on {request.base_tag}",
                        hint="Resolve the conflict manually or leave this commit out",
                    )
                )
            console.success(f"applied {sha}")

        recorded = _record_version(vcs, request, settings=settings)
        if isinstance(recorded, Err):
            return recorded

        tagged = vcs.create_annotated_tag(request.tag, request.tag)
        if isinstance(tagged, Err):
            return Err(git_failed(tagged.error, message=f"failed to create tag {request.tag}"))
        cp.track_tag(request.tag)

        pushed = vcs.push(settings.remote, request.tag)
        if isinstance(pushed, Err):
            return Err(git_failed(pushed.error, message=f"failed to push tag {request.tag}"))

        cp.commit()

    console.success(f"hotfix {request.tag} published")
    return Ok(request.tag)


def _record_version(
    vcs: VersionControl, request: HotfixRequest, *, settings: ReleaseSettings
) -> Result[None, ReleaseError]:
    """Commit the hotfix version into the build metadata, when it changed."""
    path = settings.properties_path
    if not path.exists():
        return Ok(None)

    changed = set_properties(
        path, settings.version_updates(request.target_version, request.min_version)
    )
    if isinstance(changed, Err):
        return changed
    if not changed.value:
        return Ok(None)

    committed = vcs.commit_files(
        [path], f"chore(version): update to version '{request.target_version}'"
    )
    if isinstance(committed, Err):
        return Err(git_failed(committed.error, message="failed to commit version update"))
    return Ok(None)
