"""Branch policy: which branch a release runs on, and whether it may run.

PATCH releases (no next version) run on an existing maintenance branch
``releases/vMAJOR.MINOR.x``. MAJOR and MINOR releases run on the default
branch and create the maintenance branch for their line when it is absent.
"""

from __future__ import annotations

from relops.core.config import DEFAULT_BRANCH_PREFIX
from relops.core.result import Err, Ok, Result
from relops.release.errors import ReleaseError
from relops.release.model import (
    BranchState,
    ReleasePlan,
    ReleaseRequest,
    ReleaseType,
    RepositoryState,
)
from relops.release.semver import SNAPSHOT_SUFFIX, SemVer

__all__ = [
    "check_coherence",
    "determine_release_type",
    "maintenance_branch",
    "plan_release",
]


def maintenance_branch(version: SemVer, *, prefix: str = DEFAULT_BRANCH_PREFIX) -> str:
    return f"{prefix}{version.major}.{version.minor}.x"


def determine_release_type(
    release: SemVer, next_version: SemVer | None
) -> Result[ReleaseType, ReleaseError]:
    if next_version is None:
        return Ok(ReleaseType.PATCH)

    if not next_version.is_snapshot:
        return Err(
            ReleaseError(
                kind="invalid_format",
                message=f"next version must be a snapshot: '{next_version}'",
                hint=f"Use {next_version}{SNAPSHOT_SUFFIX}",
            )
        )
    if next_version.base() <= release.base():
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"next version {next_version} must be greater than release {release}",
            )
        )

    if release.patch != 0:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=(
                    f"unable to determine release type from version '{release}' "
                    f"with next version '{next_version}'"
                ),
                hint="MAJOR/MINOR releases end in .0; omit the next version for a PATCH release",
            )
        )
    if release.minor == 0:
        return Ok(ReleaseType.MAJOR)
    return Ok(ReleaseType.MINOR)


def check_coherence(
    release_type: ReleaseType,
    release: SemVer,
    project_version: SemVer,
) -> Result[None, ReleaseError]:
    """Check the release against the version recorded in the build metadata.

    A snapshot project refuses patches on its own line and on any newer line;
    a stable project refuses only newer lines.
    """
    if release_type is not ReleaseType.PATCH:
        if not project_version.is_snapshot:
            return Err(
                ReleaseError(
                    kind="incoherent_version",
                    message=(
                        f"{release_type} release {release} requires a SNAPSHOT project version, "
                        f"found {project_version}"
                    ),
                )
            )
        if project_version.base() != release.base():
            return Err(
                ReleaseError(
                    kind="incoherent_version",
                    message=(
                        f"{release_type} release {release} must match the current snapshot "
                        f"base version {project_version.base()}"
                    ),
                    hint=f"Release {project_version.base()} or update the project version first",
                )
            )
        return Ok(None)

    if project_version.is_snapshot:
        if release.line >= project_version.line:
            return Err(
                ReleaseError(
                    kind="incoherent_version",
                    message=(
                        f"PATCH release {release} targets line {release.major}.{release.minor}, "
                        f"which is not released yet (current version {project_version})"
                    ),
                    hint="Patch releases only apply to already released lines",
                )
            )
        return Ok(None)

    if release.line > project_version.line:
        return Err(
            ReleaseError(
                kind="incoherent_version",
                message=(
                    f"PATCH release {release} targets future line {release.major}.{release.minor} "
                    f"(current version {project_version})"
                ),
            )
        )
    return Ok(None)


def plan_release(
    request: ReleaseRequest,
    state: RepositoryState,
    *,
    branch_prefix: str = DEFAULT_BRANCH_PREFIX,
) -> Result[ReleasePlan, ReleaseError]:
    release = request.release_version
    tag = release.to_tag()

    release_type = determine_release_type(release, request.next_version)
    if isinstance(release_type, Err):
        return release_type

    if state.tag_exists:
        return Err(
            ReleaseError(
                kind="release_exists",
                message=f"tag '{tag}' already exists",
                hint="Pick a new version",
            )
        )

    coherent = check_coherence(release_type.value, release, state.project_version)
    if isinstance(coherent, Err):
        return coherent

    branch = maintenance_branch(release, prefix=branch_prefix)

    if release_type.value is ReleaseType.PATCH:
        if not state.maintenance_branch_exists:
            return Err(
                ReleaseError(
                    kind="branch_missing",
                    message=f"branch '{branch}' does not exist",
                    hint=f"Release {release.major}.{release.minor}.0 first to create it",
                )
            )
        return Ok(
            ReleasePlan(
                release_version=release,
                next_version=None,
                release_type=ReleaseType.PATCH,
                branch_state=BranchState.ON_MAINTENANCE_BRANCH,
                target_branch=branch,
                maintenance_branch=branch,
                must_create_branch=False,
            )
        )

    return Ok(
        ReleasePlan(
            release_version=release,
            next_version=request.next_version,
            release_type=release_type.value,
            branch_state=BranchState.ON_DEFAULT_BRANCH,
            target_branch=state.default_branch,
            maintenance_branch=branch,
            must_create_branch=not state.maintenance_branch_exists,
        )
    )
