from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from relops.core.config import (
    DEFAULT_BRANCH_PREFIX,
    DEFAULT_GRADLE,
    DEFAULT_MIN_VERSION_KEY,
    DEFAULT_PROPERTIES_FILE,
    DEFAULT_REMOTE,
    DEFAULT_VERSION_KEY,
    ReleaseConfig,
)
from relops.release.semver import SemVer


class ReleaseType(StrEnum):
    MAJOR = "MAJOR"
    MINOR = "MINOR"
    PATCH = "PATCH"


class BranchState(StrEnum):
    """Where a release executes once the branch policy accepted it."""

    ON_DEFAULT_BRANCH = "default"
    ON_MAINTENANCE_BRANCH = "maintenance"


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """Validated CLI input for a regular (non-hotfix) release."""

    release_version: SemVer
    # Present for MAJOR/MINOR releases; absent means PATCH.
    next_version: SemVer | None = None
    min_version: str | None = None
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class RepositoryState:
    """What the branch policy needs to know about the repository."""

    tag_exists: bool
    maintenance_branch_exists: bool
    default_branch: str
    project_version: SemVer


@dataclass(frozen=True, slots=True)
class ReleasePlan:
    release_version: SemVer
    next_version: SemVer | None
    release_type: ReleaseType
    branch_state: BranchState
    target_branch: str
    maintenance_branch: str
    must_create_branch: bool

    @property
    def tag(self) -> str:
        return self.release_version.to_tag()


@dataclass(frozen=True, slots=True)
class ReleaseSettings:
    """Repository-specific names resolved from ``relops.toml``."""

    repo_root: Path
    remote: str = DEFAULT_REMOTE
    branch_prefix: str = DEFAULT_BRANCH_PREFIX
    properties_file: str = DEFAULT_PROPERTIES_FILE
    version_key: str = DEFAULT_VERSION_KEY
    min_version_key: str = DEFAULT_MIN_VERSION_KEY
    gradle: str = DEFAULT_GRADLE

    @classmethod
    def from_config(cls, repo_root: Path, config: ReleaseConfig) -> ReleaseSettings:
        return cls(
            repo_root=repo_root,
            remote=config.remote,
            branch_prefix=config.branch_prefix,
            properties_file=config.properties_file,
            version_key=config.version_key,
            min_version_key=config.min_version_key,
            gradle=config.gradle,
        )

    @property
    def properties_path(self) -> Path:
        return self.repo_root / self.properties_file

    def version_updates(self, version: SemVer, min_version: str | None) -> dict[str, str]:
        """Property updates that record ``version`` (and an optional min version)."""
        updates = {self.version_key: str(version)}
        if min_version:
            updates[self.min_version_key] = min_version
        return updates
