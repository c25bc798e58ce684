"""Announce a released plugin to the plugin index.

For a mono-project build, or for every subproject of a multi-project build,
the Gradle coordinates and compatibility version are posted as JSON to the
indexing webhook together with the git origin of the release.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from relops.core.result import Err, Ok, Result
from relops.output.console import ConsoleProtocol
from relops.platform.http import HttpClient
from relops.release.errors import ReleaseError
from relops.release.gradle import gradle_properties, list_subprojects
from relops.release.model import ReleaseSettings
from relops.release.semver import parse_release_version
from relops.release.remote import strip_credentials
from relops.release.steps import git_failed
from relops.release.vcs import VersionControl


@dataclass(frozen=True, slots=True)
class GitOrigin:
    repository: str | None
    branch: str
    commit: str


@dataclass(frozen=True, slots=True)
class PluginRelease:
    group_id: str | None
    artifact_id: str | None
    version: str | None
    min_core_version: str | None
    origin: GitOrigin

    @property
    def is_complete(self) -> bool:
        return all((self.group_id, self.artifact_id, self.version, self.min_core_version))

    def to_payload(self) -> dict[str, str | None]:
        return {
            "groupId": self.group_id,
            "artifactId": self.artifact_id,
            "version": self.version,
            "minCoreCompatibilityVersion": self.min_core_version,
            "repository": self.origin.repository,
            "branch": self.origin.branch,
            "commit": self.origin.commit,
        }


def resolve_git_origin(vcs: VersionControl, *, remote: str) -> Result[GitOrigin, ReleaseError]:
    """Branch name, or the exact tag when HEAD is detached on a release tag."""
    branch = vcs.current_branch() or vcs.exact_tag()
    if branch is None:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message="not on a branch or a tagged commit",
                hint="Check out the release tag before indexing",
            )
        )

    commit = vcs.head_sha(short=True)
    if isinstance(commit, Err):
        return Err(git_failed(commit.error, message="failed to resolve HEAD"))

    url = vcs.remote_url(remote)
    return Ok(
        GitOrigin(
            repository=strip_credentials(url.value) if isinstance(url, Ok) and url.value else None,
            branch=branch,
            commit=commit.value,
        )
    )


def build_plugin_release(
    props: dict[str, str],
    *,
    min_version_key: str,
    origin: GitOrigin,
) -> Result[PluginRelease, ReleaseError]:
    version = props.get("version") or ""
    min_core = props.get(min_version_key) or ""

    for label, value in (("version", version), (min_version_key, min_core)):
        parsed = parse_release_version(value)
        if isinstance(parsed, Err):
            return Err(
                ReleaseError(
                    kind="invalid_format",
                    message=f"invalid {label} '{value}'",
                    hint="Expected format MAJOR.MINOR.PATCH",
                )
            )

    return Ok(
        PluginRelease(
            group_id=props.get("group") or None,
            artifact_id=props.get("archivesBaseName") or None,
            version=version,
            min_core_version=min_core,
            origin=origin,
        )
    )


def index_plugin_releases(
    *,
    vcs: VersionControl,
    settings: ReleaseSettings,
    http: HttpClient,
    webhook_url: str,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[list[PluginRelease], ReleaseError]:
    root = settings.repo_root
    subprojects = list_subprojects(root=root, gradle=settings.gradle)
    if isinstance(subprojects, Err):
        return subprojects

    if subprojects.value:
        console.info(f"Gradle multi-project build detected ({len(subprojects.value)} projects)")
        projects = subprojects.value
    else:
        console.info("Gradle mono-project build detected")
        projects = [""]

    origin = resolve_git_origin(vcs, remote=settings.remote)
    if isinstance(origin, Err):
        return origin

    indexed: list[PluginRelease] = []
    for project in projects:
        props = gradle_properties(root=root, gradle=settings.gradle, project=project)
        if isinstance(props, Err):
            return props

        release = build_plugin_release(
            props.value, min_version_key=settings.min_version_key, origin=origin.value
        )
        if isinstance(release, Err):
            return release

        payload = release.value.to_payload()
        console.print(f"plugin release to index: {json.dumps(payload)}")

        if dry_run:
            console.skipped("indexing webhook")
            indexed.append(release.value)
            continue
        if not release.value.is_complete:
            console.warning("skipping webhook: some properties are null")
            continue

        posted = http.post_json(webhook_url, payload)
        if isinstance(posted, Err):
            error = posted.error
            return Err(
                ReleaseError(
                    kind="webhook_failed",
                    message=f"indexing webhook failed for {release.value.artifact_id}",
                    hint=f"HTTP {error.status}: {error.message}" if error.status else error.message,
                )
            )
        console.success(f"indexed {release.value.group_id}:{release.value.artifact_id}")
        indexed.append(release.value)

    return Ok(indexed)
