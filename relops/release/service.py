"""Regular release runs (MAJOR, MINOR, PATCH).

The run fetches the remote, reads repository state, asks the branch policy
for a plan, checks the proposed version against the commits being released,
then performs the git and Gradle side effects. Every refusal ends the run
before anything is mutated.
"""

from __future__ import annotations

from dataclasses import dataclass

from relops.core.result import Err, Ok, Result
from relops.output.console import ConsoleProtocol, Style
from relops.release.branch import maintenance_branch, plan_release
from relops.release.bump import BumpDecision, NothingToRelease, evaluate_bump
from relops.release.errors import ReleaseError
from relops.release.gradle import gradle_release, release_command
from relops.release.model import (
    ReleasePlan,
    ReleaseRequest,
    ReleaseSettings,
    ReleaseType,
    RepositoryState,
)
from relops.release.properties import (
    parse_properties,
    require_property,
    set_properties,
)
from relops.release.semver import SemVer, parse_tag, parse_version
from relops.release.steps import git_failed, mutate
from relops.release.vcs import VersionControl

__all__ = [
    "ReleaseOutcome",
    "ensure_maintenance_branch",
    "evaluate_pending_commits",
    "read_repository_state",
    "run_release",
]


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    plan: ReleasePlan
    decision: BumpDecision


def _read_project_version(
    vcs: VersionControl, *, settings: ReleaseSettings, ref: str
) -> Result[SemVer, ReleaseError]:
    source = f"{ref}:{settings.properties_file}"
    text = vcs.show_file(ref, settings.properties_file)
    if isinstance(text, Err):
        return Err(git_failed(text.error, message=f"failed to read {source}"))
    raw = require_property(parse_properties(text.value), settings.version_key, source=source)
    if isinstance(raw, Err):
        return raw

    parsed = parse_version(raw.value)
    if isinstance(parsed, Err):
        return Err(
            ReleaseError(
                kind="invalid_format",
                message=f"invalid project version '{raw.value}' in {source}",
            )
        )
    return parsed


def read_repository_state(
    vcs: VersionControl,
    request: ReleaseRequest,
    *,
    settings: ReleaseSettings,
) -> Result[RepositoryState, ReleaseError]:
    """Snapshot what the branch policy needs, after the remote was fetched.

    The project version is read from the remote default branch, whatever is
    checked out locally: the default branch carries the current snapshot that
    every release type is checked against.
    """
    default_branch = vcs.default_branch(settings.remote)
    if isinstance(default_branch, Err):
        return Err(git_failed(default_branch.error, message="failed to detect the default branch"))

    branch = maintenance_branch(request.release_version, prefix=settings.branch_prefix)
    exists = vcs.remote_branch_exists(settings.remote, branch)
    if isinstance(exists, Err):
        return Err(git_failed(exists.error, message=f"failed to query remote branch {branch}"))

    ref = f"{settings.remote}/{default_branch.value}"
    project_version = _read_project_version(vcs, settings=settings, ref=ref)
    if isinstance(project_version, Err):
        return project_version

    return Ok(
        RepositoryState(
            tag_exists=vcs.tag_exists(request.release_version.to_tag()),
            maintenance_branch_exists=exists.value,
            default_branch=default_branch.value,
            project_version=project_version.value,
        )
    )


def _newest_line_tag(
    vcs: VersionControl, line: SemVer
) -> Result[tuple[str, SemVer] | None, ReleaseError]:
    pattern = f"v{line.major}.{line.minor}.*"
    tags = vcs.list_tags(pattern)
    if isinstance(tags, Err):
        return Err(git_failed(tags.error, message=f"failed to list {pattern} tags"))

    released: list[tuple[SemVer, str]] = []
    for tag in tags.value:
        version = parse_tag(tag)
        if version is not None and version.line == line.line:
            released.append((version, tag))
    if not released:
        return Ok(None)
    version, tag = max(released)
    return Ok((tag, version))


def evaluate_pending_commits(
    vcs: VersionControl, proposed: SemVer, *, line: SemVer | None = None
) -> Result[BumpDecision | NothingToRelease, ReleaseError]:
    """Compare ``proposed`` with the bump implied by commits since the last tag.

    With ``line``, the last tag is the newest ``vMAJOR.MINOR.*`` tag of that
    line even when it is not reachable from HEAD: a maintenance branch is cut
    before its ``.0`` tag is created on the default branch. Without a tag on
    the line, or without ``line``, it is the nearest tag reachable from HEAD.
    """
    found: tuple[str, SemVer] | None = None
    if line is not None:
        on_line = _newest_line_tag(vcs, line)
        if isinstance(on_line, Err):
            return on_line
        found = on_line.value

    if found is None:
        latest = vcs.latest_tag()
        if isinstance(latest, Err):
            return Err(git_failed(latest.error, message="failed to find the latest release tag"))
        if latest.value is not None:
            version = parse_tag(latest.value)
            if version is None:
                return Err(
                    ReleaseError(
                        kind="invalid_format",
                        message=f"latest tag '{latest.value}' is not a vMAJOR.MINOR.PATCH tag",
                    )
                )
            found = (latest.value, version)

    since = found[0] if found is not None else None
    commits = vcs.commits_since(since)
    if isinstance(commits, Err):
        return Err(git_failed(commits.error, message="failed to read commit history"))

    return evaluate_bump(
        proposed=proposed,
        latest_tag=found[1] if found is not None else None,
        commits=commits.value,
    )


def ensure_maintenance_branch(
    vcs: VersionControl,
    plan: ReleasePlan,
    *,
    settings: ReleaseSettings,
    console: ConsoleProtocol,
    dry_run: bool,
) -> Result[None, ReleaseError]:
    """Create and push the maintenance branch for the release line if absent.

    Idempotent: an existing branch is reported and left alone.
    """
    branch = plan.maintenance_branch
    if not plan.must_create_branch:
        console.info(f"branch '{branch}' already exists on {settings.remote}")
        return Ok(None)

    console.info(f"creating release branch: {branch}")
    created = mutate(
        console,
        dry_run=dry_run,
        action=f"git branch {branch} {plan.target_branch}",
        run=lambda: vcs.create_branch(branch, plan.target_branch),
    )
    if isinstance(created, Err):
        return created
    return mutate(
        console,
        dry_run=dry_run,
        action=f"git push {settings.remote} {branch}",
        run=lambda: vcs.push(settings.remote, branch),
    )


def _switch_to_target(
    vcs: VersionControl, plan: ReleasePlan, *, settings: ReleaseSettings
) -> Result[None, ReleaseError]:
    branch = plan.target_branch
    for step in (
        lambda: vcs.checkout(branch),
        lambda: vcs.pull(settings.remote, branch),
    ):
        result = step()
        if isinstance(result, Err):
            return Err(git_failed(result.error, message=f"failed to update branch {branch}"))
    return Ok(None)


def _commit_versions(
    vcs: VersionControl,
    updates: dict[str, str],
    *,
    settings: ReleaseSettings,
    console: ConsoleProtocol,
    message: str,
    dry_run: bool,
) -> Result[None, ReleaseError]:
    summary = ", ".join(f"{k}={v}" for k, v in updates.items())
    path = settings.properties_path
    if dry_run:
        console.skipped(f"update {settings.properties_file} with {summary}")
        console.skipped(f"git commit -m \"{message}\"")
        return Ok(None)

    console.print(f"updating {settings.properties_file} with {summary}", Style.DIM)
    changed = set_properties(path, updates)
    if isinstance(changed, Err):
        return changed
    if not changed.value:
        console.info(f"{settings.properties_file} already up to date")
        return Ok(None)

    return mutate(
        console,
        dry_run=False,
        action=f"git commit -m \"{message}\"",
        run=lambda: vcs.commit_files([path], message),
    )


def _release_patch(
    vcs: VersionControl,
    plan: ReleasePlan,
    request: ReleaseRequest,
    *,
    settings: ReleaseSettings,
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    version = plan.release_version
    committed = _commit_versions(
        vcs,
        settings.version_updates(version, request.min_version),
        settings=settings,
        console=console,
        message=f"chore(version): update to version '{version}'",
        dry_run=request.dry_run,
    )
    if isinstance(committed, Err):
        return committed

    console.info(f"creating annotated tag: {plan.tag}")
    steps = (
        (
            f"git tag -a {plan.tag} -m {plan.tag}",
            lambda: vcs.create_annotated_tag(plan.tag, plan.tag),
        ),
        (
            f"git push {settings.remote} {plan.target_branch}",
            lambda: vcs.push(settings.remote, plan.target_branch),
        ),
        (f"git push {settings.remote} {plan.tag}", lambda: vcs.push(settings.remote, plan.tag)),
    )
    for action, run in steps:
        result = mutate(console, dry_run=request.dry_run, action=action, run=run)
        if isinstance(result, Err):
            return result
    return Ok(None)


def _release_from_default(
    vcs: VersionControl,
    plan: ReleasePlan,
    request: ReleaseRequest,
    *,
    settings: ReleaseSettings,
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    if request.min_version:
        committed = _commit_versions(
            vcs,
            {settings.min_version_key: request.min_version},
            settings=settings,
            console=console,
            message=f"chore(version): set {settings.min_version_key} to '{request.min_version}'",
            dry_run=request.dry_run,
        )
        if isinstance(committed, Err):
            return committed

    branched = ensure_maintenance_branch(
        vcs, plan, settings=settings, console=console, dry_run=request.dry_run
    )
    if isinstance(branched, Err):
        return branched

    assert plan.next_version is not None
    console.info(f"running Gradle release (creates and pushes tag {plan.tag})")
    if request.dry_run:
        cmd = release_command(settings.gradle, plan.release_version, plan.next_version)
        console.skipped(" ".join(cmd))
        return Ok(None)
    return gradle_release(
        root=settings.repo_root,
        gradle=settings.gradle,
        release=plan.release_version,
        next_version=plan.next_version,
    )


def run_release(
    vcs: VersionControl,
    request: ReleaseRequest,
    *,
    settings: ReleaseSettings,
    console: ConsoleProtocol,
) -> Result[ReleaseOutcome | NothingToRelease, ReleaseError]:
    """Plan, validate and perform a MAJOR, MINOR or PATCH release.

    Returns:
        Ok(ReleaseOutcome) when released (or, on a dry run, fully simulated),
        Ok(NothingToRelease) when no commit landed since the last tag,
        Err(ReleaseError) for every refusal.
    """
    if not vcs.is_clean():
        return Err(
            ReleaseError(
                kind="invalid_input",
                message="working tree has uncommitted changes",
                hint="Commit or stash them before releasing",
            )
        )

    fetched = vcs.fetch(settings.remote)
    if isinstance(fetched, Err):
        return Err(git_failed(fetched.error, message=f"failed to fetch from {settings.remote}"))

    state = read_repository_state(vcs, request, settings=settings)
    if isinstance(state, Err):
        return state

    planned = plan_release(request, state.value, branch_prefix=settings.branch_prefix)
    if isinstance(planned, Err):
        return planned
    plan = planned.value

    console.header(f"{plan.release_type} release {plan.release_version}")
    console.print(f"next version: {plan.next_version or '-'}", Style.DIM)
    console.print(f"branch: {plan.target_branch}", Style.DIM)
    console.print(f"dry run: {str(request.dry_run).lower()}", Style.DIM)

    switched = _switch_to_target(vcs, plan, settings=settings)
    if isinstance(switched, Err):
        return switched

    line = plan.release_version if plan.release_type is ReleaseType.PATCH else None
    evaluated = evaluate_pending_commits(vcs, plan.release_version, line=line)
    if isinstance(evaluated, Err):
        return evaluated
    if isinstance(evaluated.value, NothingToRelease):
        since = evaluated.value.since_tag or "the beginning of history"
        console.info(f"nothing to release: no commits since {since}")
        return Ok(evaluated.value)
    decision = evaluated.value
    console.print(
        f"{decision.commit_count} commit(s) since {decision.current.to_tag()}: "
        f"{decision.classification} -> {decision.expected}",
        Style.DIM,
    )

    if plan.release_type is ReleaseType.PATCH:
        done = _release_patch(vcs, plan, request, settings=settings, console=console)
    else:
        done = _release_from_default(vcs, plan, request, settings=settings, console=console)
    if isinstance(done, Err):
        return done

    suffix = " (dry-run)" if request.dry_run else ""
    console.success(f"{plan.release_type} release {plan.release_version}{suffix} completed")
    return Ok(ReleaseOutcome(plan=plan, decision=decision))
