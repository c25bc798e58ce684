"""Check a proposed release version against the commits it ships."""

from __future__ import annotations

from dataclasses import dataclass

from relops.core.result import Err, Ok, Result
from relops.release.commits import BumpClassification, CommitSet, classify
from relops.release.errors import ReleaseError
from relops.release.semver import SemVer

__all__ = [
    "BumpDecision",
    "NothingToRelease",
    "evaluate_bump",
    "expected_next_version",
    "validate_bump",
]

INITIAL_VERSION = SemVer(0, 0, 0)


@dataclass(frozen=True, slots=True)
class BumpDecision:
    current: SemVer
    classification: BumpClassification
    expected: SemVer
    commit_count: int


@dataclass(frozen=True, slots=True)
class NothingToRelease:
    """No commits since ``since_tag``; the run ends successfully."""

    since_tag: str | None


def expected_next_version(current: SemVer, classification: BumpClassification) -> SemVer:
    match classification:
        case BumpClassification.BREAKING:
            return SemVer(current.major + 1, 0, 0)
        case BumpClassification.FEATURE:
            return SemVer(current.major, current.minor + 1, 0)
        case BumpClassification.FIX | BumpClassification.OTHER:
            return SemVer(current.major, current.minor, current.patch + 1)


def validate_bump(
    *,
    proposed: SemVer,
    expected: SemVer,
    classification: BumpClassification,
) -> Result[None, ReleaseError]:
    if proposed.base() == expected.base():
        return Ok(None)
    return Err(
        ReleaseError(
            kind="version_mismatch",
            message=(
                f"proposed version {proposed.base()} does not match expected {expected} "
                f"for {classification} changes"
            ),
            hint=f"Release {expected}, or check the commit messages since the last tag",
        )
    )


def evaluate_bump(
    *,
    proposed: SemVer,
    latest_tag: SemVer | None,
    commits: CommitSet,
) -> Result[BumpDecision | NothingToRelease, ReleaseError]:
    """Classify ``commits`` and compare the proposed version to the expected one.

    Without a previous tag the current version is 0.0.0 and ``commits`` is the
    whole history.
    """
    if not commits:
        return Ok(NothingToRelease(since_tag=latest_tag.to_tag() if latest_tag else None))

    current = latest_tag or INITIAL_VERSION
    classification = classify(commits)
    expected = expected_next_version(current, classification)

    ok = validate_bump(proposed=proposed, expected=expected, classification=classification)
    if isinstance(ok, Err):
        return ok

    return Ok(
        BumpDecision(
            current=current,
            classification=classification,
            expected=expected,
            commit_count=len(commits),
        )
    )
