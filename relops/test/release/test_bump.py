from __future__ import annotations

import pytest

from relops.core.result import Err, Ok
from relops.release.bump import (
    BumpDecision,
    NothingToRelease,
    evaluate_bump,
    expected_next_version,
    validate_bump,
)
from relops.release.commits import BumpClassification, CommitMessage
from relops.release.semver import SemVer


def _commits(*subjects: str) -> tuple[CommitMessage, ...]:
    return tuple(CommitMessage(sha=f"{i:040x}", subject=s) for i, s in enumerate(subjects))


@pytest.mark.parametrize(
    ("classification", "expected"),
    [
        (BumpClassification.BREAKING, SemVer(2, 0, 0)),
        (BumpClassification.FEATURE, SemVer(1, 3, 0)),
        (BumpClassification.FIX, SemVer(1, 2, 4)),
        (BumpClassification.OTHER, SemVer(1, 2, 4)),
    ],
)
def test_expected_next_version(classification: BumpClassification, expected: SemVer) -> None:
    assert expected_next_version(SemVer(1, 2, 3), classification) == expected


def test_validate_bump_accepts_expected() -> None:
    assert validate_bump(
        proposed=SemVer(1, 3, 0),
        expected=SemVer(1, 3, 0),
        classification=BumpClassification.FEATURE,
    ) == Ok(None)


def test_validate_bump_mismatch_names_both_versions() -> None:
    result = validate_bump(
        proposed=SemVer(1, 2, 4),
        expected=SemVer(1, 3, 0),
        classification=BumpClassification.FEATURE,
    )
    assert isinstance(result, Err)
    assert result.error.kind == "version_mismatch"
    assert "1.2.4" in result.error.message
    assert "1.3.0" in result.error.message


def test_evaluate_bump_feature() -> None:
    result = evaluate_bump(
        proposed=SemVer(1, 3, 0),
        latest_tag=SemVer(1, 2, 3),
        commits=_commits("fix: a", "feat: b"),
    )
    assert result == Ok(
        BumpDecision(
            current=SemVer(1, 2, 3),
            classification=BumpClassification.FEATURE,
            expected=SemVer(1, 3, 0),
            commit_count=2,
        )
    )


def test_evaluate_bump_without_commits_is_nothing_to_release() -> None:
    result = evaluate_bump(proposed=SemVer(1, 2, 4), latest_tag=SemVer(1, 2, 3), commits=())
    assert result == Ok(NothingToRelease(since_tag="v1.2.3"))


def test_evaluate_bump_without_tag_starts_from_zero() -> None:
    result = evaluate_bump(proposed=SemVer(0, 1, 0), latest_tag=None, commits=_commits("feat: a"))
    assert isinstance(result, Ok)
    assert isinstance(result.value, BumpDecision)
    assert result.value.current == SemVer(0, 0, 0)


def test_evaluate_bump_breaking_refuses_minor() -> None:
    result = evaluate_bump(
        proposed=SemVer(1, 3, 0),
        latest_tag=SemVer(1, 2, 3),
        commits=_commits("feat!: new api"),
    )
    assert isinstance(result, Err)
    assert result.error.kind == "version_mismatch"
    assert "2.0.0" in result.error.message
