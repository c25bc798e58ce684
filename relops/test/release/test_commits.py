from __future__ import annotations

import pytest

from relops.release.commits import BumpClassification, CommitMessage, classify, classify_commit


def _commit(subject: str, body: str = "") -> CommitMessage:
    return CommitMessage(sha="0" * 40, subject=subject, body=body)


@pytest.mark.parametrize(
    ("subject", "body", "expected"),
    [
        ("fix: npe in parser", "", BumpClassification.FIX),
        ("fix(core): npe in parser", "", BumpClassification.FIX),
        ("feat: add retries", "", BumpClassification.FEATURE),
        ("feat(ui): dark mode", "", BumpClassification.FEATURE),
        ("feat!: drop java 11", "", BumpClassification.BREAKING),
        ("feat(api)!: new payload", "", BumpClassification.BREAKING),
        ("refactor: tidy", "BREAKING CHANGE: config keys renamed", BumpClassification.BREAKING),
        ("chore: this is a breaking change", "", BumpClassification.BREAKING),
        ("chore(deps): bump gradle", "", BumpClassification.OTHER),
        ("docs: typo", "", BumpClassification.OTHER),
        ("fixes the build", "", BumpClassification.OTHER),
        ("feature: not conventional", "", BumpClassification.OTHER),
    ],
)
def test_classify_commit(subject: str, body: str, expected: BumpClassification) -> None:
    assert classify_commit(_commit(subject, body)) is expected


def test_classify_takes_highest() -> None:
    commits = [_commit("fix: a"), _commit("feat: b"), _commit("docs: c")]
    assert classify(commits) is BumpClassification.FEATURE


def test_classify_breaking_dominates() -> None:
    commits = [_commit("feat: a"), _commit("fix: b", "BREAKING CHANGE: c")]
    assert classify(commits) is BumpClassification.BREAKING


def test_classify_empty_is_other() -> None:
    assert classify([]) is BumpClassification.OTHER


def test_short_sha() -> None:
    assert CommitMessage(sha="abcdef0123456789", subject="x").short_sha == "abcdef01"
