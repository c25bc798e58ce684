"""Conventional Commits classification of a range of commits."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum
from typing import TypeAlias

__all__ = [
    "BumpClassification",
    "CommitMessage",
    "CommitSet",
    "classify",
    "classify_commit",
]

_BREAKING_PHRASE = "breaking change"
_BREAKING_FEAT_RE = re.compile(r"^feat(\([^)]*\))?!:")
_FEAT_RE = re.compile(r"^feat(\([^)]*\))?:")
_FIX_RE = re.compile(r"^fix(\([^)]*\))?:")


class BumpClassification(IntEnum):
    """Severity of a commit range; higher values dominate."""

    OTHER = 0
    FIX = 1
    FEATURE = 2
    BREAKING = 3

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class CommitMessage:
    sha: str
    subject: str
    body: str = ""

    @property
    def short_sha(self) -> str:
        return self.sha[:8]


CommitSet: TypeAlias = tuple[CommitMessage, ...]


def classify_commit(commit: CommitMessage) -> BumpClassification:
    subject = commit.subject.strip().casefold()
    text = f"{subject}\n{commit.body.casefold()}"

    if _BREAKING_PHRASE in text or _BREAKING_FEAT_RE.match(subject):
        return BumpClassification.BREAKING
    if _FEAT_RE.match(subject):
        return BumpClassification.FEATURE
    if _FIX_RE.match(subject):
        return BumpClassification.FIX
    return BumpClassification.OTHER


def classify(commits: Iterable[CommitMessage]) -> BumpClassification:
    """Highest severity across the whole set, OTHER when empty."""
    result = BumpClassification.OTHER
    for commit in commits:
        result = max(result, classify_commit(commit))
        if result is BumpClassification.BREAKING:
            break
    return result
