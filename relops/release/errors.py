from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "invalid_format",
    "version_mismatch",
    "branch_missing",
    "release_exists",
    "conflict",
    "incoherent_version",
    "invalid_input",
    "git_failed",
    "gh_missing",
    "gh_failed",
    "release_not_found",
    "gradle_failed",
    "properties_failed",
    "webhook_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical failure payload for every release operation.

    ``message`` names the rule that was violated and the offending values;
    ``hint`` says what a human should do next.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
