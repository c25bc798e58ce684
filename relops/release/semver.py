"""Semantic version parsing for release and snapshot versions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from relops.core.result import Err, Ok, Result
from relops.release.errors import ReleaseError

SNAPSHOT_SUFFIX = "-SNAPSHOT"

_VERSION_RE = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int
    is_snapshot: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if self.major < 0 or self.minor < 0 or self.patch < 0:
            raise ValueError(f"negative version component: {self.major}.{self.minor}.{self.patch}")

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        return text + SNAPSHOT_SUFFIX if self.is_snapshot else text

    @property
    def line(self) -> tuple[int, int]:
        """The ``(major, minor)`` pair identifying a maintenance line."""
        return (self.major, self.minor)

    def base(self) -> SemVer:
        return SemVer(self.major, self.minor, self.patch)

    def to_tag(self) -> str:
        return f"v{self.major}.{self.minor}.{self.patch}"

    def previous_patch(self) -> SemVer | None:
        if self.patch == 0:
            return None
        return SemVer(self.major, self.minor, self.patch - 1)


def parse_version(text: str) -> Result[SemVer, ReleaseError]:
    """Parse ``MAJOR.MINOR.PATCH`` with an optional ``-SNAPSHOT`` suffix.

    Missing components are an error; nothing is zero-filled.
    """
    raw = text.strip()
    snapshot = raw.endswith(SNAPSHOT_SUFFIX)
    if snapshot:
        raw = raw[: -len(SNAPSHOT_SUFFIX)]

    m = _VERSION_RE.match(raw)
    if m is None:
        return Err(
            ReleaseError(
                kind="invalid_format",
                message=f"invalid version: '{text}'",
                hint="Expected MAJOR.MINOR.PATCH, optionally suffixed with -SNAPSHOT",
            )
        )
    return Ok(SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), is_snapshot=snapshot))


def parse_release_version(text: str) -> Result[SemVer, ReleaseError]:
    """Like :func:`parse_version`, but a snapshot is refused."""
    parsed = parse_version(text)
    if isinstance(parsed, Err):
        return parsed
    if parsed.value.is_snapshot:
        return Err(
            ReleaseError(
                kind="invalid_format",
                message=f"release version cannot be a snapshot: '{text}'",
                hint=f"Drop the {SNAPSHOT_SUFFIX} suffix",
            )
        )
    return parsed


def parse_tag(tag: str) -> SemVer | None:
    """Parse a ``vMAJOR.MINOR.PATCH`` tag; None for anything else."""
    if not tag.startswith("v"):
        return None
    m = _VERSION_RE.match(tag[1:])
    if m is None:
        return None
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)))
