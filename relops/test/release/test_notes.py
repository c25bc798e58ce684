from __future__ import annotations

from pathlib import Path

import pytest

from relops.core.config import NotesSource
from relops.core.result import Err, Ok, Result
from relops.output.console import MockConsole
from relops.release import notes as notes_mod
from relops.release.errors import ReleaseError
from relops.release.gh import GhRelease

OSS = NotesSource(slug="kestra-io/kestra", title="Open-Source Edition Changes")
EE = NotesSource(slug="kestra-io/kestra-ee", title="Enterprise Edition Changes")
TARGET = "kestra-io/kestra"


class FakeGitHub:
    def __init__(self, releases: dict[str, Result[GhRelease | None, ReleaseError]]) -> None:
        self.releases = releases
        self.updates: list[tuple[str, int, str]] = []

    def get_release_by_tag(
        self, *, cwd: Path, repo: str, tag: str
    ) -> Result[GhRelease | None, ReleaseError]:
        del cwd, tag
        return self.releases[repo]

    def update_release_body(
        self, *, cwd: Path, repo: str, release_id: int, body: str
    ) -> Result[GhRelease, ReleaseError]:
        del cwd
        self.updates.append((repo, release_id, body))
        return Ok(GhRelease(id=release_id, tag="v1.4.0", body=body, html_url="https://x/1"))


def _release(body: str, release_id: int = 1) -> Ok[GhRelease | None]:
    return Ok(GhRelease(id=release_id, tag="v1.4.0", body=body, html_url=None))


@pytest.fixture
def github(monkeypatch: pytest.MonkeyPatch) -> FakeGitHub:
    fake = FakeGitHub(
        {
            "kestra-io/kestra": _release("oss notes", release_id=7),
            "kestra-io/kestra-ee": _release("ee notes"),
        }
    )
    monkeypatch.setattr(notes_mod, "get_release_by_tag", fake.get_release_by_tag)
    monkeypatch.setattr(notes_mod, "update_release_body", fake.update_release_body)
    return fake


def _merge(tmp_path: Path, *, dry_run: bool = False, console: MockConsole | None = None):
    return notes_mod.merge_release_notes(
        cwd=tmp_path,
        tag="v1.4.0",
        target=TARGET,
        sources=(OSS, EE),
        console=console or MockConsole(),
        dry_run=dry_run,
    )


def test_render_merged_notes() -> None:
    merged = notes_mod.render_merged_notes(
        [notes_mod.NotesSection(OSS, "a"), notes_mod.NotesSection(EE, "b")]
    )
    assert merged == (
        "## Open-Source Edition Changes\n\na\n\n---\n\n## Enterprise Edition Changes\n\nb"
    )


def test_merge_updates_target_release(github: FakeGitHub, tmp_path: Path) -> None:
    result = _merge(tmp_path)

    assert isinstance(result, Ok)
    assert github.updates == [(TARGET, 7, result.value)]
    assert "oss notes" in result.value
    assert "ee notes" in result.value


def test_missing_source_release_halts(github: FakeGitHub, tmp_path: Path) -> None:
    github.releases["kestra-io/kestra-ee"] = Ok(None)

    result = _merge(tmp_path)

    assert isinstance(result, Err)
    assert result.error.kind == "release_not_found"
    assert "kestra-io/kestra-ee" in result.error.message
    assert github.updates == []


def test_failing_source_is_skipped(github: FakeGitHub, tmp_path: Path) -> None:
    github.releases["kestra-io/kestra-ee"] = Err(
        ReleaseError(kind="gh_failed", message="failed to fetch")
    )
    console = MockConsole()

    result = _merge(tmp_path, console=console)

    assert isinstance(result, Ok)
    assert "Enterprise" not in result.value
    assert console.has_warning()


def test_dry_run_does_not_update(github: FakeGitHub, tmp_path: Path) -> None:
    console = MockConsole()

    result = _merge(tmp_path, dry_run=True, console=console)

    assert isinstance(result, Ok)
    assert github.updates == []
    assert console.find("[dry-run] skipping: update release 7")


def test_no_sources(tmp_path: Path) -> None:
    result = notes_mod.merge_release_notes(
        cwd=tmp_path, tag="v1.4.0", target=TARGET, sources=(), console=MockConsole()
    )
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_input"
