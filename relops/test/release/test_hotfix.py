"""Tests for the hotfix cherry-pick transaction."""

from __future__ import annotations

from pathlib import Path

import pytest

from relops.core.result import Err, Ok
from relops.git.memory import MemoryRepository
from relops.output.console import MockConsole
from relops.release.hotfix import (
    HotfixRequest,
    apply_hotfix,
    checkpoint,
    new_hotfix_request,
    parse_commit_ids,
)
from relops.release.model import ReleaseSettings
from relops.release.semver import SemVer


@pytest.fixture
def repo(tmp_path: Path) -> MemoryRepository:
    repo = MemoryRepository(path=tmp_path)
    repo.add_commit("feat: initial", tag="v1.3.0")
    repo.add_commit("fix: first patch", tag="v1.3.1")
    return repo


@pytest.fixture
def settings(tmp_path: Path) -> ReleaseSettings:
    (tmp_path / "gradle.properties").write_text(
        "# build\nversion=1.3.1\nkestraVersion=0.20.0\n", encoding="utf-8"
    )
    return ReleaseSettings(repo_root=tmp_path)


def _request(commits: str = "c1,c2") -> HotfixRequest:
    result = new_hotfix_request("1.3.2", commits)
    assert isinstance(result, Ok)
    return result.value


def test_parse_commit_ids_trims_and_drops_empty() -> None:
    assert parse_commit_ids(" c1, c2 ,,c3 ") == ("c1", "c2", "c3")


def test_new_hotfix_request_computes_base_tag() -> None:
    request = _request()
    assert request.target_version == SemVer(1, 3, 2)
    assert request.base_tag == "v1.3.1"
    assert request.commit_ids == ("c1", "c2")
    assert request.tag == "v1.3.2"


def test_new_hotfix_request_refuses_patch_zero() -> None:
    result = new_hotfix_request("1.4.0", "c1")
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_input"


def test_new_hotfix_request_refuses_empty_commits() -> None:
    result = new_hotfix_request("1.3.2", " , ")
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_input"


def test_hotfix_applies_commits_tags_and_pushes(
    repo: MemoryRepository, settings: ReleaseSettings
) -> None:
    console = MockConsole()

    result = apply_hotfix(repo, _request(), settings=settings, console=console)

    assert result == Ok("v1.3.2")
    subjects = [c.subject for c in repo.history]
    assert subjects[-3:] == [
        "picked c1",
        "picked c2",
        "chore(version): update to version '1.3.2'",
    ]
    assert repo.tags["v1.3.2"] == repo.head
    assert repo.pushes == [("origin", "v1.3.2")]
    assert "version=1.3.2" in (settings.properties_path).read_text(encoding="utf-8")


def test_hotfix_conflict_rolls_back_to_base(
    repo: MemoryRepository, settings: ReleaseSettings
) -> None:
    repo.conflicts.add("c2")
    base_sha = repo.tags["v1.3.1"]
    console = MockConsole()

    result = apply_hotfix(repo, _request(), settings=settings, console=console)

    assert isinstance(result, Err)
    assert result.error.kind == "conflict"
    assert "c2" in result.error.message
    assert repo.head == base_sha
    assert "v1.3.2" not in repo.tags
    assert repo.pushes == []
    assert "cherry-pick --abort" in repo.calls
    assert repo.calls[-1] == "reset --hard v1.3.1"
    assert console.has_warning()


def test_hotfix_push_failure_deletes_tag(
    repo: MemoryRepository, settings: ReleaseSettings
) -> None:
    repo.failures["push"] = "remote rejected"
    base_sha = repo.tags["v1.3.1"]

    result = apply_hotfix(repo, _request("c1"), settings=settings, console=MockConsole())

    assert isinstance(result, Err)
    assert result.error.kind == "git_failed"
    assert "v1.3.2" not in repo.tags
    assert repo.head == base_sha


def test_hotfix_missing_base_tag(repo: MemoryRepository, settings: ReleaseSettings) -> None:
    request = new_hotfix_request("1.3.5", "c1")
    assert isinstance(request, Ok)

    result = apply_hotfix(repo, request.value, settings=settings, console=MockConsole())

    assert isinstance(result, Err)
    assert result.error.kind == "invalid_input"
    assert "v1.3.4" in result.error.message
    assert repo.calls == []


def test_hotfix_existing_tag(repo: MemoryRepository, settings: ReleaseSettings) -> None:
    repo.add_commit("fix: already released", tag="v1.3.2")

    result = apply_hotfix(repo, _request(), settings=settings, console=MockConsole())

    assert isinstance(result, Err)
    assert result.error.kind == "release_exists"


def test_hotfix_dirty_tree(repo: MemoryRepository, settings: ReleaseSettings) -> None:
    repo.clean = False

    result = apply_hotfix(repo, _request(), settings=settings, console=MockConsole())

    assert isinstance(result, Err)
    assert result.error.kind == "invalid_input"
    assert repo.calls == []


def test_hotfix_dry_run_touches_nothing(
    repo: MemoryRepository, settings: ReleaseSettings
) -> None:
    console = MockConsole()
    before = list(repo.history)

    result = apply_hotfix(repo, _request(), settings=settings, console=console, dry_run=True)

    assert result == Ok("v1.3.2")
    assert repo.calls == []
    assert repo.history == before
    assert console.find("[dry-run] skipping: git cherry-pick -x c2")
    assert console.find("[dry-run] skipping: git push origin v1.3.2")


def test_checkpoint_commit_keeps_state(repo: MemoryRepository) -> None:
    with checkpoint(repo, "v1.3.0", console=MockConsole()) as cp:
        repo.add_commit("fix: kept")
        cp.commit()

    assert repo.history[-1].subject == "fix: kept"
    assert not any(call.startswith("reset") for call in repo.calls)


def test_checkpoint_rolls_back_on_exception(repo: MemoryRepository) -> None:
    with pytest.raises(RuntimeError):
        with checkpoint(repo, "v1.3.0", console=MockConsole()) as cp:
            repo.add_commit("fix: lost")
            cp.track_tag("v9.9.9")
            repo.tags["v9.9.9"] = repo.head or ""
            raise RuntimeError("boom")

    assert repo.head == repo.tags["v1.3.0"]
    assert "v9.9.9" not in repo.tags
