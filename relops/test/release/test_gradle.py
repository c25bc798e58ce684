from __future__ import annotations

from pathlib import Path

import pytest

from relops.core.result import Err, Ok, Result
from relops.platform.process import ProcessError
from relops.release import gradle as gradle_mod
from relops.release.semver import SemVer

PROPERTIES_OUTPUT = """\
------------------------------------------------------------
Root project 'plugin-jdbc'
------------------------------------------------------------

allprojects: [root project 'plugin-jdbc', project ':plugin-jdbc-mysql']
archivesBaseName: plugin-jdbc
group: io.kestra.plugin
subprojects: [project ':plugin-jdbc-mysql', project ':plugin-jdbc-pgsql']
version: 0.21.0
kestraVersion: 0.21.0
  indented: ignored
"""


def test_release_command() -> None:
    cmd = gradle_mod.release_command(
        "./gradlew", SemVer(1, 4, 0), SemVer(1, 5, 0, is_snapshot=True)
    )
    assert cmd == [
        "./gradlew",
        "release",
        "-Prelease.useAutomaticVersion=true",
        "-Prelease.releaseVersion=1.4.0",
        "-Prelease.newVersion=1.5.0-SNAPSHOT",
    ]


def test_parse_gradle_properties() -> None:
    props = gradle_mod.parse_gradle_properties(PROPERTIES_OUTPUT)
    assert props["group"] == "io.kestra.plugin"
    assert props["version"] == "0.21.0"
    assert props["archivesBaseName"] == "plugin-jdbc"
    assert "  indented" not in props


def test_parse_subprojects() -> None:
    props = gradle_mod.parse_gradle_properties(PROPERTIES_OUTPUT)
    assert gradle_mod.parse_subprojects(props["subprojects"]) == [
        "plugin-jdbc-mysql",
        "plugin-jdbc-pgsql",
    ]
    assert gradle_mod.parse_subprojects("[]") == []


def test_gradle_properties_for_subproject(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    calls: list[list[str]] = []

    def fake_run(
        cmd: list[str], cwd: Path, env: object = None, *, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        del cwd, env, timeout
        calls.append(cmd)
        return Ok("version: 1.0.0\n")

    monkeypatch.setattr(gradle_mod, "run_process", fake_run)

    result = gradle_mod.gradle_properties(root=tmp_path, gradle="./gradlew", project="core")

    assert result == Ok({"version": "1.0.0"})
    assert calls == [["./gradlew", "-q", "core:properties"]]


def test_gradle_release_failure(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def fake_streaming(cmd: list[str], cwd: Path, env: object = None) -> Err[ProcessError]:
        del cwd, env
        return Err(ProcessError(command=tuple(cmd), returncode=1, stdout="", stderr=""))

    monkeypatch.setattr(gradle_mod, "run_streaming", fake_streaming)

    result = gradle_mod.gradle_release(
        root=tmp_path,
        gradle="./gradlew",
        release=SemVer(1, 4, 0),
        next_version=SemVer(1, 5, 0, is_snapshot=True),
    )

    assert isinstance(result, Err)
    assert result.error.kind == "gradle_failed"
    assert "exit 1" in result.error.message
