"""Merge the release notes of several source repositories into one release.

Each source contributes a ``## <title>`` section; sections are separated by a
horizontal rule. If any source has no release for the tag, nothing is
written.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from relops.core.config import NotesSource
from relops.core.result import Err, Ok, Result
from relops.output.console import ConsoleProtocol
from relops.release.errors import ReleaseError
from relops.release.gh import get_release_by_tag, update_release_body

SECTION_SEPARATOR = "\n\n---\n\n"


@dataclass(frozen=True, slots=True)
class NotesSection:
    source: NotesSource
    body: str

    def render(self) -> str:
        return f"## {self.source.title}\n\n{self.body}"


def render_merged_notes(sections: Sequence[NotesSection]) -> str:
    return SECTION_SEPARATOR.join(section.render() for section in sections)


def collect_sections(
    *,
    cwd: Path,
    tag: str,
    sources: Sequence[NotesSource],
    console: ConsoleProtocol,
) -> Result[list[NotesSection], ReleaseError]:
    """Fetch every source's notes for ``tag``.

    A missing release halts the merge. Other fetch failures drop that source
    with a warning.
    """
    sections: list[NotesSection] = []
    missing: list[str] = []
    for source in sources:
        release = get_release_by_tag(cwd=cwd, repo=source.slug, tag=tag)
        if isinstance(release, Err):
            console.warning(f"{source.slug}: {release.error.pretty()}")
            continue
        if release.value is None:
            console.error(f"release '{tag}' for {source.slug} was not found")
            missing.append(source.slug)
            continue
        console.success(f"fetched release notes from {source.slug}")
        sections.append(NotesSection(source=source, body=release.value.body))

    if missing:
        return Err(
            ReleaseError(
                kind="release_not_found",
                message=f"release '{tag}' not found in: {', '.join(missing)}",
                hint="Publish the release in every source repository first",
            )
        )
    return Ok(sections)


def merge_release_notes(
    *,
    cwd: Path,
    tag: str,
    target: str,
    sources: Sequence[NotesSource],
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[str, ReleaseError]:
    """Write the merged notes into the ``target`` release for ``tag``.

    Returns:
        Ok(merged markdown) once written (or, on a dry run, computed).
    """
    if not sources:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message="no release note sources configured",
                hint="Add [[notes.sources]] entries to relops.toml",
            )
        )

    console.header(f"Merge release notes for {tag} into {target}")
    sections = collect_sections(cwd=cwd, tag=tag, sources=sources, console=console)
    if isinstance(sections, Err):
        return sections
    if not sections.value:
        return Err(
            ReleaseError(
                kind="gh_failed",
                message="no release notes could be fetched",
            )
        )

    merged = render_merged_notes(sections.value)

    release = get_release_by_tag(cwd=cwd, repo=target, tag=tag)
    if isinstance(release, Err):
        return release
    if release.value is None:
        return Err(
            ReleaseError(
                kind="release_not_found",
                message=f"could not find a release with tag {tag} in {target}",
            )
        )

    if dry_run:
        console.skipped(f"update release {release.value.id} in {target}")
        console.print(merged)
        return Ok(merged)

    updated = update_release_body(cwd=cwd, repo=target, release_id=release.value.id, body=merged)
    if isinstance(updated, Err):
        return updated

    console.success("release notes updated")
    if updated.value.html_url:
        console.info(f"view the updated release at: {updated.value.html_url}")
    return Ok(merged)
