"""Version-control capability consumed by the release services.

Services depend on this protocol rather than on :class:`relops.git.Repository`
so the policies and the hotfix transaction run against an in-memory fake in
tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from relops.core.result import Result
from relops.git.repository import GitError
from relops.release.commits import CommitSet


class VersionControl(Protocol):
    path: Path

    def is_clean(self) -> bool: ...

    def current_branch(self) -> str | None: ...

    def exact_tag(self) -> str | None: ...

    def head_sha(self, *, short: bool = False) -> Result[str, GitError]: ...

    def remote_url(self, remote: str) -> Result[str, GitError]: ...

    def tag_exists(self, tag: str) -> bool: ...

    def list_tags(self, pattern: str) -> Result[list[str], GitError]: ...

    def show_file(self, ref: str, path: str) -> Result[str, GitError]: ...

    def latest_tag(self, ref: str = "HEAD") -> Result[str | None, GitError]: ...

    def commits_since(self, tag: str | None, ref: str = "HEAD") -> Result[CommitSet, GitError]: ...

    def remote_branch_exists(self, remote: str, branch: str) -> Result[bool, GitError]: ...

    def default_branch(self, remote: str) -> Result[str, GitError]: ...

    def fetch(self, remote: str) -> Result[None, GitError]: ...

    def checkout(self, branch: str) -> Result[None, GitError]: ...

    def checkout_detached(self, ref: str) -> Result[None, GitError]: ...

    def pull(self, remote: str, branch: str) -> Result[None, GitError]: ...

    def create_branch(self, name: str, start: str = "HEAD") -> Result[None, GitError]: ...

    def push(self, remote: str, ref: str) -> Result[None, GitError]: ...

    def commit_files(self, paths: list[Path], message: str) -> Result[None, GitError]: ...

    def create_annotated_tag(self, tag: str, message: str) -> Result[None, GitError]: ...

    def delete_tag(self, tag: str) -> Result[None, GitError]: ...

    def cherry_pick(self, sha: str) -> Result[None, GitError]: ...

    def abort_cherry_pick(self) -> Result[None, GitError]: ...

    def reset_hard(self, ref: str) -> Result[None, GitError]: ...

    def set_remote_url(self, remote: str, url: str) -> Result[None, GitError]: ...
