"""In-memory stand-in for :class:`Repository`, used by tests.

History is a single linear line of commits (oldest first). Branches only
record a name; tags point at commit shas. Every mutating call is recorded in
``calls`` and every push in ``pushes`` so tests can assert on side effects.
"""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass, field
from pathlib import Path

from relops.core.result import Err, Ok, Result
from relops.git.repository import GitError
from relops.release.commits import CommitMessage, CommitSet


@dataclass
class MemoryRepository:
    path: Path = field(default_factory=Path.cwd)
    history: list[CommitMessage] = field(default_factory=list)
    tags: dict[str, str] = field(default_factory=dict)
    # tags only the remote has until the next fetch
    remote_tags: dict[str, str] = field(default_factory=dict)
    # "ref:path" -> content; other refs read the working tree
    files: dict[str, str] = field(default_factory=dict)
    branch: str | None = "main"
    default: str = "main"
    url: str = "https://github.com/example/project.git"
    clean: bool = True
    remote_branches: set[str] = field(default_factory=set)
    local_branches: set[str] = field(default_factory=set)
    # cherry-pick of these shas fails as a conflict
    conflicts: set[str] = field(default_factory=set)
    # git command name -> failure returned by that command
    failures: dict[str, str] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    pushes: list[tuple[str, str]] = field(default_factory=list)
    picking: str | None = None

    def add_commit(self, subject: str, body: str = "", *, tag: str | None = None) -> str:
        sha = f"{len(self.history) + 1:040x}"
        self.history.append(CommitMessage(sha=sha, subject=subject, body=body))
        if tag is not None:
            self.tags[tag] = sha
        return sha

    @property
    def head(self) -> str | None:
        return self.history[-1].sha if self.history else None

    def _fail(self, command: str) -> Err[GitError] | None:
        message = self.failures.get(command)
        if message is None:
            return None
        return Err(GitError(command=command, message=message))

    def _mutate(self, command: str, detail: str) -> Err[GitError] | None:
        self.calls.append(f"{command} {detail}".strip())
        return self._fail(command)

    def _resolve(self, ref: str) -> str | None:
        if ref in self.tags:
            return self.tags[ref]
        if any(c.sha == ref for c in self.history):
            return ref
        return None

    def _truncate(self, sha: str) -> None:
        index = next(i for i, c in enumerate(self.history) if c.sha == sha)
        del self.history[index + 1 :]

    # Queries

    def exists(self) -> bool:
        return True

    def is_clean(self) -> bool:
        return self.clean

    def current_branch(self) -> str | None:
        return self.branch

    def exact_tag(self) -> str | None:
        head = self.head
        return next((t for t, sha in self.tags.items() if sha == head), None)

    def head_sha(self, *, short: bool = False) -> Result[str, GitError]:
        if self.head is None:
            return Err(GitError(command="rev-parse", message="no commits yet"))
        return Ok(self.head[:7] if short else self.head)

    def remote_url(self, remote: str) -> Result[str, GitError]:
        return self._fail("config") or Ok(self.url)

    def tag_exists(self, tag: str) -> bool:
        return tag in self.tags

    def list_tags(self, pattern: str) -> Result[list[str], GitError]:
        return Ok(sorted(t for t in self.tags if fnmatch.fnmatch(t, pattern)))

    def show_file(self, ref: str, path: str) -> Result[str, GitError]:
        failed = self._fail("show")
        if failed is not None:
            return failed
        recorded = self.files.get(f"{ref}:{path}")
        if recorded is not None:
            return Ok(recorded)
        try:
            return Ok((self.path / path).read_text(encoding="utf-8"))
        except OSError as e:
            return Err(GitError(command="show", message=str(e)))

    def latest_tag(self, ref: str = "HEAD") -> Result[str | None, GitError]:
        for commit in reversed(self.history):
            for tag, sha in self.tags.items():
                if sha == commit.sha and fnmatch.fnmatch(tag, "v[0-9]*"):
                    return Ok(tag)
        return Ok(None)

    def commits_since(self, tag: str | None, ref: str = "HEAD") -> Result[CommitSet, GitError]:
        failed = self._fail("log")
        if failed is not None:
            return failed
        commits = list(self.history)
        if tag is not None:
            sha = self.tags[tag]
            index = next(i for i, c in enumerate(commits) if c.sha == sha)
            commits = commits[index + 1 :]
        return Ok(tuple(reversed(commits)))

    def remote_branch_exists(self, remote: str, branch: str) -> Result[bool, GitError]:
        return self._fail("ls-remote") or Ok(branch in self.remote_branches)

    def default_branch(self, remote: str) -> Result[str, GitError]:
        return self._fail("remote") or Ok(self.default)

    # Mutations

    def fetch(self, remote: str) -> Result[None, GitError]:
        failed = self._mutate("fetch", remote)
        if failed is not None:
            return failed
        self.tags.update(self.remote_tags)
        return Ok(None)

    def checkout(self, branch: str) -> Result[None, GitError]:
        failed = self._mutate("checkout", branch)
        if failed is not None:
            return failed
        self.branch = branch
        return Ok(None)

    def checkout_detached(self, ref: str) -> Result[None, GitError]:
        failed = self._mutate("checkout", f"--detach {ref}")
        if failed is not None:
            return failed
        sha = self._resolve(ref)
        if sha is None:
            return Err(GitError(command="checkout", message=f"unknown ref {ref}"))
        self._truncate(sha)
        self.branch = None
        return Ok(None)

    def pull(self, remote: str, branch: str) -> Result[None, GitError]:
        return self._mutate("pull", f"{remote} {branch}") or Ok(None)

    def create_branch(self, name: str, start: str = "HEAD") -> Result[None, GitError]:
        failed = self._mutate("branch", f"{name} {start}")
        if failed is not None:
            return failed
        if name in self.local_branches:
            return Err(GitError(command="branch", message=f"branch '{name}' already exists"))
        self.local_branches.add(name)
        return Ok(None)

    def push(self, remote: str, ref: str) -> Result[None, GitError]:
        failed = self._mutate("push", f"{remote} {ref}")
        if failed is not None:
            return failed
        self.pushes.append((remote, ref))
        if ref in self.local_branches:
            self.remote_branches.add(ref)
        return Ok(None)

    def commit_files(self, paths: list[Path], message: str) -> Result[None, GitError]:
        failed = self._mutate("commit", message)
        if failed is not None:
            return failed
        self.add_commit(message)
        return Ok(None)

    def create_annotated_tag(self, tag: str, message: str) -> Result[None, GitError]:
        failed = self._mutate("tag", tag)
        if failed is not None:
            return failed
        if tag in self.tags or self.head is None:
            return Err(GitError(command="tag", message=f"tag '{tag}' already exists"))
        self.tags[tag] = self.head
        return Ok(None)

    def delete_tag(self, tag: str) -> Result[None, GitError]:
        failed = self._mutate("tag", f"-d {tag}")
        if failed is not None:
            return failed
        self.tags.pop(tag, None)
        return Ok(None)

    def cherry_pick(self, sha: str) -> Result[None, GitError]:
        failed = self._mutate("cherry-pick", sha)
        if failed is not None:
            return failed
        if sha in self.conflicts:
            self.picking = sha
            return Err(GitError(command="cherry-pick", message=f"could not apply {sha}"))
        self.add_commit(f"picked {sha}", f"(cherry picked from commit {sha})")
        return Ok(None)

    def abort_cherry_pick(self) -> Result[None, GitError]:
        self.calls.append("cherry-pick --abort")
        self.picking = None
        return Ok(None)

    def reset_hard(self, ref: str) -> Result[None, GitError]:
        failed = self._mutate("reset", f"--hard {ref}")
        if failed is not None:
            return failed
        sha = self._resolve(ref)
        if sha is None:
            return Err(GitError(command="reset", message=f"unknown ref {ref}"))
        self._truncate(sha)
        return Ok(None)

    def set_remote_url(self, remote: str, url: str) -> Result[None, GitError]:
        failed = self._mutate("set-url", remote)
        if failed is not None:
            return failed
        self.url = url
        return Ok(None)
