"""Git repository adapter.

:class:`Repository` implements the version-control capability used by the
release services (:class:`relops.release.vcs.VersionControl`) by shelling out
to ``git``. Every operation returns a Result; nothing raises.

Usage:
    repo = Repository(Path("."))
    match repo.latest_tag():
        case Ok(None):
            console.info("no release yet")
        case Ok(tag):
            console.info(f"latest: {tag}")
        case Err(e):
            console.error(e.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relops.core.result import Err, Ok, Result
from relops.platform.process import ProcessError
from relops.platform.process import run as run_process
from relops.release.commits import CommitMessage, CommitSet

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "ls-remote", "remote"})

# Field and record separators for `git log` parsing.
_FS = "\x1f"
_RS = "\x1e"

__all__ = ["GitError", "Repository"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class Repository:
    """A local clone, addressed by its root path."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return (self.path / ".git").exists()

    # -- queries ------------------------------------------------------------

    def is_clean(self) -> bool:
        """True when the working tree has no changes. False if unknown."""
        result = self._run(["status", "--porcelain"])
        match result:
            case Ok(stdout):
                return stdout.strip() == ""
            case Err(_):
                return False

    def current_branch(self) -> str | None:
        """Current branch name; None when detached or on error."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def exact_tag(self) -> str | None:
        """Tag pointing exactly at HEAD, if any."""
        result = self._run(["describe", "--tags", "--exact-match"])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def head_sha(self, *, short: bool = False) -> Result[str, GitError]:
        args = ["rev-parse", "--short", "HEAD"] if short else ["rev-parse", "HEAD"]
        return self._stripped(args, command="rev-parse")

    def remote_url(self, remote: str) -> Result[str, GitError]:
        return self._stripped(["config", "--get", f"remote.{remote}.url"], command="config")

    def tag_exists(self, tag: str) -> bool:
        result = self._run(["rev-parse", "--verify", "--quiet", f"refs/tags/{tag}"])
        return isinstance(result, Ok)

    def list_tags(self, pattern: str) -> Result[list[str], GitError]:
        """Local tags matching the glob ``pattern``, reachable or not."""
        result = self._run(["tag", "--list", pattern])
        if isinstance(result, Err):
            return Err(self._error("tag --list", result.error, "git tag --list failed"))
        return Ok([line.strip() for line in result.value.splitlines() if line.strip()])

    def show_file(self, ref: str, path: str) -> Result[str, GitError]:
        """Content of ``path`` (relative to the root) as recorded at ``ref``."""
        result = self._run(["show", f"{ref}:{path}"])
        if isinstance(result, Err):
            return Err(self._error("show", result.error, f"git show {ref}:{path} failed"))
        return Ok(result.value)

    def latest_tag(self, ref: str = "HEAD") -> Result[str | None, GitError]:
        """Most recent ``v*`` release tag reachable from ``ref``; None if none."""
        result = self._run(["describe", "--tags", "--abbrev=0", "--match", "v[0-9]*", ref])
        match result:
            case Ok(stdout):
                return Ok(stdout.strip() or None)
            case Err(e):
                text = f"{e.stderr}\n{e.stdout}".lower()
                if "no names found" in text or "no tags can describe" in text:
                    return Ok(None)
                return Err(self._error("describe", e, "git describe failed"))

    def commits_since(self, tag: str | None, ref: str = "HEAD") -> Result[CommitSet, GitError]:
        """Commits in ``tag..ref`` (whole history of ``ref`` when ``tag`` is None)."""
        rev = f"{tag}..{ref}" if tag else ref
        result = self._run(["log", f"--format=%H{_FS}%s{_FS}%b{_RS}", rev])
        if isinstance(result, Err):
            return Err(self._error("log", result.error, "git log failed"))
        return Ok(parse_log(result.value))

    def remote_branch_exists(self, remote: str, branch: str) -> Result[bool, GitError]:
        result = self._run(["ls-remote", "--heads", remote, f"refs/heads/{branch}"])
        if isinstance(result, Err):
            return Err(self._error("ls-remote", result.error, "git ls-remote failed"))
        return Ok(bool(result.value.strip()))

    def default_branch(self, remote: str) -> Result[str, GitError]:
        result = self._run(["remote", "show", remote])
        if isinstance(result, Err):
            return Err(self._error("remote show", result.error, "git remote show failed"))
        for line in result.value.splitlines():
            key, sep, value = line.strip().partition(":")
            if sep and key == "HEAD branch" and value.strip():
                return Ok(value.strip())
        return Err(GitError(command="remote show", message=f"no HEAD branch for remote {remote}"))

    # -- mutations ----------------------------------------------------------

    def fetch(self, remote: str) -> Result[None, GitError]:
        return self._void(["fetch", remote, "--tags"], command="fetch")

    def checkout(self, branch: str) -> Result[None, GitError]:
        return self._void(["checkout", branch], command="checkout")

    def checkout_detached(self, ref: str) -> Result[None, GitError]:
        return self._void(["checkout", "--detach", ref], command="checkout --detach")

    def pull(self, remote: str, branch: str) -> Result[None, GitError]:
        return self._void(["pull", "--ff-only", remote, branch], command="pull")

    def create_branch(self, name: str, start: str = "HEAD") -> Result[None, GitError]:
        return self._void(["branch", name, start], command="branch")

    def push(self, remote: str, ref: str) -> Result[None, GitError]:
        return self._void(["push", remote, ref], command="push")

    def commit_files(self, paths: list[Path], message: str) -> Result[None, GitError]:
        added = self._void(["add", "--", *(str(p) for p in paths)], command="add")
        if isinstance(added, Err):
            return added
        return self._void(["commit", "-m", message], command="commit")

    def create_annotated_tag(self, tag: str, message: str) -> Result[None, GitError]:
        return self._void(["tag", "-a", tag, "-m", message], command="tag")

    def delete_tag(self, tag: str) -> Result[None, GitError]:
        return self._void(["tag", "-d", tag], command="tag -d")

    def cherry_pick(self, sha: str) -> Result[None, GitError]:
        return self._void(["cherry-pick", "-x", sha], command="cherry-pick")

    def abort_cherry_pick(self) -> Result[None, GitError]:
        return self._void(["cherry-pick", "--abort"], command="cherry-pick --abort")

    def reset_hard(self, ref: str) -> Result[None, GitError]:
        return self._void(["reset", "--hard", ref], command="reset --hard")

    def set_remote_url(self, remote: str, url: str) -> Result[None, GitError]:
        return self._void(["remote", "set-url", remote, url], command="remote set-url")

    # -- plumbing -----------------------------------------------------------

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if args and args[0] in _NETWORK_COMMANDS
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)

    def _void(self, args: list[str], *, command: str) -> Result[None, GitError]:
        result = self._run(args)
        if isinstance(result, Err):
            return Err(self._error(command, result.error, f"git {command} failed"))
        return Ok(None)

    def _stripped(self, args: list[str], *, command: str) -> Result[str, GitError]:
        result = self._run(args)
        if isinstance(result, Err):
            return Err(self._error(command, result.error, f"git {command} failed"))
        return Ok(result.value.strip())

    @staticmethod
    def _error(command: str, e: ProcessError, fallback: str) -> GitError:
        return GitError(
            command=command,
            message=e.stderr.strip() or e.stdout.strip() or fallback,
            returncode=e.returncode,
        )


def parse_log(output: str) -> CommitSet:
    """Parse ``git log --format=%H<FS>%s<FS>%b<RS>`` output, newest first."""
    commits: list[CommitMessage] = []
    for record in output.split(_RS):
        record = record.strip("\n")
        if not record.strip():
            continue
        parts = record.split(_FS, 2)
        if len(parts) < 2:
            continue
        sha = parts[0].strip()
        subject = parts[1].strip()
        body = parts[2].strip() if len(parts) > 2 else ""
        commits.append(CommitMessage(sha=sha, subject=subject, body=body))
    return tuple(commits)
