"""Git adapter.

Usage:
    from relops.git import Repository

    repo = Repository(Path("."))
    exists = repo.remote_branch_exists("origin", "releases/v1.3.x")
"""

from relops.git.repository import GitError, Repository, parse_log

__all__ = ["GitError", "Repository", "parse_log"]
