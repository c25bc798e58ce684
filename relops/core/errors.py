"""Process exit codes.

Every command maps its failure to one of these codes. CI treats any non-zero
status as a failed release run.

- 0: success, or nothing to release
- 1: release refused (bad version, tag exists, branch missing, conflict)
- 2: environment problem (git or gh missing, not a repository, bad config)
- 4: remote failure (GitHub API, webhook, push)
- 5: I/O failure on local build metadata
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands. Values are stable."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
