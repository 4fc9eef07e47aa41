"""Exit codes for the relflow CLI.

A failing workflow step is mapped to one of these codes by
``relflow.output.errors`` and becomes the process exit status.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (bad config, bad branch name, no issue selected)
    - 2: Environment error (not a Git repo, tracker not configured)
    - 3: Repository state error (uncommitted changes, broken checkout)
    - 4: Network error (issue tracker or release API unreachable)
    - 5: I/O error (file not readable or writable)
    - 6: Command error (a Command step exited non-zero)
    - 70: Internal error (a bug)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    REPO_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
    COMMAND_ERROR = 6
    INTERNAL_ERROR = 70

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
