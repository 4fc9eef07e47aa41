"""Git operations.

- ``repository``: the adapter over the ``git`` executable
- ``branches``: issue <-> branch name correlation
- ``workflow``: branch switching, rebasing and issue-from-branch steps
- ``history``: commit messages since the last stable release

Only the adapter is re-exported here; the other modules depend on the step
error taxonomy, which itself depends on the adapter.
"""

from relflow.git.repository import (
    CommitRecord,
    GitError,
    NotAGitRepo,
    Repository,
    StatusEntry,
)

__all__ = [
    "CommitRecord",
    "GitError",
    "NotAGitRepo",
    "Repository",
    "StatusEntry",
]
