"""Errors a workflow step can fail with.

Each kind is its own frozen dataclass; ``StepError`` is the union. Rendering
(message, hint, exit code) lives in ``relflow.output.errors``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relflow.git.repository import GitError, NotAGitRepo

__all__ = [
    "ApiRequestError",
    "ApiResponseError",
    "BadGitBranchName",
    "Bug",
    "CommandFailed",
    "GitError",
    "GitHubNotConfigured",
    "IncompleteCheckout",
    "InvalidGitHubTransition",
    "InvalidJiraTransition",
    "InvalidPreReleaseVersion",
    "InvalidSemanticVersion",
    "InvalidVersionedFile",
    "IoError",
    "JiraNotConfigured",
    "MissingAncestorCommit",
    "NoIssueSelected",
    "NoMetadataFileFound",
    "NoRelevantChanges",
    "NotAGitRepo",
    "NotOnAGitBranch",
    "ReleaseNotPrepared",
    "StepError",
    "UncommittedChanges",
    "UserInputError",
]


@dataclass(frozen=True, slots=True)
class NoIssueSelected:
    pass


@dataclass(frozen=True, slots=True)
class JiraNotConfigured:
    pass


@dataclass(frozen=True, slots=True)
class GitHubNotConfigured:
    pass


@dataclass(frozen=True, slots=True)
class InvalidJiraTransition:
    status: str


@dataclass(frozen=True, slots=True)
class InvalidGitHubTransition:
    status: str


@dataclass(frozen=True, slots=True)
class ApiRequestError:
    url: str
    message: str


@dataclass(frozen=True, slots=True)
class ApiResponseError:
    url: str
    message: str


@dataclass(frozen=True, slots=True)
class NotOnAGitBranch:
    pass


@dataclass(frozen=True, slots=True)
class BadGitBranchName:
    name: str


@dataclass(frozen=True, slots=True)
class UncommittedChanges:
    paths: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class IncompleteCheckout:
    """HEAD was moved but the working tree could not be updated to match."""

    branch: str
    cause: GitError


@dataclass(frozen=True, slots=True)
class MissingAncestorCommit:
    """The commit graph is missing an object (corrupt or shallow repository)."""

    cause: str


@dataclass(frozen=True, slots=True)
class IoError:
    path: Path
    message: str


@dataclass(frozen=True, slots=True)
class CommandFailed:
    command: str
    returncode: int


@dataclass(frozen=True, slots=True)
class UserInputError:
    message: str


@dataclass(frozen=True, slots=True)
class InvalidPreReleaseVersion:
    version: str


@dataclass(frozen=True, slots=True)
class InvalidSemanticVersion:
    version: str
    file_name: str


@dataclass(frozen=True, slots=True)
class NoMetadataFileFound:
    file_name: str | None = None


@dataclass(frozen=True, slots=True)
class InvalidVersionedFile:
    file_name: str
    reason: str


@dataclass(frozen=True, slots=True)
class NoRelevantChanges:
    pass


@dataclass(frozen=True, slots=True)
class ReleaseNotPrepared:
    pass


@dataclass(frozen=True, slots=True)
class Bug:
    message: str


StepError = (
    NoIssueSelected
    | JiraNotConfigured
    | GitHubNotConfigured
    | InvalidJiraTransition
    | InvalidGitHubTransition
    | ApiRequestError
    | ApiResponseError
    | NotAGitRepo
    | NotOnAGitBranch
    | BadGitBranchName
    | UncommittedChanges
    | IncompleteCheckout
    | MissingAncestorCommit
    | GitError
    | IoError
    | CommandFailed
    | UserInputError
    | InvalidPreReleaseVersion
    | InvalidSemanticVersion
    | NoMetadataFileFound
    | InvalidVersionedFile
    | NoRelevantChanges
    | ReleaseNotPrepared
    | Bug
)
