"""Error presentation utilities.

Maps each step error to a message, an optional hint and an exit code, so every
command reports failures the same way.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from relflow.core.errors import ErrorCode
from relflow.output.console import Style
from relflow.step_errors import (
    ApiRequestError,
    ApiResponseError,
    BadGitBranchName,
    Bug,
    CommandFailed,
    GitError,
    GitHubNotConfigured,
    IncompleteCheckout,
    InvalidGitHubTransition,
    InvalidJiraTransition,
    InvalidPreReleaseVersion,
    InvalidSemanticVersion,
    InvalidVersionedFile,
    IoError,
    JiraNotConfigured,
    MissingAncestorCommit,
    NoIssueSelected,
    NoMetadataFileFound,
    NoRelevantChanges,
    NotAGitRepo,
    NotOnAGitBranch,
    ReleaseNotPrepared,
    StepError,
    UncommittedChanges,
    UserInputError,
)

if TYPE_CHECKING:
    from relflow.output.console import ConsoleProtocol

__all__ = ["ErrorReport", "describe_step_error", "print_step_error", "step_error_exit_code"]


@dataclass(frozen=True, slots=True)
class ErrorReport:
    """How a step error is shown to the user.

    Attributes:
        message: One-line description
        hint: What to do about it, if there is something to suggest
        code: Process exit code
        needs_inspection: The repository may be left in an inconsistent state
    """

    message: str
    code: ErrorCode
    hint: str | None = None
    needs_inspection: bool = False


def describe_step_error(error: StepError) -> ErrorReport:
    match error:
        case NoIssueSelected():
            return ErrorReport(
                "No issue selected",
                ErrorCode.USER_ERROR,
                hint="Add a step that selects an issue (e.g. SelectJiraIssue) before this one",
            )
        case JiraNotConfigured():
            return ErrorReport(
                "Jira is not configured",
                ErrorCode.ENV_ERROR,
                hint="Add a [jira] table with url and project to relflow.toml",
            )
        case GitHubNotConfigured():
            return ErrorReport(
                "GitHub is not configured",
                ErrorCode.ENV_ERROR,
                hint="Add a [github] table with owner and repo to relflow.toml",
            )
        case InvalidJiraTransition(status=status):
            return ErrorReport(
                f"Cannot transition issue to '{status}' in Jira",
                ErrorCode.USER_ERROR,
                hint="Check the status name against the Jira workflow of the project",
            )
        case InvalidGitHubTransition(status=status):
            return ErrorReport(
                f"Cannot transition a GitHub issue to '{status}'",
                ErrorCode.USER_ERROR,
                hint="GitHub issues can only be 'open' or 'closed'",
            )
        case ApiRequestError(url=url, message=message):
            return ErrorReport(
                f"Request to {url} failed: {message}",
                ErrorCode.NETWORK_ERROR,
                hint="Check your network connection and credentials",
            )
        case ApiResponseError(url=url, message=message):
            return ErrorReport(
                f"Unexpected response from {url}: {message}", ErrorCode.NETWORK_ERROR
            )
        case NotAGitRepo(path=path):
            return ErrorReport(
                f"Not a Git repository: {path}",
                ErrorCode.ENV_ERROR,
                hint="Run relflow from inside a Git working tree",
            )
        case NotOnAGitBranch():
            return ErrorReport(
                "Not on a Git branch",
                ErrorCode.REPO_ERROR,
                hint="Check out a branch; detached HEAD has no branch name to read",
            )
        case BadGitBranchName(name=name):
            return ErrorReport(
                f"Branch name '{name}' does not contain an issue key",
                ErrorCode.USER_ERROR,
                hint="Expected '<issue key>-<summary>', e.g. 'PROJ-12-fix-login'",
            )
        case UncommittedChanges(paths=paths):
            shown = ", ".join(paths[:5]) + (", ..." if len(paths) > 5 else "")
            return ErrorReport(
                f"Uncommitted changes: {shown}",
                ErrorCode.REPO_ERROR,
                hint="Commit or stash your changes, then run the workflow again",
            )
        case IncompleteCheckout(branch=branch, cause=cause):
            return ErrorReport(
                f"Switched HEAD to {branch} but could not update the working tree: {cause.message}",
                ErrorCode.REPO_ERROR,
                hint="Inspect 'git status' before continuing",
                needs_inspection=True,
            )
        case MissingAncestorCommit(cause=cause):
            return ErrorReport(
                f"Could not walk the commit history: {cause}",
                ErrorCode.REPO_ERROR,
                hint="If this is a shallow clone, run 'git fetch --unshallow'",
                needs_inspection=True,
            )
        case GitError(command=command, message=message):
            return ErrorReport(f"git {command} failed: {message}", ErrorCode.REPO_ERROR)
        case IoError(path=path, message=message):
            return ErrorReport(f"Could not access {path}: {message}", ErrorCode.IO_ERROR)
        case CommandFailed(command=command, returncode=rc):
            return ErrorReport(f"Command failed (exit {rc}): {command}", ErrorCode.COMMAND_ERROR)
        case UserInputError(message=message):
            return ErrorReport(message, ErrorCode.USER_ERROR)
        case InvalidPreReleaseVersion(version=version):
            return ErrorReport(
                f"Cannot bump pre-release version {version}",
                ErrorCode.USER_ERROR,
                hint="Pre-release versions must look like '<label>.<number>', e.g. 1.0.0-rc.1",
            )
        case InvalidSemanticVersion(version=version, file_name=file_name):
            return ErrorReport(
                f"'{version}' in {file_name} is not a semantic version", ErrorCode.USER_ERROR
            )
        case NoMetadataFileFound(file_name=file_name):
            message = (
                f"Unsupported versioned file: {file_name}"
                if file_name
                else "No versioned files configured"
            )
            return ErrorReport(
                message,
                ErrorCode.USER_ERROR,
                hint="Set [package] versioned_files to pyproject.toml, package.json or Cargo.toml",
            )
        case InvalidVersionedFile(file_name=file_name, reason=reason):
            return ErrorReport(f"Invalid {file_name}: {reason}", ErrorCode.USER_ERROR)
        case NoRelevantChanges():
            return ErrorReport(
                "No relevant changes to release",
                ErrorCode.USER_ERROR,
                hint="Only 'feat', 'fix' and breaking conventional commits produce a release",
            )
        case ReleaseNotPrepared():
            return ErrorReport(
                "No release has been prepared",
                ErrorCode.USER_ERROR,
                hint="Add a PrepareRelease step before Release",
            )
        case Bug(message=message):
            return ErrorReport(f"Internal error: {message}", ErrorCode.INTERNAL_ERROR)


def print_step_error(error: StepError, console: ConsoleProtocol) -> None:
    """Print step error to console with appropriate formatting."""
    report = describe_step_error(error)
    console.error(report.message)
    if report.needs_inspection:
        console.warning("The repository may be in an inconsistent state")
    if report.hint:
        console.print(f"hint: {report.hint}", Style.DIM)


def step_error_exit_code(error: StepError) -> int:
    """Get exit code for a step error."""
    return int(describe_step_error(error).code)
