"""Workflow state and the dual-mode execution context.

A workflow threads one ``ExecutionContext`` through its steps. The context is
either ``Apply`` (perform real effects) or ``Simulate`` (perform none, write
one description line per intended effect to ``sink``). Steps branch on the
variant in a single function and hand back a context of the same variant.

Usage:
    def my_step(ctx: ExecutionContext) -> Result[ExecutionContext, StepError]:
        issue = selected_issue(ctx.state)
        if isinstance(issue, Err):
            return issue
        match ctx:
            case Simulate(sink=sink):
                sink.print(f"Would do something with {issue.value.key}")
                return Ok(ctx)
            case Apply():
                ...
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from relflow.core.config import Config, GitHubConfig, JiraConfig, PackageConfig
from relflow.core.result import Err, Ok, Result
from relflow.issues.model import Issue
from relflow.output.console import ConsoleProtocol
from relflow.releases.semver import Version
from relflow.step_errors import NoIssueSelected

__all__ = [
    "Apply",
    "ExecutionContext",
    "IssueSelection",
    "NONE_SELECTED",
    "NoneSelected",
    "PreparedRelease",
    "Selected",
    "Simulate",
    "WorkflowState",
    "select_issue",
    "selected_issue",
    "with_state",
]


@dataclass(frozen=True, slots=True)
class NoneSelected:
    """No issue has been selected yet."""


@dataclass(frozen=True, slots=True)
class Selected:
    issue: Issue


IssueSelection = NoneSelected | Selected

NONE_SELECTED = NoneSelected()


@dataclass(frozen=True, slots=True)
class PreparedRelease:
    """Outcome of PrepareRelease, consumed by the Release step.

    Attributes:
        version: The version that was just prepared
        notes: Markdown release notes (the new changelog section body)
    """

    version: Version
    notes: str


@dataclass(frozen=True, slots=True)
class WorkflowState:
    """State shared by every step of one workflow run."""

    package: PackageConfig | None = None
    jira: JiraConfig | None = None
    github: GitHubConfig | None = None
    issue: IssueSelection = NONE_SELECTED
    release: PreparedRelease | None = None

    @classmethod
    def from_config(cls, config: Config) -> WorkflowState:
        return cls(package=config.package, jira=config.jira, github=config.github)


@dataclass(frozen=True, slots=True)
class Apply:
    """Perform real effects."""

    state: WorkflowState


@dataclass(frozen=True, slots=True)
class Simulate:
    """Describe effects on ``sink`` instead of performing them."""

    state: WorkflowState
    sink: ConsoleProtocol


ExecutionContext = Apply | Simulate


def with_state(ctx: ExecutionContext, state: WorkflowState) -> ExecutionContext:
    """Rebuild ``ctx`` around a new state, keeping its mode."""
    match ctx:
        case Apply():
            return Apply(state=state)
        case Simulate(sink=sink):
            return Simulate(state=state, sink=sink)


def selected_issue(state: WorkflowState) -> Result[Issue, NoIssueSelected]:
    match state.issue:
        case Selected(issue=issue):
            return Ok(issue)
        case NoneSelected():
            return Err(NoIssueSelected())


def select_issue(ctx: ExecutionContext, issue: Issue) -> ExecutionContext:
    """Return ``ctx`` with ``issue`` recorded as the selected issue."""
    return with_state(ctx, replace(ctx.state, issue=Selected(issue=issue)))
