"""Workflow steps: parsing from configuration and dispatch.

A step table names its kind with ``type``; the remaining keys are the step's
parameters::

    [[workflows.steps]]
    type = "RebaseBranch"
    to = "main"
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

import structlog

from relflow.command import VARIABLES, Variable, run_command
from relflow.core.result import Err, Ok, Result
from relflow.core.structured import get_str, get_str_list, get_table
from relflow.git.workflow import rebase_branch, select_issue_from_current_branch, switch_branches
from relflow.issues.steps import select_github_issue, select_jira_issue, transition_jira_issue
from relflow.releases.semver import RULES, Rule
from relflow.releases.steps import bump_version, prepare_release, release
from relflow.runtime import Runtime
from relflow.state import ExecutionContext
from relflow.step_errors import StepError

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class SelectJiraIssue:
    status: str


@dataclass(frozen=True, slots=True)
class TransitionJiraIssue:
    status: str


@dataclass(frozen=True, slots=True)
class SelectGitHubIssue:
    labels: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class SelectIssueFromBranch:
    pass


@dataclass(frozen=True, slots=True)
class SwitchBranches:
    pass


@dataclass(frozen=True, slots=True)
class RebaseBranch:
    to: str


@dataclass(frozen=True, slots=True)
class BumpVersion:
    rule: Rule
    label: str | None = None


@dataclass(frozen=True, slots=True)
class Command:
    command: str
    variables: Mapping[str, Variable] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class PrepareRelease:
    prerelease_label: str | None = None


@dataclass(frozen=True, slots=True)
class Release:
    pass


Step = (
    SelectJiraIssue
    | TransitionJiraIssue
    | SelectGitHubIssue
    | SelectIssueFromBranch
    | SwitchBranches
    | RebaseBranch
    | BumpVersion
    | Command
    | PrepareRelease
    | Release
)

STEP_TYPES = (
    "SelectJiraIssue",
    "TransitionJiraIssue",
    "SelectGitHubIssue",
    "SelectIssueFromBranch",
    "SwitchBranches",
    "RebaseBranch",
    "BumpVersion",
    "Command",
    "PrepareRelease",
    "Release",
)


def _required(table: Mapping[str, object], step_type: str, key: str) -> Result[str, str]:
    value = get_str(table, key)
    if value is None:
        return Err(f"{step_type} requires a string '{key}'")
    return Ok(value)


def _parse_variables(table: Mapping[str, object]) -> Result[dict[str, Variable], str]:
    raw = get_table(table, "variables")
    if raw is None:
        if "variables" in table:
            return Err("Command variables must be a table")
        return Ok({})
    variables: dict[str, Variable] = {}
    for placeholder, value in raw.items():
        match value:
            case "Version" | "IssueBranch":
                variables[placeholder] = value
            case _:
                return Err(
                    f"unknown variable {value!r} for '{placeholder}'"
                    f" (expected one of: {', '.join(VARIABLES)})"
                )
    return Ok(variables)


def _parse_bump(table: Mapping[str, object]) -> Result[Step, str]:
    rule = get_str(table, "rule")
    label = get_str(table, "label")
    match rule:
        case "major" | "minor" | "patch" | "release":
            return Ok(BumpVersion(rule=rule, label=label))
        case "pre":
            if not label:
                return Err("BumpVersion with rule 'pre' requires a 'label'")
            return Ok(BumpVersion(rule=rule, label=label))
        case _:
            return Err(f"BumpVersion rule must be one of: {', '.join(RULES)}")


def parse_step(table: Mapping[str, object]) -> Result[Step, str]:
    """Turn a raw step table into a step value."""
    step_type = get_str(table, "type")
    match step_type:
        case "SelectJiraIssue" | "TransitionJiraIssue":
            status = _required(table, step_type, "status")
            if isinstance(status, Err):
                return status
            if step_type == "SelectJiraIssue":
                return Ok(SelectJiraIssue(status=status.value))
            return Ok(TransitionJiraIssue(status=status.value))
        case "SelectGitHubIssue":
            labels = get_str_list(table, "labels")
            if labels is None and "labels" in table:
                return Err("SelectGitHubIssue labels must be a list of strings")
            return Ok(SelectGitHubIssue(labels=tuple(labels or ())))
        case "SelectIssueFromBranch":
            return Ok(SelectIssueFromBranch())
        case "SwitchBranches":
            return Ok(SwitchBranches())
        case "RebaseBranch":
            to = _required(table, step_type, "to")
            if isinstance(to, Err):
                return to
            return Ok(RebaseBranch(to=to.value))
        case "BumpVersion":
            return _parse_bump(table)
        case "Command":
            command = _required(table, step_type, "command")
            if isinstance(command, Err):
                return command
            variables = _parse_variables(table)
            if isinstance(variables, Err):
                return variables
            return Ok(Command(command=command.value, variables=variables.value))
        case "PrepareRelease":
            return Ok(PrepareRelease(prerelease_label=get_str(table, "prerelease_label")))
        case "Release":
            return Ok(Release())
        case None:
            return Err("step is missing a 'type'")
        case _:
            expected = ", ".join(STEP_TYPES)
            return Err(f"unknown step type '{step_type}' (expected one of: {expected})")


def run_step(
    step: Step, ctx: ExecutionContext, runtime: Runtime
) -> Result[ExecutionContext, StepError]:
    """Run one step, returning the context for the next one."""
    logger.debug("running_step", step=type(step).__name__)
    match step:
        case SelectJiraIssue(status=status):
            return select_jira_issue(status, ctx, runtime)
        case TransitionJiraIssue(status=status):
            return transition_jira_issue(status, ctx, runtime)
        case SelectGitHubIssue(labels=labels):
            return select_github_issue(labels, ctx, runtime)
        case SelectIssueFromBranch():
            return select_issue_from_current_branch(ctx, runtime)
        case SwitchBranches():
            return switch_branches(ctx, runtime)
        case RebaseBranch(to=to):
            return rebase_branch(to, ctx, runtime)
        case BumpVersion(rule=rule, label=label):
            return bump_version(rule, label, ctx, runtime)
        case Command(command=command, variables=variables):
            return run_command(command, variables, ctx, runtime)
        case PrepareRelease(prerelease_label=label):
            return prepare_release(label, ctx, runtime)
        case Release():
            return release(ctx, runtime)
