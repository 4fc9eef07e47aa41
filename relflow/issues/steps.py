"""Issue selection and transition steps."""

from __future__ import annotations

from relflow.core.result import Err, Ok, Result
from relflow.issues.github import GitHubTracker
from relflow.issues.jira import JiraTracker, jira_auth_header
from relflow.issues.model import Issue
from relflow.issues.tracker import IssueTracker
from relflow.runtime import Runtime
from relflow.state import Apply, ExecutionContext, Simulate, select_issue, selected_issue
from relflow.step_errors import GitHubNotConfigured, JiraNotConfigured, StepError

PLACEHOLDER_ISSUE = Issue(key="FAKE-123", summary="Fake Issue")


def _choose_issue(
    tracker: IssueTracker,
    runtime: Runtime,
    status_filter: str | None,
    labels: tuple[str, ...] = (),
) -> Result[Issue, StepError]:
    found = tracker.search(status_filter, labels)
    if isinstance(found, Err):
        return found
    issues = found.value
    labels_by_choice = {f"{issue.key}: {issue.summary}": issue for issue in issues}
    choice = runtime.prompt.select(list(labels_by_choice), "Select an issue")
    if isinstance(choice, Err):
        return choice
    return Ok(labels_by_choice[choice.value])


def _jira_tracker(ctx: ExecutionContext, runtime: Runtime) -> Result[JiraTracker, StepError]:
    config = ctx.state.jira
    if config is None:
        return Err(JiraNotConfigured())
    auth = jira_auth_header(runtime.env, runtime.prompt)
    if isinstance(auth, Err):
        return auth
    return Ok(JiraTracker(config, runtime.http, auth.value))


def select_jira_issue(
    status: str, ctx: ExecutionContext, runtime: Runtime
) -> Result[ExecutionContext, StepError]:
    if ctx.state.jira is None:
        return Err(JiraNotConfigured())

    match ctx:
        case Simulate(sink=sink):
            sink.print(
                f"Would query configured Jira instance for issues with status {status}"
                " and prompt user to select one"
            )
            return Ok(select_issue(ctx, PLACEHOLDER_ISSUE))
        case Apply():
            pass

    tracker = _jira_tracker(ctx, runtime)
    if isinstance(tracker, Err):
        return tracker
    issue = _choose_issue(tracker.value, runtime, status)
    if isinstance(issue, Err):
        return issue
    return Ok(select_issue(ctx, issue.value))


def transition_jira_issue(
    status: str, ctx: ExecutionContext, runtime: Runtime
) -> Result[ExecutionContext, StepError]:
    if ctx.state.jira is None:
        return Err(JiraNotConfigured())
    issue = selected_issue(ctx.state)
    if isinstance(issue, Err):
        return issue

    match ctx:
        case Simulate(sink=sink):
            sink.print(
                f"Would transition currently selected issue ({issue.value.key}) to {status}"
            )
            return Ok(ctx)
        case Apply():
            pass

    tracker = _jira_tracker(ctx, runtime)
    if isinstance(tracker, Err):
        return tracker
    moved = tracker.value.transition(issue.value.key, status)
    if isinstance(moved, Err):
        return moved
    runtime.console.success(f"{issue.value.key} transitioned to {status}")
    return Ok(ctx)


def select_github_issue(
    labels: tuple[str, ...], ctx: ExecutionContext, runtime: Runtime
) -> Result[ExecutionContext, StepError]:
    config = ctx.state.github
    if config is None:
        return Err(GitHubNotConfigured())

    match ctx:
        case Simulate(sink=sink):
            label_text = f" with labels {', '.join(labels)}" if labels else ""
            sink.print(
                f"Would query configured GitHub instance for issues{label_text}"
                " and prompt user to select one"
            )
            return Ok(select_issue(ctx, PLACEHOLDER_ISSUE))
        case Apply():
            pass

    issue = _choose_issue(GitHubTracker(config, runtime.cwd), runtime, None, labels)
    if isinstance(issue, Err):
        return issue
    return Ok(select_issue(ctx, issue.value))
