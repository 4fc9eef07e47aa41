"""Branch-oriented workflow steps.

- ``switch_branches``: check out (or create) the branch of the selected issue
- ``rebase_branch``: rebase the current branch onto another, then switch to it
- ``select_issue_from_current_branch``: recover the issue from the branch name

All three describe themselves on the sink under Simulate without opening the
repository.
"""

from __future__ import annotations

from relflow.core.result import Err, Ok, Result
from relflow.git.branches import branch_name_from_issue, select_issue_from_branch_name
from relflow.git.repository import Repository
from relflow.issues.model import Issue
from relflow.runtime import Runtime
from relflow.state import Apply, ExecutionContext, Simulate, select_issue, selected_issue
from relflow.step_errors import (
    IncompleteCheckout,
    NotOnAGitBranch,
    StepError,
    UncommittedChanges,
)

__all__ = [
    "rebase_branch",
    "select_issue_from_current_branch",
    "switch_branches",
    "switch_to_branch",
]

PLACEHOLDER_ISSUE = Issue(key="123", summary="Fake Issue")


def switch_to_branch(repo: Repository, name: str) -> Result[None, StepError]:
    """Check out local branch ``name``, refusing to clobber pending changes.

    Nothing is touched if any status entry outside the ignore rules exists.
    Otherwise HEAD is repointed first and the working tree forced to match;
    if that second part fails, HEAD has already moved (IncompleteCheckout).
    """
    status = repo.status()
    if isinstance(status, Err):
        return status
    pending = tuple(entry.path for entry in status.value if not entry.is_ignored)
    if pending:
        return Err(UncommittedChanges(paths=pending))

    moved = repo.set_head(f"refs/heads/{name}")
    if isinstance(moved, Err):
        return moved

    checkout = repo.checkout_head_force()
    if isinstance(checkout, Err):
        return Err(IncompleteCheckout(branch=name, cause=checkout.error))
    return Ok(None)


def switch_branches(ctx: ExecutionContext, runtime: Runtime) -> Result[ExecutionContext, StepError]:
    """Switch to the selected issue's branch, creating it from a chosen base if needed."""
    issue = selected_issue(ctx.state)
    if isinstance(issue, Err):
        return issue
    new_branch_name = branch_name_from_issue(issue.value)

    match ctx:
        case Simulate(sink=sink):
            sink.print(f"Would switch to or create a branch named {new_branch_name}")
            return Ok(ctx)
        case Apply():
            pass

    discovered = Repository.discover(runtime.cwd)
    if isinstance(discovered, Err):
        return discovered
    repo = discovered.value

    if repo.branch_exists(new_branch_name):
        runtime.console.info(f"Found existing branch named {new_branch_name}, switching to it.")
    else:
        runtime.console.info(f"Creating a new branch called {new_branch_name}")
        branches = repo.local_branches()
        if isinstance(branches, Err):
            return branches
        base = runtime.prompt.select(branches.value, "Which branch do you want to base off of?")
        if isinstance(base, Err):
            return base
        created = repo.create_branch(new_branch_name, base.value)
        if isinstance(created, Err):
            return created

    switched = switch_to_branch(repo, new_branch_name)
    if isinstance(switched, Err):
        return switched
    return Ok(ctx)


def rebase_branch(
    to: str, ctx: ExecutionContext, runtime: Runtime
) -> Result[ExecutionContext, StepError]:
    """Rebase the current branch onto ``to`` and leave the user on ``to``."""
    match ctx:
        case Simulate(sink=sink):
            sink.print(f"Would rebase current branch onto {to}")
            return Ok(ctx)
        case Apply():
            pass

    discovered = Repository.discover(runtime.cwd)
    if isinstance(discovered, Err):
        return discovered
    repo = discovered.value

    head = repo.resolve_commit("HEAD")
    if isinstance(head, Err):
        return head
    target = repo.resolve_commit(f"refs/heads/{to}")
    if isinstance(target, Err):
        return target

    rebased = repo.rebase_onto(to)
    if isinstance(rebased, Err):
        return rebased
    runtime.console.success(f"Rebased current branch onto {to}")

    switched = switch_to_branch(repo, to)
    if isinstance(switched, Err):
        return switched
    runtime.console.info(f"Switched to branch {to}, don't forget to push!")
    return Ok(ctx)


def select_issue_from_current_branch(
    ctx: ExecutionContext, runtime: Runtime
) -> Result[ExecutionContext, StepError]:
    """Select the issue encoded in the current branch name."""
    match ctx:
        case Simulate(sink=sink):
            sink.print("Would attempt to parse current branch name to select current issue")
            return Ok(select_issue(ctx, PLACEHOLDER_ISSUE))
        case Apply():
            pass

    discovered = Repository.discover(runtime.cwd)
    if isinstance(discovered, Err):
        return discovered
    branch = discovered.value.head_branch()
    if branch is None:
        return Err(NotOnAGitBranch())

    issue = select_issue_from_branch_name(branch)
    if isinstance(issue, Err):
        return issue
    runtime.console.info(f"Auto-selecting issue {issue.value.key} from ref {branch}")
    return Ok(select_issue(ctx, issue.value))
