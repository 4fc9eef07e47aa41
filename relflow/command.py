"""The Command step: run a shell command with workflow values substituted.

Variables map a placeholder string in the command to a value:

    [[workflows.steps]]
    type = "Command"
    command = "git commit -m \\"Bump to version\\""
    variables = { "version" = "Version" }

``Version`` is the prepared release version if there is one, else the current
package version. ``IssueBranch`` is the branch name of the selected issue.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Literal

from relflow.core.result import Err, Ok, Result
from relflow.git.branches import branch_name_from_issue
from relflow.platform.process import run_shell
from relflow.releases.versioned_files import current_package_version
from relflow.runtime import Runtime
from relflow.state import Apply, ExecutionContext, Simulate, selected_issue
from relflow.step_errors import CommandFailed, StepError

Variable = Literal["Version", "IssueBranch"]

VARIABLES: tuple[Variable, ...] = ("Version", "IssueBranch")


def _variable_value(
    variable: Variable, ctx: ExecutionContext, runtime: Runtime
) -> Result[str, StepError]:
    match variable:
        case "Version":
            if ctx.state.release is not None:
                return Ok(str(ctx.state.release.version))
            version = current_package_version(runtime.cwd, ctx.state.package)
            if isinstance(version, Err):
                return version
            return Ok(str(version.value))
        case "IssueBranch":
            issue = selected_issue(ctx.state)
            if isinstance(issue, Err):
                return issue
            return Ok(branch_name_from_issue(issue.value))


def render_command(
    command: str, variables: Mapping[str, Variable], ctx: ExecutionContext, runtime: Runtime
) -> Result[str, StepError]:
    rendered = command
    for placeholder, variable in variables.items():
        value = _variable_value(variable, ctx, runtime)
        if isinstance(value, Err):
            return value
        rendered = rendered.replace(placeholder, value.value)
    return Ok(rendered)


def run_command(
    command: str, variables: Mapping[str, Variable], ctx: ExecutionContext, runtime: Runtime
) -> Result[ExecutionContext, StepError]:
    rendered = render_command(command, variables, ctx, runtime)
    if isinstance(rendered, Err):
        return rendered

    match ctx:
        case Simulate(sink=sink):
            sink.print(f"Would run {rendered.value}")
            return Ok(ctx)
        case Apply():
            pass

    result = run_shell(rendered.value, cwd=runtime.cwd)
    if isinstance(result, Err):
        return Err(CommandFailed(command=rendered.value, returncode=result.error.returncode))
    return Ok(ctx)
