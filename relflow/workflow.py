"""Named workflows: an ordered list of steps run against one context."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from relflow.core.config import Config
from relflow.core.result import Err, Ok, Result
from relflow.runtime import Runtime
from relflow.state import ExecutionContext
from relflow.step import Step, parse_step, run_step
from relflow.step_errors import StepError

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class Workflow:
    name: str
    steps: tuple[Step, ...]


@dataclass(frozen=True, slots=True)
class StepFailure:
    """A step failed; later steps were not run.

    Attributes:
        workflow: Name of the workflow
        index: Zero-based position of the failing step
        error: What went wrong
    """

    workflow: str
    index: int
    error: StepError


def load_workflows(config: Config) -> Result[list[Workflow], str]:
    """Parse every configured workflow's steps."""
    workflows: list[Workflow] = []
    for wf in config.workflows:
        steps: list[Step] = []
        for index, table in enumerate(wf.steps):
            step = parse_step(table)
            if isinstance(step, Err):
                return Err(f"workflow '{wf.name}' step {index + 1}: {step.error}")
            steps.append(step.value)
        workflows.append(Workflow(name=wf.name, steps=tuple(steps)))
    return Ok(workflows)


def find_workflow(workflows: list[Workflow], name: str) -> Workflow | None:
    for wf in workflows:
        if wf.name == name:
            return wf
    return None


def run_workflow(
    workflow: Workflow, ctx: ExecutionContext, runtime: Runtime
) -> Result[ExecutionContext, StepFailure]:
    """Run the steps in order, stopping at the first failure."""
    log = logger.bind(workflow=workflow.name)
    for index, step in enumerate(workflow.steps):
        result = run_step(step, ctx, runtime)
        if isinstance(result, Err):
            log.debug("step_failed", index=index, step=type(step).__name__)
            return Err(StepFailure(workflow=workflow.name, index=index, error=result.error))
        ctx = result.value
    log.debug("workflow_completed", steps=len(workflow.steps))
    return Ok(ctx)
