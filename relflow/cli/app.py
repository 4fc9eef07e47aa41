from __future__ import annotations

from pathlib import Path

import typer

from relflow import __version__
from relflow.cli.context import build_context
from relflow.core.config import CONFIG_FILE_NAME
from relflow.core.errors import ErrorCode
from relflow.core.logging import configure_logging
from relflow.core.result import Err
from relflow.generate import generate_config
from relflow.output.console import RichConsole
from relflow.output.errors import print_step_error, step_error_exit_code
from relflow.runtime import Runtime
from relflow.state import Apply, ExecutionContext, Simulate, WorkflowState
from relflow.workflow import find_workflow, run_workflow

app = typer.Typer(
    add_completion=False,
    rich_markup_mode="rich",
)


@app.command()
def run(
    workflow: str | None = typer.Argument(
        None, help="Name of the workflow to run (prompted for when omitted)."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Describe what the workflow would do without doing it."
    ),
    generate: bool = typer.Option(
        False, "--generate", help=f"Write a default {CONFIG_FILE_NAME} and exit."
    ),
    validate: bool = typer.Option(
        False, "--validate", help=f"Check {CONFIG_FILE_NAME} and exit."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs."),
    config: Path | None = typer.Option(
        None, "--config", help=f"Path to the config file (default: ./{CONFIG_FILE_NAME})."
    ),
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Run a release workflow defined in relflow.toml."""
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    configure_logging(level="DEBUG" if verbose else "WARNING")
    runtime = Runtime.default()
    console = runtime.console

    if generate:
        target = runtime.cwd / CONFIG_FILE_NAME
        if target.exists():
            console.error(f"{target} already exists")
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        written = generate_config(runtime.cwd)
        if isinstance(written, Err):
            print_step_error(written.error, console)
            raise typer.Exit(code=step_error_exit_code(written.error))
        console.success(f"Generated {written.value}")
        return

    cli = build_context(config or runtime.cwd / CONFIG_FILE_NAME, console)

    if validate:
        console.success(f"{CONFIG_FILE_NAME} is valid ({len(cli.workflows)} workflows)")
        return

    if not cli.workflows:
        console.error("No workflows configured")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if workflow is None:
        choice = runtime.prompt.select([wf.name for wf in cli.workflows], "Select a workflow")
        if isinstance(choice, Err):
            print_step_error(choice.error, console)
            raise typer.Exit(code=step_error_exit_code(choice.error))
        workflow = choice.value

    selected = find_workflow(cli.workflows, workflow)
    if selected is None:
        console.error(f"Unknown workflow: {workflow}")
        console.info(f"Available: {', '.join(wf.name for wf in cli.workflows)}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    state = WorkflowState.from_config(cli.config)
    ctx: ExecutionContext = Simulate(state=state, sink=console) if dry_run else Apply(state=state)

    result = run_workflow(selected, ctx, runtime)
    if isinstance(result, Err):
        failure = result.error
        print_step_error(failure.error, console)
        console.info(f"Workflow '{failure.workflow}' stopped at step {failure.index + 1}")
        raise typer.Exit(code=step_error_exit_code(failure.error))


def main() -> None:
    app()
