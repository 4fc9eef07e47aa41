from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from relflow.core.config import Config, load_config
from relflow.core.errors import ErrorCode
from relflow.core.result import Err
from relflow.output.console import ConsoleProtocol
from relflow.workflow import Workflow, load_workflows


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    workflows: list[Workflow]
    console: ConsoleProtocol


def build_context(config_path: Path, console: ConsoleProtocol) -> CLIContext:
    """Load the config and parse its workflows, exiting on failure."""
    config_result = load_config(config_path)
    if isinstance(config_result, Err):
        console.error(config_result.error.message)
        if not config_path.exists():
            console.info("Run 'relflow --generate' to create a default relflow.toml")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    workflows = load_workflows(config_result.value)
    if isinstance(workflows, Err):
        console.error(f"Invalid {config_path.name}: {workflows.error}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(config=config_result.value, workflows=workflows.value, console=console)
