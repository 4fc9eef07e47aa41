"""Subprocess execution with Result-based error handling.

All external programs relflow drives (``git``, ``gh``, user shell commands)
go through this module, so adapters never deal with ``subprocess``
exceptions directly.

Usage:
    match run(["git", "rev-parse", "HEAD"], cwd=Path(".")):
        case Ok(stdout):
            print(stdout.strip())
        case Err(error):
            print(f"Failed: {error.stderr}")
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from relflow.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_shell"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process (-1 if it never ran).
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def _failure(
    cmd: list[str] | tuple[str, ...], returncode: int, stderr: str, stdout: str = ""
) -> Err[ProcessError]:
    return Err(
        ProcessError(command=tuple(cmd), returncode=returncode, stdout=stdout, stderr=stderr)
    )


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
    input_text: str | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return its stdout.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit).
        input_text: Text fed to stdin.

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure. A command that
        never ran (missing binary, timeout) reports returncode -1.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            input=input_text,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return _failure(cmd, -1, f"Command timed out after {timeout}s")
    except OSError as e:
        return _failure(cmd, -1, str(e))

    if proc.returncode != 0:
        return _failure(cmd, proc.returncode, proc.stderr, proc.stdout)
    return Ok(proc.stdout)


def run_shell(command: str, cwd: Path) -> Result[None, ProcessError]:
    """Run a command line through the user's shell, streaming its output.

    Returns:
        Ok(None) on success, Err(ProcessError) on non-zero exit.
    """
    try:
        proc = subprocess.run(command, cwd=str(cwd), shell=True, check=False)
    except OSError as e:
        return _failure((command,), -1, str(e))

    if proc.returncode != 0:
        return _failure((command,), proc.returncode, "")
    return Ok(None)
