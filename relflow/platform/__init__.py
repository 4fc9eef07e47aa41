"""Platform abstraction layer."""

from .files import atomic_write_text
from .process import ProcessError, run, run_shell

__all__ = [
    "ProcessError",
    "atomic_write_text",
    "run",
    "run_shell",
]
