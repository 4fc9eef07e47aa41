"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
)
from .errors import ErrorReport, describe_step_error, print_step_error, step_error_exit_code

__all__ = [
    "ConsoleProtocol",
    "ErrorReport",
    "MockConsole",
    "RichConsole",
    "Style",
    "describe_step_error",
    "print_step_error",
    "step_error_exit_code",
]
