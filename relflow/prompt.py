"""Blocking user prompts.

Steps never read the terminal themselves; they go through a ``Prompt`` so
tests can script the answers.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Protocol

import typer

from relflow.core.result import Err, Ok, Result
from relflow.step_errors import UserInputError

__all__ = ["Prompt", "ScriptedPrompt", "TerminalPrompt"]


class Prompt(Protocol):
    def select(self, choices: list[str], question: str) -> Result[str, UserInputError]:
        """Ask the user to pick exactly one of ``choices``."""
        ...

    def secret(self, question: str) -> Result[str, UserInputError]:
        """Ask for a value without echoing it (API tokens)."""
        ...


class TerminalPrompt:
    """Prompt on the controlling terminal."""

    def select(self, choices: list[str], question: str) -> Result[str, UserInputError]:
        from relflow.platform.selector import select_one

        if not choices:
            return Err(UserInputError(message=f"nothing to choose from: {question}"))
        try:
            result = select_one(title=question, options=choices)
        except RuntimeError as e:
            return Err(UserInputError(message=str(e)))
        if result.action != "select" or result.value is None:
            return Err(UserInputError(message="selection cancelled"))
        return Ok(result.value)

    def secret(self, question: str) -> Result[str, UserInputError]:
        try:
            value: str = typer.prompt(question, hide_input=True)
        except typer.Abort:
            return Err(UserInputError(message="input aborted"))
        if not value.strip():
            return Err(UserInputError(message="empty input"))
        return Ok(value.strip())


def _empty_answers() -> deque[str]:
    return deque()


@dataclass
class ScriptedPrompt:
    """Prompt that replays canned answers, for tests.

    ``select`` answers must be one of the offered choices; running out of
    answers is reported as a UserInputError like a closed stdin would be.
    """

    answers: deque[str] = field(default_factory=_empty_answers)
    questions: list[str] = field(default_factory=list)

    @classmethod
    def of(cls, *answers: str) -> ScriptedPrompt:
        return cls(answers=deque(answers))

    def select(self, choices: list[str], question: str) -> Result[str, UserInputError]:
        self.questions.append(question)
        if not self.answers:
            return Err(UserInputError(message="no scripted answer left"))
        answer = self.answers.popleft()
        if answer not in choices:
            return Err(UserInputError(message=f"{answer!r} is not one of {choices}"))
        return Ok(answer)

    def secret(self, question: str) -> Result[str, UserInputError]:
        self.questions.append(question)
        if not self.answers:
            return Err(UserInputError(message="no scripted answer left"))
        return Ok(self.answers.popleft())
