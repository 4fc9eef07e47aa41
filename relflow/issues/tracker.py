from __future__ import annotations

from typing import Protocol

from relflow.core.result import Result
from relflow.issues.model import Issue
from relflow.step_errors import StepError


class IssueTracker(Protocol):
    """An issue tracker workflows can search and update.

    Steps only see ``Issue`` values; which tracker produced them is
    decided by configuration.
    """

    def search(
        self, status_filter: str | None, labels: tuple[str, ...] = ()
    ) -> Result[list[Issue], StepError]:
        """Issues in the given status (and carrying every label, where supported)."""
        ...

    def transition(self, issue_key: str, target_status: str) -> Result[None, StepError]:
        """Move an issue to ``target_status``."""
        ...
