from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Issue:
    """An issue tracker item, as far as workflows care about it.

    Attributes:
        key: Tracker identifier ("123" on GitHub, "PROJ-123" on Jira)
        summary: Human-readable title
    """

    key: str
    summary: str
