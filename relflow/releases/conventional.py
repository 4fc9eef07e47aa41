"""Conventional commit parsing.

Only the parts relflow acts on are extracted: the type, an optional scope,
the description, and whether the commit is breaking (``!`` after the type or
a ``BREAKING CHANGE:`` footer).
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from relflow.releases.semver import Rule

_HEADER_RE = re.compile(
    r"^(?P<type>[A-Za-z]+)(?:\((?P<scope>[^()\r\n]*)\))?(?P<bang>!)?: (?P<description>\S.*)$"
)
_BREAKING_FOOTER_RE = re.compile(r"^BREAKING[ -]CHANGE: (?P<description>\S.*)$")


@dataclass(frozen=True, slots=True)
class ConventionalCommit:
    kind: str
    scope: str | None
    description: str
    breaking: bool = False
    breaking_description: str | None = None

    @property
    def breaking_summary(self) -> str:
        return self.breaking_description or self.description


def parse_commit(message: str) -> ConventionalCommit | None:
    """Parse a full commit message; None if its subject is not conventional."""
    lines = message.strip().splitlines()
    if not lines:
        return None
    m = _HEADER_RE.match(lines[0].strip())
    if m is None:
        return None

    breaking_description: str | None = None
    for line in lines[1:]:
        footer = _BREAKING_FOOTER_RE.match(line.strip())
        if footer is not None:
            breaking_description = footer.group("description").strip()
            break

    return ConventionalCommit(
        kind=m.group("type").lower(),
        scope=m.group("scope") or None,
        description=m.group("description").strip(),
        breaking=m.group("bang") is not None or breaking_description is not None,
        breaking_description=breaking_description,
    )


def parse_commits(messages: Iterable[str]) -> list[ConventionalCommit]:
    return [c for c in (parse_commit(m) for m in messages) if c is not None]


def rule_for(commits: Iterable[ConventionalCommit]) -> Rule | None:
    """The bump rule these commits call for, or None if none is relevant."""
    rule: Rule | None = None
    for commit in commits:
        if commit.breaking:
            return "major"
        if commit.kind == "feat":
            rule = "minor"
        elif commit.kind == "fix" and rule is None:
            rule = "patch"
    return rule
