from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from relflow.releases.conventional import ConventionalCommit
from relflow.releases.semver import Version

CHANGELOG_TITLE = "# Changelog"


@dataclass(slots=True)
class ChangelogSections:
    breaking: list[str] = field(default_factory=list)
    features: list[str] = field(default_factory=list)
    fixes: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.breaking or self.features or self.fixes)


def _entry(commit: ConventionalCommit, text: str) -> str:
    if commit.scope:
        return f"{commit.scope}: {text}"
    return text


def sections_from(commits: Iterable[ConventionalCommit]) -> ChangelogSections:
    """Group commits into changelog sections; other types are left out."""
    sections = ChangelogSections()
    for commit in commits:
        if commit.breaking:
            sections.breaking.append(_entry(commit, commit.breaking_summary))
        elif commit.kind == "feat":
            sections.features.append(_entry(commit, commit.description))
        elif commit.kind == "fix":
            sections.fixes.append(_entry(commit, commit.description))
    return sections


def release_notes(sections: ChangelogSections) -> str:
    """Markdown body of a release: one ``###`` block per non-empty section."""
    blocks: list[str] = []
    for title, entries in (
        ("Breaking Changes", sections.breaking),
        ("Features", sections.features),
        ("Fixes", sections.fixes),
    ):
        if entries:
            lines = [f"### {title}", ""] + [f"- {e}" for e in entries]
            blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def render_section(version: Version, notes: str, today: date) -> str:
    return f"## {version} ({today.isoformat()})\n\n{notes}\n"


def insert_section(existing: str, section: str) -> str:
    """Insert a release section above the newest one (the first ``## `` line)."""
    if not existing.strip():
        return f"{CHANGELOG_TITLE}\n\n{section}"

    lines = existing.splitlines(keepends=True)
    for i, line in enumerate(lines):
        if line.startswith("## "):
            return "".join(lines[:i]) + section + "\n" + "".join(lines[i:])

    body = existing if existing.endswith("\n") else existing + "\n"
    return f"{body}\n{section}"
