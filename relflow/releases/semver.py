from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from relflow.core.result import Err, Ok, Result

Rule = Literal["major", "minor", "patch", "pre", "release"]

RULES: tuple[Rule, ...] = ("major", "minor", "patch", "pre", "release")

_PRE_IDENT = r"(?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*)"
_VERSION_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    rf"(?:-({_PRE_IDENT}(?:\.{_PRE_IDENT})*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)
_PRE_RE = re.compile(r"^([0-9A-Za-z-]+)\.(0|[1-9]\d*)$")


@dataclass(frozen=True, slots=True)
class Version:
    major: int
    minor: int
    patch: int
    pre: str | None = None

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{self.pre}" if self.pre else base

    @property
    def is_prerelease(self) -> bool:
        return self.pre is not None

    @property
    def stable(self) -> Version:
        return Version(self.major, self.minor, self.patch)

    def _sort_key(self) -> tuple[int, int, int, int, tuple[tuple[int, int, str], ...]]:
        # A pre-release sorts before the stable version it leads up to
        if self.pre is None:
            return (self.major, self.minor, self.patch, 1, ())
        idents = tuple(
            (0, int(part), "") if part.isdigit() else (1, 0, part) for part in self.pre.split(".")
        )
        return (self.major, self.minor, self.patch, 0, idents)

    def __lt__(self, other: Version) -> bool:
        return self._sort_key() < other._sort_key()

    def __le__(self, other: Version) -> bool:
        return self._sort_key() <= other._sort_key()

    def __gt__(self, other: Version) -> bool:
        return self._sort_key() > other._sort_key()

    def __ge__(self, other: Version) -> bool:
        return self._sort_key() >= other._sort_key()


def parse_version(text: str) -> Version | None:
    """Parse a Semantic Version; build metadata is accepted and dropped."""
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return None
    return Version(int(m.group(1)), int(m.group(2)), int(m.group(3)), m.group(4))


def bump(version: Version, rule: Rule, label: str | None = None) -> Result[Version, str]:
    """Apply a bump rule.

    Returns:
        Ok(new version), or Err(version text) when the current pre-release
        is not shaped ``<label>.<N>``.
    """
    match rule:
        case "major":
            if version.major == 0:
                return Ok(Version(0, version.minor + 1, 0))
            return Ok(Version(version.major + 1, 0, 0))
        case "minor":
            return Ok(Version(version.major, version.minor + 1, 0))
        case "patch":
            return Ok(Version(version.major, version.minor, version.patch + 1))
        case "release":
            return Ok(version.stable)
        case "pre":
            if not label:
                raise ValueError("pre rule requires a label")
            if version.pre is None:
                return Ok(Version(version.major, version.minor, version.patch + 1, f"{label}.0"))
            m = _PRE_RE.match(version.pre)
            if m is None:
                return Err(str(version))
            if m.group(1) == label:
                n = int(m.group(2)) + 1
                return Ok(Version(version.major, version.minor, version.patch, f"{label}.{n}"))
            return Ok(Version(version.major, version.minor, version.patch, f"{label}.0"))
