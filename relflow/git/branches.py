"""Correlation between issues and branch names.

An issue maps to exactly one branch name, and a branch created that way can be
read back into the issue it came from:

    Issue("FLOW-5", "A test issue")  <->  "FLOW-5-a-test-issue"
    Issue("42", "Fix crash")         <->  "42-fix-crash"

Only the key survives the round trip verbatim; the summary comes back in its
branch form (lower-cased, hyphenated).
"""

from __future__ import annotations

from relflow.core.result import Err, Ok, Result
from relflow.issues.model import Issue
from relflow.step_errors import BadGitBranchName

__all__ = ["branch_name_from_issue", "select_issue_from_branch_name"]


def _ascii_lower(text: str) -> str:
    return "".join(ch.lower() if ch.isascii() else ch for ch in text)


def _is_unsigned_int(segment: str) -> bool:
    return segment.isascii() and segment.isdigit()


def branch_name_from_issue(issue: Issue) -> str:
    """Derive the branch name for an issue: ``<key>-<summary>``, spaces as hyphens."""
    return f"{issue.key}-{_ascii_lower(issue.summary)}".replace(" ", "-")


def select_issue_from_branch_name(ref_name: str) -> Result[Issue, BadGitBranchName]:
    """Recover the issue from a branch name.

    Supported shapes, tried in order:
    - ``42-some-summary``: GitHub style, numeric first segment is the key
    - ``PROJ-42-some-summary``: Jira style, first two segments are the key
    """
    parts = ref_name.split("-")

    if _is_unsigned_int(parts[0]):
        return Ok(Issue(key=parts[0], summary="-".join(parts[1:])))
    if len(parts) >= 2 and _is_unsigned_int(parts[1]):
        return Ok(Issue(key="-".join(parts[:2]), summary="-".join(parts[2:])))
    return Err(BadGitBranchName(name=ref_name))
