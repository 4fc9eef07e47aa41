"""Commit history since the last stable release.

``get_commit_messages_after_last_stable_version`` returns the raw messages of
every commit reachable from HEAD but not from the commit tagged with the
current stable version, newest first. Without such a tag the whole
history is returned: a first release is not an error, and including too much
history is preferred over blocking the user.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from relflow.core.result import Err, Ok, Result
from relflow.git.repository import Repository
from relflow.releases.tags import get_current_versions_from_tag, tag_name
from relflow.step_errors import MissingAncestorCommit, StepError

logger = structlog.get_logger()

__all__ = ["get_commit_messages_after_last_stable_version"]


def _boundary_commit(repo: Repository, package_name: str | None) -> Result[str | None, StepError]:
    versions = get_current_versions_from_tag(package_name, repo)
    if isinstance(versions, Err):
        return versions

    stable = versions.value.stable if versions.value is not None else None
    if stable is None:
        logger.warning("no_stable_version_tag", package=package_name)
        return Ok(None)

    tag = tag_name(stable, package_name)
    logger.debug("processing_commits_since_tag", tag=tag)
    commit_id = repo.peel_tag(tag)
    if commit_id is None:
        logger.error("unresolvable_version_tag", reference=f"refs/tags/{tag}")
    return Ok(commit_id)


def _is_missing_object(message: str) -> bool:
    text = message.lower()
    markers = (
        "bad object",
        "missing blob",
        "missing tree",
        "missing commit",
        "unable to read",
        "could not read",
        "invalid object",
    )
    return any(marker in text for marker in markers)


def get_commit_messages_after_last_stable_version(
    package_name: str | None, cwd: Path
) -> Result[list[str], StepError]:
    """Messages of the commits since the last stable version tag.

    Args:
        package_name: Package name used in tag names, if tags are prefixed
        cwd: Directory inside the repository

    Returns:
        Ok(messages) in traversal order, newest first.
        Err(MissingAncestorCommit) if the history is incomplete before the
        boundary is reached.
    """
    discovered = Repository.discover(cwd)
    if isinstance(discovered, Err):
        return discovered
    repo = discovered.value

    boundary = _boundary_commit(repo, package_name)
    if isinstance(boundary, Err):
        return boundary

    # HEAD ^boundary: the tagged commit and all of its ancestors are left out
    log = repo.commit_log("HEAD", exclude=boundary.value)
    if isinstance(log, Err):
        if _is_missing_object(log.error.message):
            return Err(MissingAncestorCommit(cause=log.error.message))
        return log

    shallow = repo.shallow_commits()
    messages: list[str] = []
    for record in log.value:
        logger.debug("checking_commit_message", commit=record.id, message=record.message)
        messages.append(record.message)
        if record.id in shallow:
            return Err(MissingAncestorCommit(cause=f"parents of {record.id} are not available"))
    return Ok(messages)
