"""Release tags: naming and discovery of the current versions."""

from __future__ import annotations

from dataclasses import dataclass

from relflow.core.result import Err, Ok, Result
from relflow.git.repository import GitError, Repository
from relflow.releases.semver import Version, parse_version


@dataclass(frozen=True, slots=True)
class CurrentVersions:
    """Latest released versions found in the tags.

    Attributes:
        stable: Newest non pre-release version, if any
        prerelease: Newest pre-release newer than ``stable``, if any
    """

    stable: Version | None
    prerelease: Version | None


def tag_name(version: Version, package_name: str | None = None) -> str:
    """``v1.2.3``, or ``<package>/v1.2.3`` for a named package."""
    if package_name:
        return f"{package_name}/v{version}"
    return f"v{version}"


def _tag_prefix(package_name: str | None) -> str:
    return f"{package_name}/v" if package_name else "v"


def get_current_versions_from_tag(
    package_name: str | None, repo: Repository
) -> Result[CurrentVersions | None, GitError]:
    """Find the newest stable and pre-release versions among the tags.

    Returns:
        Ok(None) if no tag matches the naming convention.
    """
    tags = repo.tags()
    if isinstance(tags, Err):
        return tags

    prefix = _tag_prefix(package_name)
    versions: list[Version] = []
    for tag in tags.value:
        if not tag.startswith(prefix):
            continue
        version = parse_version(tag[len(prefix) :])
        if version is not None:
            versions.append(version)

    if not versions:
        return Ok(None)

    stables = [v for v in versions if not v.is_prerelease]
    stable = max(stables) if stables else None
    pres = [v for v in versions if v.is_prerelease and (stable is None or v > stable)]
    prerelease = max(pres) if pres else None
    return Ok(CurrentVersions(stable=stable, prerelease=prerelease))
