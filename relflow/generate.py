"""Default ``relflow.toml`` generation (``relflow --generate``)."""

from __future__ import annotations

import re
from pathlib import Path

import structlog

from relflow.core.config import CONFIG_FILE_NAME, GitHubConfig
from relflow.core.result import Err, Ok, Result
from relflow.git.repository import Repository
from relflow.platform.files import atomic_write_text
from relflow.releases.versioned_files import SUPPORTED_FILES
from relflow.step_errors import IoError

logger = structlog.get_logger()

_GITHUB_REMOTE_RE = re.compile(
    r"github\.com[:/](?P<owner>[^/\s]+)/(?P<repo>[^/\s]+?)(?:\.git)?/?$"
)

_BASE_TEMPLATE = """\
[package]
versioned_files = [{versioned_files}]
changelog = "CHANGELOG.md"

[[workflows]]
name = "release"

[[workflows.steps]]
type = "PrepareRelease"

[[workflows.steps]]
type = "Command"
command = "git commit -m \\"chore: prepare release $version\\""
variables = {{ "$version" = "Version" }}

[[workflows.steps]]
type = "Command"
command = "git push"

[[workflows.steps]]
type = "Release"
"""

_GITHUB_TEMPLATE = """
[[workflows]]
name = "Start New Task"

[[workflows.steps]]
type = "SelectGitHubIssue"

[[workflows.steps]]
type = "SwitchBranches"

[github]
owner = "{owner}"
repo = "{repo}"
"""


def github_from_remote(url: str) -> GitHubConfig | None:
    """Owner and repository of a github.com remote URL (https or ssh)."""
    m = _GITHUB_REMOTE_RE.search(url.strip())
    if m is None:
        return None
    return GitHubConfig(owner=m.group("owner"), repo=m.group("repo"))


def render_default_config(versioned_files: list[str], github: GitHubConfig | None) -> str:
    quoted = ", ".join(f'"{name}"' for name in versioned_files)
    text = _BASE_TEMPLATE.format(versioned_files=quoted)
    if github is not None:
        text += _GITHUB_TEMPLATE.format(owner=github.owner, repo=github.repo)
    return text


def generate_config(cwd: Path) -> Result[Path, IoError]:
    """Write a default relflow.toml in ``cwd``.

    Versioned files are whichever supported metadata files exist in ``cwd``.
    A GitHub flavoured file is produced when the first remote points at
    github.com.
    """
    versioned = [name for name in SUPPORTED_FILES if (cwd / name).is_file()]

    github: GitHubConfig | None = None
    discovered = Repository.discover(cwd)
    if not isinstance(discovered, Err):
        remote = discovered.value.first_remote_url()
        if remote is not None:
            github = github_from_remote(remote)
    logger.debug("generating_config", versioned_files=versioned, github=github is not None)

    path = cwd / CONFIG_FILE_NAME
    try:
        atomic_write_text(path, render_default_config(versioned, github))
    except OSError as e:
        return Err(IoError(path=path, message=str(e)))
    return Ok(path)
