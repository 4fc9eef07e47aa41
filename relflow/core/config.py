"""Typed configuration loading.

The configuration lives in ``relflow.toml`` at the project root::

    [package]
    versioned_files = ["pyproject.toml"]
    changelog = "CHANGELOG.md"

    [[workflows]]
    name = "Start New Task"

    [[workflows.steps]]
    type = "SelectGitHubIssue"

    [[workflows.steps]]
    type = "SwitchBranches"

    [github]
    owner = "acme"
    repo = "widgets"

Steps are kept as raw tables here; ``relflow.workflow`` turns them into
step values so that config loading has no dependency on step semantics.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_list,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "Config",
    "ConfigError",
    "GitHubConfig",
    "JiraConfig",
    "PackageConfig",
    "WorkflowConfig",
    "load_config",
]

CONFIG_FILE_NAME = "relflow.toml"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class PackageConfig:
    """The single package whose version relflow manages.

    Attributes:
        versioned_files: Metadata files carrying the version, relative to the root.
        changelog: Changelog file to prepend release notes to, if any.
        name: Package name, used to prefix release tags (``<name>/v1.2.3``).
    """

    versioned_files: tuple[str, ...] = ()
    changelog: str | None = None
    name: str | None = None


@dataclass(frozen=True, slots=True)
class JiraConfig:
    url: str
    project: str


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    owner: str
    repo: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True, slots=True)
class WorkflowConfig:
    """A named workflow with its raw step tables."""

    name: str
    steps: tuple[StrDict, ...]


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    workflows: tuple[WorkflowConfig, ...] = ()
    package: PackageConfig | None = None
    jira: JiraConfig | None = None
    github: GitHubConfig | None = None

    def workflow(self, name: str) -> WorkflowConfig | None:
        for wf in self.workflows:
            if wf.name == name:
                return wf
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Result[Config, str]:
        """Create Config from parsed TOML, validating its shape."""
        workflows_raw = get_list(data, "workflows")
        if workflows_raw is None:
            return Err("missing [[workflows]] array")

        workflows: list[WorkflowConfig] = []
        for index, item in enumerate(workflows_raw):
            table = as_str_dict(item)
            if table is None:
                return Err(f"workflows[{index}] must be a table")
            name = get_str(table, "name")
            if name is None:
                return Err(f"workflows[{index}] is missing a name")
            steps_raw = get_list(table, "steps") or []
            steps: list[StrDict] = []
            for step_index, step_item in enumerate(steps_raw):
                step = as_str_dict(step_item)
                if step is None:
                    return Err(f"workflow '{name}' step {step_index} must be a table")
                steps.append(step)
            workflows.append(WorkflowConfig(name=name, steps=tuple(steps)))

        package: PackageConfig | None = None
        package_table = get_table(data, "package")
        if package_table is not None:
            versioned = get_str_list(package_table, "versioned_files")
            if versioned is None and "versioned_files" in package_table:
                return Err("[package] versioned_files must be a list of strings")
            package = PackageConfig(
                versioned_files=tuple(versioned or ()),
                changelog=get_str(package_table, "changelog"),
                name=get_str(package_table, "name"),
            )

        jira: JiraConfig | None = None
        jira_table = get_table(data, "jira")
        if jira_table is not None:
            url = get_str(jira_table, "url")
            project = get_str(jira_table, "project")
            if url is None or project is None:
                return Err("[jira] requires both url and project")
            jira = JiraConfig(url=url.rstrip("/"), project=project)

        github: GitHubConfig | None = None
        github_table = get_table(data, "github")
        if github_table is not None:
            owner = get_str(github_table, "owner")
            repo = get_str(github_table, "repo")
            if owner is None or repo is None:
                return Err("[github] requires both owner and repo")
            github = GitHubConfig(owner=owner, repo=repo)

        return Ok(cls(workflows=tuple(workflows), package=package, jira=jira, github=github))


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and syntax errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and validate configuration from a TOML file.

    Args:
        path: Path to relflow.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    parsed = _parse_toml(path)
    if isinstance(parsed, Err):
        return parsed

    config = Config.from_dict(parsed.value)
    if isinstance(config, Err):
        return Err(ConfigError(f"Invalid config structure: {config.error}", path=path))
    return Ok(config.value)
