"""Tests for releases/steps.py."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from relflow.core.config import GitHubConfig, PackageConfig
from relflow.core.result import Err, Ok
from relflow.issues.http import MockHttpClient
from relflow.output.console import MockConsole
from relflow.prompt import ScriptedPrompt
from relflow.releases.semver import Version
from relflow.releases.steps import _next_version, bump_version, prepare_release, release
from relflow.runtime import Runtime
from relflow.state import Apply, PreparedRelease, Simulate, WorkflowState
from relflow.step_errors import (
    InvalidPreReleaseVersion,
    NoMetadataFileFound,
    NoRelevantChanges,
    ReleaseNotPrepared,
)

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not available")

PACKAGE = PackageConfig(versioned_files=("Cargo.toml",), changelog="CHANGELOG.md")
GITHUB = GitHubConfig(owner="acme", repo="widgets")


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        raise RuntimeError(
            f"git {' '.join(args)} failed (code {result.returncode}): {result.stderr.strip()}"
        )
    return result.stdout.strip()


def _write_cargo(path: Path, version: str) -> None:
    (path / "Cargo.toml").write_text(
        f'[package]\nname = "widgets"\nversion = "{version}"\n', encoding="utf-8"
    )


def _init_repo(path: Path, version: str = "1.0.0") -> Path:
    path.mkdir(parents=True, exist_ok=True)
    _git(path, "init", "-b", "main")
    _git(path, "config", "user.email", "test@example.com")
    _git(path, "config", "user.name", "Test")
    _git(path, "config", "commit.gpgsign", "false")
    _git(path, "config", "tag.gpgsign", "false")
    _write_cargo(path, version)
    _git(path, "add", "Cargo.toml")
    _git(path, "commit", "-m", "chore: initial")
    _git(path, "tag", f"v{version}")
    return path


def _commit(repo: Path, message: str) -> None:
    _git(repo, "commit", "--allow-empty", "-m", message)


def _runtime(cwd: Path) -> tuple[Runtime, MockConsole]:
    console = MockConsole()
    runtime = Runtime(
        console=console, prompt=ScriptedPrompt.of(), http=MockHttpClient(), cwd=cwd, env={}
    )
    return runtime, console


class TestBumpVersion:
    def test_simulate_leaves_files_alone(self, tmp_path: Path) -> None:
        _write_cargo(tmp_path, "1.2.3")
        runtime, _ = _runtime(tmp_path)
        sink = MockConsole()

        ctx = Simulate(WorkflowState(package=PACKAGE), sink)
        result = bump_version("minor", None, ctx, runtime)

        assert isinstance(result, Ok)
        assert sink.messages == ["Would bump version from 1.2.3 to 1.3.0"]
        assert 'version = "1.2.3"' in (tmp_path / "Cargo.toml").read_text(encoding="utf-8")

    def test_apply_writes_files(self, tmp_path: Path) -> None:
        _write_cargo(tmp_path, "1.2.3")
        runtime, console = _runtime(tmp_path)

        result = bump_version("pre", "rc", Apply(WorkflowState(package=PACKAGE)), runtime)

        assert isinstance(result, Ok)
        assert 'version = "1.2.4-rc.0"' in (tmp_path / "Cargo.toml").read_text(encoding="utf-8")
        assert console.find("Bumped version from 1.2.3 to 1.2.4-rc.0")

    def test_no_package(self, tmp_path: Path) -> None:
        runtime, _ = _runtime(tmp_path)
        result = bump_version("patch", None, Apply(WorkflowState()), runtime)
        assert result == Err(NoMetadataFileFound())

    def test_unbumpable_prerelease(self, tmp_path: Path) -> None:
        _write_cargo(tmp_path, "1.0.0-nightly")
        runtime, _ = _runtime(tmp_path)
        result = bump_version("pre", "rc", Apply(WorkflowState(package=PACKAGE)), runtime)
        assert result == Err(InvalidPreReleaseVersion(version="1.0.0-nightly"))


class TestNextVersion:
    def test_without_label(self) -> None:
        assert _next_version(Version(1, 0, 0), "minor", None, None) == Ok(Version(1, 1, 0))

    def test_first_prerelease(self) -> None:
        result = _next_version(Version(1, 0, 0), "minor", "rc", Version(1, 0, 0))
        assert result == Ok(Version(1, 1, 0, "rc.0"))

    def test_next_prerelease_of_same_target(self) -> None:
        result = _next_version(Version(1, 1, 0, "rc.0"), "minor", "rc", Version(1, 0, 0))
        assert result == Ok(Version(1, 1, 0, "rc.1"))

    def test_bigger_change_moves_target(self) -> None:
        result = _next_version(Version(1, 0, 1, "rc.0"), "minor", "rc", Version(1, 0, 0))
        assert result == Ok(Version(1, 1, 0, "rc.0"))


@requires_git
class TestPrepareRelease:
    def test_apply(self, tmp_path: Path) -> None:
        repo = _init_repo(tmp_path / "repo")
        _commit(repo, "feat: dark mode")
        _commit(repo, "fix: crash on start")
        runtime, console = _runtime(repo)

        result = prepare_release(None, Apply(WorkflowState(package=PACKAGE)), runtime)

        assert isinstance(result, Ok)
        prepared = result.value.state.release
        assert prepared is not None
        assert prepared.version == Version(1, 1, 0)
        assert prepared.notes == "### Features\n\n- dark mode\n\n### Fixes\n\n- crash on start"
        assert 'version = "1.1.0"' in (repo / "Cargo.toml").read_text(encoding="utf-8")
        changelog = (repo / "CHANGELOG.md").read_text(encoding="utf-8")
        assert changelog.startswith("# Changelog\n\n## 1.1.0 (")
        staged = _git(repo, "diff", "--cached", "--name-only").splitlines()
        assert sorted(staged) == ["CHANGELOG.md", "Cargo.toml"]
        assert console.find("Prepared release 1.1.0")

    def test_simulate_records_release_without_writing(self, tmp_path: Path) -> None:
        repo = _init_repo(tmp_path / "repo")
        _commit(repo, "feat!: new config format")
        runtime, _ = _runtime(repo)
        sink = MockConsole()

        result = prepare_release(None, Simulate(WorkflowState(package=PACKAGE), sink), runtime)

        assert isinstance(result, Ok)
        assert result.value.state.release is not None
        assert result.value.state.release.version == Version(2, 0, 0)
        assert sink.messages == [
            "Would bump version from 1.0.0 to 2.0.0",
            "Would add a 2.0.0 section to CHANGELOG.md",
        ]
        assert not (repo / "CHANGELOG.md").exists()
        assert _git(repo, "status", "--porcelain") == ""

    def test_prerelease_label(self, tmp_path: Path) -> None:
        repo = _init_repo(tmp_path / "repo")
        _commit(repo, "fix: a")
        runtime, _ = _runtime(repo)

        result = prepare_release("rc", Apply(WorkflowState(package=PACKAGE)), runtime)

        assert isinstance(result, Ok)
        assert result.value.state.release is not None
        assert result.value.state.release.version == Version(1, 0, 1, "rc.0")

    def test_no_relevant_changes(self, tmp_path: Path) -> None:
        repo = _init_repo(tmp_path / "repo")
        _commit(repo, "docs: readme")
        runtime, _ = _runtime(repo)

        result = prepare_release(None, Apply(WorkflowState(package=PACKAGE)), runtime)

        assert result == Err(NoRelevantChanges())

    def test_no_package(self, tmp_path: Path) -> None:
        runtime, _ = _runtime(tmp_path)
        result = prepare_release(None, Apply(WorkflowState()), runtime)
        assert result == Err(NoMetadataFileFound())


class TestRelease:
    PREPARED = PreparedRelease(version=Version(1, 1, 0), notes="### Fixes\n\n- b")

    def test_not_prepared_in_both_modes(self, tmp_path: Path) -> None:
        runtime, _ = _runtime(tmp_path)
        sink = MockConsole()
        assert release(Simulate(WorkflowState(), sink), runtime) == Err(ReleaseNotPrepared())
        assert release(Apply(WorkflowState()), runtime) == Err(ReleaseNotPrepared())
        assert sink.outputs == []

    def test_simulate_tag(self, tmp_path: Path) -> None:
        runtime, _ = _runtime(tmp_path)
        sink = MockConsole()
        state = WorkflowState(package=PackageConfig(name="widgets"), release=self.PREPARED)
        assert isinstance(release(Simulate(state, sink), runtime), Ok)
        assert sink.messages == ["Would create Git tag widgets/v1.1.0"]

    def test_simulate_github(self, tmp_path: Path) -> None:
        runtime, _ = _runtime(tmp_path)
        sink = MockConsole()
        state = WorkflowState(github=GITHUB, release=self.PREPARED)
        assert isinstance(release(Simulate(state, sink), runtime), Ok)
        assert sink.messages == ["Would create GitHub release v1.1.0 on acme/widgets"]

    @patch("subprocess.run")
    def test_apply_github(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = subprocess.CompletedProcess(
            args=["gh"], returncode=0, stdout="", stderr=""
        )
        runtime, console = _runtime(tmp_path)
        prepared = PreparedRelease(version=Version(2, 0, 0, "rc.0"), notes="notes")

        result = release(Apply(WorkflowState(github=GITHUB, release=prepared)), runtime)

        assert isinstance(result, Ok)
        cmd = mock_run.call_args[0][0]
        assert cmd[:4] == ["gh", "release", "create", "v2.0.0-rc.0"]
        assert cmd[cmd.index("--notes") + 1] == "notes"
        assert cmd[-1] == "--prerelease"
        assert console.find("Created GitHub release v2.0.0-rc.0")

    @requires_git
    def test_apply_tag(self, tmp_path: Path) -> None:
        repo = _init_repo(tmp_path / "repo")
        runtime, _ = _runtime(repo)

        result = release(Apply(WorkflowState(release=self.PREPARED)), runtime)

        assert isinstance(result, Ok)
        assert _git(repo, "tag", "--list", "v1.1.0") == "v1.1.0"
        assert _git(repo, "cat-file", "-t", "v1.1.0") == "tag"
