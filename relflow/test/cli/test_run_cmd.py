"""Tests for the relflow command line."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from relflow import __version__
from relflow.cli.app import app
from relflow.core.errors import ErrorCode

runner = CliRunner()

CONFIG = """\
[[workflows]]
name = "build"

[[workflows.steps]]
type = "Command"
command = "touch built"

[[workflows]]
name = "broken"

[[workflows.steps]]
type = "Command"
command = "exit 3"

[[workflows.steps]]
type = "Command"
command = "touch after"
"""


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    (tmp_path / "relflow.toml").write_text(CONFIG, encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestVersion:
    def test_prints_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestGenerate:
    def test_writes_default_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "package.json").write_text('{"version": "0.1.0"}', encoding="utf-8")

        result = runner.invoke(app, ["--generate"])

        assert result.exit_code == 0
        text = (tmp_path / "relflow.toml").read_text(encoding="utf-8")
        assert 'versioned_files = ["package.json"]' in text

        validated = runner.invoke(app, ["--validate"])
        assert validated.exit_code == 0
        assert "is valid" in validated.output

    def test_refuses_to_overwrite(self, project: Path) -> None:
        result = runner.invoke(app, ["--generate"])
        assert result.exit_code == int(ErrorCode.USER_ERROR)
        assert "already exists" in result.output
        assert (project / "relflow.toml").read_text(encoding="utf-8") == CONFIG


class TestValidate:
    def test_missing_config_suggests_generate(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["--validate"])
        assert result.exit_code == int(ErrorCode.USER_ERROR)
        assert "--generate" in result.output

    def test_invalid_step(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "relflow.toml").write_text(
            '[[workflows]]\nname = "x"\n\n[[workflows.steps]]\ntype = "Nope"\n',
            encoding="utf-8",
        )
        result = runner.invoke(app, ["--validate"])
        assert result.exit_code == int(ErrorCode.USER_ERROR)
        assert "unknown step type" in result.output

    def test_explicit_config_path(
        self, project: Path, tmp_path_factory: pytest.TempPathFactory
    ) -> None:
        elsewhere = tmp_path_factory.mktemp("elsewhere")
        (elsewhere / "custom.toml").write_text(CONFIG, encoding="utf-8")
        result = runner.invoke(app, ["--validate", "--config", str(elsewhere / "custom.toml")])
        assert result.exit_code == 0


class TestRun:
    def test_runs_named_workflow(self, project: Path) -> None:
        result = runner.invoke(app, ["build"])
        assert result.exit_code == 0
        assert (project / "built").exists()

    def test_dry_run_has_no_effects(self, project: Path) -> None:
        result = runner.invoke(app, ["build", "--dry-run"])
        assert result.exit_code == 0
        assert "Would run touch built" in result.output
        assert not (project / "built").exists()

    def test_unknown_workflow(self, project: Path) -> None:
        result = runner.invoke(app, ["deploy"])
        assert result.exit_code == int(ErrorCode.USER_ERROR)
        assert "Unknown workflow: deploy" in result.output
        assert "build, broken" in result.output

    def test_failing_step_stops_workflow(self, project: Path) -> None:
        result = runner.invoke(app, ["broken"])
        assert result.exit_code == int(ErrorCode.COMMAND_ERROR)
        assert "stopped at step 1" in result.output
        assert not (project / "after").exists()
