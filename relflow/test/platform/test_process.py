"""Tests for relflow.platform.process."""

from __future__ import annotations

import sys
from pathlib import Path

from relflow.core.result import Err, Ok
from relflow.platform.process import ProcessError, run, run_shell

PY = sys.executable


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(command=("git", "status"), returncode=128, stdout="", stderr="")
        assert str(error) == "git status failed (exit 128)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("gh", "release", "create", "v1.0.0", "--notes", "x"),
            returncode=1,
            stdout="",
            stderr="",
        )
        assert str(error) == "gh release create ... failed (exit 1)"


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "print('hello')"], cwd=tmp_path)
        assert isinstance(result, Ok)
        assert result.value.strip() == "hello"

    def test_failure_keeps_output(self, tmp_path: Path) -> None:
        result = run(
            [PY, "-c", "import sys; sys.stderr.write('bad ref'); sys.exit(42)"], cwd=tmp_path
        )
        assert isinstance(result, Err)
        assert result.error.returncode == 42
        assert result.error.stderr == "bad ref"

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["relflow_missing_binary_12345"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert result.error.stderr

    def test_uses_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text("", encoding="utf-8")
        result = run([PY, "-c", "import os; print(os.listdir('.'))"], cwd=tmp_path)
        assert isinstance(result, Ok)
        assert "Cargo.toml" in result.value

    def test_input_text_is_fed_to_stdin(self, tmp_path: Path) -> None:
        result = run(
            [PY, "-c", "import sys; print(sys.stdin.read().upper())"],
            cwd=tmp_path,
            input_text="release notes",
        )
        assert isinstance(result, Ok)
        assert "RELEASE NOTES" in result.value

    def test_timeout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "import time; time.sleep(10)"], cwd=tmp_path, timeout=0.1)
        assert isinstance(result, Err)
        assert "timed out" in result.error.stderr


class TestRunShell:
    def test_success(self, tmp_path: Path) -> None:
        assert run_shell("touch a && touch b", cwd=tmp_path) == Ok(None)
        assert (tmp_path / "a").exists() and (tmp_path / "b").exists()

    def test_exit_code(self, tmp_path: Path) -> None:
        result = run_shell("exit 7", cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == 7
        assert result.error.command == ("exit 7",)
