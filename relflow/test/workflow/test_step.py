"""Tests for step.py."""

from __future__ import annotations

from pathlib import Path

import pytest

from relflow.core.result import Err, Ok
from relflow.issues.http import MockHttpClient
from relflow.issues.model import Issue
from relflow.output.console import MockConsole
from relflow.prompt import ScriptedPrompt
from relflow.runtime import Runtime
from relflow.state import Selected, Simulate, WorkflowState
from relflow.step import (
    BumpVersion,
    Command,
    PrepareRelease,
    RebaseBranch,
    Release,
    SelectGitHubIssue,
    SelectIssueFromBranch,
    SelectJiraIssue,
    Step,
    SwitchBranches,
    TransitionJiraIssue,
    parse_step,
    run_step,
)
from relflow.step_errors import GitHubNotConfigured, ReleaseNotPrepared


class TestParseStep:
    @pytest.mark.parametrize(
        ("table", "expected"),
        [
            ({"type": "SelectJiraIssue", "status": "To Do"}, SelectJiraIssue(status="To Do")),
            (
                {"type": "TransitionJiraIssue", "status": "In Progress"},
                TransitionJiraIssue(status="In Progress"),
            ),
            ({"type": "SelectGitHubIssue"}, SelectGitHubIssue()),
            (
                {"type": "SelectGitHubIssue", "labels": ["bug", "ui"]},
                SelectGitHubIssue(labels=("bug", "ui")),
            ),
            ({"type": "SelectIssueFromBranch"}, SelectIssueFromBranch()),
            ({"type": "SwitchBranches"}, SwitchBranches()),
            ({"type": "RebaseBranch", "to": "main"}, RebaseBranch(to="main")),
            ({"type": "BumpVersion", "rule": "minor"}, BumpVersion(rule="minor")),
            (
                {"type": "BumpVersion", "rule": "pre", "label": "rc"},
                BumpVersion(rule="pre", label="rc"),
            ),
            (
                {"type": "Command", "command": "echo $v", "variables": {"$v": "Version"}},
                Command(command="echo $v", variables={"$v": "Version"}),
            ),
            ({"type": "PrepareRelease"}, PrepareRelease()),
            (
                {"type": "PrepareRelease", "prerelease_label": "beta"},
                PrepareRelease(prerelease_label="beta"),
            ),
            ({"type": "Release"}, Release()),
        ],
    )
    def test_valid(self, table: dict[str, object], expected: Step) -> None:
        assert parse_step(table) == Ok(expected)

    def test_missing_type(self) -> None:
        assert parse_step({"status": "x"}) == Err("step is missing a 'type'")

    def test_unknown_type(self) -> None:
        result = parse_step({"type": "Deploy"})
        assert isinstance(result, Err)
        assert "unknown step type 'Deploy'" in result.error

    def test_missing_required_field(self) -> None:
        assert parse_step({"type": "RebaseBranch"}) == Err(
            "RebaseBranch requires a string 'to'"
        )

    def test_pre_without_label(self) -> None:
        result = parse_step({"type": "BumpVersion", "rule": "pre"})
        assert isinstance(result, Err)
        assert "label" in result.error

    def test_bad_rule(self) -> None:
        result = parse_step({"type": "BumpVersion", "rule": "huge"})
        assert isinstance(result, Err)
        assert "major, minor, patch, pre, release" in result.error

    def test_unknown_variable(self) -> None:
        result = parse_step({"type": "Command", "command": "x", "variables": {"x": "Date"}})
        assert isinstance(result, Err)
        assert "unknown variable 'Date'" in result.error

    def test_labels_must_be_strings(self) -> None:
        result = parse_step({"type": "SelectGitHubIssue", "labels": [1]})
        assert isinstance(result, Err)


class TestRunStep:
    def _runtime(self, cwd: Path) -> Runtime:
        return Runtime(
            console=MockConsole(),
            prompt=ScriptedPrompt.of(),
            http=MockHttpClient(),
            cwd=cwd,
            env={},
        )

    def test_dispatches_switch_branches(self, tmp_path: Path) -> None:
        sink = MockConsole()
        ctx = Simulate(WorkflowState(issue=Selected(Issue(key="3", summary="Go"))), sink)

        result = run_step(SwitchBranches(), ctx, self._runtime(tmp_path))

        assert isinstance(result, Ok)
        assert sink.messages == ["Would switch to or create a branch named 3-go"]

    def test_dispatches_command(self, tmp_path: Path) -> None:
        sink = MockConsole()
        ctx = Simulate(WorkflowState(), sink)

        run_step(Command(command="make dist"), ctx, self._runtime(tmp_path))

        assert sink.messages == ["Would run make dist"]

    def test_errors_pass_through(self, tmp_path: Path) -> None:
        ctx = Simulate(WorkflowState(), MockConsole())
        runtime = self._runtime(tmp_path)
        assert run_step(Release(), ctx, runtime) == Err(ReleaseNotPrepared())
        assert run_step(SelectGitHubIssue(), ctx, runtime) == Err(GitHubNotConfigured())
