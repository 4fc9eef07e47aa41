"""Tests for git/branches.py."""

from __future__ import annotations

from relflow.core.result import Err, Ok
from relflow.git.branches import branch_name_from_issue, select_issue_from_branch_name
from relflow.issues.model import Issue
from relflow.step_errors import BadGitBranchName


class TestBranchNameFromIssue:
    def test_jira_issue(self) -> None:
        issue = Issue(key="FLOW-5", summary="A test issue")
        assert branch_name_from_issue(issue) == "FLOW-5-a-test-issue"

    def test_github_issue(self) -> None:
        assert branch_name_from_issue(Issue(key="42", summary="Fix crash")) == "42-fix-crash"

    def test_key_case_is_kept(self) -> None:
        assert branch_name_from_issue(Issue(key="ABC-1", summary="X")) == "ABC-1-x"

    def test_non_ascii_is_not_lowercased(self) -> None:
        assert branch_name_from_issue(Issue(key="1", summary="Ünïcode Word")) == "1-Ünïcode-word"


class TestSelectIssueFromBranchName:
    def test_jira_style(self) -> None:
        result = select_issue_from_branch_name("FLOW-5-a-test-issue")
        assert result == Ok(Issue(key="FLOW-5", summary="a-test-issue"))

    def test_github_style(self) -> None:
        result = select_issue_from_branch_name("123-some-summary")
        assert result == Ok(Issue(key="123", summary="some-summary"))

    def test_key_only(self) -> None:
        assert select_issue_from_branch_name("ABC-123") == Ok(Issue(key="ABC-123", summary=""))
        assert select_issue_from_branch_name("123") == Ok(Issue(key="123", summary=""))

    def test_no_key(self) -> None:
        result = select_issue_from_branch_name("some-summary")
        assert result == Err(BadGitBranchName(name="some-summary"))

    def test_main(self) -> None:
        assert isinstance(select_issue_from_branch_name("main"), Err)

    def test_signed_number_is_not_a_key(self) -> None:
        assert isinstance(select_issue_from_branch_name("+5-thing"), Err)

    def test_round_trip_keeps_key(self) -> None:
        for issue in (Issue("FLOW-5", "A test issue"), Issue("7", "Something Else")):
            result = select_issue_from_branch_name(branch_name_from_issue(issue))
            assert isinstance(result, Ok)
            assert result.value.key == issue.key

    def test_round_trip_keeps_branch_form_summary(self) -> None:
        for issue in (Issue("ABC-12", "fix-login"), Issue("42", "fix-crash")):
            result = select_issue_from_branch_name(branch_name_from_issue(issue))
            assert result == Ok(issue)
