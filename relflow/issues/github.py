"""GitHub adapter, driven through the ``gh`` CLI.

``gh`` owns authentication (``gh auth login``), so relflow never handles a
GitHub token itself.
"""

from __future__ import annotations

import json
from pathlib import Path

from relflow.core.config import GitHubConfig
from relflow.core.result import Err, Ok, Result
from relflow.core.structured import as_obj_list, as_str_dict, get_str
from relflow.issues.model import Issue
from relflow.platform.process import ProcessError
from relflow.platform.process import run as run_process
from relflow.step_errors import (
    ApiRequestError,
    ApiResponseError,
    InvalidGitHubTransition,
    StepError,
)

GH_TIMEOUT_SECONDS = 60.0


class GitHubTracker:
    def __init__(self, config: GitHubConfig, cwd: Path) -> None:
        self.config = config
        self.cwd = cwd

    def _endpoint(self) -> str:
        return f"https://github.com/{self.config.slug}"

    def _request_error(self, error: ProcessError) -> ApiRequestError:
        detail = error.stderr.strip() or str(error)
        return ApiRequestError(url=self._endpoint(), message=detail)

    def search(
        self, status_filter: str | None, labels: tuple[str, ...] = ()
    ) -> Result[list[Issue], StepError]:
        cmd = [
            "gh",
            "issue",
            "list",
            "--repo",
            self.config.slug,
            "--state",
            status_filter or "open",
            "--json",
            "number,title",
            "--limit",
            "100",
        ]
        for label in labels:
            cmd += ["--label", label]

        result = run_process(cmd, cwd=self.cwd, timeout=GH_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(self._request_error(result.error))

        try:
            data: object = json.loads(result.value or "[]")
        except json.JSONDecodeError as e:
            return Err(ApiResponseError(url=self._endpoint(), message=f"invalid JSON: {e}"))

        items = as_obj_list(data)
        if items is None:
            return Err(ApiResponseError(url=self._endpoint(), message="expected a JSON list"))

        issues: list[Issue] = []
        for raw in items:
            item = as_str_dict(raw)
            if item is None:
                return Err(ApiResponseError(url=self._endpoint(), message="expected objects"))
            number = item.get("number")
            title = get_str(item, "title")
            if not isinstance(number, int) or title is None:
                return Err(ApiResponseError(url=self._endpoint(), message="issue without number"))
            issues.append(Issue(key=str(number), summary=title))
        return Ok(issues)

    def transition(self, issue_key: str, target_status: str) -> Result[None, StepError]:
        match target_status.lower():
            case "closed":
                action = "close"
            case "open":
                action = "reopen"
            case _:
                return Err(InvalidGitHubTransition(status=target_status))

        result = run_process(
            ["gh", "issue", action, issue_key, "--repo", self.config.slug],
            cwd=self.cwd,
            timeout=GH_TIMEOUT_SECONDS,
        )
        if isinstance(result, Err):
            return Err(self._request_error(result.error))
        return Ok(None)
