"""Jira Cloud adapter (REST API v3)."""

from __future__ import annotations

import base64
from collections.abc import Mapping

import structlog

from relflow.core.config import JiraConfig
from relflow.core.result import Err, Ok, Result
from relflow.core.structured import as_obj_list, as_str_dict, get_str, get_table
from relflow.issues.http import HttpClient, HttpError
from relflow.issues.model import Issue
from relflow.prompt import Prompt
from relflow.step_errors import (
    ApiRequestError,
    ApiResponseError,
    InvalidJiraTransition,
    StepError,
    UserInputError,
)

logger = structlog.get_logger()

JIRA_EMAIL_ENV = "JIRA_EMAIL"
JIRA_TOKEN_ENV = "JIRA_TOKEN"


def _api_error(error: HttpError) -> StepError:
    if error.kind == "response":
        return ApiResponseError(url=error.url, message=error.message)
    return ApiRequestError(url=error.url, message=str(error))


def jira_auth_header(env: Mapping[str, str], prompt: Prompt) -> Result[str, UserInputError]:
    """Basic auth header from JIRA_EMAIL/JIRA_TOKEN, prompting for missing values."""
    email = env.get(JIRA_EMAIL_ENV)
    if not email:
        asked = prompt.secret("Jira account email")
        if isinstance(asked, Err):
            return asked
        email = asked.value
    token = env.get(JIRA_TOKEN_ENV)
    if not token:
        asked = prompt.secret("Jira API token")
        if isinstance(asked, Err):
            return asked
        token = asked.value
    encoded = base64.b64encode(f"{email}:{token}".encode()).decode("ascii")
    return Ok(f"Basic {encoded}")


class JiraTracker:
    def __init__(self, config: JiraConfig, http: HttpClient, auth_header: str) -> None:
        self.config = config
        self.http = http
        self._headers = {"Authorization": auth_header}

    def search(
        self, status_filter: str | None, labels: tuple[str, ...] = ()
    ) -> Result[list[Issue], StepError]:
        jql = f"project = {self.config.project}"
        if status_filter:
            jql = f'status = "{status_filter}" AND {jql}'
        url = f"{self.config.url}/rest/api/3/search"
        logger.debug("jira_search", url=url, jql=jql)

        response = self.http.post_json(url, {"jql": jql, "fields": ["summary"]}, self._headers)
        if isinstance(response, Err):
            return Err(_api_error(response.error))

        body = as_str_dict(response.value)
        raw_issues = as_obj_list(body.get("issues")) if body is not None else None
        if raw_issues is None:
            return Err(ApiResponseError(url=url, message="response has no 'issues' list"))

        issues: list[Issue] = []
        for raw in raw_issues:
            item = as_str_dict(raw)
            key = get_str(item, "key") if item is not None else None
            fields = get_table(item, "fields") if item is not None else None
            summary = get_str(fields, "summary") if fields is not None else None
            if key is None or summary is None:
                return Err(ApiResponseError(url=url, message="issue without key or summary"))
            issues.append(Issue(key=key, summary=summary))
        return Ok(issues)

    def transition(self, issue_key: str, target_status: str) -> Result[None, StepError]:
        url = f"{self.config.url}/rest/api/3/issue/{issue_key}/transitions"
        available = self.http.get_json(url, self._headers)
        if isinstance(available, Err):
            return Err(_api_error(available.error))

        body = as_str_dict(available.value)
        transitions = as_obj_list(body.get("transitions")) if body is not None else None
        if transitions is None:
            return Err(ApiResponseError(url=url, message="response has no 'transitions' list"))

        transition_id: str | None = None
        for raw in transitions:
            item = as_str_dict(raw)
            if item is not None and get_str(item, "name") == target_status:
                transition_id = get_str(item, "id")
                break
        if transition_id is None:
            return Err(InvalidJiraTransition(status=target_status))

        posted = self.http.post_json(url, {"transition": {"id": transition_id}}, self._headers)
        if isinstance(posted, Err):
            return Err(_api_error(posted.error))
        return Ok(None)
