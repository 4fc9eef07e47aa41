"""HTTP client abstraction for issue tracker APIs.

This module provides:
- HttpClient: Protocol for JSON-over-HTTP calls (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, Protocol, runtime_checkable

from relflow import __version__
from relflow.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network or decoding errors)
        message: Human-readable error message
        kind: "request" if the call failed, "response" if the body was unusable
    """

    url: str
    status: int
    message: str
    kind: Literal["request", "response"] = "request"

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    def get_json(self, url: str, headers: Mapping[str, str]) -> Result[object, HttpError]:
        """GET ``url`` and decode the JSON body."""
        ...

    def post_json(
        self, url: str, body: object, headers: Mapping[str, str]
    ) -> Result[object, HttpError]:
        """POST ``body`` as JSON; decode the JSON reply (None for an empty body)."""
        ...


class RealHttpClient:
    """HTTP client using urllib with system certificates."""

    def __init__(self, timeout: float = 30.0, user_agent: str = f"relflow/{__version__}") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _request(
        self, method: str, url: str, headers: Mapping[str, str], data: bytes | None
    ) -> Result[bytes, HttpError]:
        all_headers = {"User-Agent": self.user_agent, "Accept": "application/json", **headers}
        if data is not None:
            all_headers["Content-Type"] = "application/json"
        try:
            req = urllib.request.Request(url, data=data, headers=all_headers, method=method)
            with urllib.request.urlopen(
                req, timeout=self.timeout, context=self._ssl_context
            ) as response:
                return Ok(response.read())
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def _decode(self, url: str, raw: bytes) -> Result[object, HttpError]:
        if not raw.strip():
            return Ok(None)
        try:
            data: object = json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(
                HttpError(url=url, status=0, message=f"JSON parse error: {e}", kind="response")
            )
        return Ok(data)

    def get_json(self, url: str, headers: Mapping[str, str]) -> Result[object, HttpError]:
        result = self._request("GET", url, headers, None)
        if isinstance(result, Err):
            return result
        return self._decode(url, result.value)

    def post_json(
        self, url: str, body: object, headers: Mapping[str, str]
    ) -> Result[object, HttpError]:
        result = self._request("POST", url, headers, json.dumps(body).encode("utf-8"))
        if isinstance(result, Err):
            return result
        return self._decode(url, result.value)


class MockHttpClient:
    """Mock HTTP client for testing.

    Usage:
        client = MockHttpClient()
        client.set_response("POST", "https://jira.example.com/rest/api/3/search", {"issues": []})
        result = client.post_json("https://jira.example.com/rest/api/3/search", {}, {})
        assert result == Ok({"issues": []})
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], object | HttpError] = {}
        self.calls: list[tuple[str, str, object]] = []

    def set_response(self, method: str, url: str, response: object | HttpError) -> None:
        self._responses[(method, url)] = response

    def _respond(self, method: str, url: str, body: object) -> Result[object, HttpError]:
        self.calls.append((method, url, body))
        if (method, url) not in self._responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        response = self._responses[(method, url)]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def get_json(self, url: str, headers: Mapping[str, str]) -> Result[object, HttpError]:
        return self._respond("GET", url, None)

    def post_json(
        self, url: str, body: object, headers: Mapping[str, str]
    ) -> Result[object, HttpError]:
        return self._respond("POST", url, body)
