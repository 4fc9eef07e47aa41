"""Tests for relflow.prompt and the mock HTTP client."""

from __future__ import annotations

from relflow.core.result import Err, Ok
from relflow.issues.http import HttpClient, HttpError, MockHttpClient
from relflow.prompt import ScriptedPrompt, TerminalPrompt
from relflow.step_errors import UserInputError


class TestScriptedPrompt:
    def test_select_replays_answers(self) -> None:
        prompt = ScriptedPrompt.of("b")
        assert prompt.select(["a", "b"], "Pick one") == Ok("b")
        assert prompt.questions == ["Pick one"]

    def test_answer_must_be_a_choice(self) -> None:
        result = ScriptedPrompt.of("z").select(["a", "b"], "Pick one")
        assert isinstance(result, Err)

    def test_out_of_answers(self) -> None:
        assert ScriptedPrompt.of().secret("Token") == Err(
            UserInputError(message="no scripted answer left")
        )


class TestTerminalPrompt:
    def test_empty_choices(self) -> None:
        result = TerminalPrompt().select([], "Select an issue")
        assert isinstance(result, Err)
        assert "nothing to choose from" in result.error.message


class TestMockHttpClient:
    def test_conforms_to_protocol(self) -> None:
        assert isinstance(MockHttpClient(), HttpClient)

    def test_records_calls_and_defaults_to_404(self) -> None:
        client = MockHttpClient()
        result = client.get_json("https://example.com/x", {})
        assert isinstance(result, Err)
        assert result.error.status == 404
        assert client.calls == [("GET", "https://example.com/x", None)]

    def test_canned_error(self) -> None:
        client = MockHttpClient()
        error = HttpError(url="https://example.com/x", status=500, message="boom")
        client.set_response("POST", "https://example.com/x", error)
        assert client.post_json("https://example.com/x", {"a": 1}, {}) == Err(error)
