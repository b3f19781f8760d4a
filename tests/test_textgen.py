import pytest
import requests

import textgen
from textgen import (
    ANNOUNCEMENT_ERROR,
    EMPTY_RESPONSE_MESSAGE,
    ERROR_MESSAGE,
    UNAVAILABLE_MESSAGE,
    TextGenerator,
    parse_announcement,
    strip_code_fences,
)


class FakeResponse:
    def __init__(self, body, status_code=200):
        self.body = body
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self.body, Exception):
            raise self.body
        return self.body


def gemini_body(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def calls(monkeypatch):
    recorded = []

    def install(response):
        def fake_post(url, **kwargs):
            recorded.append((url, kwargs))
            if isinstance(response, Exception):
                raise response
            return response
        monkeypatch.setattr(textgen.requests, "post", fake_post)
        return recorded

    return install


def test_without_credential_no_request_is_made(calls):
    recorded = calls(AssertionError("network must not be used"))
    generator = TextGenerator(api_key=None)
    assert generator.is_available() is False
    assert generator.generate("gemini-2.5-flash", "hello") == UNAVAILABLE_MESSAGE
    assert recorded == []


def test_empty_key_counts_as_missing():
    assert TextGenerator(api_key="").is_available() is False


def test_generate_strips_code_fences(calls):
    recorded = calls(FakeResponse(gemini_body('```json\n{"title": "Eid"}\n```')))
    generator = TextGenerator(api_key="secret")

    assert generator.generate("gemini-2.5-flash", "prompt text") == '{"title": "Eid"}'

    url, kwargs = recorded[0]
    assert url.endswith("/models/gemini-2.5-flash:generateContent")
    assert kwargs["headers"]["x-goog-api-key"] == "secret"
    assert kwargs["json"]["contents"][0]["parts"][0]["text"] == "prompt text"


def test_network_error_returns_error_message(calls, caplog):
    calls(requests.ConnectionError("offline"))
    assert TextGenerator(api_key="secret").generate("gemini-3-pro-preview", "x") == ERROR_MESSAGE
    assert "Error running Gemini" in caplog.text


def test_http_error_returns_error_message(calls):
    calls(FakeResponse({}, status_code=500))
    assert TextGenerator(api_key="secret").generate("gemini-3-pro-preview", "x") == ERROR_MESSAGE


def test_malformed_body_returns_error_message(calls):
    calls(FakeResponse(ValueError("not json")))
    assert TextGenerator(api_key="secret").generate("gemini-3-pro-preview", "x") == ERROR_MESSAGE
    calls(FakeResponse({"candidates": [{"nothing": True}]}))
    assert TextGenerator(api_key="secret").generate("gemini-3-pro-preview", "x") == ERROR_MESSAGE


def test_empty_response(calls):
    calls(FakeResponse({"candidates": []}))
    assert TextGenerator(api_key="secret").generate("gemini-3-pro-preview", "x") == EMPTY_RESPONSE_MESSAGE


def test_unsupported_model(calls):
    recorded = calls(FakeResponse(gemini_body("hi")))
    assert TextGenerator(api_key="secret").generate("gpt-4", "x") == ERROR_MESSAGE
    assert recorded == []


def test_strip_code_fences():
    assert strip_code_fences("```\nplain\n```  ") == "plain"


class TestParseAnnouncement:
    def test_valid(self):
        result = parse_announcement('{"title": "Holiday", "content": "Closed on Friday."}')
        assert result.ok is True
        assert (result.draft.title, result.draft.content) == ("Holiday", "Closed on Friday.")
        assert result.error is None

    def test_fenced_json(self):
        assert parse_announcement('```json\n{"title": "A", "content": "B"}\n```').ok is True

    @pytest.mark.parametrize("text", [
        "Sorry, I cannot help with that.",
        UNAVAILABLE_MESSAGE,
        '{"title": "Only a title"}',
        '{"title": "  ", "content": "x"}',
        '["title", "content"]',
        '{"title": 1, "content": "x"}',
    ])
    def test_invalid(self, text):
        result = parse_announcement(text)
        assert result.ok is False
        assert result.draft is None
        assert result.error == ANNOUNCEMENT_ERROR
