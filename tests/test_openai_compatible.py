"""Tests for the OpenAI-compatible rewrite provider against a mocked API."""

from __future__ import annotations

import json
import logging

import httpx
import pytest

from rss_curator.config import LoggingConfig, ProviderConfig
from rss_curator.core.errors import ApiError, ParseError, TransportError
from rss_curator.llm.providers.openai_compatible import OpenAICompatibleProvider


def _provider(handler, **kwargs) -> OpenAICompatibleProvider:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return OpenAICompatibleProvider(ProviderConfig(), client=client, **kwargs)


def _ok(text: str = "Rewritten post"):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": text}}]})

    return handler


def test_request_shape():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return _ok()(request)

    result = _provider(handler).rewrite("<p>raw</p>", "Be concise", "secret-key")

    assert result == "Rewritten post"
    assert seen["url"] == "https://api.venice.ai/api/v1/chat/completions"
    assert seen["auth"] == "Bearer secret-key"
    body = seen["body"]
    assert body["model"] == "venice-uncensored"
    assert body["temperature"] == 0.7
    assert body["max_tokens"] == 2000
    assert body["messages"] == [
        {"role": "system", "content": "Be concise"},
        {"role": "user", "content": "<p>raw</p>"},
    ]


def test_remote_error_message_is_surfaced():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": {"message": "rate limited"}})

    with pytest.raises(ApiError) as excinfo:
        _provider(handler).rewrite("content", "prompt", "key")

    assert str(excinfo.value) == "rate limited"
    assert excinfo.value.status_code == 500


@pytest.mark.parametrize("body", [b"", b"<html>bad gateway</html>", b'{"detail": "nope"}'])
def test_non_200_without_message_uses_generic_text(body):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, content=body)

    with pytest.raises(ApiError, match=r"^API Error \(401\)$"):
        _provider(handler).rewrite("content", "prompt", "key")


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"choices": []},
        {"choices": [{"message": {}}]},
        {"choices": [{"message": {"content": None}}]},
    ],
)
def test_malformed_success_is_parse_error(payload):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    with pytest.raises(ParseError, match="^Invalid API Response$"):
        _provider(handler).rewrite("content", "prompt", "key")


def test_non_json_success_is_parse_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"not json")

    with pytest.raises(ParseError, match="Invalid API Response"):
        _provider(handler).rewrite("content", "prompt", "key")


def test_network_failure_is_transport_error_without_retry():
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError, match="ConnectError"):
        _provider(handler).rewrite("content", "prompt", "key")

    assert calls == 1


def test_verify_sends_ping_and_discards_text():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return _ok("Pong")(request)

    assert _provider(handler).verify("key") == "Verified"
    messages = seen["body"]["messages"]
    assert messages[0] == {"role": "system", "content": "Reply only with Pong"}
    assert messages[1] == {"role": "user", "content": "Ping"}


def test_verify_uses_same_error_taxonomy():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": {"message": "Invalid API key"}})

    with pytest.raises(ApiError, match="Invalid API key"):
        _provider(handler).verify("bad-key")


def test_llm_log_redacts_urls():
    logger = logging.getLogger("rss_curator.llm.test")
    logger.handlers = []
    logger.propagate = False
    logger.setLevel(logging.INFO)
    records: list[logging.LogRecord] = []

    class _Collect(logging.Handler):
        def emit(self, record):
            records.append(record)

    logger.addHandler(_Collect())
    provider = _provider(
        _ok("See https://example.com/secret for more"),
        log_cfg=LoggingConfig(llm_log_redaction="redact_urls_authors"),
        llm_logger=logger,
    )

    provider.rewrite("content", "prompt", "key")

    assert len(records) == 1
    assert records[0].status == "ok"
    assert records[0].raw_response == "See [REDACTED_URL] for more"
