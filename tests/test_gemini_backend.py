from __future__ import annotations

import json

import httpx
import pytest

from painters.agents.gemini_backend import GeminiBackend
from painters.agents.json_schema import JsonSchema
from painters.agents.llm_config import GeminiSettings
from painters.errors import MalformedResponse, TransportFailure


def _backend(handler, *, api_key: str | None = "k123") -> GeminiBackend:
    return GeminiBackend(
        name="test",
        settings=GeminiSettings(model="gemini-test", base_url="https://gemini.example/", api_key=api_key),
        transport=httpx.MockTransport(handler),
    )


def _reply(*texts: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": t}]}} for t in texts]}


async def test_generate_posts_prompt_and_reads_candidates() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_reply("hello", "again"))

    texts = await _backend(handler).generate(prompt="Say hi")

    assert texts == ["hello", "again"]
    req = seen[0]
    assert req.method == "POST"
    assert req.url.path == "/v1beta/models/gemini-test:generateContent"
    assert req.url.params["key"] == "k123"
    body = json.loads(req.content)
    assert body["contents"][0]["parts"][0]["text"] == "Say hi"
    assert "generationConfig" not in body


async def test_generate_requests_json_with_schema() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json=_reply('{"ok": true}'))

    schema = JsonSchema(name="x", schema={"type": "object", "properties": {"ok": {"type": "boolean"}}})
    await _backend(handler).generate(prompt="p", structured_output=schema)

    config = seen[0]["generationConfig"]
    assert config["responseMimeType"] == "application/json"
    assert config["responseSchema"] == schema.schema


async def test_generate_joins_parts_and_skips_empty_candidates() -> None:
    payload = {
        "candidates": [
            {"content": {"parts": []}},
            {"finishReason": "SAFETY"},
            {"content": {"parts": [{"text": "Hel"}, {"text": "lo"}]}},
        ]
    }
    texts = await _backend(lambda r: httpx.Response(200, json=payload)).generate(prompt="p")
    assert texts == ["Hello"]


async def test_generate_without_candidates_returns_empty_list() -> None:
    texts = await _backend(lambda r: httpx.Response(200, json={"promptFeedback": {}})).generate(prompt="p")
    assert texts == []


async def test_http_error_is_transport_failure() -> None:
    with pytest.raises(TransportFailure):
        await _backend(lambda r: httpx.Response(503, json={"error": "busy"})).generate(prompt="p")


async def test_connect_error_is_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(TransportFailure):
        await _backend(handler).generate(prompt="p")


async def test_non_json_body_is_malformed() -> None:
    with pytest.raises(MalformedResponse):
        await _backend(lambda r: httpx.Response(200, text="<html>")).generate(prompt="p")


async def test_missing_api_key_fails_without_network() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover
        raise AssertionError("should not be called")

    with pytest.raises(TransportFailure):
        await _backend(handler, api_key=None).generate(prompt="p")
