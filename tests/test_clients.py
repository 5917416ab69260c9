"""
LLM client tests. HTTP is served by httpx.MockTransport; no network access.
"""

import json

import httpx
import pytest

from startup_index.core.clients import anthropic, openai
from startup_index.core.errors import LLMProviderError


def _patch_transport(monkeypatch, handler, seen: list):
    real_client = httpx.AsyncClient

    def recording_handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    def factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(recording_handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", factory)


@pytest.mark.asyncio
async def test_anthropic_complete_joins_text_blocks(monkeypatch):
    seen = []
    _patch_transport(monkeypatch, lambda request: httpx.Response(200, json={
        "content": [
            {"type": "text", "text": '{"isPitchDeck": '},
            {"type": "tool_use", "id": "x"},
            {"type": "text", "text": "true}"},
        ],
    }), seen)

    text = await anthropic.complete("sk-test", "system prompt", "user prompt", model="claude-test", temperature=0.7, max_tokens=2000)

    assert text == '{"isPitchDeck": true}'
    request = seen[0]
    assert str(request.url) == "https://api.anthropic.com/v1/messages"
    assert request.headers["x-api-key"] == "sk-test"
    assert request.headers["anthropic-version"] == anthropic.ANTHROPIC_VERSION
    body = json.loads(request.content)
    assert body["model"] == "claude-test"
    assert body["system"] == "system prompt"
    assert body["messages"] == [{"role": "user", "content": "user prompt"}]
    assert body["temperature"] == 0.7
    assert body["max_tokens"] == 2000


@pytest.mark.asyncio
async def test_anthropic_http_error_becomes_provider_error(monkeypatch):
    _patch_transport(monkeypatch, lambda request: httpx.Response(401, json={
        "type": "error", "error": {"type": "authentication_error", "message": "invalid x-api-key"},
    }), [])

    with pytest.raises(LLMProviderError, match="invalid x-api-key"):
        await anthropic.complete("bad", "s", "p")


@pytest.mark.asyncio
async def test_anthropic_empty_content_is_an_error(monkeypatch):
    _patch_transport(monkeypatch, lambda request: httpx.Response(200, json={"content": []}), [])

    with pytest.raises(LLMProviderError, match="Invalid response format"):
        await anthropic.complete("sk-test", "s", "p")


@pytest.mark.asyncio
async def test_openai_complete_returns_first_choice(monkeypatch):
    seen = []
    _patch_transport(monkeypatch, lambda request: httpx.Response(200, json={
        "choices": [{"message": {"role": "assistant", "content": '  {"name": "Acme"}\n'}}],
    }), seen)

    text = await openai.complete("sk-openai", "system prompt", "user prompt")

    assert text == '{"name": "Acme"}'
    request = seen[0]
    assert str(request.url) == "https://api.openai.com/v1/chat/completions"
    assert request.headers["authorization"] == "Bearer sk-openai"
    body = json.loads(request.content)
    assert body["model"] == openai.DEFAULT_MODEL
    assert body["response_format"] == {"type": "json_object"}
    assert body["messages"][0] == {"role": "system", "content": "system prompt"}


@pytest.mark.asyncio
async def test_openai_server_error(monkeypatch):
    _patch_transport(monkeypatch, lambda request: httpx.Response(500, text="upstream exploded"), [])

    with pytest.raises(LLMProviderError, match="500"):
        await openai.complete("sk-openai", "s", "p")


@pytest.mark.asyncio
async def test_openai_malformed_response(monkeypatch):
    _patch_transport(monkeypatch, lambda request: httpx.Response(200, json={"choices": []}), [])

    with pytest.raises(LLMProviderError, match="Invalid response format"):
        await openai.complete("sk-openai", "s", "p")


def _refuse_connection(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)


def _time_out(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("timed out", request=request)


@pytest.mark.asyncio
@pytest.mark.parametrize("client,name", [(anthropic, "Claude API"), (openai, "OpenAI API")])
@pytest.mark.parametrize("handler", [_refuse_connection, _time_out])
async def test_transport_failures_become_provider_errors(monkeypatch, client, name, handler):
    _patch_transport(monkeypatch, handler, [])

    with pytest.raises(LLMProviderError, match=f"Could not reach {name}") as excinfo:
        await client.complete("sk-test", "s", "p")
    assert isinstance(excinfo.value.__cause__, httpx.TransportError)


@pytest.mark.asyncio
@pytest.mark.parametrize("client", [anthropic, openai])
async def test_non_json_success_is_a_provider_error(monkeypatch, client):
    _patch_transport(monkeypatch, lambda request: httpx.Response(200, text="<html>gateway</html>"), [])

    with pytest.raises(LLMProviderError, match="not JSON"):
        await client.complete("sk-test", "s", "p")


@pytest.mark.asyncio
@pytest.mark.parametrize("client", [anthropic, openai])
async def test_json_that_is_not_an_object_is_a_provider_error(monkeypatch, client):
    _patch_transport(monkeypatch, lambda request: httpx.Response(200, json=["unexpected"]), [])

    with pytest.raises(LLMProviderError, match="Invalid response format"):
        await client.complete("sk-test", "s", "p")
