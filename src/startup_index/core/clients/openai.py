"""OpenAI Chat Completions API client.

API docs: https://platform.openai.com/docs/api-reference/chat
"""

from __future__ import annotations

import logging

import httpx

from ..errors import LLMProviderError

logger = logging.getLogger(__name__)

API_BASE = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return f"OpenAI API error {response.status_code}: {response.text[:200]}"
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return f"OpenAI API error {response.status_code}: {error['message']}"
    return f"OpenAI API error {response.status_code}"


async def complete(
    api_key: str,
    system: str,
    prompt: str,
    *,
    model: str = DEFAULT_MODEL,
    temperature: float = 0.3,
    max_tokens: int = 4000,
) -> str:
    """Send a system + user message pair and return the first choice's content."""
    payload = {
        "model": model,
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ],
        "temperature": temperature,
        "max_tokens": max_tokens,
        "response_format": {"type": "json_object"},
    }
    headers = {"Authorization": f"Bearer {api_key}"}

    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(120.0, connect=10.0)) as client:
            response = await client.post(f"{API_BASE}/chat/completions", json=payload, headers=headers)
    except httpx.TransportError as exc:
        logger.warning("OpenAI API request failed: %r", exc)
        raise LLMProviderError(f"Could not reach OpenAI API: {exc!r}") from exc

    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        message = _error_message(response)
        logger.warning("%s", message)
        raise LLMProviderError(message) from exc

    try:
        data = response.json()
    except ValueError as exc:
        raise LLMProviderError(f"OpenAI API returned a response that is not JSON: {response.text[:200]}") from exc

    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise LLMProviderError("Invalid response format from OpenAI API") from exc
    if not content:
        raise LLMProviderError("OpenAI API returned an empty response")
    return content.strip()
