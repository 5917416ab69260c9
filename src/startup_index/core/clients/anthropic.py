"""Anthropic (Claude) Messages API client.

API docs: https://docs.anthropic.com/en/api/messages
"""

from __future__ import annotations

import logging

import httpx

from ..errors import LLMProviderError

logger = logging.getLogger(__name__)

API_BASE = "https://api.anthropic.com/v1"
ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MODEL = "claude-sonnet-4-5"


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return f"Claude API error {response.status_code}: {response.text[:200]}"
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return f"Claude API error {response.status_code}: {error['message']}"
    return f"Claude API error {response.status_code}"


async def complete(
    api_key: str,
    system: str,
    prompt: str,
    *,
    model: str = DEFAULT_MODEL,
    temperature: float = 0.3,
    max_tokens: int = 4000,
) -> str:
    """Send a single-turn message and return the concatenated text blocks.

    Args:
        api_key: Anthropic API key.
        system: System prompt.
        prompt: User message.
        model: Model name.
        temperature: Sampling temperature.
        max_tokens: Response token cap.

    Returns:
        The response text.
    """
    payload = {
        "model": model,
        "system": system,
        "messages": [{"role": "user", "content": prompt}],
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    headers = {
        "x-api-key": api_key,
        "anthropic-version": ANTHROPIC_VERSION,
        "content-type": "application/json",
    }

    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(120.0, connect=10.0)) as client:
            response = await client.post(f"{API_BASE}/messages", json=payload, headers=headers)
    except httpx.TransportError as exc:
        logger.warning("Claude API request failed: %r", exc)
        raise LLMProviderError(f"Could not reach Claude API: {exc!r}") from exc

    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        message = _error_message(response)
        logger.warning("%s", message)
        raise LLMProviderError(message) from exc

    try:
        data = response.json()
    except ValueError as exc:
        raise LLMProviderError(f"Claude API returned a response that is not JSON: {response.text[:200]}") from exc

    if not isinstance(data, dict):
        raise LLMProviderError("Invalid response format from Claude API")
    blocks = data.get("content") or []
    text = "".join(b.get("text", "") for b in blocks if isinstance(b, dict) and b.get("type") == "text")
    if not text:
        raise LLMProviderError("Invalid response format from Claude API")
    return text
