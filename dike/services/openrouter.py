"""OpenRouter chat-completions client.

Single async call used by every AI-backed feature. Transport failures are
raised as UpstreamError; the caller never sees raw httpx exceptions.
"""

from __future__ import annotations

import logging

import httpx

from dike.core.config import settings
from dike.core.exceptions import ConfigurationError, UpstreamError
from dike.core.metrics import UPSTREAM_CALLS

logger = logging.getLogger(__name__)


async def call_openrouter(
    messages: list[dict[str, str]],
    *,
    model: str | None = None,
    temperature: float = 0.7,
    max_tokens: int = 1000,
    purpose: str = "analysis",
    title: str | None = None,
) -> str:
    """Send a chat completion request and return the assistant message text."""
    api_key = settings.openrouter_api_key
    if not api_key:
        raise ConfigurationError("API key not configured")

    model = model or settings.analysis_model
    payload = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
        "HTTP-Referer": settings.openrouter_referer,
        "X-Title": title or settings.openrouter_title,
    }

    logger.info("[openrouter] %s: model=%s messages=%d maxTokens=%d", purpose, model, len(messages), max_tokens)
    try:
        async with httpx.AsyncClient(timeout=settings.openrouter_timeout) as client:
            resp = await client.post(settings.openrouter_base_url, json=payload, headers=headers)
    except httpx.TimeoutException as exc:
        UPSTREAM_CALLS.labels(purpose=purpose, outcome="timeout").inc()
        logger.error("[openrouter] %s: timed out after %.0fs", purpose, settings.openrouter_timeout)
        raise UpstreamError("AI provider timed out") from exc
    except httpx.RequestError as exc:
        UPSTREAM_CALLS.labels(purpose=purpose, outcome="network_error").inc()
        logger.error("[openrouter] %s: request failed: %s", purpose, exc)
        raise UpstreamError("AI provider unreachable") from exc

    if not resp.is_success:
        UPSTREAM_CALLS.labels(purpose=purpose, outcome="http_error").inc()
        logger.error("[openrouter] %s: error %d: %s", purpose, resp.status_code, resp.text[:500])
        raise UpstreamError(f"API request failed: {resp.status_code}")

    try:
        content = resp.json()["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as exc:
        UPSTREAM_CALLS.labels(purpose=purpose, outcome="bad_response").inc()
        logger.error("[openrouter] %s: unexpected response body: %s", purpose, resp.text[:500])
        raise UpstreamError("Unexpected response from AI provider") from exc

    UPSTREAM_CALLS.labels(purpose=purpose, outcome="success").inc()
    content = content.strip() if isinstance(content, str) else ""
    logger.info("[openrouter] %s: response length=%d chars", purpose, len(content))
    return content
