from __future__ import annotations

import asyncio
import json
import logging
import os
import re
import time
from functools import lru_cache
from typing import Any, Sequence

from app.ai.factory import get_ai_client
from app.ai.types import AIClient, ChatMessage, CompletionRequest
from app.core.config import settings

logger = logging.getLogger(__name__)

_FENCE_START_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_END_RE = re.compile(r"\s*```$")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


def ai_enabled() -> bool:
    if not _env_bool("ATS_LLM_ENABLED", settings.ats_llm_enabled):
        return False
    provider = (os.getenv("AI_PROVIDER") or settings.ai_provider).strip().lower()
    if provider != "openai":
        return False
    api_key = (os.getenv("OPENAI_API_KEY") or "").strip()
    if not api_key or _looks_like_placeholder(api_key):
        return False
    return True


@lru_cache(maxsize=1)
def default_ai_client() -> AIClient:
    return get_ai_client()


def strip_code_fences(content: str) -> str:
    """Remove an optional ```json ... ``` wrapper around a model response."""
    cleaned = content.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_START_RE.sub("", cleaned)
        cleaned = _FENCE_END_RE.sub("", cleaned)
    return cleaned.strip()


async def json_completion(
    messages: Sequence[ChatMessage],
    *,
    max_tokens: int,
    temperature: float,
    purpose: str,
    client: AIClient | None = None,
    timeout_s: float | None = None,
) -> dict[str, Any] | None:
    """Run one completion and parse its JSON object.

    Returns None on every failure (disabled, timeout, transport error, empty or
    malformed response); callers are expected to take their fallback path.
    """
    if client is None:
        if not ai_enabled():
            logger.debug("ai_completion_skipped purpose=%s reason=llm_disabled", purpose)
            return None
        client = default_ai_client()

    request = CompletionRequest(
        model=settings.ai_model,
        messages=tuple(messages),
        max_tokens=max_tokens,
        temperature=temperature,
    )
    timeout = timeout_s if timeout_s is not None else settings.ai_timeout_s
    started = time.perf_counter()
    try:
        content = await asyncio.wait_for(client.complete(request), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("ai_completion_timeout purpose=%s model=%s timeout_s=%s", purpose, request.model, timeout)
        return None
    except Exception as exc:  # noqa: BLE001 - deterministic fallback is expected
        logger.warning("ai_completion_failed purpose=%s model=%s: %s", purpose, request.model, exc)
        return None

    latency_ms = int((time.perf_counter() - started) * 1000)
    if not content or not content.strip():
        logger.warning("ai_completion_empty purpose=%s latency_ms=%s", purpose, latency_ms)
        return None

    try:
        parsed = json.loads(strip_code_fences(content))
    except ValueError as exc:
        logger.warning("ai_completion_invalid_json purpose=%s response_len=%s: %s", purpose, len(content), exc)
        return None

    if not isinstance(parsed, dict):
        logger.warning("ai_completion_invalid_schema purpose=%s type=%s", purpose, type(parsed).__name__)
        return None

    logger.info("ai_completion_ok purpose=%s latency_ms=%s", purpose, latency_ms)
    return parsed
