from __future__ import annotations

import logging
from dataclasses import dataclass

from app.ai.prompts import build_semantic_match_messages
from app.ai.types import AIClient
from app.core.config.scoring import get_scoring_float, get_scoring_value
from app.services.ai_completion import json_completion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SemanticHit:
    phrase: str
    confidence: float


def _clamp_float(value: object, default: float) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return max(0.0, min(1.0, number))


async def find_semantic_phrase(
    keyword: str,
    resume_text: str,
    *,
    ai_client: AIClient | None = None,
) -> SemanticHit | None:
    """Ask the model for a résumé phrase semantically close to keyword."""
    excerpt_chars = int(get_scoring_value("matching.semantic_excerpt_chars", 1000))
    payload = await json_completion(
        build_semantic_match_messages(keyword, resume_text[:excerpt_chars]),
        max_tokens=int(get_scoring_value("ai.semantic.max_tokens", 200)),
        temperature=get_scoring_float("ai.semantic.temperature", 0.1),
        purpose="semantic_match",
        client=ai_client,
    )
    if not payload or not payload.get("found"):
        return None

    phrase = str(payload.get("matchedPhrase") or "").strip()
    if not phrase:
        return None

    default_confidence = get_scoring_float("matching.confidence.semantic_default", 0.7)
    confidence = payload.get("confidence")
    return SemanticHit(
        phrase=phrase,
        confidence=_clamp_float(confidence, default_confidence) if confidence else default_confidence,
    )
