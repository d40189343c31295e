from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from app.core.config.scoring import get_scoring_float, get_scoring_value
from app.normalize.utils import count_word_matches
from app.schemas.ats import ExtractedKeywords

logger = logging.getLogger(__name__)

GENERAL_INDUSTRY = "general"
_INDUSTRIES_PATH = Path(__file__).resolve().parents[1] / "taxonomy" / "industries.json"


@lru_cache(maxsize=1)
def _industry_keywords() -> Mapping[str, tuple[str, ...]]:
    with _INDUSTRIES_PATH.open("r", encoding="utf-8") as handle:
        raw = json.load(handle)
    tables = {
        str(industry).strip().lower(): tuple(str(keyword).strip().lower() for keyword in keywords)
        for industry, keywords in raw.items()
    }
    logger.info("industry_tables_loaded industries=%s", len(tables))
    return MappingProxyType(tables)


def keyword_weight(keyword: str) -> float:
    """Longer, more specific indicators weigh more."""
    length = len(keyword)
    if length > 15:
        return 3.0
    if length > 10:
        return 2.0
    if length > 5:
        return 1.5
    return 1.0


def _score_industries(text: str, *, multiplier: float = 1.0) -> dict[str, float]:
    lowered = text.lower()
    scores: dict[str, float] = {}
    for industry, keywords in _industry_keywords().items():
        score = 0.0
        for keyword in keywords:
            hits = count_word_matches(keyword, lowered)
            if hits:
                score += hits * keyword_weight(keyword) * multiplier
        if score > 0:
            scores[industry] = score
    return scores


def _rank(scores: dict[str, float], *, min_score: float, limit: int) -> list[str]:
    ranked = sorted(
        ((industry, score) for industry, score in scores.items() if score >= min_score),
        key=lambda item: item[1],
        reverse=True,
    )
    top = [industry for industry, _ in ranked[:limit]]
    return top or [GENERAL_INDUSTRY]


def detect_industries(text: str, job_keywords: ExtractedKeywords | None = None) -> list[str]:
    keyword_text = " ".join(item.keyword for item in job_keywords.all) if job_keywords else ""
    scores = _score_industries(f"{text} {keyword_text}")
    industries = _rank(
        scores,
        min_score=get_scoring_float("industry.min_score", 2.0),
        limit=int(get_scoring_value("industry.max_industries", 3)),
    )
    logger.debug("industries_detected industries=%s scores=%s", industries, scores)
    return industries


def detect_industry_from_job_description(job_description_text: str) -> list[str]:
    scores = _score_industries(
        job_description_text,
        multiplier=get_scoring_float("industry.job_description.multiplier", 1.5),
    )
    return _rank(
        scores,
        min_score=get_scoring_float("industry.job_description.min_score", 3.0),
        limit=int(get_scoring_value("industry.job_description.max_industries", 2)),
    )


def get_industry_keyword_boost(keyword: str, industries: list[str]) -> float:
    boost = 1.0
    needle = keyword.strip().lower()
    if not needle:
        return boost
    tables = _industry_keywords()
    for industry in industries:
        if any(needle in candidate or candidate in needle for candidate in tables.get(industry, ())):
            boost = max(boost, get_scoring_float("industry.keyword_boost", 1.3))
    return boost


def available_industries() -> list[str]:
    return list(_industry_keywords().keys())


def get_industry_keywords(industry: str) -> list[str]:
    return list(_industry_keywords().get(industry.strip().lower(), ()))
