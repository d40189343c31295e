from __future__ import annotations

import logging
from typing import Any, get_args

from pydantic import ValidationError

from app.ai.prompts import build_extraction_messages
from app.ai.types import AIClient
from app.core.config.scoring import get_scoring_float, get_scoring_value
from app.normalize.utils import clean_keyword, contains_word
from app.schemas.ats import ContextType, ExtractedKeywords, KeywordContext, KeywordData
from app.services.ai_completion import json_completion

logger = logging.getLogger(__name__)

_CONTEXT_TYPES = frozenset(get_args(ContextType))
_IMPORTANCE_BUCKETS: tuple[tuple[str, str], ...] = (
    ("required", "required"),
    ("preferred", "preferred"),
    ("niceToHave", "nice-to-have"),
)

# Conservative fallback shortlists: only unambiguous terms, tested for literal presence.
_FALLBACK_TECHNICAL = (
    "javascript",
    "react",
    "angular",
    "vue",
    "html",
    "css",
    "typescript",
    "node.js",
    "python",
    "java",
    "sql",
    "git",
)
_FALLBACK_QUALIFICATIONS = ("bachelor", "master", "degree", "experience")
_FALLBACK_ROLE_TERMS = ("frontend", "backend", "development")


def _keywords_from_payload(payload: dict[str, Any], job_description_text: str) -> list[KeywordData]:
    source = job_description_text.lower()
    keywords: list[KeywordData] = []
    rejected: list[str] = []
    for bucket, importance in _IMPORTANCE_BUCKETS:
        items = payload.get(bucket)
        if not isinstance(items, list):
            continue
        for item in items:
            if not isinstance(item, dict):
                continue
            raw_keyword = str(item.get("keyword") or "").strip().lower()
            if not raw_keyword:
                continue
            if raw_keyword not in source:
                rejected.append(raw_keyword)
                continue
            context_type = str(item.get("contextType") or "").strip().lower()
            category = item.get("category")
            try:
                keywords.append(
                    KeywordData(
                        keyword=raw_keyword,
                        context=KeywordContext(
                            type=context_type if context_type in _CONTEXT_TYPES else "skill",
                            category=str(category) if category else None,
                        ),
                        importance=importance,
                    )
                )
            except ValidationError:
                logger.debug("keyword_extraction_item_invalid keyword=%s", raw_keyword)
    if rejected:
        logger.info("keyword_extraction_rejected_unverified count=%s keywords=%s", len(rejected), rejected[:10])
    return keywords


def fallback_keyword_extraction(job_description_text: str) -> ExtractedKeywords:
    text = job_description_text.lower()
    keywords: list[KeywordData] = []
    for skill in _FALLBACK_TECHNICAL:
        if contains_word(skill, text):
            keywords.append(
                KeywordData(
                    keyword=skill,
                    context=KeywordContext(type="skill", category="technical"),
                    importance="required",
                )
            )
    for qualification in _FALLBACK_QUALIFICATIONS:
        if contains_word(qualification, text):
            keywords.append(
                KeywordData(
                    keyword=qualification,
                    context=KeywordContext(type="degree", category="education"),
                    importance="required",
                )
            )
    for term in _FALLBACK_ROLE_TERMS:
        if contains_word(term, text):
            keywords.append(
                KeywordData(
                    keyword=term,
                    context=KeywordContext(type="responsibility", category="development"),
                    importance="preferred",
                )
            )
    result = ExtractedKeywords.from_keywords(keywords)
    logger.info("keyword_extraction_complete source=fallback total=%s", len(result.all))
    return result


async def _extract(
    job_description_text: str,
    *,
    ai_client: AIClient | None,
    industry: str | None,
) -> ExtractedKeywords:
    payload = await json_completion(
        build_extraction_messages(job_description_text, industry=industry),
        max_tokens=int(get_scoring_value("ai.extraction.max_tokens", 1500)),
        temperature=get_scoring_float("ai.extraction.temperature", 0.1),
        purpose="keyword_extraction",
        client=ai_client,
    )
    if payload is None:
        return fallback_keyword_extraction(job_description_text)

    keywords = _keywords_from_payload(payload, job_description_text)
    if not keywords:
        logger.warning("keyword_extraction_empty source=ai; using fallback")
        return fallback_keyword_extraction(job_description_text)

    result = ExtractedKeywords.from_keywords(keywords)
    logger.info(
        "keyword_extraction_complete source=ai total=%s required=%s preferred=%s",
        len(result.all),
        len(result.required),
        len(result.preferred),
    )
    return result


async def extract_enhanced_job_keywords(
    job_description_text: str,
    *,
    ai_client: AIClient | None = None,
) -> ExtractedKeywords:
    """Extract categorized keywords from a job description.

    The AI path only keeps keywords found verbatim (case-insensitive) in the
    text. Any AI failure falls back to the deterministic shortlists.
    """
    return await _extract(job_description_text, ai_client=ai_client, industry=None)


async def extract_keywords_with_industry_context(
    job_description_text: str,
    industry: str,
    *,
    ai_client: AIClient | None = None,
) -> ExtractedKeywords:
    extracted = await _extract(job_description_text, ai_client=ai_client, industry=industry)
    tagged = [
        item.model_copy(update={"context": item.context.model_copy(update={"industry": industry})})
        for item in extracted.all
    ]
    return ExtractedKeywords.from_keywords(tagged)


def validate_and_clean_keywords(keywords: ExtractedKeywords) -> ExtractedKeywords:
    seen: set[str] = set()
    cleaned_items: list[KeywordData] = []
    for item in keywords.all:
        cleaned = clean_keyword(item.keyword)
        if len(cleaned) <= 1 or cleaned in seen:
            continue
        seen.add(cleaned)
        cleaned_items.append(item.model_copy(update={"keyword": cleaned}))
    return ExtractedKeywords.from_keywords(cleaned_items)


def merge_keyword_sources(primary: ExtractedKeywords, secondary: ExtractedKeywords) -> ExtractedKeywords:
    """Union of both sources; the primary entry wins on duplicate keywords."""
    return ExtractedKeywords.from_keywords([*primary.all, *secondary.all])
