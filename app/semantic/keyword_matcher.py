from __future__ import annotations

import asyncio
import logging
import math

from app.ai.types import AIClient
from app.core.config import settings
from app.core.config.scoring import get_scoring_float, get_scoring_value
from app.features.industry_detector import GENERAL_INDUSTRY, detect_industries
from app.features.match_quality import calculate_match_quality, generate_matching_recommendations
from app.normalize.utils import count_word_matches, first_word_match, word_offsets
from app.schemas.ats import (
    CompoundTerm,
    EnhancedKeywordMatch,
    ExtractedKeywords,
    KeywordData,
    KeywordMatchingResult,
    ParsedResumeSections,
    SectionLocation,
)
from app.taxonomy import VariationProvider, get_default_variation_database

from .fuzzy import fuzzy_tokens
from .semantic_match import find_semantic_phrase

logger = logging.getLogger(__name__)


def contextual_score(context_type: str, section: str) -> float:
    """How well a section suits a keyword of the given type, in [0, 1]."""
    default = get_scoring_float("matching.contextual_scores.default", 0.5)
    value = get_scoring_value(f"matching.contextual_scores.{context_type}.{section}", default)
    try:
        score = float(value)
    except (TypeError, ValueError):
        score = default
    return max(0.0, min(1.0, score))


def proximity(term: str, content: str) -> int:
    """Score 100 at the start of a section, falling towards 0 at its end."""
    if not content:
        return 0
    index = first_word_match(term, content)
    if index == -1:
        return 0
    return max(0, min(100, round((1 - index / len(content)) * 100)))


def match_rank(match: EnhancedKeywordMatch) -> float:
    return match.confidence * match.contextual_score * (1 + math.log10(match.frequency + 1))


def select_best_match(candidates: list[EnhancedKeywordMatch]) -> EnhancedKeywordMatch | None:
    """Highest rank wins; on ties the earliest candidate is kept."""
    best: EnhancedKeywordMatch | None = None
    best_rank = -1.0
    for candidate in candidates:
        rank = match_rank(candidate)
        if rank > best_rank:
            best = candidate
            best_rank = rank
    return best


class AdvancedKeywordMatcher:
    def __init__(
        self,
        variation_db: VariationProvider | None = None,
        *,
        ai_client: AIClient | None = None,
        semantic_enabled: bool | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        self._db = variation_db or get_default_variation_database()
        self._ai_client = ai_client
        self._semantic_enabled = settings.semantic_match_enabled if semantic_enabled is None else semantic_enabled
        self._max_concurrency = max(1, max_concurrency or settings.ai_max_concurrency)

    async def match_keywords(
        self,
        resume_text: str,
        job_keywords: ExtractedKeywords,
        sections: ParsedResumeSections,
    ) -> KeywordMatchingResult:
        max_industries = int(get_scoring_value("matching.max_detected_industries", 3))
        industries = detect_industries(resume_text, job_keywords)[:max_industries]
        semaphore = asyncio.Semaphore(self._max_concurrency)

        best_matches = await asyncio.gather(
            *(self._find_best_match(item, resume_text, sections, industries, semaphore) for item in job_keywords.all)
        )

        matches: list[EnhancedKeywordMatch] = []
        unmatched: list[str] = []
        for item, best in zip(job_keywords.all, best_matches):
            if best is None:
                unmatched.append(item.keyword)
            else:
                matches.append(best)

        quality = calculate_match_quality(matches, job_keywords)
        logger.info(
            "keyword_matching_complete matches=%s unmatched=%s grade=%s industries=%s",
            len(matches),
            len(unmatched),
            quality.grade,
            ",".join(industries),
        )
        return KeywordMatchingResult(
            matches=matches,
            unmatched_keywords=unmatched,
            match_quality=quality,
            recommendations=generate_matching_recommendations(matches, unmatched, job_keywords),
            detected_industries=industries,
        )

    async def _find_best_match(
        self,
        item: KeywordData,
        resume_text: str,
        sections: ParsedResumeSections,
        industries: list[str],
        semaphore: asyncio.Semaphore,
    ) -> EnhancedKeywordMatch | None:
        compound = self._db.is_compound_term(item.keyword)

        candidates = self._exact_matches(item, sections, compound)
        if compound is not None:
            candidates.extend(self._compound_matches(item, resume_text, sections, compound))
        for industry in industries:
            if industry != GENERAL_INDUSTRY:
                candidates.extend(self._industry_matches(item, sections, industry))

        if not candidates and item.importance == "required" and self._semantic_enabled:
            async with semaphore:
                semantic = await self._semantic_match(item, resume_text, sections)
            if semantic is not None:
                candidates.append(semantic)

        if not candidates and len(item.keyword) >= int(get_scoring_value("matching.fuzzy.min_keyword_length", 6)):
            candidates.extend(self._fuzzy_matches(item, sections))

        return select_best_match(candidates)

    def _ordered_variations(self, keyword: str) -> list[str]:
        variations = self._db.get_all_variations(keyword)
        return [keyword] + sorted(variation for variation in variations if variation != keyword)

    def _exact_matches(
        self,
        item: KeywordData,
        sections: ParsedResumeSections,
        compound: CompoundTerm | None,
    ) -> list[EnhancedKeywordMatch]:
        partial_confidence = get_scoring_float("matching.confidence.partial", 0.6)
        partial_factor = get_scoring_float("matching.partial_context_factor", 0.7)
        partial_proximity = int(get_scoring_value("matching.proximity.partial", 40))

        matches: list[EnhancedKeywordMatch] = []
        for variation in self._ordered_variations(item.keyword):
            if compound is not None and variation == item.keyword:
                continue
            is_literal = variation == item.keyword
            is_typo = not is_literal and self._db.is_misspelling(item.keyword, variation)
            for section_name, section in sections.iter_sections():
                frequency = count_word_matches(variation, section.content)
                if not frequency:
                    continue
                base_context = contextual_score(item.context.type, section_name)
                if is_typo:
                    matches.append(
                        EnhancedKeywordMatch(
                            original_keyword=item.keyword,
                            matched_variation=variation,
                            match_type="partial",
                            confidence=partial_confidence,
                            context=item.context,
                            location=SectionLocation(section=section_name, proximity=partial_proximity),
                            frequency=frequency,
                            contextual_score=base_context * partial_factor,
                        )
                    )
                    continue
                matches.append(
                    EnhancedKeywordMatch(
                        original_keyword=item.keyword,
                        matched_variation=variation,
                        match_type="exact" if is_literal else "synonym",
                        confidence=get_scoring_float(
                            "matching.confidence.exact" if is_literal else "matching.confidence.synonym",
                            1.0 if is_literal else 0.9,
                        ),
                        context=item.context,
                        location=SectionLocation(section=section_name, proximity=proximity(variation, section.content)),
                        frequency=frequency,
                        contextual_score=base_context,
                    )
                )
        return matches

    def _compound_matches(
        self,
        item: KeywordData,
        resume_text: str,
        sections: ParsedResumeSections,
        compound: CompoundTerm,
    ) -> list[EnhancedKeywordMatch]:
        if not compound.parts:
            return []
        lowered = resume_text.lower()
        positions = [word_offsets(part, lowered) for part in compound.parts]

        if compound.must_match_all:
            max_distance = int(get_scoring_value("matching.compound_max_distance", 20))
            found = any(
                all(
                    any(abs(position - start) <= max_distance * index for position in positions[index])
                    for index in range(1, len(compound.parts))
                )
                for start in positions[0]
            )
        else:
            found = any(positions)
        if not found:
            return []

        matches: list[EnhancedKeywordMatch] = []
        for section_name, section in sections.iter_sections():
            present = [count_word_matches(part, section.content) > 0 for part in compound.parts]
            if not (all(present) if compound.must_match_all else any(present)):
                continue
            matches.append(
                EnhancedKeywordMatch(
                    original_keyword=item.keyword,
                    matched_variation=compound.full,
                    match_type="compound",
                    confidence=get_scoring_float("matching.confidence.compound", 0.95),
                    context=item.context,
                    location=SectionLocation(
                        section=section_name,
                        proximity=int(get_scoring_value("matching.proximity.compound", 80)),
                    ),
                    frequency=1,
                    contextual_score=contextual_score(item.context.type, section_name),
                )
            )
        return matches

    def _industry_matches(
        self,
        item: KeywordData,
        sections: ParsedResumeSections,
        industry: str,
    ) -> list[EnhancedKeywordMatch]:
        variations = sorted(self._db.get_industry_variations(item.keyword, industry))
        if not variations:
            return []
        industry_context = item.context.model_copy(update={"industry": industry})

        matches: list[EnhancedKeywordMatch] = []
        for variation in variations:
            for section_name, section in sections.iter_sections():
                frequency = count_word_matches(variation, section.content)
                if not frequency:
                    continue
                matches.append(
                    EnhancedKeywordMatch(
                        original_keyword=item.keyword,
                        matched_variation=variation,
                        match_type="synonym",
                        confidence=get_scoring_float("matching.confidence.industry", 0.85),
                        context=industry_context,
                        location=SectionLocation(section=section_name, proximity=proximity(variation, section.content)),
                        frequency=frequency,
                        contextual_score=contextual_score(item.context.type, section_name),
                    )
                )
        return matches

    async def _semantic_match(
        self,
        item: KeywordData,
        resume_text: str,
        sections: ParsedResumeSections,
    ) -> EnhancedKeywordMatch | None:
        hit = await find_semantic_phrase(item.keyword, resume_text, ai_client=self._ai_client)
        if hit is None:
            return None

        needle = hit.phrase.lower()
        for section_name, section in sections.iter_sections():
            if needle in section.content.lower():
                return EnhancedKeywordMatch(
                    original_keyword=item.keyword,
                    matched_variation=hit.phrase,
                    match_type="semantic",
                    confidence=hit.confidence,
                    context=item.context,
                    location=SectionLocation(
                        section=section_name,
                        proximity=int(get_scoring_value("matching.proximity.semantic", 50)),
                    ),
                    frequency=1,
                    contextual_score=contextual_score(item.context.type, section_name),
                )
        logger.debug("semantic_match_unlocated keyword=%s phrase=%s", item.keyword, hit.phrase)
        return None

    def _fuzzy_matches(self, item: KeywordData, sections: ParsedResumeSections) -> list[EnhancedKeywordMatch]:
        partial_factor = get_scoring_float("matching.partial_context_factor", 0.7)
        matches: list[EnhancedKeywordMatch] = []
        for section_name, section in sections.iter_sections():
            for token, count in fuzzy_tokens(item.keyword, section.content).items():
                matches.append(
                    EnhancedKeywordMatch(
                        original_keyword=item.keyword,
                        matched_variation=token,
                        match_type="partial",
                        confidence=get_scoring_float("matching.confidence.partial", 0.6),
                        context=item.context,
                        location=SectionLocation(
                            section=section_name,
                            proximity=int(get_scoring_value("matching.proximity.partial", 40)),
                        ),
                        frequency=count,
                        contextual_score=contextual_score(item.context.type, section_name) * partial_factor,
                    )
                )
        return matches


async def match_keywords(
    resume_text: str,
    job_keywords: ExtractedKeywords,
    sections: ParsedResumeSections,
    *,
    ai_client: AIClient | None = None,
) -> KeywordMatchingResult:
    return await AdvancedKeywordMatcher(ai_client=ai_client).match_keywords(resume_text, job_keywords, sections)
