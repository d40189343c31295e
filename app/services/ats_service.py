from __future__ import annotations

import logging

from app.ai.types import AIClient
from app.core.config.scoring import get_scoring_float, get_scoring_value
from app.features import (
    analyze_bonus_features,
    analyze_contact_info,
    analyze_format_compatibility,
    analyze_parseability,
    analyze_structural_compliance,
    extract_enhanced_job_keywords,
    generate_keyword_insights,
    parse_resume_into_sections,
    validate_and_clean_keywords,
)
from app.schemas.ats import (
    PRIORITY_ORDER,
    ATSAnalysisError,
    ATSAnalysisResult,
    ATSRecommendation,
    ATSResult,
    ATSScoreBreakdown,
    ExtractedKeywords,
    KeywordInsights,
    KeywordMatchingResult,
    KeywordSubscore,
    MatchQuality,
    MatchQualityMetrics,
    ParseabilityAnalysis,
    ParserMetadata,
    PassFailStatus,
)
from app.semantic import AdvancedKeywordMatcher

logger = logging.getLogger(__name__)

_OVERALL_WEIGHTS = {
    "parseability": 0.30,
    "keyword_match": 0.35,
    "skills_alignment": 0.20,
    "format_compatibility": 0.10,
    "contact_info": 0.03,
    "bonus_features": 0.02,
}


def _clamp_score(value: float) -> int:
    return int(max(0, min(100, round(value))))


def calculate_enhanced_scores(result: KeywordMatchingResult, job_keywords: ExtractedKeywords) -> KeywordSubscore:
    """Keyword sub-score: required 60, preferred 30, quality 10 and a coverage bonus."""
    required_points = get_scoring_float("keyword_subscore.required_points", 60)
    preferred_points = get_scoring_float("keyword_subscore.preferred_points", 30)
    exact_bonus = get_scoring_float("keyword_subscore.exact_bonus", 1.1)

    required = {item.keyword for item in job_keywords.required}
    preferred = {item.keyword for item in job_keywords.preferred}
    required_matches = [match for match in result.matches if match.original_keyword in required]
    preferred_matches = [match for match in result.matches if match.original_keyword in preferred]

    required_score = 0.0
    for match in required_matches:
        points = required_points / max(len(job_keywords.required), 1)
        points *= match.confidence
        points *= 0.5 + match.contextual_score * 0.5
        if match.match_type == "exact":
            points *= exact_bonus
        required_score += points

    preferred_score = 0.0
    for match in preferred_matches:
        points = preferred_points / max(len(job_keywords.preferred), 1)
        points *= match.confidence
        points *= 0.5 + match.contextual_score * 0.5
        preferred_score += points

    metrics = result.match_quality.metrics
    required_coverage = len(required_matches) / len(job_keywords.required) if job_keywords.required else 1.0
    coverage_bonus = 0.0
    if required_coverage >= get_scoring_float("keyword_subscore.coverage_bonus.high_threshold", 0.9):
        coverage_bonus = get_scoring_float("keyword_subscore.coverage_bonus.high_points", 5)
    elif required_coverage >= get_scoring_float("keyword_subscore.coverage_bonus.medium_threshold", 0.75):
        coverage_bonus = get_scoring_float("keyword_subscore.coverage_bonus.medium_points", 3)

    subscore = KeywordSubscore(
        required_keywords=min(required_points, required_score),
        preferred_keywords=min(preferred_points, preferred_score),
        match_confidence=metrics.average_confidence * get_scoring_float("keyword_subscore.confidence_points", 5),
        context_accuracy=metrics.context_accuracy * get_scoring_float("keyword_subscore.context_points", 5),
        coverage_bonus=coverage_bonus,
    )
    total = (
        subscore.required_keywords
        + subscore.preferred_keywords
        + subscore.match_confidence
        + subscore.context_accuracy
        + subscore.coverage_bonus
    )
    subscore.overall = _clamp_score(min(100.0, total))
    return subscore


def determine_pass_fail_status(overall_score: int, critical_failures: bool, unmatched_count: int) -> PassFailStatus:
    if critical_failures:
        return "FAIL"
    if overall_score < get_scoring_float("overall.thresholds.auto_reject", 30):
        return "FAIL"
    if unmatched_count > int(get_scoring_value("overall.thresholds.max_unmatched_before_fail", 5)):
        return "FAIL"
    if overall_score >= get_scoring_float("overall.thresholds.auto_pass", 75) and unmatched_count <= int(
        get_scoring_value("overall.thresholds.max_unmatched_for_pass", 2)
    ):
        return "PASS"
    return "REVIEW"


def sort_recommendations(recommendations: list[ATSRecommendation]) -> list[ATSRecommendation]:
    """Stable sort CRITICAL -> HIGH -> MEDIUM -> LOW."""
    return sorted(recommendations, key=lambda item: PRIORITY_ORDER[item.priority])


def _critical_failure_result(parseability: ParseabilityAnalysis) -> ATSAnalysisResult:
    return ATSAnalysisResult(
        overall_score=parseability.score,
        pass_fail_status="FAIL",
        breakdown=ATSScoreBreakdown(
            parseability=parseability.score,
            keyword_match=0,
            skills_alignment=0,
            format_compatibility=0,
            contact_info=0,
            bonus_features=0,
        ),
        recommendations=sort_recommendations(parseability.recommendations),
        critical_issues=parseability.issues,
        match_quality=MatchQuality(
            overall_score=0,
            metrics=MatchQualityMetrics(
                required_coverage=0.0,
                preferred_coverage=0.0,
                average_confidence=0.0,
                context_accuracy=0.0,
            ),
            grade="F",
        ),
        insights=KeywordInsights(weaknesses=["Critical parsing failures prevent proper analysis"]),
    )


async def _analyze(
    resume_text: str,
    job_description_text: str,
    parser_metadata: ParserMetadata | None,
    ai_client: AIClient | None,
) -> ATSAnalysisResult:
    parseability = analyze_parseability(parser_metadata)
    if parseability.critical_failures:
        logger.info("ats_analysis_critical_failure parseability=%s", parseability.score)
        return _critical_failure_result(parseability)

    raw_keywords = await extract_enhanced_job_keywords(job_description_text, ai_client=ai_client)
    job_keywords = validate_and_clean_keywords(raw_keywords)
    sections = parse_resume_into_sections(resume_text)
    matching = await AdvancedKeywordMatcher(ai_client=ai_client).match_keywords(resume_text, job_keywords, sections)

    subscore = calculate_enhanced_scores(matching, job_keywords)
    structural = analyze_structural_compliance(sections)
    format_check = analyze_format_compatibility(resume_text)
    contact = analyze_contact_info(resume_text)
    bonus = analyze_bonus_features(resume_text, matching.matches)

    breakdown = ATSScoreBreakdown(
        parseability=parseability.score,
        keyword_match=subscore.overall,
        skills_alignment=_clamp_score(subscore.required_keywords),
        format_compatibility=_clamp_score(
            format_check.score * get_scoring_float("overall.format_blend.format", 0.7)
            + structural.score * get_scoring_float("overall.format_blend.structure", 0.3)
        ),
        contact_info=contact.score,
        bonus_features=bonus.score,
    )
    overall = _clamp_score(
        sum(
            getattr(breakdown, component) * get_scoring_float(f"overall.weights.{component}", default)
            for component, default in _OVERALL_WEIGHTS.items()
        )
    )
    status = determine_pass_fail_status(overall, parseability.critical_failures, len(matching.unmatched_keywords))

    recommendations = sort_recommendations(
        [
            *parseability.recommendations,
            *matching.recommendations,
            *structural.recommendations,
            *format_check.recommendations,
            *contact.recommendations,
            *bonus.recommendations,
        ]
    )

    skill_types = {"skill", "tool"}
    keyword_types = {item.keyword: item.context.type for item in job_keywords.all}
    logger.info(
        "ats_analysis_complete score=%s status=%s grade=%s matched=%s unmatched=%s",
        overall,
        status,
        matching.match_quality.grade,
        len(matching.matches),
        len(matching.unmatched_keywords),
    )
    return ATSAnalysisResult(
        overall_score=overall,
        pass_fail_status=status,
        breakdown=breakdown,
        recommendations=recommendations,
        missing_keywords=matching.unmatched_keywords,
        matched_keywords=[match.original_keyword for match in matching.matches],
        skills_found=[match.original_keyword for match in matching.matches if match.context.type in skill_types],
        skills_missing=[keyword for keyword in matching.unmatched_keywords if keyword_types.get(keyword) in skill_types],
        bonus_items=bonus.found,
        critical_issues=parseability.issues,
        match_quality=matching.match_quality,
        insights=generate_keyword_insights(matching, job_keywords),
        detailed_matches=matching.matches,
        detected_industries=matching.detected_industries,
    )


async def analyze_ats_compatibility_enhanced(
    resume_text: str,
    job_description_text: str,
    parser_metadata: ParserMetadata | None = None,
    *,
    ai_client: AIClient | None = None,
) -> ATSResult:
    """Score a résumé against a job description.

    Never raises: input problems and unexpected failures are returned as
    ``ATSAnalysisError``; a critical parseability failure is a ``FAIL`` result.
    """
    if not (resume_text or "").strip():
        return ATSAnalysisError(
            error="Resume text is required",
            details="Cannot analyze ATS compatibility without resume content",
        )
    if not (job_description_text or "").strip():
        return ATSAnalysisError(
            error="Job description is required",
            details="Cannot analyze ATS compatibility without job description",
        )

    try:
        return await _analyze(resume_text, job_description_text, parser_metadata, ai_client)
    except Exception as exc:  # noqa: BLE001
        logger.exception("ats_analysis_failed resume_len=%s jd_len=%s", len(resume_text), len(job_description_text))
        return ATSAnalysisError(error="Failed to analyze ATS compatibility", details=str(exc) or type(exc).__name__)
