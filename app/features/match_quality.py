from __future__ import annotations

from app.core.config.scoring import get_scoring_float, get_scoring_value
from app.schemas.ats import (
    MATCH_TYPES,
    ATSRecommendation,
    EnhancedKeywordMatch,
    ExtractedKeywords,
    Grade,
    KeywordInsights,
    KeywordMatchingResult,
    MatchQuality,
    MatchQualityMetrics,
)

_GRADE_ORDER: tuple[Grade, ...] = ("A", "B", "C", "D")
_DEFAULT_GRADE_THRESHOLDS = {"A": 85, "B": 70, "C": 55, "D": 40}


def _clamp_float(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    return max(lower, min(upper, value))


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def quality_grade(score: float) -> Grade:
    for grade in _GRADE_ORDER:
        threshold = get_scoring_float(f"match_quality.grades.{grade}", _DEFAULT_GRADE_THRESHOLDS[grade])
        if score >= threshold:
            return grade
    return "F"


def match_type_distribution(matches: list[EnhancedKeywordMatch]) -> dict[str, int]:
    distribution = {match_type: 0 for match_type in MATCH_TYPES}
    for match in matches:
        distribution[match.match_type] += 1
    return distribution


def _coverage(matched: set[str], bucket: list[str]) -> float:
    if not bucket:
        return 1.0
    return sum(1 for keyword in bucket if keyword in matched) / len(bucket)


def calculate_match_quality(
    matches: list[EnhancedKeywordMatch],
    job_keywords: ExtractedKeywords,
) -> MatchQuality:
    matched = {match.original_keyword for match in matches}
    metrics = MatchQualityMetrics(
        required_coverage=_coverage(matched, [item.keyword for item in job_keywords.required]),
        preferred_coverage=_coverage(matched, [item.keyword for item in job_keywords.preferred]),
        average_confidence=_clamp_float(_mean([match.confidence for match in matches])),
        context_accuracy=_clamp_float(_mean([match.contextual_score for match in matches])),
        match_type_distribution=match_type_distribution(matches),
    )

    weighted = (
        metrics.required_coverage * get_scoring_float("match_quality.weights.required_coverage", 0.5)
        + metrics.preferred_coverage * get_scoring_float("match_quality.weights.preferred_coverage", 0.2)
        + metrics.average_confidence * get_scoring_float("match_quality.weights.average_confidence", 0.15)
        + metrics.context_accuracy * get_scoring_float("match_quality.weights.context_accuracy", 0.15)
    )
    overall = max(0, min(100, round(weighted * 100)))
    return MatchQuality(overall_score=overall, metrics=metrics, grade=quality_grade(overall))


def generate_matching_recommendations(
    matches: list[EnhancedKeywordMatch],
    unmatched_keywords: list[str],
    job_keywords: ExtractedKeywords,
) -> list[ATSRecommendation]:
    recommendations: list[ATSRecommendation] = []
    unmatched = set(unmatched_keywords)

    missing_required = [item.keyword for item in job_keywords.required if item.keyword in unmatched]
    if missing_required:
        listed = int(get_scoring_value("match_quality.recommendations.max_listed_missing", 3))
        recommendations.append(
            ATSRecommendation(
                priority="CRITICAL",
                issue=f"Missing required keywords: {', '.join(missing_required[:listed])}",
                fix="Add these critical skills/requirements to your resume if you have the experience",
                impact="These are likely minimum requirements - missing them may result in automatic rejection",
            )
        )

    context_floor = get_scoring_float("match_quality.recommendations.misplaced_skill_context", 0.7)
    misplaced = [
        match
        for match in matches
        if match.context.type == "skill" and match.location.section != "skills" and match.contextual_score < context_floor
    ]
    if len(misplaced) > int(get_scoring_value("match_quality.recommendations.misplaced_skill_count", 3)):
        recommendations.append(
            ATSRecommendation(
                priority="HIGH",
                issue="Technical skills scattered throughout resume",
                fix="Consolidate technical skills in a dedicated Skills section",
                impact="ATS systems expect skills in a specific section for proper categorization",
            )
        )

    low_confidence = get_scoring_float("match_quality.recommendations.low_confidence", 0.7)
    low_share = get_scoring_float("match_quality.recommendations.low_confidence_share", 0.3)
    if sum(1 for match in matches if match.confidence < low_confidence) > len(matches) * low_share:
        recommendations.append(
            ATSRecommendation(
                priority="MEDIUM",
                issue="Many keywords only partially match job requirements",
                fix="Use exact terminology from the job description where applicable",
                impact="Partial matches may not be recognized by all ATS systems",
            )
        )

    partial_share = get_scoring_float("match_quality.recommendations.partial_share", 0.2)
    if match_type_distribution(matches)["partial"] > len(matches) * partial_share:
        recommendations.append(
            ATSRecommendation(
                priority="MEDIUM",
                issue="Too many fuzzy/partial keyword matches",
                fix="Review spelling and use standard industry terminology",
                impact="Typos and non-standard terms reduce ATS matching confidence",
            )
        )

    return recommendations


def generate_keyword_insights(result: KeywordMatchingResult, job_keywords: ExtractedKeywords) -> KeywordInsights:
    matches = result.matches
    metrics = result.match_quality.metrics
    patterns: dict[str, int] = {}
    for match in matches:
        patterns[match.match_type] = patterns.get(match.match_type, 0) + 1

    insights = KeywordInsights(match_patterns=patterns)

    if patterns.get("exact", 0) > len(matches) * 0.6:
        insights.strengths.append("Strong exact keyword matches with job requirements")
    skills_in_place = sum(1 for match in matches if match.context.type == "skill" and match.location.section == "skills")
    if skills_in_place > 5:
        insights.strengths.append("Technical skills properly organized in Skills section")
    if metrics.average_confidence > 0.8:
        insights.strengths.append("High confidence keyword matches indicate strong alignment")

    if patterns.get("partial", 0) > len(matches) * 0.2:
        insights.weaknesses.append("Many partial/fuzzy matches suggest terminology misalignment")
    matched = {match.original_keyword for match in matches}
    missing_required = [item.keyword for item in job_keywords.required if item.keyword not in matched]
    if missing_required:
        insights.weaknesses.append(f"Missing {len(missing_required)} required keywords")
    if metrics.context_accuracy < 0.6:
        insights.weaknesses.append("Keywords found in suboptimal resume sections")

    if any(match.confidence < 0.8 for match in matches):
        insights.opportunities.append("Update terminology to match job description exactly")
    if patterns.get("synonym", 0) > 3:
        insights.opportunities.append("Consider using the exact terms from the job posting")
    if metrics.preferred_coverage < 0.5:
        insights.opportunities.append("Add more preferred qualifications to strengthen your profile")

    return insights
