from __future__ import annotations

import re

from app.core.config.scoring import get_scoring_float, get_scoring_value
from app.normalize.utils import EMAIL_RE, PHONE_RE
from app.schemas.ats import (
    CANONICAL_SECTIONS,
    ATSRecommendation,
    EnhancedKeywordMatch,
    HeuristicScore,
    ParseabilityAnalysis,
    ParsedResumeSections,
    ParserMetadata,
    StructuralCompliance,
)

_REQUIRED_SECTIONS = ("contact", "experience")
_EXPECTED_SECTIONS = ("summary", "education", "skills")
_OPTIONAL_SECTIONS = ("certifications",)

_SPECIAL_CHAR_RE = re.compile(r"[^\w\s.,;:()\-]")
_CERTIFICATION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(AWS|Azure|GCP|Google Cloud)\s+(Certified|Professional|Associate|Expert|Practitioner)\b", re.IGNORECASE),
    re.compile(r"\b(PMP|CISSP|CISA|CISM|CEH|CCNA|CCNP|CCIE)\b", re.IGNORECASE),
    re.compile(r"\b(Certified|Professional)\s+(Scrum Master|Product Owner|Developer|Analyst)\b", re.IGNORECASE),
    re.compile(r"\b(Microsoft|Oracle|Salesforce|Adobe)\s+Certified\b", re.IGNORECASE),
    re.compile(r"\bCertified\s+(Public Accountant|Financial Planner|Project Manager)\b", re.IGNORECASE),
)
_EXPERIENCE_YEARS_RE = re.compile(r"(\d+)\+?\s*(?:years?|yrs?)\s*(?:of\s*)?(?:experience|exp)", re.IGNORECASE)

_FORMATTING_RECOMMENDATIONS: dict[str, ATSRecommendation] = {
    "multi_column": ATSRecommendation(
        priority="HIGH",
        issue="Multi-column layout detected",
        fix="Switch to a single-column layout",
        impact="ATS parsers often read columns out of order and scramble your content",
    ),
    "tables": ATSRecommendation(
        priority="HIGH",
        issue="Tables detected in resume",
        fix="Replace tables with plain text sections and bullet points",
        impact="Table cells are frequently skipped or merged by ATS parsers",
    ),
    "graphics": ATSRecommendation(
        priority="MEDIUM",
        issue="Graphics or images detected",
        fix="Remove images, icons and charts; describe skills in text instead",
        impact="ATS systems cannot read text embedded in graphics",
    ),
    "header": ATSRecommendation(
        priority="MEDIUM",
        issue="Important content placed in page header or footer",
        fix="Move contact details and other key content into the main body",
        impact="Many ATS parsers ignore page headers and footers",
    ),
    "special_chars": ATSRecommendation(
        priority="LOW",
        issue="Unusual symbols or special characters detected",
        fix="Use standard bullets and punctuation",
        impact="Decorative characters can be garbled during parsing",
    ),
}
_DEFAULT_FORMATTING_PENALTIES = {"multi_column": 40, "tables": 30, "graphics": 20, "header": 25, "special_chars": 15}


def _clamp_score(value: float) -> int:
    return int(max(0, min(100, round(value))))


def analyze_parseability(metadata: ParserMetadata | None) -> ParseabilityAnalysis:
    if metadata is None:
        return ParseabilityAnalysis(
            score=_clamp_score(get_scoring_float("parseability.missing_metadata_score", 50)),
            issues=["No advanced parsing data available"],
            critical_failures=False,
            recommendations=[
                ATSRecommendation(
                    priority="MEDIUM",
                    issue="No detailed parsing analysis available",
                    fix="Upload the original resume file for a full ATS parsing check",
                    impact="Basic analysis only - some formatting issues may not be detected",
                )
            ],
        )

    score = 100.0
    issues: list[str] = []
    recommendations: list[ATSRecommendation] = []
    critical = False

    for issue in dict.fromkeys(metadata.formatting_issues):
        score -= get_scoring_float(f"parseability.formatting_penalties.{issue}", _DEFAULT_FORMATTING_PENALTIES[issue])
        issues.append(f"Formatting issue: {issue.replace('_', ' ')}")
        recommendations.append(_FORMATTING_RECOMMENDATIONS[issue].model_copy())

    if metadata.word_count is not None and metadata.word_count < int(get_scoring_value("parseability.low_word_count", 150)):
        score -= get_scoring_float("parseability.low_word_count_penalty", 50)
        issues.append("Insufficient text content - likely parsing failure")
        recommendations.append(
            ATSRecommendation(
                priority="HIGH",
                issue="Very low word count detected",
                fix="Ensure resume has sufficient content and detail",
                impact="May indicate parsing failure or insufficient content",
            )
        )
        if metadata.word_count < int(get_scoring_value("parseability.critical_word_count", 100)):
            critical = True

    if metadata.ats_warnings:
        score -= get_scoring_float("parseability.warning_penalty", 10) * len(metadata.ats_warnings)
        issues.extend(f"Parser warning: {warning}" for warning in metadata.ats_warnings)
        recommendations.append(
            ATSRecommendation(
                priority="MEDIUM",
                issue=f"Document parser reported {len(metadata.ats_warnings)} warning(s)",
                fix="Simplify formatting and re-export the resume as a standard PDF or DOCX",
                impact="Parser warnings usually mean some content is lost in ATS systems",
            )
        )

    if metadata.parsing_confidence is not None and metadata.parsing_confidence < get_scoring_float(
        "parseability.critical_confidence", 20
    ):
        critical = True
        issues.append("CRITICAL: Resume could not be parsed reliably")
        recommendations.append(
            ATSRecommendation(
                priority="CRITICAL",
                issue="Resume format prevents parsing",
                fix="Convert to simple single-column format with standard fonts (PDF, DOCX)",
                impact="Currently being auto-rejected by ATS",
            )
        )

    if critical:
        score = min(score, get_scoring_float("parseability.critical_score_cap", 10))

    return ParseabilityAnalysis(
        score=_clamp_score(score),
        issues=issues,
        critical_failures=critical,
        recommendations=recommendations,
    )


def analyze_structural_compliance(sections: ParsedResumeSections) -> StructuralCompliance:
    score = 100
    sections_found: list[str] = []
    missing_critical: list[str] = []
    recommendations: list[ATSRecommendation] = []

    for name in _REQUIRED_SECTIONS:
        if getattr(sections, name) is not None:
            sections_found.append(name)
            continue
        missing_critical.append(name)
        score -= 40
        recommendations.append(
            ATSRecommendation(
                priority="CRITICAL",
                issue=f"Missing required section: {name}",
                fix=f"Add a clearly labeled {name} section to your resume",
                impact="ATS systems expect standard resume sections and may reject resumes without them",
            )
        )

    for name in _EXPECTED_SECTIONS:
        if getattr(sections, name) is not None:
            sections_found.append(name)
            continue
        score -= 15
        recommendations.append(
            ATSRecommendation(
                priority="HIGH",
                issue=f"Missing expected section: {name}",
                fix=f"Consider adding a {name} section to improve ATS compatibility",
                impact="Expected sections help ATS systems categorize your information properly",
            )
        )

    for name in _OPTIONAL_SECTIONS:
        if getattr(sections, name) is not None:
            sections_found.append(name)
            score += 5

    # Document order of the detected sections, compared against the conventional order.
    section_order = sorted(
        (name for name in CANONICAL_SECTIONS if getattr(sections, name) is not None),
        key=lambda name: getattr(sections, name).header_line,
    )
    order_score = 100
    for previous, current in zip(section_order, section_order[1:]):
        if CANONICAL_SECTIONS.index(current) < CANONICAL_SECTIONS.index(previous):
            order_score -= 10

    return StructuralCompliance(
        score=_clamp_score(score),
        sections_found=sections_found,
        missing_critical_sections=missing_critical,
        section_order=section_order,
        order_score=_clamp_score(order_score),
        recommendations=recommendations,
    )


def analyze_format_compatibility(resume_text: str) -> HeuristicScore:
    score = 100
    recommendations: list[ATSRecommendation] = []

    special_count = len(_SPECIAL_CHAR_RE.findall(resume_text))
    if special_count > len(resume_text) * 0.02:
        score -= 20
        recommendations.append(
            ATSRecommendation(
                priority="MEDIUM",
                issue="Too many special characters",
                fix="Use standard punctuation and avoid decorative symbols",
                impact="May cause parsing errors in some ATS systems",
            )
        )

    lines = resume_text.split("\n")
    short_lines = sum(1 for line in lines if 0 < len(line.strip()) < 10)
    if short_lines > len(lines) * 0.3:
        score -= 15
        recommendations.append(
            ATSRecommendation(
                priority="LOW",
                issue="Fragmented text structure detected",
                fix="Ensure proper sentence structure and formatting",
                impact="May indicate parsing or formatting issues",
            )
        )

    return HeuristicScore(score=_clamp_score(score), recommendations=recommendations)


def analyze_contact_info(resume_text: str) -> HeuristicScore:
    score = 0
    found: list[str] = []
    recommendations: list[ATSRecommendation] = []

    if EMAIL_RE.search(resume_text):
        score += 40
        found.append("email")
    else:
        recommendations.append(
            ATSRecommendation(
                priority="HIGH",
                issue="No email address found",
                fix="Add a professional email address",
                impact="Recruiters cannot contact you without email",
            )
        )

    if PHONE_RE.search(resume_text):
        score += 30
        found.append("phone")
    else:
        recommendations.append(
            ATSRecommendation(
                priority="HIGH",
                issue="No phone number found",
                fix="Add a professional phone number",
                impact="Limits contact options for recruiters",
            )
        )

    first_line = resume_text.split("\n", 1)[0].strip()
    if 2 < len(first_line) < 50:
        score += 30
        found.append("name")
    else:
        recommendations.append(
            ATSRecommendation(
                priority="MEDIUM",
                issue="Name may not be clearly identified",
                fix="Ensure your full name is prominently displayed at the top",
                impact="ATS may not properly identify candidate name",
            )
        )

    return HeuristicScore(score=_clamp_score(score), found=found, recommendations=recommendations)


def extract_certifications(text: str) -> list[str]:
    found: dict[str, None] = {}
    for pattern in _CERTIFICATION_PATTERNS:
        for match in pattern.finditer(text):
            found.setdefault(match.group(0), None)
    return list(found)


def extract_experience_years(text: str) -> int:
    return max((int(match.group(1)) for match in _EXPERIENCE_YEARS_RE.finditer(text)), default=0)


def analyze_bonus_features(resume_text: str, matches: list[EnhancedKeywordMatch]) -> HeuristicScore:
    score = 0
    found: list[str] = []
    recommendations: list[ATSRecommendation] = []

    job_titles = [match.original_keyword for match in matches if match.context.type == "job_title"]
    if job_titles:
        score += 40
        found.extend(f"Job Title: {title}" for title in job_titles)

    certifications = extract_certifications(resume_text)
    if certifications:
        score += 30
        found.extend(f"Certification: {certification}" for certification in certifications)

    years = extract_experience_years(resume_text)
    if years > 0:
        score += 30
        found.append(f"Experience: {years} years")

    if score < 50:
        recommendations.append(
            ATSRecommendation(
                priority="LOW",
                issue="Limited bonus features detected",
                fix="Consider highlighting relevant job titles and experience",
                impact="Missing opportunities for additional ATS scoring",
            )
        )
    if not certifications:
        recommendations.append(
            ATSRecommendation(
                priority="LOW",
                issue="No certifications found",
                fix="Add relevant professional certifications if available",
                impact="Certifications can boost ATS scores",
            )
        )

    return HeuristicScore(score=_clamp_score(score), found=found, recommendations=recommendations)
