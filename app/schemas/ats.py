from __future__ import annotations

from typing import Iterator, Literal

from pydantic import BaseModel, Field, field_validator

ContextType = Literal[
    "skill",
    "tool",
    "certification",
    "degree",
    "job_title",
    "responsibility",
    "industry_term",
]
Importance = Literal["required", "preferred", "nice-to-have"]
SectionName = Literal["contact", "summary", "experience", "education", "skills", "certifications", "other"]
MatchType = Literal["exact", "synonym", "semantic", "partial", "acronym", "compound"]
Priority = Literal["CRITICAL", "HIGH", "MEDIUM", "LOW"]
Grade = Literal["A", "B", "C", "D", "F"]
PassFailStatus = Literal["PASS", "FAIL", "REVIEW"]
FormattingIssue = Literal["multi_column", "tables", "graphics", "header", "special_chars"]

CANONICAL_SECTIONS: tuple[str, ...] = (
    "contact",
    "summary",
    "experience",
    "education",
    "skills",
    "certifications",
)
MATCH_TYPES: tuple[str, ...] = ("exact", "synonym", "semantic", "partial", "acronym", "compound")
PRIORITY_ORDER: dict[str, int] = {"CRITICAL": 0, "HIGH": 1, "MEDIUM": 2, "LOW": 3}


class KeywordContext(BaseModel):
    type: ContextType
    category: str | None = None
    industry: str | None = None


class KeywordData(BaseModel):
    keyword: str
    context: KeywordContext
    importance: Importance

    @field_validator("keyword")
    @classmethod
    def _validate_keyword(cls, value: str) -> str:
        normalized = value.strip().lower()
        if len(normalized) <= 1:
            raise ValueError("keyword must be longer than one character")
        return normalized


class ExtractedKeywords(BaseModel):
    all: list[KeywordData] = Field(default_factory=list)
    required: list[KeywordData] = Field(default_factory=list)
    preferred: list[KeywordData] = Field(default_factory=list)

    @classmethod
    def from_keywords(cls, keywords: list[KeywordData]) -> "ExtractedKeywords":
        """Build the importance views; the first occurrence of a keyword wins."""
        seen: set[str] = set()
        unique: list[KeywordData] = []
        for item in keywords:
            if item.keyword in seen:
                continue
            seen.add(item.keyword)
            unique.append(item)
        return cls(
            all=unique,
            required=[item for item in unique if item.importance == "required"],
            preferred=[item for item in unique if item.importance == "preferred"],
        )


class ResumeSection(BaseModel):
    content: str
    start_line: int = Field(ge=0)
    end_line: int = Field(ge=0)
    header_line: int = Field(ge=0)


class ParsedResumeSections(BaseModel):
    contact: ResumeSection | None = None
    summary: ResumeSection | None = None
    experience: ResumeSection | None = None
    education: ResumeSection | None = None
    skills: ResumeSection | None = None
    certifications: ResumeSection | None = None
    other: list[ResumeSection] = Field(default_factory=list)

    def iter_sections(self) -> Iterator[tuple[str, ResumeSection]]:
        """Yield (name, section) for detected canonical sections; `other` entries are skipped."""
        for name in CANONICAL_SECTIONS:
            section = getattr(self, name)
            if section is not None:
                yield name, section

    def detected_sections(self) -> list[str]:
        return [name for name in CANONICAL_SECTIONS if getattr(self, name) is not None]


class CompoundTerm(BaseModel):
    full: str
    parts: list[str]
    must_match_all: bool


class SectionLocation(BaseModel):
    section: SectionName
    subsection: str | None = None
    proximity: int = Field(ge=0, le=100)


class EnhancedKeywordMatch(BaseModel):
    original_keyword: str
    matched_variation: str
    match_type: MatchType
    confidence: float = Field(ge=0.0, le=1.0)
    context: KeywordContext
    location: SectionLocation
    frequency: int = Field(ge=1)
    contextual_score: float = Field(ge=0.0, le=1.0)


class MatchQualityMetrics(BaseModel):
    required_coverage: float = Field(ge=0.0, le=1.0)
    preferred_coverage: float = Field(ge=0.0, le=1.0)
    average_confidence: float = Field(ge=0.0, le=1.0)
    context_accuracy: float = Field(ge=0.0, le=1.0)
    match_type_distribution: dict[str, int] = Field(default_factory=dict)


class MatchQuality(BaseModel):
    overall_score: int = Field(ge=0, le=100)
    metrics: MatchQualityMetrics
    grade: Grade


class KeywordInsights(BaseModel):
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)
    match_patterns: dict[str, int] = Field(default_factory=dict)


class ATSRecommendation(BaseModel):
    priority: Priority
    issue: str
    fix: str
    impact: str


class KeywordMatchingResult(BaseModel):
    matches: list[EnhancedKeywordMatch] = Field(default_factory=list)
    unmatched_keywords: list[str] = Field(default_factory=list)
    match_quality: MatchQuality
    recommendations: list[ATSRecommendation] = Field(default_factory=list)
    detected_industries: list[str] = Field(default_factory=list)


class StructuralCompliance(BaseModel):
    score: int = Field(ge=0, le=100)
    sections_found: list[str] = Field(default_factory=list)
    missing_critical_sections: list[str] = Field(default_factory=list)
    section_order: list[str] = Field(default_factory=list)
    order_score: int = Field(ge=0, le=100)
    recommendations: list[ATSRecommendation] = Field(default_factory=list)


class ParserMetadata(BaseModel):
    parsing_confidence: float | None = Field(default=None, ge=0.0, le=100.0)
    formatting_issues: list[FormattingIssue] = Field(default_factory=list)
    word_count: int | None = Field(default=None, ge=0)
    ats_warnings: list[str] = Field(default_factory=list)


class ParseabilityAnalysis(BaseModel):
    score: int = Field(ge=0, le=100)
    issues: list[str] = Field(default_factory=list)
    critical_failures: bool = False
    recommendations: list[ATSRecommendation] = Field(default_factory=list)


class HeuristicScore(BaseModel):
    score: int = Field(ge=0, le=100)
    found: list[str] = Field(default_factory=list)
    recommendations: list[ATSRecommendation] = Field(default_factory=list)


class KeywordSubscore(BaseModel):
    required_keywords: float = 0.0
    preferred_keywords: float = 0.0
    match_confidence: float = 0.0
    context_accuracy: float = 0.0
    coverage_bonus: float = 0.0
    overall: int = Field(default=0, ge=0, le=100)


class ATSScoreBreakdown(BaseModel):
    parseability: int = Field(ge=0, le=100)
    keyword_match: int = Field(ge=0, le=100)
    skills_alignment: int = Field(ge=0, le=100)
    format_compatibility: int = Field(ge=0, le=100)
    contact_info: int = Field(ge=0, le=100)
    bonus_features: int = Field(ge=0, le=100)


class ATSAnalysisResult(BaseModel):
    success: Literal[True] = True
    overall_score: int = Field(ge=0, le=100)
    pass_fail_status: PassFailStatus
    breakdown: ATSScoreBreakdown
    recommendations: list[ATSRecommendation] = Field(default_factory=list)
    missing_keywords: list[str] = Field(default_factory=list)
    matched_keywords: list[str] = Field(default_factory=list)
    skills_found: list[str] = Field(default_factory=list)
    skills_missing: list[str] = Field(default_factory=list)
    bonus_items: list[str] = Field(default_factory=list)
    critical_issues: list[str] = Field(default_factory=list)
    match_quality: MatchQuality
    insights: KeywordInsights
    detailed_matches: list[EnhancedKeywordMatch] = Field(default_factory=list)
    detected_industries: list[str] = Field(default_factory=list)


class ATSAnalysisError(BaseModel):
    success: Literal[False] = False
    error: str
    details: str | None = None


ATSResult = ATSAnalysisResult | ATSAnalysisError


class ATSAnalyzeRequest(BaseModel):
    resume_text: str = Field(min_length=1, max_length=50000)
    job_description_text: str = Field(min_length=1, max_length=50000)
    parser_metadata: ParserMetadata | None = None


class KeywordExtractionRequest(BaseModel):
    job_description_text: str = Field(min_length=1, max_length=50000)


class SectionParseRequest(BaseModel):
    resume_text: str = Field(min_length=1, max_length=50000)


class KeywordExtractionResponse(BaseModel):
    keywords: ExtractedKeywords
    industries: list[str] = Field(default_factory=list)


class SectionParseResponse(BaseModel):
    sections: ParsedResumeSections
    structure: StructuralCompliance
