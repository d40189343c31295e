from .ats_checks import (
    analyze_bonus_features,
    analyze_contact_info,
    analyze_format_compatibility,
    analyze_parseability,
    analyze_structural_compliance,
    extract_certifications,
    extract_experience_years,
)
from .industry_detector import (
    available_industries,
    detect_industries,
    detect_industry_from_job_description,
    get_industry_keyword_boost,
    get_industry_keywords,
)
from .keyword_extractor import (
    extract_enhanced_job_keywords,
    extract_keywords_with_industry_context,
    fallback_keyword_extraction,
    merge_keyword_sources,
    validate_and_clean_keywords,
)
from .match_quality import (
    calculate_match_quality,
    generate_keyword_insights,
    generate_matching_recommendations,
    quality_grade,
)
from .resume_sections import detect_section_header, parse_resume_into_sections

__all__ = [
    "analyze_parseability",
    "analyze_structural_compliance",
    "analyze_format_compatibility",
    "analyze_contact_info",
    "analyze_bonus_features",
    "extract_certifications",
    "extract_experience_years",
    "detect_industries",
    "detect_industry_from_job_description",
    "get_industry_keyword_boost",
    "available_industries",
    "get_industry_keywords",
    "extract_enhanced_job_keywords",
    "extract_keywords_with_industry_context",
    "fallback_keyword_extraction",
    "validate_and_clean_keywords",
    "merge_keyword_sources",
    "calculate_match_quality",
    "quality_grade",
    "generate_matching_recommendations",
    "generate_keyword_insights",
    "detect_section_header",
    "parse_resume_into_sections",
]
