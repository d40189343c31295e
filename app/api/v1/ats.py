from fastapi import APIRouter, Header, Request, status
from fastapi.responses import JSONResponse

from app.core.rate_limit import rate_limit
from app.core.security import check_api_key
from app.features import (
    analyze_structural_compliance,
    detect_industry_from_job_description,
    extract_enhanced_job_keywords,
    parse_resume_into_sections,
    validate_and_clean_keywords,
)
from app.schemas.ats import (
    ATSAnalysisError,
    ATSAnalysisResult,
    ATSAnalyzeRequest,
    KeywordExtractionRequest,
    KeywordExtractionResponse,
    SectionParseRequest,
    SectionParseResponse,
)
from app.services.ats_service import analyze_ats_compatibility_enhanced

router = APIRouter()

_INTERNAL_ERROR = "Failed to analyze ATS compatibility"


@router.post("/ats/analyze", response_model=ATSAnalysisResult | ATSAnalysisError)
@rate_limit()
async def analyze(
    request: Request,
    payload: ATSAnalyzeRequest,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
):
    _ = request
    check_api_key(x_api_key)
    result = await analyze_ats_compatibility_enhanced(
        payload.resume_text,
        payload.job_description_text,
        payload.parser_metadata,
    )
    if isinstance(result, ATSAnalysisError):
        code = status.HTTP_500_INTERNAL_SERVER_ERROR if result.error == _INTERNAL_ERROR else 422
        return JSONResponse(status_code=code, content=result.model_dump())
    return result


@router.post("/ats/keywords", response_model=KeywordExtractionResponse)
@rate_limit()
async def extract_keywords(
    request: Request,
    payload: KeywordExtractionRequest,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
):
    _ = request
    check_api_key(x_api_key)
    keywords = validate_and_clean_keywords(await extract_enhanced_job_keywords(payload.job_description_text))
    return KeywordExtractionResponse(
        keywords=keywords,
        industries=detect_industry_from_job_description(payload.job_description_text),
    )


@router.post("/ats/sections", response_model=SectionParseResponse)
@rate_limit()
async def parse_sections(
    request: Request,
    payload: SectionParseRequest,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
):
    _ = request
    check_api_key(x_api_key)
    sections = parse_resume_into_sections(payload.resume_text)
    return SectionParseResponse(sections=sections, structure=analyze_structural_compliance(sections))
