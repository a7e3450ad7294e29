"""Analysis endpoints: equity analysis, follow-up chat and alternative versions."""

from fastapi import APIRouter, Request

from dike.core.config import settings
from dike.core.rate_limit import limiter
from dike.schemas.analysis import (
    AlternativesRequest,
    AlternativesResponse,
    AnalysisRecord,
    AnalyzeRequest,
    ChatMessage,
    ChatRequest,
)
from dike.services.analyzer import analyze_assignment, answer_follow_up, generate_alternatives

router = APIRouter(tags=["analysis"])


@router.post("/analyze", response_model=AnalysisRecord, response_model_exclude_none=True)
@limiter.limit(settings.analyze_rate_limit)
async def analyze(request: Request, payload: AnalyzeRequest):
    """Analyze an assignment for equity barriers.

    Always answers with a complete record once the provider replied; an
    unusable reply yields the six-dimension fallback (``shape == "dimensions"``).
    """
    return await analyze_assignment(payload)


@router.post("/chat", response_model=ChatMessage)
@limiter.limit(settings.analyze_rate_limit)
async def chat(request: Request, payload: ChatRequest):
    """Answer a follow-up question about an analysis."""
    return await answer_follow_up(payload)


@router.post("/alternatives", response_model=AlternativesResponse)
@limiter.limit(settings.analyze_rate_limit)
async def alternatives(request: Request, payload: AlternativesRequest):
    """Generate three more equitable versions of the assignment."""
    return AlternativesResponse(alternatives=await generate_alternatives(payload))
