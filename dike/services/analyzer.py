"""Assignment analysis service.

Builds the prompt, calls OpenRouter and normalizes the completion. Follow-up
chat and alternative-assignment generation share the same provider call.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from dike.analysis.normalizer import normalize, parse_json_block
from dike.core.config import settings
from dike.core.exceptions import BadRequestError, UpstreamError
from dike.core.metrics import NORMALIZER_OUTCOMES
from dike.schemas.analysis import (
    Alternative,
    AlternativesRequest,
    AnalysisRecord,
    AnalyzeRequest,
    ChatMessage,
    ChatRequest,
)
from dike.services.openrouter import call_openrouter
from dike.services.prompts import (
    build_alternatives_messages,
    build_analysis_messages,
    build_chat_messages,
)

logger = logging.getLogger(__name__)

CHAT_MAX_TOKENS = 1000
ALTERNATIVES_MAX_TOKENS = 1500


def validate_analyze_request(req: AnalyzeRequest) -> str:
    """Check required fields and return the trimmed assignment text."""
    assignment_text = (req.assignment_text or "").strip()
    if not assignment_text or not (req.course_type or "").strip():
        raise BadRequestError("Missing required fields: assignmentText, courseType")
    if len(assignment_text) < settings.min_assignment_chars:
        raise BadRequestError(
            f"Please enter an assignment description (minimum {settings.min_assignment_chars} characters)"
        )
    return assignment_text


async def analyze_assignment(req: AnalyzeRequest) -> AnalysisRecord:
    assignment_text = validate_analyze_request(req)

    completion = await call_openrouter(
        build_analysis_messages(req),
        model=settings.analysis_model,
        temperature=settings.analysis_temperature,
        max_tokens=settings.analysis_max_tokens,
        purpose="analysis",
    )

    record = normalize(completion, assignment_text, settings.fallback_summary_source)
    NORMALIZER_OUTCOMES.labels(shape=record.shape.value).inc()
    if record.is_fallback:
        logger.warning("[analyzer] provider reply unusable, returned fallback record (%d chars)", len(completion))
    return record


async def answer_follow_up(req: ChatRequest) -> ChatMessage:
    message = req.message.strip()
    if not message:
        raise BadRequestError("Message must not be empty")

    content = await call_openrouter(
        build_chat_messages(req.assignment_text, req.analysis, req.messages, message),
        model=settings.chat_model,
        temperature=0.7,
        max_tokens=CHAT_MAX_TOKENS,
        purpose="chat",
        title="DIKE AI Chat",
    )
    return ChatMessage(role="assistant", content=content or "Response received")


async def generate_alternatives(req: AlternativesRequest) -> list[Alternative]:
    if not req.assignment_text.strip():
        raise BadRequestError("Missing required field: assignmentText")

    completion = await call_openrouter(
        build_alternatives_messages(req.assignment_text, req.barriers),
        model=settings.chat_model,
        temperature=0.8,
        max_tokens=ALTERNATIVES_MAX_TOKENS,
        purpose="alternatives",
        title="DIKE Alternatives",
    )

    data = parse_json_block(completion)
    items = data.get("alternatives") if isinstance(data, dict) else None
    if not isinstance(items, list):
        logger.warning("[analyzer] alternatives reply has no 'alternatives' list (%d chars)", len(completion))
        raise UpstreamError("Failed to generate alternatives")

    alternatives: list[Alternative] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            alternatives.append(Alternative.model_validate(item))
        except ValidationError as e:
            logger.debug("[analyzer] skipping malformed alternative: %s", e)
    if not alternatives:
        raise UpstreamError("Failed to generate alternatives")
    return alternatives
