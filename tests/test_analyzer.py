"""Tests for the analysis service (provider call mocked)."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from dike.analysis.types import FallbackSource, ResponseShape
from dike.core.config import settings
from dike.core.exceptions import BadRequestError, UpstreamError
from dike.schemas.analysis import (
    AlternativesRequest,
    AnalysisRecord,
    AnalyzeRequest,
    Barrier,
    ChatMessage,
    ChatRequest,
)
from dike.services.analyzer import analyze_assignment, answer_follow_up, generate_alternatives

ASSIGNMENT = "Write a 10-page research essay using at least five paid journal articles."

PARSED_REPLY = """Here is the analysis:
```json
{
  "overallScore": 65,
  "summary": "Paid sources create a cost barrier.",
  "barriers": [
    {
      "category": "Socioeconomic",
      "severity": "high",
      "issue": "Paid journal articles",
      "impact": "Students without library access",
      "suggestions": ["Allow open-access sources"],
      "researchBasis": "open access student equity"
    }
  ],
  "strengths": ["Clear length requirement"],
  "recommendations": ["Allow open-access sources"],
  "reformattedAssignment": "Write a 10-page essay using five sources (open access welcome)."
}
```"""


def _request(**overrides) -> AnalyzeRequest:
    fields = {"assignment_text": ASSIGNMENT, "course_type": "History", "grade_level": "College"}
    fields.update(overrides)
    return AnalyzeRequest(**fields)


# ---------------------------------------------------------------------------
# analyze_assignment
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_analyze_returns_parsed_record():
    with patch("dike.services.analyzer.call_openrouter", AsyncMock(return_value=PARSED_REPLY)):
        record = await analyze_assignment(_request())

    assert record.shape == ResponseShape.BARRIERS
    assert record.overall_score == 65
    assert record.barriers[0].severity.value == "High"
    assert record.reformatted_assignment.startswith("Write a 10-page essay")


@pytest.mark.asyncio
async def test_analyze_sends_request_context_to_provider():
    mock_call = AsyncMock(return_value=PARSED_REPLY)
    with patch("dike.services.analyzer.call_openrouter", mock_call):
        await analyze_assignment(_request(student_profile="  "))

    messages = mock_call.call_args.args[0]
    assert messages[0]["role"] == "system"
    assert "six dimensions" in messages[0]["content"]
    user = messages[1]["content"]
    assert "Course Type: History" in user
    assert "Grade Level: College" in user
    assert "Focus Area: Not specified" in user
    assert "Student Profile: Not specified" in user
    assert user.endswith(f"Assignment: {ASSIGNMENT}")
    assert mock_call.call_args.kwargs["model"] == settings.analysis_model
    assert mock_call.call_args.kwargs["max_tokens"] == settings.analysis_max_tokens


@pytest.mark.asyncio
async def test_analyze_unusable_reply_returns_fallback():
    with patch("dike.services.analyzer.call_openrouter", AsyncMock(return_value="Sorry, I cannot comply.")):
        record = await analyze_assignment(_request())

    assert record.shape == ResponseShape.DIMENSIONS
    assert record.overall_score == 75
    assert record.summary == "Sorry, I cannot comply...."
    assert len(record.dimensions) == 6


@pytest.mark.asyncio
async def test_analyze_fallback_can_summarize_assignment(monkeypatch):
    monkeypatch.setattr(settings, "fallback_summary_source", FallbackSource.ASSIGNMENT)
    with patch("dike.services.analyzer.call_openrouter", AsyncMock(return_value="no json")):
        record = await analyze_assignment(_request())

    assert record.summary == ASSIGNMENT[:200] + "..."


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"assignment_text": None},
        {"assignment_text": "   "},
        {"course_type": None},
        {"course_type": ""},
    ],
)
async def test_analyze_missing_fields(overrides):
    mock_call = AsyncMock()
    with patch("dike.services.analyzer.call_openrouter", mock_call):
        with pytest.raises(BadRequestError) as exc_info:
            await analyze_assignment(_request(**overrides))

    assert exc_info.value.detail == "Missing required fields: assignmentText, courseType"
    mock_call.assert_not_called()


@pytest.mark.asyncio
async def test_analyze_too_short():
    with patch("dike.services.analyzer.call_openrouter", AsyncMock()) as mock_call:
        with pytest.raises(BadRequestError) as exc_info:
            await analyze_assignment(_request(assignment_text="Essay"))

    assert "minimum 10 characters" in exc_info.value.detail
    mock_call.assert_not_called()


@pytest.mark.asyncio
async def test_analyze_propagates_upstream_error():
    with patch("dike.services.analyzer.call_openrouter", AsyncMock(side_effect=UpstreamError("API request failed: 500"))):
        with pytest.raises(UpstreamError):
            await analyze_assignment(_request())


# ---------------------------------------------------------------------------
# answer_follow_up
# ---------------------------------------------------------------------------


def _record() -> AnalysisRecord:
    return AnalysisRecord(overall_score=65, summary="Paid sources create a cost barrier.")


@pytest.mark.asyncio
async def test_follow_up_includes_history_and_analysis():
    mock_call = AsyncMock(return_value="• Use **open access** journals")
    req = ChatRequest(
        assignment_text=ASSIGNMENT,
        analysis=_record(),
        messages=[
            ChatMessage(role="user", content="What is the biggest barrier?"),
            ChatMessage(role="assistant", content="Cost of articles."),
        ],
        message="How do I fix it?",
    )
    with patch("dike.services.analyzer.call_openrouter", mock_call):
        reply = await answer_follow_up(req)

    assert reply == ChatMessage(role="assistant", content="• Use **open access** journals")
    messages = mock_call.call_args.args[0]
    assert [m["role"] for m in messages] == ["system", "user", "assistant", "user"]
    assert ASSIGNMENT in messages[0]["content"]
    assert '"overallScore":65' in messages[0]["content"]
    assert messages[-1]["content"] == "How do I fix it?"
    assert mock_call.call_args.kwargs["model"] == settings.chat_model


@pytest.mark.asyncio
async def test_follow_up_rejects_blank_message():
    req = ChatRequest(assignment_text=ASSIGNMENT, analysis=_record(), message="  ")
    with pytest.raises(BadRequestError):
        await answer_follow_up(req)


# ---------------------------------------------------------------------------
# generate_alternatives
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_alternatives_parsed_from_fenced_json():
    reply = "```json\n" + json.dumps(
        {
            "alternatives": [
                {"title": "Podcast", "description": "Record a 10-minute podcast.", "improvements": ["No cost"]},
                {"title": "Poster", "description": "Design a poster."},
                "not an object",
            ]
        }
    ) + "\n```"
    mock_call = AsyncMock(return_value=reply)
    req = AlternativesRequest(
        assignment_text=ASSIGNMENT,
        barriers=[Barrier(category="Socioeconomic", severity="High", issue="Paid journals")],
    )
    with patch("dike.services.analyzer.call_openrouter", mock_call):
        alternatives = await generate_alternatives(req)

    assert [a.title for a in alternatives] == ["Podcast", "Poster"]
    assert alternatives[0].improvements == ["No cost"]
    assert alternatives[1].improvements == []
    user = mock_call.call_args.args[0][1]["content"]
    assert '"category": "Socioeconomic"' in user
    assert mock_call.call_args.kwargs["temperature"] == 0.8


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", ["I can't help with that.", '{"alternatives": "none"}', '{"alternatives": []}'])
async def test_alternatives_unusable_reply(reply):
    req = AlternativesRequest(assignment_text=ASSIGNMENT)
    with patch("dike.services.analyzer.call_openrouter", AsyncMock(return_value=reply)):
        with pytest.raises(UpstreamError) as exc_info:
            await generate_alternatives(req)

    assert exc_info.value.detail == "Failed to generate alternatives"
