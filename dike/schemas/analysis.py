"""Pydantic models for analysis records and the analysis-related endpoints.

Field names are snake_case in Python and camelCase on the wire, matching what
the frontend sends and renders.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from dike.analysis.types import ResponseShape, Severity


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Analysis record
# ---------------------------------------------------------------------------


class Barrier(CamelModel):
    category: str = ""
    severity: Severity = Severity.MEDIUM
    issue: str = ""
    impact: str = ""
    suggestions: list[str] = Field(default_factory=list)
    research_basis: str = ""  # keyword phrase the UI turns into a search link

    @field_validator("severity", mode="before")
    @classmethod
    def parse_severity(cls, v: object) -> Severity:
        return Severity.parse(v)


class Dimension(CamelModel):
    """One equity dimension of the legacy (fallback) record shape."""

    name: str
    score: int
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class AnalysisRecord(CamelModel):
    overall_score: int
    summary: str
    barriers: list[Barrier] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    reformatted_assignment: str | None = None
    dimensions: list[Dimension] | None = None
    shape: ResponseShape = ResponseShape.BARRIERS

    @property
    def is_fallback(self) -> bool:
        return self.shape is ResponseShape.DIMENSIONS


# ---------------------------------------------------------------------------
# Requests / responses
# ---------------------------------------------------------------------------


class AnalyzeRequest(CamelModel):
    # Optional here so that missing fields produce the handler's 400, not a 422
    assignment_text: str | None = None
    course_type: str | None = None
    grade_level: str | None = None
    focus_area: str | None = None
    student_profile: str | None = None


class ChatMessage(CamelModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(CamelModel):
    assignment_text: str
    analysis: AnalysisRecord
    messages: list[ChatMessage] = Field(default_factory=list, max_length=50)
    message: str


class Alternative(CamelModel):
    title: str = ""
    description: str = ""
    improvements: list[str] = Field(default_factory=list)


class AlternativesRequest(CamelModel):
    assignment_text: str
    barriers: list[Barrier] = Field(default_factory=list)


class AlternativesResponse(CamelModel):
    alternatives: list[Alternative]


class ExportRequest(CamelModel):
    assignment_text: str
    analysis: AnalysisRecord
