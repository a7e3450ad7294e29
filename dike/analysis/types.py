"""Enums shared by the normalizer, settings and API schemas."""

from __future__ import annotations

from enum import Enum


class ExtractionStrategy(str, Enum):
    """Which extractor produced the JSON candidate text."""

    JSON_FENCE = "json_fence"  # ```json ... ```
    ANY_FENCE = "any_fence"  # ``` ... ```
    SCORE_OBJECT = "score_object"  # {...} span containing "overallScore"
    WHOLE_TEXT = "whole_text"  # nothing matched, try the whole completion


class ResponseShape(str, Enum):
    """Which of the two record shapes an analysis carries."""

    BARRIERS = "barriers"  # parsed provider reply
    DIMENSIONS = "dimensions"  # six-dimension fallback


class FallbackSource(str, Enum):
    """Text the fallback summary excerpt is cut from."""

    COMPLETION = "completion"
    ASSIGNMENT = "assignment"


class Severity(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def parse(cls, value: object) -> Severity:
        """Case-insensitive lookup; anything unrecognised is treated as Medium."""
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return cls.MEDIUM
