"""Response normalizer: turns a raw provider completion into an AnalysisRecord.

Models wrap their JSON in all sorts of ways, so candidate text is located by an
ordered list of extractors (first hit wins):
  1. a fenced block tagged ``json``
  2. any fenced block
  3. the widest ``{...}`` span that mentions "overallScore"
  4. the whole completion

The candidate is parsed and validated (numeric ``overallScore``, non-empty
``summary``). Anything that fails ends in the fixed six-dimension fallback
record, so ``normalize`` returns a usable record for every input string.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Callable

from pydantic import ValidationError

from dike.analysis.types import ExtractionStrategy, FallbackSource, ResponseShape
from dike.schemas.analysis import AnalysisRecord, Barrier, Dimension

logger = logging.getLogger(__name__)

FALLBACK_SCORE = 75
FALLBACK_ISSUE = "Review required"
SUMMARY_EXCERPT_CHARS = 200

# (dimension name, fallback recommendation)
FALLBACK_DIMENSIONS: tuple[tuple[str, str], ...] = (
    ("Socioeconomic", "Consider student resources"),
    ("Time & Scheduling", "Consider flexibility"),
    ("Cultural & Linguistic", "Consider inclusivity"),
    ("Accessibility", "Consider accommodations"),
    ("Digital Divide", "Consider access"),
    ("Learning Support", "Consider guidance"),
)

# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------
_JSON_FENCE = re.compile(r"```json\n?([\s\S]*?)\n?```")
_ANY_FENCE = re.compile(r"```\n?([\s\S]*?)\n?```")
_SCORE_OBJECT = re.compile(r'\{[\s\S]*"overallScore"[\s\S]*\}')


def _from_json_fence(text: str) -> str | None:
    m = _JSON_FENCE.search(text)
    return m.group(1) if m else None


def _from_any_fence(text: str) -> str | None:
    m = _ANY_FENCE.search(text)
    return m.group(1) if m else None


def _from_score_object(text: str) -> str | None:
    m = _SCORE_OBJECT.search(text)
    return m.group(0) if m else None


_EXTRACTORS: list[tuple[ExtractionStrategy, Callable[[str], str | None]]] = [
    (ExtractionStrategy.JSON_FENCE, _from_json_fence),
    (ExtractionStrategy.ANY_FENCE, _from_any_fence),
    (ExtractionStrategy.SCORE_OBJECT, _from_score_object),
]


def extract_json_candidate(raw_text: str) -> tuple[ExtractionStrategy, str]:
    """Locate the text most likely to hold the JSON answer.

    Returns the strategy that matched and the candidate text. When no extractor
    matches, the whole trimmed completion is the candidate.
    """
    for strategy, extractor in _EXTRACTORS:
        candidate = extractor(raw_text)
        if candidate is not None:
            return strategy, candidate
    return ExtractionStrategy.WHOLE_TEXT, raw_text.strip()


def _load_json(candidate: str) -> object:
    # RecursionError: pathologically nested input
    try:
        return json.loads(candidate.strip())
    except RecursionError as exc:
        raise ValueError("JSON nesting too deep") from exc


def parse_json_block(raw_text: str) -> object | None:
    """Extract and parse the JSON document in a completion, or None if there is none."""
    strategy, candidate = extract_json_candidate(raw_text or "")
    try:
        return _load_json(candidate)
    except ValueError as e:
        logger.debug("[normalizer] %s candidate is not JSON: %s", strategy.value, e)
        return None


# ---------------------------------------------------------------------------
# Validation & coercion
# ---------------------------------------------------------------------------


def _is_number(value: object) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return math.isfinite(value)  # json.loads accepts NaN / Infinity
    return isinstance(value, int)


def _validation_problem(data: object) -> str | None:
    if not isinstance(data, dict):
        return f"expected a JSON object, got {type(data).__name__}"
    if not _is_number(data.get("overallScore")):
        return "overallScore missing or not numeric"
    summary = data.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        return "summary missing or empty"
    return None


def _clamp_score(score: float) -> int:
    return max(0, min(100, int(round(score))))


def _text(value: object) -> str:
    if value is None or isinstance(value, (dict, list, bool)):
        return ""
    return str(value).strip()


def _text_items(value: object) -> list[str]:
    """Coerce a JSON value into a list of non-empty strings."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [item for item in (_text(v) for v in value) if item]


def _coerce_barrier(item: dict) -> Barrier:
    return Barrier(
        category=_text(item.get("category")),
        severity=item.get("severity"),
        issue=_text(item.get("issue")),
        impact=_text(item.get("impact")),
        suggestions=_text_items(item.get("suggestions")),
        research_basis=_text(item.get("researchBasis")),
    )


def _coerce_record(data: dict) -> AnalysisRecord:
    barriers = data.get("barriers")
    reformatted = data.get("reformattedAssignment")
    return AnalysisRecord(
        overall_score=_clamp_score(data["overallScore"]),
        summary=data["summary"],
        barriers=[_coerce_barrier(b) for b in barriers if isinstance(b, dict)] if isinstance(barriers, list) else [],
        strengths=_text_items(data.get("strengths")),
        recommendations=_text_items(data.get("recommendations")),
        reformatted_assignment=reformatted if isinstance(reformatted, str) and reformatted.strip() else None,
        shape=ResponseShape.BARRIERS,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_fallback_record(
    raw_text: str,
    original_assignment_text: str = "",
    fallback_source: FallbackSource = FallbackSource.COMPLETION,
) -> AnalysisRecord:
    """The fixed six-dimension record used whenever a completion can't be used."""
    if FallbackSource(fallback_source) is FallbackSource.ASSIGNMENT:
        source = original_assignment_text
    else:
        source = raw_text
    return AnalysisRecord(
        overall_score=FALLBACK_SCORE,
        summary=(source or "")[:SUMMARY_EXCERPT_CHARS] + "...",
        dimensions=[
            Dimension(
                name=name,
                score=FALLBACK_SCORE,
                issues=[FALLBACK_ISSUE],
                recommendations=[recommendation],
            )
            for name, recommendation in FALLBACK_DIMENSIONS
        ],
        shape=ResponseShape.DIMENSIONS,
    )


def normalize(
    raw_text: str,
    original_assignment_text: str = "",
    fallback_source: FallbackSource = FallbackSource.COMPLETION,
) -> AnalysisRecord:
    """Convert a provider completion into an AnalysisRecord. Never raises.

    Args:
        raw_text: Completion text exactly as returned by the provider.
        original_assignment_text: The analysed assignment; only used for the
            fallback summary when ``fallback_source`` is ASSIGNMENT.
        fallback_source: Which text the fallback summary excerpt is cut from.

    Returns:
        The parsed record (shape BARRIERS) or the fallback (shape DIMENSIONS).
    """
    raw_text = raw_text or ""
    strategy, candidate = extract_json_candidate(raw_text)

    try:
        data = _load_json(candidate)
    except ValueError as e:
        logger.info("[normalizer] strategy=%s: not valid JSON (%s), using fallback", strategy.value, e)
        return build_fallback_record(raw_text, original_assignment_text, fallback_source)

    problem = _validation_problem(data)
    if problem:
        logger.info("[normalizer] strategy=%s: %s, using fallback", strategy.value, problem)
        return build_fallback_record(raw_text, original_assignment_text, fallback_source)

    try:
        record = _coerce_record(data)
    except ValidationError as e:
        logger.warning("[normalizer] strategy=%s: could not coerce record: %s", strategy.value, e)
        return build_fallback_record(raw_text, original_assignment_text, fallback_source)

    logger.info(
        "[normalizer] strategy=%s: parsed analysis score=%d barriers=%d",
        strategy.value,
        record.overall_score,
        len(record.barriers),
    )
    return record
