"""Prompt templates and message builders for the OpenRouter calls."""

from __future__ import annotations

import json

from dike.schemas.analysis import AnalysisRecord, AnalyzeRequest, Barrier, ChatMessage

NOT_SPECIFIED = "Not specified"

ANALYSIS_SYSTEM_PROMPT = """\
You are an expert educational equity analyst analyzing assignments for potential barriers to student success.

Analyze this assignment across six dimensions of educational equity:
1. Socioeconomic barriers (costs, resources, technology access)
2. Time and scheduling constraints (flexibility, deadlines, workload)
3. Cultural and linguistic inclusivity (representation, language, assumptions)
4. Accessibility needs (physical, cognitive, technological accommodations)
5. Digital divide considerations (technology requirements, digital literacy)
6. Learning support resources (guidance, feedback, scaffolding)

Provide specific, actionable recommendations to improve equity.

Respond ONLY with a JSON object inside a ```json code block, in this exact structure:
{
  "overallScore": <integer from 0 to 100>,
  "summary": "<2-3 sentence overall assessment>",
  "barriers": [
    {
      "category": "<equity dimension>",
      "severity": "High" | "Medium" | "Low",
      "issue": "<what in the assignment creates the barrier>",
      "impact": "<which students are affected and how>",
      "suggestions": ["<concrete change>", ...],
      "researchBasis": "<short keyword phrase for finding supporting research>"
    }
  ],
  "strengths": ["<equitable aspect of the assignment>", ...],
  "recommendations": ["<prioritized recommendation>", ...],
  "reformattedAssignment": "<the full assignment rewritten to remove the barriers>"
}

Scoring guide: start from 100 and subtract 15 per High, 10 per Medium and 5 per Low severity barrier.
- 80-100: Excellent equity consideration
- 60-79: Good foundation with opportunities for improvement
- Below 60: Significant barriers
"""

CHAT_SYSTEM_PROMPT = """\
You are an educational equity expert. The user has analyzed this assignment: "{assignment_text}". \
Analysis results: {analysis_json}.

FORMATTING RULES:
• Use bullet points (•) for lists
• Break content into SHORT paragraphs (2-3 sentences max)
• Use bold text with ** for emphasis
• Add line breaks between sections
• Keep responses concise and scannable
• Use numbered lists (1., 2., 3.) for steps or priorities

Answer follow-up questions about barriers, suggest improvements, and provide research-backed guidance. \
Make your responses easy to read and visually organized."""

ALTERNATIVES_SYSTEM_PROMPT = (
    "You are an educational equity expert. Generate 3 alternative assignment versions that address the "
    "identified barriers while maintaining learning objectives. Return JSON: "
    '{"alternatives": [{"title": "text", "description": "text", "improvements": ["text"]}]}'
)


def _or_default(value: str | None) -> str:
    return value.strip() if value and value.strip() else NOT_SPECIFIED


def build_analysis_messages(req: AnalyzeRequest) -> list[dict[str, str]]:
    user_prompt = (
        f"Course Type: {_or_default(req.course_type)}\n"
        f"Grade Level: {_or_default(req.grade_level)}\n"
        f"Focus Area: {_or_default(req.focus_area)}\n"
        f"Student Profile: {_or_default(req.student_profile)}\n\n"
        f"Assignment: {(req.assignment_text or '').strip()}"
    )
    return [
        {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
        {"role": "user", "content": user_prompt},
    ]


def build_chat_messages(
    assignment_text: str,
    analysis: AnalysisRecord,
    history: list[ChatMessage],
    message: str,
) -> list[dict[str, str]]:
    analysis_json = analysis.model_dump_json(by_alias=True, exclude_none=True)
    system = CHAT_SYSTEM_PROMPT.format(assignment_text=assignment_text, analysis_json=analysis_json)
    messages = [{"role": "system", "content": system}]
    messages.extend({"role": m.role, "content": m.content} for m in history)
    messages.append({"role": "user", "content": message})
    return messages


def build_alternatives_messages(assignment_text: str, barriers: list[Barrier]) -> list[dict[str, str]]:
    barriers_json = json.dumps([b.model_dump(mode="json", by_alias=True) for b in barriers], ensure_ascii=False)
    return [
        {"role": "system", "content": ALTERNATIVES_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": (
                f'Original assignment: "{assignment_text}"\n\n'
                f"Barriers identified: {barriers_json}\n\n"
                "Generate 3 more equitable alternatives."
            ),
        },
    ]
