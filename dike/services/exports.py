"""Report and LMS export renderers.

Each renderer takes an analysis record plus the original assignment text and
returns the document body. The LMS formats carry the equity-improved rewrite
when the analysis has one, otherwise the original assignment.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from xml.sax.saxutils import escape

from dike.schemas.analysis import AnalysisRecord

REPORT_RULE = "=" * 50


def _assignment_body(record: AnalysisRecord, assignment_text: str) -> str:
    return record.reformatted_assignment or assignment_text


def _numbered(items: list[str]) -> str:
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, 1))


def _findings_section(record: AnalysisRecord) -> str:
    if record.is_fallback or (record.dimensions and not record.barriers):
        entries = [
            f"\n{i}. {d.name} ({d.score}/100)\n"
            f"   Issues: {'; '.join(d.issues)}\n"
            f"   Recommendations: {'; '.join(d.recommendations)}"
            for i, d in enumerate(record.dimensions or [], 1)
        ]
        return "DIMENSIONS:\n" + "\n".join(entries)

    entries = [
        f"\n{i}. {b.category} ({b.severity.value})\n"
        f"   Issue: {b.issue}\n"
        f"   Impact: {b.impact}\n"
        f"   Suggestions: {'; '.join(b.suggestions)}\n"
        f"   Research: {b.research_basis}"
        for i, b in enumerate(record.barriers, 1)
    ]
    return "BARRIERS:\n" + "\n".join(entries)


def render_text_report(record: AnalysisRecord, assignment_text: str) -> str:
    """Plain-text report, the same text the UI copies to the clipboard."""
    return (
        f"SOCIAL JUSTICE ASSIGNMENT ANALYSIS\n{REPORT_RULE}\n\n"
        f"Assignment: {assignment_text}\n\n"
        f"Overall Score: {record.overall_score}/100\n\n"
        f"Summary: {record.summary}\n\n"
        f"{_findings_section(record)}\n\n"
        f"STRENGTHS:\n{_numbered(record.strengths)}\n\n"
        f"RECOMMENDATIONS:\n{_numbered(record.recommendations)}\n\n"
        "Generated by Social Justice Assignment Analyzer"
    )


def render_canvas(record: AnalysisRecord, assignment_text: str) -> str:
    canvas_format = {
        "title": "Equity Improved Assignment",
        "description": _assignment_body(record, assignment_text),
        "points_possible": 100,
        "assignment_group_id": None,
        "grading_type": "points",
        "submission_types": ["online_text_entry", "online_upload"],
        "published": False,
    }
    return json.dumps(canvas_format, indent=2, ensure_ascii=False)


def render_google_classroom(record: AnalysisRecord, assignment_text: str) -> str:
    improvements = _numbered(record.recommendations) or "See full analysis for details"
    return (
        "Assignment Title: Equity-Improved Assignment\n\n"
        "Description:\n"
        f"{_assignment_body(record, assignment_text)}\n\n"
        "---\n"
        "EQUITY ANALYSIS SUMMARY\n"
        f"Overall Equity Score: {record.overall_score}/100\n\n"
        "Key Improvements Made:\n"
        f"{improvements}\n\n"
        "This assignment has been analyzed and improved for educational equity using DIKE AI.\n"
    )


def render_blackboard(record: AnalysisRecord, assignment_text: str) -> str:
    body = escape(_assignment_body(record, assignment_text))
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        "<CONTENT>\n"
        "  <TITLE>Equity-Improved Assignment</TITLE>\n"
        f"  <BODY>{body}</BODY>\n"
        "  <CONTENTHANDLER>resource/x-bb-assignment</CONTENTHANDLER>\n"
        "  <FLAGS>\n"
        "    <ISENABLED>true</ISENABLED>\n"
        "    <ISAVAILABLE>true</ISAVAILABLE>\n"
        "  </FLAGS>\n"
        "</CONTENT>"
    )


@dataclass(frozen=True)
class ExportFormat:
    render: Callable[[AnalysisRecord, str], str]
    filename: str
    media_type: str


EXPORT_FORMATS: dict[str, ExportFormat] = {
    "text": ExportFormat(render_text_report, "equity_analysis.txt", "text/plain"),
    "canvas": ExportFormat(render_canvas, "canvas_assignment.json", "application/json"),
    "google-classroom": ExportFormat(render_google_classroom, "google_classroom_assignment.txt", "text/plain"),
    "blackboard": ExportFormat(render_blackboard, "blackboard_assignment.xml", "text/xml"),
}
