"""Prompt templates for resume review and resume enhancement."""

import json
from typing import Any, Optional

REVIEW_SYSTEM_PROMPT = """You are an expert resume reviewer for software/tech roles.
Return STRICT JSON with the following schema:
{
  "summary": "2-4 sentences",
  "strengths": ["..."],
  "gaps": ["..."],
  "suggested_improvements": ["..."],
  "role_suggestions": ["..."],
  "keywords": {
    "skills": ["normalized technical skills"],
    "tools": ["frameworks/libraries"],
    "domains": ["areas like backend, ML, data"],
    "seniority": "Junior|Mid|Senior"
  }
}"""

ENHANCE_SYSTEM_PROMPT = """You prepare resumes for a tool named txt_to_pdf that renders plain text to a styled PDF.
Polish the wording of the resume without inventing facts, then return STRICT JSON:
{
  "enhanced_text": "the full resume as plain text, ready to render",
  "title": "a short, descriptive title (e.g. \\"Resume - John Doe\\")"
}
Rendering defaults: pageSize "Letter" in the US, "A4" elsewhere; margins "36px"; page numbers on."""


def build_review_prompt(text: str) -> str:
    """User prompt for a first analysis of a resume."""
    return (
        f"Resume text:\n{text}\n\n"
        "Generate the JSON now. Do not include explanations."
    )


def build_regeneration_prompt(
    text: str,
    previous_content: Any,
    rating: Optional[int],
    comment: Optional[str],
) -> str:
    """User prompt for a regeneration that takes reviewer feedback into account."""
    return (
        f"Resume text:\n{text}\n\n"
        "Here's the previous analysis:\n"
        f"{json.dumps(previous_content, ensure_ascii=False)}\n\n"
        "The user provided the following feedback:\n"
        f"- Rating: {rating if rating is not None else 'N/A'}/5\n"
        f"- Comment: {comment or 'N/A'}\n\n"
        "Generate the JSON now. Do not include explanations."
    )


def build_enhance_prompt(fields: dict, resume_text: str, render_options: dict) -> str:
    """User prompt asking the model to prepare structured resume fields for rendering."""

    def _show(value: Any) -> str:
        if value is None or value == [] or value == "":
            return "N/A"
        if isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False)

    skills = fields.get("skills")
    return (
        "Please convert this structured resume to PDF:\n"
        f"Name: {_show(fields.get('name'))}\n"
        f"Phone: {_show(fields.get('phone'))}\n"
        f"Email: {_show(fields.get('email'))}\n"
        f"Summary: {_show(fields.get('summary'))}\n"
        f"Education: {_show(fields.get('education'))}\n"
        f"Work Experience: {_show(fields.get('work_experience'))}\n"
        f"Project Experience: {_show(fields.get('project_experience'))}\n"
        f"Skills: {', '.join(skills) if skills else 'N/A'}\n"
        f"Publications: {_show(fields.get('publications'))}\n\n"
        f"Full text format:\n{resume_text}\n\n"
        f"Title: {render_options.get('title')}\n"
        f"Page size: {render_options.get('pageSize')}\n"
        f"Margins: {render_options.get('margins')}\n"
        f"Page numbers: {render_options.get('pageNumbers')}"
    )
