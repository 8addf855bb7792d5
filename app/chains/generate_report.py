"""Write a project report with an LLM.

The model gets the report built from the project's data and rewrites it into
a finished document: figures stay as computed, the sections left for the
team (conclusions, issues, next steps) are written from the data. The reply
is a JSON object of titled sections, normalised into the stored report
content shape.
"""

import json
from typing import Any

from app.core.errors import DraftGenerationError
from app.core.llm import get_llm, parse_llm_json
from app.core.logging import get_logger
from app.core.schemas_reports import REPORT_TYPE_LABELS

logger = get_logger(__name__)

SYSTEM_PROMPT = """You write reports for a new-business team that validates business hypotheses.

You get a report draft whose sections hold the project's figures. Keep every
figure exactly as given, replace the sections that ask to be filled in with
conclusions, issues and next steps drawn from the data, and write in Japanese.

Reply with a JSON object only, no prose and no code fences:
{"title": "...", "sections": [{"title": "...", "text": "..."}]}"""


def _section_fields(raw: dict[str, Any]) -> tuple[Any, Any]:
    # Accept both the flat shape we ask for and the stored {"content": {...}} shape
    if isinstance(raw.get("content"), dict):
        raw = raw["content"]
    return raw.get("title") or raw.get("見出し"), raw.get("text") or raw.get("本文")


def parse_report(content: str | None, fallback_title: str) -> dict[str, Any]:
    """
    Parse the raw model reply into a report title and content.

    Raises:
        DraftGenerationError: If the reply is empty, not JSON, or holds no sections
    """
    if not content or not content.strip():
        raise DraftGenerationError("AI returned an empty response")

    try:
        parsed = parse_llm_json(content)
    except json.JSONDecodeError as e:
        raise DraftGenerationError("AI response is not valid JSON") from e

    if isinstance(parsed, list):
        parsed = {"sections": parsed}

    if not isinstance(parsed, dict) or not isinstance(parsed.get("sections"), list):
        raise DraftGenerationError("AI response has no report sections")

    sections = []
    for raw in parsed["sections"]:
        if not isinstance(raw, dict):
            continue
        title, text = _section_fields(raw)
        if not title:
            continue
        sections.append(
            {"type": "text", "content": {"title": str(title), "text": str(text or "")}}
        )

    if not sections:
        raise DraftGenerationError("AI response contained no usable sections")

    title = parsed.get("title")
    return {
        "title": str(title) if title else fallback_title,
        "content": {"sections": sections},
    }


def build_user_message(
    project: dict[str, Any],
    report_type: str,
    draft: dict[str, Any],
    focus: str | None,
) -> str:
    rendered = "\n\n".join(
        f"## {section['content']['title']}\n{section['content'].get('text', '')}"
        for section in draft["content"]["sections"]
    )

    message = f"""Project: {project.get("name") or "untitled"}
Report type: {REPORT_TYPE_LABELS.get(report_type, report_type)}
Draft title: {draft["title"]}
"""
    if focus:
        message += f"Emphasise: {focus}\n"
    message += f"\nDraft:\n{rendered}"
    return message


async def generate_report_content(
    project: dict[str, Any],
    report_type: str,
    draft: dict[str, Any],
    focus: str | None = None,
) -> dict[str, Any]:
    """
    Turn a data-built report draft into a finished report.

    Args:
        project: Project row (name)
        report_type: Report type of the draft
        draft: ``{"title", "content"}`` as built by report_builder.build_report
        focus: What the report should emphasise (optional)

    Returns:
        ``{"title", "content"}`` in the stored report shape

    Raises:
        DraftGenerationError: If the model is unavailable or its reply is unusable
    """
    llm = get_llm()
    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_user_message(project, report_type, draft, focus)},
    ]

    try:
        response = await llm.ainvoke(messages)
    except Exception as e:
        logger.error(
            f"Report generation request failed: {e}",
            extra={"project_id": project.get("id")},
        )
        raise DraftGenerationError("AI report request failed") from e

    report = parse_report(response.content, fallback_title=draft["title"])
    logger.info(
        f"Generated {report_type} report with {len(report['content']['sections'])} sections",
        extra={"project_id": project.get("id"), "count": len(report["content"]["sections"])},
    )
    return report
