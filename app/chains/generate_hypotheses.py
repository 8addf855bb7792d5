"""Generate hypothesis drafts for a project.

Asks an OpenAI-compatible chat model for a JSON array of hypotheses and
normalises whatever comes back (English or Japanese keys, scores outside
1-5, missing status) into HypothesisDraft objects. Drafts are not persisted
here.
"""

import json
from typing import Any

from app.core.errors import DraftGenerationError
from app.core.llm import get_llm, parse_llm_json
from app.core.logging import get_logger
from app.core.schemas_hypotheses import (
    DEFAULT_HYPOTHESIS_STATUS,
    DEFAULT_HYPOTHESIS_TYPE,
    HYPOTHESIS_TYPES,
    HypothesisDraft,
)

logger = get_logger(__name__)

DEFAULT_SCORE = 3

# Accepted keys per draft field, first match wins
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "title": ("title", "タイトル"),
    "assumption": ("premise", "assumption", "前提"),
    "solution": ("solution", "解決策"),
    "expected_effect": ("expected_effect", "期待される効果"),
    "type": ("type", "仮説タイプ"),
    "status": ("status", "ステータス"),
    "impact": ("impact", "影響度"),
    "uncertainty": ("uncertainty", "不確実性"),
    "confidence": ("confidence", "確信度"),
}

SYSTEM_PROMPT = """You help a new-business team write testable business hypotheses.

Reply with a JSON array only, no prose and no code fences. Keys in English,
values in Japanese. Each element:
{{
  "title": "...",
  "premise": "why we believe this",
  "solution": "...",
  "expected_effect": "...",
  "type": one of {types},
  "status": "未検証",
  "impact": 1-5,
  "uncertainty": 1-5,
  "confidence": 1-5
}}"""


def _pick(raw: dict[str, Any], field_name: str) -> Any:
    for key in FIELD_ALIASES[field_name]:
        if raw.get(key) is not None:
            return raw[key]
    return None


def normalize_score(value: Any) -> int:
    """Round to an int in [1, 5]; anything non-numeric becomes 3."""
    if isinstance(value, bool):
        return DEFAULT_SCORE
    try:
        number = float(value)
    except (TypeError, ValueError):
        return DEFAULT_SCORE
    if number != number:  # NaN
        return DEFAULT_SCORE
    return min(5, max(1, round(number)))


def normalize_draft(raw: dict[str, Any]) -> HypothesisDraft:
    """Map one raw LLM object onto a HypothesisDraft."""
    title = _pick(raw, "title")
    if not title:
        raise DraftGenerationError("AI draft is missing a title")

    return HypothesisDraft(
        title=str(title),
        type=_pick(raw, "type") or DEFAULT_HYPOTHESIS_TYPE,
        assumption=_pick(raw, "assumption"),
        solution=_pick(raw, "solution"),
        expected_effect=_pick(raw, "expected_effect") or "",
        status=_pick(raw, "status") or DEFAULT_HYPOTHESIS_STATUS,
        impact=normalize_score(_pick(raw, "impact")),
        uncertainty=normalize_score(_pick(raw, "uncertainty")),
        confidence=normalize_score(_pick(raw, "confidence")),
    )


def parse_drafts(content: str | None) -> list[HypothesisDraft]:
    """
    Parse the raw model reply into drafts.

    Raises:
        DraftGenerationError: If the reply is empty, not JSON, or holds no drafts
    """
    if not content or not content.strip():
        raise DraftGenerationError("AI returned an empty response")

    try:
        parsed = parse_llm_json(content)
    except json.JSONDecodeError as e:
        raise DraftGenerationError("AI response is not valid JSON") from e

    if isinstance(parsed, dict):
        parsed = parsed.get("hypotheses", [parsed])

    if not isinstance(parsed, list):
        raise DraftGenerationError("AI response is not a list of hypotheses")

    drafts = [normalize_draft(item) for item in parsed if isinstance(item, dict)]
    if not drafts:
        raise DraftGenerationError("AI response contained no hypotheses")
    return drafts


def build_user_message(
    project: dict[str, Any],
    existing: list[dict[str, Any]],
    context: str | None,
    count: int,
) -> str:
    existing_list = ", ".join(
        f"{h.get('title')} ({h.get('type')})" for h in existing
    ) or "none"

    message = f"""Project: {project.get("name") or "untitled"}
Description: {project.get("description") or "none"}
Existing hypotheses: {existing_list}
"""
    if context:
        message += f"Focus: {context}\n"
    message += f"\nPropose {count} hypotheses with different approaches and varied types."
    return message


async def generate_hypothesis_drafts(
    project: dict[str, Any],
    existing: list[dict[str, Any]],
    context: str | None = None,
    count: int = 3,
) -> list[HypothesisDraft]:
    """
    Draft new hypotheses for a project.

    Args:
        project: Project row (name, description)
        existing: Existing hypothesis rows, listed so drafts do not repeat them
        context: What the user wants to explore (optional)
        count: Number of drafts to ask for

    Returns:
        Normalised drafts (the model may return more or fewer than asked)

    Raises:
        DraftGenerationError: If the model is unavailable or its reply is unusable
    """
    llm = get_llm()
    messages = [
        {"role": "system", "content": SYSTEM_PROMPT.format(types=" | ".join(HYPOTHESIS_TYPES))},
        {"role": "user", "content": build_user_message(project, existing, context, count)},
    ]

    try:
        response = await llm.ainvoke(messages)
    except Exception as e:
        logger.error(
            f"Hypothesis draft request failed: {e}",
            extra={"project_id": project.get("id")},
        )
        raise DraftGenerationError("AI draft request failed") from e

    drafts = parse_drafts(response.content)
    logger.info(
        f"Generated {len(drafts)} hypothesis drafts",
        extra={"project_id": project.get("id"), "count": len(drafts)},
    )
    return drafts
