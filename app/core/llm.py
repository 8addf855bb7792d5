"""LLM client utilities for LangChain integration."""

import json
import re
from typing import Any

from langchain_openai import ChatOpenAI

from app.core.config import get_settings
from app.core.errors import DraftGenerationError


def get_llm(model: str | None = None, temperature: float | None = None) -> ChatOpenAI:
    """
    Get configured LLM instance for draft generation chains.

    The endpoint is any OpenAI-compatible chat completions API
    (``LLM_BASE_URL``).

    Args:
        model: Model name override (defaults to DRAFT_MODEL)
        temperature: Temperature override (defaults to DRAFT_TEMPERATURE)

    Returns:
        ChatOpenAI instance configured with API key, base URL and model

    Raises:
        DraftGenerationError: If no LLM_API_KEY is configured
    """
    settings = get_settings()

    if not settings.LLM_API_KEY:
        raise DraftGenerationError("AI draft generation is not configured (LLM_API_KEY unset)")

    return ChatOpenAI(
        api_key=settings.LLM_API_KEY,
        base_url=settings.LLM_BASE_URL,
        model=model or settings.DRAFT_MODEL,
        temperature=settings.DRAFT_TEMPERATURE if temperature is None else temperature,
    )


def _strip_llm_fences(raw_output: str) -> str:
    """Strip markdown code fences from LLM output.

    Handles: ```json ... ```, ``` ... ```, leading/trailing whitespace.
    """
    cleaned = raw_output.strip()

    fence_match = re.search(r"```(?:json)?\s*\n?(.*?)```", cleaned, re.DOTALL)
    if fence_match:
        return fence_match.group(1).strip()

    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def parse_llm_json(raw_output: str) -> Any:
    """
    Parse LLM output as JSON.

    Args:
        raw_output: Raw string from LLM response

    Returns:
        Parsed JSON value (object or array)

    Raises:
        json.JSONDecodeError: If JSON parsing fails after cleanup
    """
    return json.loads(_strip_llm_fences(raw_output))
