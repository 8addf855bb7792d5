"""Shared helpers for hypothesis endpoints."""

from typing import Any
from uuid import UUID

from fastapi import HTTPException

from app.core.errors import (
    ConflictError,
    HypothesisTrackerError,
    InsertFailure,
    InvalidInput,
    ReadFailure,
)
from app.core.hypothesis_versioning import record_version
from app.core.logging import get_logger
from app.core.priority import priority_label, priority_score
from app.core.schemas_hypotheses import HypothesisResponse, HypothesisVersionResponse
from app.db.hypotheses import get_hypothesis, update_hypothesis

logger = get_logger(__name__)


def to_hypothesis_response(row: dict[str, Any]) -> HypothesisResponse:
    """Build a HypothesisResponse with its derived priority."""
    score = priority_score(row)
    return HypothesisResponse(**row, priority_score=score, priority_label=priority_label(score))


def history_http_error(e: HypothesisTrackerError) -> HTTPException:
    """Map a version history error to the HTTP error shown to the client."""
    if isinstance(e, InvalidInput):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, ConflictError):
        return HTTPException(
            status_code=409,
            detail="The hypothesis was changed by someone else at the same time, please retry",
        )
    if isinstance(e, ReadFailure):
        return HTTPException(status_code=503, detail="Version history is temporarily unavailable")
    if isinstance(e, InsertFailure):
        return HTTPException(status_code=500, detail="Failed to record hypothesis version")
    return HTTPException(status_code=500, detail=str(e))


def load_hypothesis_or_404(hypothesis_id: UUID) -> dict[str, Any]:
    try:
        hypothesis = get_hypothesis(hypothesis_id)
    except Exception as e:
        logger.exception(f"Failed to load hypothesis {hypothesis_id}")
        raise HTTPException(status_code=500, detail="Failed to load hypothesis") from e

    if not hypothesis:
        raise HTTPException(status_code=404, detail="Hypothesis not found")
    return hypothesis


def record_then_update(
    hypothesis: dict[str, Any],
    updates: dict[str, Any],
    validation_id: UUID | str | None = None,
    reason: str | None = None,
    actor_id: str | None = None,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Snapshot the hypothesis, then apply the update.

    The live row is only touched after the snapshot succeeded, so every
    applied change has its previous state in the history.

    Returns:
        (updated hypothesis row, recorded version row)

    Raises:
        HTTPException: 400 without changes, 409/422/500/503 when recording fails,
            500 when the update itself fails
    """
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    hypothesis_id = hypothesis.get("id")

    try:
        version = record_version(
            hypothesis,
            validation_id=validation_id,
            reason=reason,
            actor_id=actor_id,
        )
    except HypothesisTrackerError as e:
        logger.error(
            f"Not updating hypothesis {hypothesis_id}: version not recorded ({e})",
            exc_info=True,
            extra={"hypothesis_id": str(hypothesis_id), "actor_id": actor_id},
        )
        raise history_http_error(e) from e

    try:
        updated = update_hypothesis(hypothesis_id, updates)
    except Exception as e:
        logger.exception(f"Failed to update hypothesis {hypothesis_id}")
        raise HTTPException(status_code=500, detail="Failed to update hypothesis") from e

    return updated, version


def to_version_response(row: dict[str, Any]) -> HypothesisVersionResponse:
    return HypothesisVersionResponse(**row)
