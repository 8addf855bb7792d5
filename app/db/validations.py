"""Validation records database operations."""

from typing import Any
from uuid import UUID

from app.core.logging import get_logger
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)


def create_validation(hypothesis_id: UUID | str, payload: dict[str, Any]) -> dict[str, Any]:
    """
    Record a validation attempt against a hypothesis.

    Args:
        hypothesis_id: Hypothesis UUID
        payload: Validation fields (method, description, result, ...)

    Returns:
        Created validation row

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        data = {**payload, "hypothesis_id": str(hypothesis_id)}
        response = supabase.table("validations").insert(data).execute()

        if not response.data:
            raise ValueError("No data returned from create_validation")

        validation = response.data[0]
        logger.info(
            f"Created validation {validation['id']} for hypothesis {hypothesis_id}",
            extra={"hypothesis_id": str(hypothesis_id), "validation_id": validation["id"]},
        )
        return validation

    except Exception as e:
        logger.error(
            f"Failed to create validation for hypothesis {hypothesis_id}: {e}",
            extra={"hypothesis_id": str(hypothesis_id)},
        )
        raise


def get_validation(validation_id: UUID | str) -> dict[str, Any] | None:
    """Get a validation by ID, or None if it does not exist."""
    supabase = get_supabase()

    try:
        response = (
            supabase.table("validations")
            .select("*")
            .eq("id", str(validation_id))
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return rows[0] if rows else None

    except Exception as e:
        logger.error(
            f"Failed to get validation {validation_id}: {e}",
            extra={"validation_id": str(validation_id)},
        )
        raise


def list_validations(hypothesis_id: UUID | str) -> list[dict[str, Any]]:
    """
    List validations of one hypothesis, newest first.

    Args:
        hypothesis_id: Hypothesis UUID

    Returns:
        List of validation rows

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("validations")
            .select("*")
            .eq("hypothesis_id", str(hypothesis_id))
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []

    except Exception as e:
        logger.error(
            f"Failed to list validations for hypothesis {hypothesis_id}: {e}",
            extra={"hypothesis_id": str(hypothesis_id)},
        )
        raise


def list_validations_for_hypotheses(hypothesis_ids: list[str]) -> list[dict[str, Any]]:
    """
    List validations belonging to any of the given hypotheses.

    Args:
        hypothesis_ids: Hypothesis UUID strings

    Returns:
        List of validation rows (empty when no IDs are given)

    Raises:
        Exception: If database operation fails
    """
    if not hypothesis_ids:
        return []

    supabase = get_supabase()

    try:
        response = (
            supabase.table("validations")
            .select("*")
            .in_("hypothesis_id", hypothesis_ids)
            .execute()
        )
        return response.data or []

    except Exception as e:
        logger.error(f"Failed to list validations for {len(hypothesis_ids)} hypotheses: {e}")
        raise


def update_validation(validation_id: UUID | str, updates: dict[str, Any]) -> dict[str, Any]:
    """
    Update a validation record.

    Args:
        validation_id: Validation UUID
        updates: Fields to overwrite

    Returns:
        Updated validation row

    Raises:
        ValueError: If there is nothing to update or the validation does not exist
        Exception: If database operation fails
    """
    if not updates:
        raise ValueError("No fields to update")

    supabase = get_supabase()

    try:
        response = (
            supabase.table("validations")
            .update(updates)
            .eq("id", str(validation_id))
            .execute()
        )

        if not response.data:
            raise ValueError(f"Validation not found: {validation_id}")

        logger.info(
            f"Updated validation {validation_id}",
            extra={"validation_id": str(validation_id)},
        )
        return response.data[0]

    except Exception as e:
        logger.error(
            f"Failed to update validation {validation_id}: {e}",
            extra={"validation_id": str(validation_id)},
        )
        raise
