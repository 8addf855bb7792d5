"""Hypotheses database operations."""

from typing import Any
from uuid import UUID

from app.core.logging import get_logger
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)


def get_hypothesis(hypothesis_id: UUID | str) -> dict[str, Any] | None:
    """
    Get a hypothesis by ID.

    Args:
        hypothesis_id: Hypothesis UUID

    Returns:
        Hypothesis row as dict, or None if not found

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("hypotheses")
            .select("*")
            .eq("id", str(hypothesis_id))
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return rows[0] if rows else None

    except Exception as e:
        logger.error(
            f"Failed to get hypothesis {hypothesis_id}: {e}",
            extra={"hypothesis_id": str(hypothesis_id)},
        )
        raise


def list_hypotheses(
    project_id: UUID | str,
    status: str | None = None,
) -> list[dict[str, Any]]:
    """
    List hypotheses of a project, oldest first.

    Args:
        project_id: Project UUID
        status: Optional status filter (未検証, 検証中, 成立, 否定)

    Returns:
        List of hypothesis rows

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        query = supabase.table("hypotheses").select("*").eq("project_id", str(project_id))

        if status:
            query = query.eq("status", status)

        response = query.order("created_at").execute()
        return response.data or []

    except Exception as e:
        logger.error(
            f"Failed to list hypotheses for project {project_id}: {e}",
            extra={"project_id": str(project_id)},
        )
        raise


def create_hypothesis(
    project_id: UUID | str,
    payload: dict[str, Any],
    created_by: UUID | str | None = None,
) -> dict[str, Any]:
    """
    Create a hypothesis in a project.

    Args:
        project_id: Project UUID
        payload: Hypothesis fields (title, type, assumption, ...)
        created_by: UUID of the acting user (optional)

    Returns:
        Created hypothesis row

    Raises:
        Exception: If database operation fails
    """
    created = create_hypotheses(project_id, [payload], created_by=created_by)
    return created[0]


def create_hypotheses(
    project_id: UUID | str,
    payloads: list[dict[str, Any]],
    created_by: UUID | str | None = None,
) -> list[dict[str, Any]]:
    """
    Bulk-create hypotheses in a project.

    Args:
        project_id: Project UUID
        payloads: List of hypothesis field dicts
        created_by: UUID of the acting user (optional)

    Returns:
        Created hypothesis rows (empty list if nothing to insert)

    Raises:
        Exception: If database operation fails
    """
    if not payloads:
        return []

    supabase = get_supabase()

    rows = []
    for payload in payloads:
        row = {**payload, "project_id": str(project_id)}
        if created_by:
            row["created_by"] = str(created_by)
        rows.append(row)

    try:
        response = supabase.table("hypotheses").insert(rows).execute()

        if not response.data:
            raise ValueError("No data returned from create_hypotheses")

        logger.info(
            f"Created {len(response.data)} hypotheses in project {project_id}",
            extra={"project_id": str(project_id), "count": len(response.data)},
        )
        return response.data

    except Exception as e:
        logger.error(
            f"Failed to create hypotheses in project {project_id}: {e}",
            extra={"project_id": str(project_id)},
        )
        raise


def update_hypothesis(hypothesis_id: UUID | str, updates: dict[str, Any]) -> dict[str, Any]:
    """
    Apply field updates to the live hypothesis row.

    Callers that need an audit trail record a version first
    (see ``app.core.hypothesis_versioning.record_version``).

    Args:
        hypothesis_id: Hypothesis UUID
        updates: Fields to overwrite

    Returns:
        Updated hypothesis row

    Raises:
        ValueError: If there is nothing to update or the hypothesis does not exist
        Exception: If database operation fails
    """
    if not updates:
        raise ValueError("No fields to update")

    supabase = get_supabase()

    try:
        response = (
            supabase.table("hypotheses")
            .update(updates)
            .eq("id", str(hypothesis_id))
            .execute()
        )

        if not response.data:
            raise ValueError(f"Hypothesis not found: {hypothesis_id}")

        logger.info(
            f"Updated hypothesis {hypothesis_id}: {sorted(updates)}",
            extra={"hypothesis_id": str(hypothesis_id)},
        )
        return response.data[0]

    except Exception as e:
        logger.error(
            f"Failed to update hypothesis {hypothesis_id}: {e}",
            extra={"hypothesis_id": str(hypothesis_id)},
        )
        raise
