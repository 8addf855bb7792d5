"""Project reports database operations."""

from typing import Any
from uuid import UUID

from app.core.logging import get_logger
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)


def create_report(
    project_id: UUID | str,
    title: str,
    report_type: str,
    content: dict[str, Any],
    created_by: UUID | str,
    status: str = "draft",
) -> dict[str, Any]:
    """
    Save a new report for a project.

    Args:
        project_id: Project UUID
        title: Report title
        report_type: hypothesis_validation, progress, roadmap or final
        content: ``{"sections": [...]}`` document
        created_by: UUID of the authoring user
        status: Initial status (draft by default)

    Returns:
        Created report row

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        data = {
            "project_id": str(project_id),
            "title": title,
            "report_type": report_type,
            "status": status,
            "content": content,
            "created_by": str(created_by),
        }

        response = supabase.table("reports").insert(data).execute()

        if not response.data:
            raise ValueError("No data returned from create_report")

        report = response.data[0]
        logger.info(
            f"Created {report_type} report {report['id']} for project {project_id}",
            extra={
                "project_id": str(project_id),
                "report_id": report["id"],
                "actor_id": str(created_by),
            },
        )
        return report

    except Exception as e:
        logger.error(
            f"Failed to create report for project {project_id}: {e}",
            extra={"project_id": str(project_id)},
        )
        raise


def list_reports(project_id: UUID | str, status: str | None = None) -> list[dict[str, Any]]:
    """
    List the reports of a project, newest first.

    Args:
        project_id: Project UUID
        status: Optional status filter

    Returns:
        List of report rows

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        query = supabase.table("reports").select("*").eq("project_id", str(project_id))

        if status:
            query = query.eq("status", status)

        response = query.order("created_at", desc=True).execute()
        return response.data or []

    except Exception as e:
        logger.error(
            f"Failed to list reports for project {project_id}: {e}",
            extra={"project_id": str(project_id)},
        )
        raise


def get_report(report_id: UUID | str) -> dict[str, Any] | None:
    """Get a report by ID, or None if it does not exist."""
    supabase = get_supabase()

    try:
        response = (
            supabase.table("reports")
            .select("*")
            .eq("id", str(report_id))
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return rows[0] if rows else None

    except Exception as e:
        logger.error(f"Failed to get report {report_id}: {e}", extra={"report_id": str(report_id)})
        raise


def update_report(report_id: UUID | str, updates: dict[str, Any]) -> dict[str, Any]:
    """
    Update report fields.

    Args:
        report_id: Report UUID
        updates: Dict of fields to update (title, content, status, published_at)

    Returns:
        Updated report row

    Raises:
        ValueError: If no valid fields were given or the report does not exist
        Exception: If database operation fails
    """
    allowed_fields = {"title", "content", "status", "published_at"}
    filtered_updates = {k: v for k, v in updates.items() if k in allowed_fields}

    if not filtered_updates:
        raise ValueError("No fields to update")

    supabase = get_supabase()

    try:
        response = (
            supabase.table("reports")
            .update(filtered_updates)
            .eq("id", str(report_id))
            .execute()
        )

        if not response.data:
            raise ValueError(f"Report not found: {report_id}")

        logger.info(
            f"Updated report {report_id}: {sorted(filtered_updates)}",
            extra={"report_id": str(report_id)},
        )
        return response.data[0]

    except Exception as e:
        logger.error(
            f"Failed to update report {report_id}: {e}",
            extra={"report_id": str(report_id)},
        )
        raise


def delete_report(report_id: UUID | str) -> bool:
    """
    Delete a report.

    Returns:
        True if a row was deleted, False if it did not exist

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = supabase.table("reports").delete().eq("id", str(report_id)).execute()
        deleted = bool(response.data)

        if deleted:
            logger.info(f"Deleted report {report_id}", extra={"report_id": str(report_id)})
        return deleted

    except Exception as e:
        logger.error(
            f"Failed to delete report {report_id}: {e}",
            extra={"report_id": str(report_id)},
        )
        raise
