"""KPI metrics database operations."""

from typing import Any
from uuid import UUID

from app.core.logging import get_logger
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)


def list_active_kpis(project_id: UUID | str) -> list[dict[str, Any]]:
    """
    List the active KPI metrics of a project.

    Args:
        project_id: Project UUID

    Returns:
        List of KPI rows with status 'active'

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("kpi_metrics")
            .select("id, name, current_value, target_value, unit, status")
            .eq("project_id", str(project_id))
            .eq("status", "active")
            .execute()
        )
        return response.data or []

    except Exception as e:
        logger.error(
            f"Failed to list KPI metrics for project {project_id}: {e}",
            extra={"project_id": str(project_id)},
        )
        raise
