"""Projects database operations."""

from typing import Any
from uuid import UUID

from app.core.logging import get_logger
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)


def create_project(
    name: str,
    user_id: UUID | str,
    status: str | None = None,
    description: str | None = None,
    organization_id: UUID | str | None = None,
) -> dict[str, Any]:
    """
    Create a new project owned by a user.

    Args:
        name: Project name (required)
        user_id: UUID of the owning user
        status: Project status (未着手, 進行中, 完了)
        description: Project description (optional)
        organization_id: Owning organization (optional)

    Returns:
        Created project row as dict

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        data = {
            "name": name,
            "status": status,
            "description": description,
            "user_id": str(user_id),
            "organization_id": str(organization_id) if organization_id else None,
        }

        response = supabase.table("projects").insert(data).execute()

        if not response.data:
            raise ValueError("No data returned from create_project")

        project = response.data[0]
        logger.info(
            f"Created project {project['id']}: {name}",
            extra={"project_id": project["id"], "actor_id": str(user_id)},
        )
        return project

    except Exception as e:
        logger.error(f"Failed to create project {name}: {e}")
        raise


def list_projects(
    user_id: UUID | str,
    status: str | None = None,
    search: str | None = None,
) -> list[dict[str, Any]]:
    """
    List projects owned by a user, newest first.

    Args:
        user_id: Owning user UUID
        status: Optional status filter
        search: Search query for name/description (optional)

    Returns:
        List of project rows

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        query = supabase.table("projects").select("*").eq("user_id", str(user_id))

        if status:
            query = query.eq("status", status)

        if search:
            # OR filter with ILIKE for case-insensitive search
            query = query.or_(f"name.ilike.%{search}%,description.ilike.%{search}%")

        response = query.order("created_at", desc=True).execute()
        projects = response.data or []

        logger.info(
            f"Listed {len(projects)} projects",
            extra={"actor_id": str(user_id), "count": len(projects)},
        )
        return projects

    except Exception as e:
        logger.error(f"Failed to list projects: {e}")
        raise


def get_project(project_id: UUID | str) -> dict[str, Any] | None:
    """
    Get a single project by ID.

    Args:
        project_id: Project UUID

    Returns:
        Project row as dict, or None if not found

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("projects")
            .select("*")
            .eq("id", str(project_id))
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return rows[0] if rows else None

    except Exception as e:
        logger.error(f"Failed to get project {project_id}: {e}")
        raise


def count_project_hypotheses(project_id: UUID | str) -> int:
    """Count the hypotheses of a project."""
    supabase = get_supabase()

    try:
        response = (
            supabase.table("hypotheses")
            .select("id", count="exact")
            .eq("project_id", str(project_id))
            .execute()
        )
        return response.count or 0

    except Exception as e:
        logger.error(f"Failed to count hypotheses for project {project_id}: {e}")
        raise


def update_project(
    project_id: UUID | str,
    updates: dict[str, Any],
) -> dict[str, Any]:
    """
    Update project fields.

    Args:
        project_id: Project UUID
        updates: Dict of fields to update (name, description, status)

    Returns:
        Updated project row as dict

    Raises:
        ValueError: If no valid fields were given or the project does not exist
        Exception: If database operation fails
    """
    allowed_fields = {"name", "description", "status"}
    filtered_updates = {
        k: v for k, v in updates.items()
        if k in allowed_fields and v is not None
    }

    if not filtered_updates:
        raise ValueError("No fields to update")

    supabase = get_supabase()

    try:
        response = (
            supabase.table("projects")
            .update(filtered_updates)
            .eq("id", str(project_id))
            .execute()
        )

        if not response.data:
            raise ValueError(f"Project not found: {project_id}")

        logger.info(
            f"Updated project {project_id}: {sorted(filtered_updates)}",
            extra={"project_id": str(project_id)},
        )
        return response.data[0]

    except Exception as e:
        logger.error(f"Failed to update project {project_id}: {e}")
        raise
