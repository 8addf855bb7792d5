"""Project ownership checks for the project-scoped routers.

The service talks to Supabase with the service role key, so row-level
security does not apply; every route resolves the owning project and checks
it against the caller here. A project the caller cannot access is reported
as missing.
"""

from typing import Any
from uuid import UUID

from fastapi import HTTPException

from app.api.hypothesis_helpers import load_hypothesis_or_404
from app.core.auth_middleware import AuthContext
from app.core.logging import get_logger
from app.db.projects import get_project
from app.db.validations import get_validation

logger = get_logger(__name__)


def can_access_project(project: dict[str, Any], auth: AuthContext) -> bool:
    """Whether the authenticated user owns the project."""
    owner = project.get("user_id")
    return owner is not None and str(owner) == str(auth.user_id)


def require_project_access(project_id: UUID | str, auth: AuthContext) -> dict[str, Any]:
    """
    Load a project the caller owns.

    Raises:
        HTTPException: 404 if the project does not exist or belongs to someone
            else, 500 if it cannot be loaded
    """
    try:
        project = get_project(project_id)
    except Exception as e:
        logger.exception(f"Failed to load project {project_id}")
        raise HTTPException(status_code=500, detail="Failed to load project") from e

    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    if not can_access_project(project, auth):
        logger.warning(
            f"Denied access to project {project_id}",
            extra={"project_id": str(project_id), "actor_id": auth.actor_id},
        )
        raise HTTPException(status_code=404, detail="Project not found")

    return project


def load_accessible_hypothesis(hypothesis_id: UUID | str, auth: AuthContext) -> dict[str, Any]:
    """Load a hypothesis whose project the caller owns, or 404."""
    hypothesis = load_hypothesis_or_404(hypothesis_id)

    project_id = hypothesis.get("project_id")
    if not project_id:
        raise HTTPException(status_code=404, detail="Hypothesis not found")

    require_project_access(project_id, auth)
    return hypothesis


def load_accessible_validation(validation_id: UUID | str, auth: AuthContext) -> dict[str, Any]:
    """Load a validation whose hypothesis' project the caller owns, or 404."""
    try:
        validation = get_validation(validation_id)
    except Exception as e:
        logger.exception(f"Failed to load validation {validation_id}")
        raise HTTPException(status_code=500, detail="Failed to load validation") from e

    if not validation:
        raise HTTPException(status_code=404, detail="Validation not found")

    load_accessible_hypothesis(validation["hypothesis_id"], auth)
    return validation
