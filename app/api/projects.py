"""API endpoints for project-level operations."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.access import require_project_access
from app.chains.generate_hypotheses import generate_hypothesis_drafts
from app.core.auth_middleware import AuthContext, require_auth
from app.core.config import get_settings
from app.core.errors import DraftGenerationError, InvalidInput
from app.core.logging import get_logger
from app.core.project_analytics import build_roadmap, compute_project_stats
from app.core.schemas_projects import (
    CreateProjectRequest,
    CreateProjectResponse,
    ProjectAnalyticsResponse,
    ProjectDetailResponse,
    ProjectListResponse,
    ProjectResponse,
    ProjectStatus,
    RoadmapResponse,
    UpdateProjectRequest,
)
from app.db.hypotheses import create_hypotheses, list_hypotheses
from app.db.kpi_metrics import list_active_kpis
from app.db.projects import (
    count_project_hypotheses,
    create_project,
    list_projects,
    update_project,
)
from app.db.validations import list_validations_for_hypotheses

logger = get_logger(__name__)

router = APIRouter()


@router.get("/", response_model=ProjectListResponse)
async def list_my_projects(
    status: ProjectStatus | None = Query(None, description="Filter by status"),
    search: str | None = Query(None, description="Search query for name/description"),
    auth: AuthContext = Depends(require_auth),
) -> ProjectListResponse:
    """List the projects owned by the signed-in user, newest first."""
    try:
        rows = list_projects(auth.user_id, status=status, search=search)
    except Exception as e:
        logger.exception("Failed to list projects")
        raise HTTPException(status_code=500, detail=f"Failed to list projects: {str(e)}") from e

    projects = [ProjectResponse(**p) for p in rows]
    return ProjectListResponse(projects=projects, total=len(projects))


@router.post("/", response_model=CreateProjectResponse)
async def create_new_project(
    request: CreateProjectRequest,
    auth: AuthContext = Depends(require_auth),
) -> CreateProjectResponse:
    """
    Create a new project, optionally seeded with AI-drafted hypotheses.

    Flow:
    1. Create project record owned by the caller
    2. If auto_generate_hypotheses: draft hypotheses from name and description
       and insert them
    3. Return project with the number of seeded hypotheses

    A failed draft leaves the created project in place and answers 502.
    """
    try:
        project = create_project(
            name=request.name,
            user_id=auth.user_id,
            status=request.status,
            description=request.description,
            organization_id=request.organization_id,
        )
    except Exception as e:
        logger.exception("Failed to create project")
        raise HTTPException(status_code=500, detail=f"Failed to create project: {str(e)}") from e

    generated = 0

    if request.auto_generate_hypotheses:
        try:
            drafts = await generate_hypothesis_drafts(
                project, [], count=get_settings().PROJECT_SEED_HYPOTHESES
            )
        except DraftGenerationError as e:
            logger.error(
                f"Failed to draft hypotheses for new project: {e}",
                extra={"project_id": project["id"]},
            )
            raise HTTPException(
                status_code=502,
                detail=f"Project created, but hypothesis generation failed: {e}",
            ) from e

        try:
            inserted = create_hypotheses(
                project["id"],
                [draft.model_dump() for draft in drafts],
                created_by=auth.user_id,
            )
        except Exception as e:
            logger.exception("Failed to save drafted hypotheses")
            raise HTTPException(
                status_code=500,
                detail="Project created, but saving generated hypotheses failed",
            ) from e
        generated = len(inserted)

    return CreateProjectResponse(**project, generated_hypotheses=generated)


@router.get("/{project_id}", response_model=ProjectDetailResponse)
async def get_single_project(
    project_id: UUID,
    auth: AuthContext = Depends(require_auth),
) -> ProjectDetailResponse:
    """Get a project with its hypothesis count."""
    project = require_project_access(project_id, auth)

    try:
        count = count_project_hypotheses(project_id)
    except Exception as e:
        logger.exception(f"Failed to count hypotheses of project {project_id}")
        raise HTTPException(status_code=500, detail=f"Failed to get project: {str(e)}") from e

    return ProjectDetailResponse(**project, hypothesis_count=count)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_existing_project(
    project_id: UUID,
    request: UpdateProjectRequest,
    auth: AuthContext = Depends(require_auth),
) -> ProjectResponse:
    """Update project fields (name, description, status)."""
    updates = request.model_dump(exclude_none=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    require_project_access(project_id, auth)

    try:
        project = update_project(project_id, updates)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except Exception as e:
        logger.exception(f"Failed to update project {project_id}")
        raise HTTPException(status_code=500, detail=f"Failed to update project: {str(e)}") from e

    return ProjectResponse(**project)


@router.get("/{project_id}/analytics", response_model=ProjectAnalyticsResponse)
async def get_project_analytics(
    project_id: UUID,
    auth: AuthContext = Depends(require_auth),
) -> ProjectAnalyticsResponse:
    """Dashboard numbers: status breakdown, validation results, averages, KPIs."""
    require_project_access(project_id, auth)

    try:
        hypotheses = list_hypotheses(project_id)
        validations = list_validations_for_hypotheses([h["id"] for h in hypotheses])
    except Exception as e:
        logger.exception(f"Failed to load analytics data for project {project_id}")
        raise HTTPException(status_code=500, detail="Failed to load analytics data") from e

    try:
        kpis = list_active_kpis(project_id)
    except Exception:
        # KPIs are supplementary; the dashboard still renders without them
        logger.warning(
            f"Failed to load KPI metrics for project {project_id}",
            exc_info=True,
            extra={"project_id": str(project_id)},
        )
        kpis = []

    return ProjectAnalyticsResponse(**compute_project_stats(hypotheses, validations, kpis))


@router.get("/{project_id}/roadmap", response_model=RoadmapResponse)
async def get_project_roadmap(
    project_id: UUID,
    auth: AuthContext = Depends(require_auth),
) -> RoadmapResponse:
    """Hypotheses as validation steps, most urgent first, with progress."""
    require_project_access(project_id, auth)

    try:
        hypotheses = list_hypotheses(project_id)
        validations = list_validations_for_hypotheses([h["id"] for h in hypotheses])
    except Exception as e:
        logger.exception(f"Failed to load roadmap data for project {project_id}")
        raise HTTPException(status_code=500, detail="Failed to load roadmap data") from e

    try:
        roadmap = build_roadmap(hypotheses, validations)
    except InvalidInput as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    return RoadmapResponse(**roadmap)
