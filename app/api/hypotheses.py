"""API endpoints for hypotheses, their ranking and version history."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.access import load_accessible_hypothesis, require_project_access
from app.api.hypothesis_helpers import (
    record_then_update,
    to_hypothesis_response,
    to_version_response,
)
from app.chains.generate_hypotheses import generate_hypothesis_drafts
from app.core.auth_middleware import AuthContext, require_auth
from app.core.errors import DraftGenerationError, InvalidInput
from app.core.hypothesis_versioning import compare_versions, get_history, get_version
from app.core.logging import get_logger
from app.core.priority import rank_hypotheses
from app.core.schemas_hypotheses import (
    CreateHypothesisRequest,
    GenerateHypothesesRequest,
    GenerateHypothesesResponse,
    HypothesisHistoryResponse,
    HypothesisListResponse,
    HypothesisResponse,
    HypothesisStatus,
    UpdateHypothesisRequest,
    UpdateHypothesisResponse,
    VersionDiffResponse,
)
from app.db.hypotheses import create_hypothesis, list_hypotheses

logger = get_logger(__name__)

router = APIRouter()


@router.get("/projects/{project_id}/hypotheses", response_model=HypothesisListResponse)
async def list_project_hypotheses(
    project_id: UUID,
    status: HypothesisStatus | None = Query(None, description="Filter by validation status"),
    auth: AuthContext = Depends(require_auth),
) -> HypothesisListResponse:
    """
    List the hypotheses of a project, most urgent first.

    Urgency is impact * uncertainty; equal scores keep creation order.
    """
    require_project_access(project_id, auth)

    try:
        rows = list_hypotheses(project_id, status=status)
    except Exception as e:
        logger.exception(f"Failed to list hypotheses for project {project_id}")
        raise HTTPException(status_code=500, detail="Failed to list hypotheses") from e

    try:
        ranked = rank_hypotheses(rows)
    except InvalidInput as e:
        logger.error(str(e), extra={"project_id": str(project_id)})
        raise HTTPException(status_code=422, detail=str(e)) from e

    hypotheses = [HypothesisResponse(**entry.to_dict()) for entry in ranked]
    return HypothesisListResponse(hypotheses=hypotheses, total=len(hypotheses))


@router.post("/projects/{project_id}/hypotheses", response_model=HypothesisResponse)
async def create_project_hypothesis(
    project_id: UUID,
    request: CreateHypothesisRequest,
    auth: AuthContext = Depends(require_auth),
) -> HypothesisResponse:
    """Create a hypothesis in a project."""
    require_project_access(project_id, auth)

    try:
        row = create_hypothesis(project_id, request.model_dump(), created_by=auth.user_id)
    except Exception as e:
        logger.exception(f"Failed to create hypothesis in project {project_id}")
        raise HTTPException(status_code=500, detail="Failed to create hypothesis") from e

    return to_hypothesis_response(row)


@router.post(
    "/projects/{project_id}/hypotheses/generate",
    response_model=GenerateHypothesesResponse,
)
async def generate_project_hypotheses(
    project_id: UUID,
    request: GenerateHypothesesRequest,
    auth: AuthContext = Depends(require_auth),
) -> GenerateHypothesesResponse:
    """Draft hypotheses with AI. Drafts are returned for review, not saved."""
    project = require_project_access(project_id, auth)

    try:
        existing = list_hypotheses(project_id)
    except Exception as e:
        logger.exception(f"Failed to list hypotheses for project {project_id}")
        raise HTTPException(status_code=500, detail="Failed to list hypotheses") from e

    try:
        drafts = await generate_hypothesis_drafts(
            project, existing, context=request.context, count=request.count
        )
    except DraftGenerationError as e:
        logger.error(f"Hypothesis draft generation failed: {e}", extra={"project_id": str(project_id)})
        raise HTTPException(status_code=502, detail=str(e)) from e

    return GenerateHypothesesResponse(drafts=drafts)


@router.get("/hypotheses/{hypothesis_id}", response_model=HypothesisResponse)
async def get_single_hypothesis(
    hypothesis_id: UUID,
    auth: AuthContext = Depends(require_auth),
) -> HypothesisResponse:
    """Get a hypothesis with its priority score and label."""
    return to_hypothesis_response(load_accessible_hypothesis(hypothesis_id, auth))


@router.patch("/hypotheses/{hypothesis_id}", response_model=UpdateHypothesisResponse)
async def update_single_hypothesis(
    hypothesis_id: UUID,
    request: UpdateHypothesisRequest,
    auth: AuthContext = Depends(require_auth),
) -> UpdateHypothesisResponse:
    """
    Edit a hypothesis.

    Flow:
    1. Load the live hypothesis
    2. Record its current state as the next version (reason, validation, actor)
    3. Apply the edit only if step 2 succeeded
    """
    hypothesis = load_accessible_hypothesis(hypothesis_id, auth)

    updated, version = record_then_update(
        hypothesis,
        request.field_updates(),
        validation_id=request.based_on_validation_id,
        reason=request.reason,
        actor_id=auth.actor_id,
    )

    logger.info(
        f"Updated hypothesis {hypothesis_id} after recording version {version['version_number']}",
        extra={"hypothesis_id": str(hypothesis_id), "actor_id": auth.actor_id},
    )

    return UpdateHypothesisResponse(
        hypothesis=to_hypothesis_response(updated),
        recorded_version=to_version_response(version),
    )


@router.get("/hypotheses/{hypothesis_id}/history", response_model=HypothesisHistoryResponse)
async def get_hypothesis_history(
    hypothesis_id: UUID,
    auth: AuthContext = Depends(require_auth),
) -> HypothesisHistoryResponse:
    """Get every recorded version of a hypothesis plus its live state."""
    hypothesis = load_accessible_hypothesis(hypothesis_id, auth)

    try:
        versions = get_history(hypothesis_id)
    except Exception as e:
        logger.exception(f"Failed to load history of hypothesis {hypothesis_id}")
        raise HTTPException(status_code=500, detail="Failed to load hypothesis history") from e

    latest = versions[-1]["version_number"] if versions else 0

    return HypothesisHistoryResponse(
        hypothesis_id=hypothesis_id,
        versions=[to_version_response(v) for v in versions],
        current=to_hypothesis_response(hypothesis),
        current_version_number=latest + 1,
    )


@router.get("/hypotheses/{hypothesis_id}/compare", response_model=VersionDiffResponse)
async def compare_hypothesis_versions(
    hypothesis_id: UUID,
    from_version: int = Query(..., ge=1, description="Earlier version number"),
    to_version: int | None = Query(
        None, ge=1, description="Later version number (default: live hypothesis)"
    ),
    auth: AuthContext = Depends(require_auth),
) -> VersionDiffResponse:
    """Diff two versions, or a version against the live hypothesis."""
    live = load_accessible_hypothesis(hypothesis_id, auth)

    try:
        old = get_version(hypothesis_id, from_version)
        new = live if to_version is None else get_version(hypothesis_id, to_version)
    except Exception as e:
        logger.exception(f"Failed to load versions of hypothesis {hypothesis_id}")
        raise HTTPException(status_code=500, detail="Failed to load hypothesis versions") from e

    if not old or not new:
        raise HTTPException(status_code=404, detail="Version not found")

    diff = compare_versions(old, new)
    return VersionDiffResponse(**diff.to_dict())
