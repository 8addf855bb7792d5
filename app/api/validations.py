"""API endpoints for validation records."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response

from app.api.access import load_accessible_hypothesis, load_accessible_validation
from app.api.hypothesis_helpers import (
    record_then_update,
    to_hypothesis_response,
    to_version_response,
)
from app.core.auth_middleware import AuthContext, require_auth
from app.core.logging import get_logger
from app.core.schemas_validations import (
    CreateValidationRequest,
    CreateValidationResponse,
    HypothesisUpdateError,
    UpdateValidationRequest,
    ValidationListResponse,
    ValidationResponse,
)
from app.db.validations import create_validation, list_validations, update_validation

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/hypotheses/{hypothesis_id}/validations",
    response_model=CreateValidationResponse,
    responses={207: {"model": CreateValidationResponse}},
)
async def create_hypothesis_validation(
    hypothesis_id: UUID,
    request: CreateValidationRequest,
    http_response: Response,
    auth: AuthContext = Depends(require_auth),
) -> CreateValidationResponse:
    """
    Record a validation attempt, optionally updating the hypothesis with what was learned.

    When ``hypothesis_update`` is given, the pre-update hypothesis is versioned
    with this validation as its cause before the change is applied. The
    validation is kept even if the hypothesis update is refused: the response
    is then 207 with the saved validation and ``hypothesis_update_error``, so
    the client can retry the edit without recording the validation twice.
    """
    hypothesis = load_accessible_hypothesis(hypothesis_id, auth)

    change = request.hypothesis_update
    updates = change.field_updates() if change is not None else {}
    if change is not None and not updates:
        raise HTTPException(status_code=400, detail="No hypothesis fields to update")

    try:
        validation = create_validation(hypothesis_id, request.present_fields())
    except Exception as e:
        logger.exception(f"Failed to create validation for hypothesis {hypothesis_id}")
        raise HTTPException(status_code=500, detail="Failed to create validation") from e

    response = CreateValidationResponse(validation=ValidationResponse(**validation))

    if change is None:
        return response

    try:
        updated, version = record_then_update(
            hypothesis,
            updates,
            validation_id=validation["id"],
            reason=change.reason,
            actor_id=auth.actor_id,
        )
    except HTTPException as e:
        logger.warning(
            f"Validation {validation['id']} saved, hypothesis update refused ({e.status_code})",
            extra={
                "hypothesis_id": str(hypothesis_id),
                "validation_id": str(validation["id"]),
                "actor_id": auth.actor_id,
            },
        )
        http_response.status_code = 207
        response.hypothesis_update_error = HypothesisUpdateError(
            status_code=e.status_code, detail=str(e.detail)
        )
        return response

    response.hypothesis = to_hypothesis_response(updated)
    response.recorded_version = to_version_response(version)
    return response


@router.get(
    "/hypotheses/{hypothesis_id}/validations",
    response_model=ValidationListResponse,
)
async def list_hypothesis_validations(
    hypothesis_id: UUID,
    auth: AuthContext = Depends(require_auth),
) -> ValidationListResponse:
    """List the validations of a hypothesis, newest first."""
    load_accessible_hypothesis(hypothesis_id, auth)

    try:
        rows = list_validations(hypothesis_id)
    except Exception as e:
        logger.exception(f"Failed to list validations for hypothesis {hypothesis_id}")
        raise HTTPException(status_code=500, detail="Failed to list validations") from e

    validations = [ValidationResponse(**row) for row in rows]
    return ValidationListResponse(validations=validations, total=len(validations))


@router.patch("/validations/{validation_id}", response_model=ValidationResponse)
async def update_single_validation(
    validation_id: UUID,
    request: UpdateValidationRequest,
    auth: AuthContext = Depends(require_auth),
) -> ValidationResponse:
    """Edit a validation record."""
    updates = request.present_fields()
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    load_accessible_validation(validation_id, auth)

    try:
        row = update_validation(validation_id, updates)
    except Exception as e:
        logger.exception(f"Failed to update validation {validation_id}")
        raise HTTPException(status_code=500, detail="Failed to update validation") from e

    return ValidationResponse(**row)
