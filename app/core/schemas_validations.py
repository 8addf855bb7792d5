"""Pydantic schemas for validation records."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.core.schemas_hypotheses import (
    HypothesisResponse,
    HypothesisStatus,
    HypothesisVersionResponse,
    reject_null,
)


class ValidationFields(BaseModel):
    """Fields describing one validation attempt."""

    method: str | None = Field(None, description="How the hypothesis was tested")
    description: str | None = Field(None, description="What was done")
    success_criteria: str | None = Field(None, description="What would count as success")
    actual_metrics: str | None = Field(None, description="Observed numbers")
    result: str | None = Field(None, description="Outcome narrative")
    confidence_level: int | None = Field(None, ge=1, le=5, description="Confidence in the result")
    learnings: str | None = None
    next_steps: str | None = None

    def present_fields(self) -> dict[str, Any]:
        data = self.model_dump(include=set(ValidationFields.model_fields))
        return {k: v for k, v in data.items() if v is not None}


class HypothesisChangeFromValidation(BaseModel):
    """Hypothesis edits prompted by a validation outcome."""

    status: HypothesisStatus | None = None
    confidence: int | None = Field(None, ge=1, le=5)
    impact: int | None = Field(None, ge=1, le=5)
    uncertainty: int | None = Field(None, ge=1, le=5)
    assumption: str | None = None
    solution: str | None = None
    expected_effect: str | None = None
    reason: str | None = Field(None, description="Why the hypothesis changes")

    @field_validator("status", "impact", "uncertainty")
    @classmethod
    def required_columns_not_cleared(cls, v: Any) -> Any:
        return reject_null(v)

    def field_updates(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude={"reason"})


class CreateValidationRequest(ValidationFields):
    """Request body for recording a validation."""

    method: str = Field(..., min_length=1, description="How the hypothesis was tested")
    hypothesis_update: HypothesisChangeFromValidation | None = Field(
        None,
        description="Optional hypothesis edit; versioned with this validation as its cause",
    )


class UpdateValidationRequest(ValidationFields):
    """Request body for editing a validation."""


class ValidationResponse(BaseModel):
    id: UUID
    hypothesis_id: UUID
    method: str | None = None
    description: str | None = None
    success_criteria: str | None = None
    actual_metrics: str | None = None
    result: str | None = None
    confidence_level: int | None = None
    learnings: str | None = None
    next_steps: str | None = None
    created_at: str | None = None


class HypothesisUpdateError(BaseModel):
    """Why the hypothesis edit requested with a validation was not applied."""

    status_code: int
    detail: str


class CreateValidationResponse(BaseModel):
    """
    A saved validation and, when requested, the hypothesis edit it caused.

    ``hypothesis_update_error`` is set when the validation was saved but the
    hypothesis edit was refused; the hypothesis is then unchanged.
    """

    validation: ValidationResponse
    hypothesis: HypothesisResponse | None = None
    recorded_version: HypothesisVersionResponse | None = None
    hypothesis_update_error: HypothesisUpdateError | None = None


class ValidationListResponse(BaseModel):
    validations: list[ValidationResponse]
    total: int
