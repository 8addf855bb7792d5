"""Pydantic schemas for hypotheses, their version history and AI drafts."""

from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

HypothesisStatus = Literal["未検証", "検証中", "成立", "否定"]

# Categories offered by the UI; stored as a free string
HYPOTHESIS_TYPES = ("課題仮説", "価値仮説", "市場仮説", "価格仮説", "チャネル仮説")
DEFAULT_HYPOTHESIS_TYPE = "課題仮説"
DEFAULT_HYPOTHESIS_STATUS = "未検証"


def reject_null(value: Any) -> Any:
    """Refuse an explicit null for a column the hypotheses table requires."""
    if value is None:
        raise ValueError("This field cannot be cleared")
    return value


class CreateHypothesisRequest(BaseModel):
    """Request body for creating a hypothesis."""

    title: str = Field(..., min_length=1, max_length=300, description="Hypothesis title")
    type: str = Field(DEFAULT_HYPOTHESIS_TYPE, description="Hypothesis category")
    assumption: str | None = Field(None, description="Premise: why we believe this")
    solution: str | None = Field(None, description="Proposed solution")
    expected_effect: str | None = Field(None, description="Expected effect if it holds")
    status: HypothesisStatus = Field(DEFAULT_HYPOTHESIS_STATUS, description="Validation status")
    impact: int = Field(3, ge=1, le=5, description="Impact if true (1-5)")
    uncertainty: int = Field(3, ge=1, le=5, description="How uncertain we are (1-5)")
    confidence: int | None = Field(3, ge=1, le=5, description="Confidence before validation (1-5)")


class UpdateHypothesisRequest(BaseModel):
    """
    Request body for editing a hypothesis.

    The pre-edit state is recorded as a new version before the update is applied.
    """

    title: str | None = Field(None, min_length=1, max_length=300)
    type: str | None = None
    assumption: str | None = None
    solution: str | None = None
    expected_effect: str | None = None
    status: HypothesisStatus | None = None
    impact: int | None = Field(None, ge=1, le=5)
    uncertainty: int | None = Field(None, ge=1, le=5)
    confidence: int | None = Field(None, ge=1, le=5)

    reason: str | None = Field(None, description="Why the hypothesis is being changed")
    based_on_validation_id: UUID | None = Field(
        None, description="Validation that motivated the change"
    )

    @field_validator("title", "type", "status", "impact", "uncertainty")
    @classmethod
    def required_columns_not_cleared(cls, v: Any) -> Any:
        return reject_null(v)

    def field_updates(self) -> dict[str, Any]:
        """
        Hypothesis fields present in the request.

        Omitted fields are left alone; an explicit null clears a nullable column.
        """
        return self.model_dump(exclude_unset=True, exclude={"reason", "based_on_validation_id"})


class HypothesisResponse(BaseModel):
    """Response schema for a hypothesis with its derived priority."""

    id: UUID
    project_id: UUID | None = None
    title: str
    type: str | None = None
    assumption: str | None = None
    solution: str | None = None
    expected_effect: str | None = None
    status: str | None = None
    impact: int
    uncertainty: int
    confidence: int | None = None
    created_by: UUID | None = None
    created_at: str | None = None
    updated_at: str | None = None
    priority_score: int = Field(..., description="impact * uncertainty")
    priority_label: Literal["High", "Medium", "Low"]


class HypothesisListResponse(BaseModel):
    """Hypotheses of a project ranked by priority."""

    hypotheses: list[HypothesisResponse]
    total: int


class HypothesisVersionResponse(BaseModel):
    """One immutable snapshot in a hypothesis' history."""

    id: UUID
    hypothesis_id: UUID
    version_number: int
    title: str | None = None
    type: str | None = None
    assumption: str | None = None
    solution: str | None = None
    expected_effect: str | None = None
    impact: int | None = None
    uncertainty: int | None = None
    confidence: int | None = None
    based_on_validation_id: UUID | None = None
    reason: str | None = None
    updated_by: UUID | None = None
    updated_at: str | None = None


class HypothesisHistoryResponse(BaseModel):
    """Version history plus the live state of a hypothesis."""

    hypothesis_id: UUID
    versions: list[HypothesisVersionResponse]
    current: HypothesisResponse
    current_version_number: int = Field(
        ..., description="Number the live state would get if snapshotted now"
    )


class UpdateHypothesisResponse(BaseModel):
    """Result of an edit: the updated hypothesis and the version recorded for it."""

    hypothesis: HypothesisResponse
    recorded_version: HypothesisVersionResponse


class FieldChangeResponse(BaseModel):
    field: str
    old: Any = None
    new: Any = None
    type: Literal["added", "removed", "modified"]


class VersionDiffResponse(BaseModel):
    """Field-level diff between two snapshots of a hypothesis."""

    hypothesis_id: UUID
    from_version: int
    to_version: int | None = Field(None, description="None when compared with the live state")
    changes: list[FieldChangeResponse]
    summary: str
    has_changes: bool


class GenerateHypothesesRequest(BaseModel):
    """Request body for AI hypothesis drafts."""

    context: str = Field(..., min_length=1, description="What the user wants to explore")
    count: int = Field(3, ge=1, le=10, description="Number of drafts to generate")


class HypothesisDraft(BaseModel):
    """A normalised AI-generated hypothesis, not yet persisted."""

    title: str
    type: str = DEFAULT_HYPOTHESIS_TYPE
    assumption: str | None = None
    solution: str | None = None
    expected_effect: str = ""
    status: str = DEFAULT_HYPOTHESIS_STATUS
    impact: int = Field(..., ge=1, le=5)
    uncertainty: int = Field(..., ge=1, le=5)
    confidence: int = Field(..., ge=1, le=5)


class GenerateHypothesesResponse(BaseModel):
    drafts: list[HypothesisDraft]
