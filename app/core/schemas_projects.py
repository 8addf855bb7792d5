"""Pydantic schemas for project-level operations."""

from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field

ProjectStatus = Literal["未着手", "進行中", "完了"]


class CreateProjectRequest(BaseModel):
    """Request body for creating a new project."""

    name: str = Field(..., min_length=1, max_length=200, description="Project name")
    status: ProjectStatus | None = Field("未着手", description="Project status")
    description: str | None = Field(None, description="Project description")
    organization_id: UUID | None = Field(None, description="Owning organization")
    auto_generate_hypotheses: bool = Field(
        False,
        description="Whether to seed the project with AI-drafted hypotheses",
    )


class UpdateProjectRequest(BaseModel):
    """Request body for updating a project."""

    name: str | None = Field(None, min_length=1, max_length=200, description="Project name")
    description: str | None = Field(None, description="Project description")
    status: ProjectStatus | None = Field(None, description="Project status")


class ProjectResponse(BaseModel):
    """Response schema for a single project."""

    id: UUID = Field(..., description="Project UUID")
    name: str = Field(..., description="Project name")
    status: str | None = Field(None, description="Project status")
    description: str | None = Field(None, description="Project description")
    user_id: UUID | None = Field(None, description="Owning user")
    organization_id: UUID | None = Field(None, description="Owning organization")
    created_at: str | None = Field(None, description="Creation timestamp")


class ProjectDetailResponse(ProjectResponse):
    """Project with its hypothesis count."""

    hypothesis_count: int = Field(..., description="Number of hypotheses in the project")


class CreateProjectResponse(ProjectResponse):
    """Created project plus any hypotheses seeded by AI drafts."""

    generated_hypotheses: int = Field(0, description="Hypotheses inserted from AI drafts")


class ProjectListResponse(BaseModel):
    """Response schema for list of projects."""

    projects: list[ProjectResponse] = Field(..., description="List of projects")
    total: int = Field(..., description="Number of projects returned")


class KpiProgress(BaseModel):
    id: UUID
    name: str
    current_value: float | None = None
    target_value: float | None = None
    unit: str | None = None
    status: str | None = None
    progress: float = Field(..., description="Percent of target reached, capped at 100")


class ProjectAnalyticsResponse(BaseModel):
    """Dashboard numbers for one project."""

    hypotheses_total: int
    hypothesis_statuses: dict[str, int]
    validations_total: int
    validation_results: dict[str, int]
    avg_impact: float | None = None
    avg_uncertainty: float | None = None
    avg_confidence: float | None = None
    last_updated: str | None = None
    kpis: list[KpiProgress] = Field(default_factory=list)


class RoadmapResponse(BaseModel):
    """Hypotheses laid out as validation steps in priority order."""

    steps: list[dict[str, Any]]
    current_step: int
    progress: int = Field(..., description="Percent of steps with at least one validation")
