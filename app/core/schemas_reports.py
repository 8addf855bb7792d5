"""Pydantic schemas for project reports."""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

ReportType = Literal["hypothesis_validation", "progress", "roadmap", "final"]
ReportStatus = Literal["draft", "published", "archived"]

REPORT_TYPE_LABELS: dict[str, str] = {
    "hypothesis_validation": "仮説検証レポート",
    "progress": "進捗レポート",
    "roadmap": "ロードマップレポート",
    "final": "最終報告書",
}


class ReportSectionContent(BaseModel):
    # Editors may attach extra keys to a section
    model_config = ConfigDict(extra="allow")

    title: str
    text: str = ""


class ReportSection(BaseModel):
    type: str = "text"
    content: ReportSectionContent


class ReportContent(BaseModel):
    """Report body: an ordered list of titled sections."""

    sections: list[ReportSection] = Field(default_factory=list)


class CreateReportRequest(BaseModel):
    """Request body for a report written by hand."""

    title: str = Field(..., min_length=1, max_length=300)
    report_type: ReportType
    content: ReportContent = Field(default_factory=ReportContent)


class GenerateReportRequest(BaseModel):
    """Request body for a report drafted from the project's data."""

    report_type: ReportType
    use_ai: bool = Field(
        False, description="Have the model write the narrative around the computed figures"
    )
    focus: str | None = Field(None, description="What the AI-written report should emphasise")


class UpdateReportRequest(BaseModel):
    """Request body for editing a report. Publishing stamps published_at."""

    title: str | None = Field(None, min_length=1, max_length=300)
    content: ReportContent | None = None
    status: ReportStatus | None = None


class ReportResponse(BaseModel):
    id: UUID
    project_id: UUID
    title: str
    report_type: ReportType
    status: ReportStatus
    content: ReportContent
    created_by: UUID | None = None
    created_at: str | None = None
    updated_at: str | None = None
    published_at: str | None = None


class ReportListResponse(BaseModel):
    reports: list[ReportResponse]
    total: int
