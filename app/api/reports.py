"""API endpoints for project reports."""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.access import require_project_access
from app.chains.generate_report import generate_report_content
from app.core.auth_middleware import AuthContext, require_auth
from app.core.errors import DraftGenerationError, InvalidInput
from app.core.logging import get_logger
from app.core.report_builder import build_report
from app.core.schemas_reports import (
    CreateReportRequest,
    GenerateReportRequest,
    ReportListResponse,
    ReportResponse,
    ReportStatus,
    UpdateReportRequest,
)
from app.db.hypotheses import list_hypotheses
from app.db.kpi_metrics import list_active_kpis
from app.db.reports import (
    create_report,
    delete_report,
    get_report,
    list_reports,
    update_report,
)
from app.db.validations import list_validations_for_hypotheses

logger = get_logger(__name__)

router = APIRouter()


def _report_or_404(project_id: UUID, report_id: UUID) -> dict[str, Any]:
    try:
        report = get_report(report_id)
    except Exception as e:
        logger.exception(f"Failed to load report {report_id}")
        raise HTTPException(status_code=500, detail="Failed to load report") from e

    if not report or str(report.get("project_id")) != str(project_id):
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@router.get("/{project_id}/reports", response_model=ReportListResponse)
async def list_project_reports(
    project_id: UUID,
    status: ReportStatus | None = Query(None, description="Filter by report status"),
    auth: AuthContext = Depends(require_auth),
) -> ReportListResponse:
    """List the reports of a project, newest first."""
    require_project_access(project_id, auth)

    try:
        rows = list_reports(project_id, status=status)
    except Exception as e:
        logger.exception(f"Failed to list reports for project {project_id}")
        raise HTTPException(status_code=500, detail="Failed to list reports") from e

    reports = [ReportResponse(**row) for row in rows]
    return ReportListResponse(reports=reports, total=len(reports))


@router.post("/{project_id}/reports", response_model=ReportResponse)
async def create_project_report(
    project_id: UUID,
    request: CreateReportRequest,
    auth: AuthContext = Depends(require_auth),
) -> ReportResponse:
    """Create a draft report written by hand."""
    require_project_access(project_id, auth)

    try:
        row = create_report(
            project_id,
            title=request.title,
            report_type=request.report_type,
            content=request.content.model_dump(),
            created_by=auth.user_id,
        )
    except Exception as e:
        logger.exception(f"Failed to create report for project {project_id}")
        raise HTTPException(status_code=500, detail="Failed to create report") from e

    return ReportResponse(**row)


@router.post("/{project_id}/reports/generate", response_model=ReportResponse)
async def generate_project_report(
    project_id: UUID,
    request: GenerateReportRequest,
    auth: AuthContext = Depends(require_auth),
) -> ReportResponse:
    """
    Draft a report from the project's data and save it.

    Flow:
    1. Load hypotheses, their validations and the active KPIs
    2. Lay the figures out as sections for the requested report type
    3. If use_ai: have the model write the narrative around the figures
    4. Save the result as a draft report
    """
    project = require_project_access(project_id, auth)

    try:
        hypotheses = list_hypotheses(project_id)
        validations = list_validations_for_hypotheses([h["id"] for h in hypotheses])
    except Exception as e:
        logger.exception(f"Failed to load report data for project {project_id}")
        raise HTTPException(status_code=500, detail="Failed to load report data") from e

    try:
        kpis = list_active_kpis(project_id)
    except Exception:
        logger.warning(
            f"Failed to load KPI metrics for project {project_id}",
            exc_info=True,
            extra={"project_id": str(project_id)},
        )
        kpis = []

    try:
        report = build_report(request.report_type, project, hypotheses, validations, kpis)
    except InvalidInput as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    if request.use_ai:
        try:
            report = await generate_report_content(
                project, request.report_type, report, focus=request.focus
            )
        except DraftGenerationError as e:
            logger.error(f"Report generation failed: {e}", extra={"project_id": str(project_id)})
            raise HTTPException(status_code=502, detail=str(e)) from e

    try:
        row = create_report(
            project_id,
            title=report["title"],
            report_type=request.report_type,
            content=report["content"],
            created_by=auth.user_id,
        )
    except Exception as e:
        logger.exception(f"Failed to save generated report for project {project_id}")
        raise HTTPException(status_code=500, detail="Failed to create report") from e

    return ReportResponse(**row)


@router.get("/{project_id}/reports/{report_id}", response_model=ReportResponse)
async def get_project_report(
    project_id: UUID,
    report_id: UUID,
    auth: AuthContext = Depends(require_auth),
) -> ReportResponse:
    """Get a single report."""
    require_project_access(project_id, auth)
    return ReportResponse(**_report_or_404(project_id, report_id))


@router.patch("/{project_id}/reports/{report_id}", response_model=ReportResponse)
async def update_project_report(
    project_id: UUID,
    report_id: UUID,
    request: UpdateReportRequest,
    auth: AuthContext = Depends(require_auth),
) -> ReportResponse:
    """Edit a report's title or sections, or publish or archive it."""
    updates = request.model_dump(exclude_none=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    require_project_access(project_id, auth)
    existing = _report_or_404(project_id, report_id)

    if updates.get("status") == "published" and existing.get("status") != "published":
        updates["published_at"] = datetime.now(timezone.utc).isoformat()

    try:
        row = update_report(report_id, updates)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except Exception as e:
        logger.exception(f"Failed to update report {report_id}")
        raise HTTPException(status_code=500, detail="Failed to update report") from e

    return ReportResponse(**row)


@router.delete("/{project_id}/reports/{report_id}")
async def delete_project_report(
    project_id: UUID,
    report_id: UUID,
    auth: AuthContext = Depends(require_auth),
):
    """Delete a report."""
    require_project_access(project_id, auth)
    _report_or_404(project_id, report_id)

    try:
        deleted = delete_report(report_id)
    except Exception as e:
        logger.exception(f"Failed to delete report {report_id}")
        raise HTTPException(status_code=500, detail="Failed to delete report") from e

    if not deleted:
        raise HTTPException(status_code=404, detail="Report not found")
    return {"message": "Report deleted"}
