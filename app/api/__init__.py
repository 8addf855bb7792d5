"""API router for v1 endpoints."""

from fastapi import APIRouter

from app.api import hypotheses, projects, reports, validations

router = APIRouter()

# Projects, analytics and roadmap
router.include_router(projects.router, prefix="/projects", tags=["projects"])

# Project reports, drafted from data or written by hand
router.include_router(reports.router, prefix="/projects", tags=["reports"])

# Hypotheses, ranking, version history and AI drafts
router.include_router(hypotheses.router, tags=["hypotheses"])

# Validation records
router.include_router(validations.router, tags=["validations"])
