"""Objective read API — payloads carry derived progress_percentage."""

from fastapi import APIRouter, Depends

from app.core.auth import CurrentProfile, get_current_profile
from app.db.base import get_session_factory
from app.schemas.okrs import ObjectiveDetailResponse, ObjectiveListResponse
from app.services.okr_service import OkrService

router = APIRouter()


def get_okr_service() -> OkrService:
    """Dependency that provides OkrService bound to the shared session factory."""
    return OkrService(get_session_factory())


@router.get("", response_model=ObjectiveListResponse)
async def list_objectives(
    session_id: str | None = None,
    profile: CurrentProfile = Depends(get_current_profile),
    service: OkrService = Depends(get_okr_service),
):
    """List the organization's objectives, optionally for one session."""
    objectives = await service.list_objectives(profile.organization_id, session_id=session_id)
    return ObjectiveListResponse(objectives=objectives)


@router.get("/{objective_id}", response_model=ObjectiveDetailResponse)
async def get_objective(
    objective_id: str,
    profile: CurrentProfile = Depends(get_current_profile),
    service: OkrService = Depends(get_okr_service),
):
    """Objective detail with key results and aggregate progress.

    Returns 404 for unknown objectives and for objectives of other organizations.
    """
    objective = await service.get_objective(profile.organization_id, objective_id)
    return ObjectiveDetailResponse(objective=objective)
