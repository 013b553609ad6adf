"""Key result API — reads, explicit edits and append-only check-ins."""

from fastapi import APIRouter, Depends

from app.api.routes.objectives import get_okr_service
from app.core.auth import CurrentProfile, get_current_profile
from app.schemas.okrs import (
    CheckInCreate,
    CheckInCreatedResponse,
    CheckInListResponse,
    KeyResultDetailResponse,
    KeyResultListResponse,
    KeyResultUpdate,
)
from app.services.okr_service import OkrService

router = APIRouter()


@router.get("", response_model=KeyResultListResponse)
async def list_key_results(
    objective_id: str | None = None,
    profile: CurrentProfile = Depends(get_current_profile),
    service: OkrService = Depends(get_okr_service),
):
    key_results = await service.list_key_results(profile.organization_id, objective_id=objective_id)
    return KeyResultListResponse(key_results=key_results)


@router.get("/{key_result_id}", response_model=KeyResultDetailResponse)
async def get_key_result(
    key_result_id: str,
    profile: CurrentProfile = Depends(get_current_profile),
    service: OkrService = Depends(get_okr_service),
):
    key_result = await service.get_key_result(profile.organization_id, key_result_id)
    return KeyResultDetailResponse(key_result=key_result)


@router.patch("/{key_result_id}", response_model=KeyResultDetailResponse)
async def update_key_result(
    key_result_id: str,
    request: KeyResultUpdate,
    profile: CurrentProfile = Depends(get_current_profile),
    service: OkrService = Depends(get_okr_service),
):
    """Edit target, type, unit or metadata. Check-in history is untouched."""
    key_result = await service.update_key_result(profile.organization_id, key_result_id, request)
    return KeyResultDetailResponse(key_result=key_result)


@router.get("/{key_result_id}/check-ins", response_model=CheckInListResponse)
async def list_check_ins(
    key_result_id: str,
    profile: CurrentProfile = Depends(get_current_profile),
    service: OkrService = Depends(get_okr_service),
):
    """Check-in history, newest first."""
    check_ins = await service.list_check_ins(profile.organization_id, key_result_id)
    return CheckInListResponse(check_ins=check_ins)


@router.post("/{key_result_id}/check-ins", response_model=CheckInCreatedResponse, status_code=201)
async def create_check_in(
    key_result_id: str,
    request: CheckInCreate,
    profile: CurrentProfile = Depends(get_current_profile),
    service: OkrService = Depends(get_okr_service),
):
    """Record a check-in and move the key result's current value to it."""
    check_in, key_result = await service.record_check_in(
        profile.organization_id,
        key_result_id,
        user_id=profile.user_id,
        value=request.value,
        notes=request.notes,
        confidence_level=request.confidence_level,
    )
    return CheckInCreatedResponse(check_in=check_in, key_result=key_result)
