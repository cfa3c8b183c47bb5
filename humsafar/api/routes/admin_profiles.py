"""Admin routes for moderation, quota overrides and erasure."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from humsafar.api.deps import (
    get_admin_id,
    get_entitlement_service,
    get_member_service,
    get_moderation_service,
)
from humsafar.api.schemas import ModerationResponse
from humsafar.components.entitlements import EntitlementService
from humsafar.components.moderation import ModerationService, SetStatusInput, run_set_status
from humsafar.domain.entities import ProfileStatus
from humsafar.services.members import MemberService

router = APIRouter()


class StatusChangeRequest(BaseModel):
    status: ProfileStatus


class StatusChangeResponse(BaseModel):
    record: ModerationResponse
    previous_status: ProfileStatus
    changed: bool


class ViewsLimitRequest(BaseModel):
    views_limit: int = Field(ge=0)


@router.post("/{user_id}/status", response_model=StatusChangeResponse)
def set_profile_status(
    user_id: UUID,
    request: StatusChangeRequest,
    admin_id: UUID = Depends(get_admin_id),
    service: ModerationService = Depends(get_moderation_service),
) -> StatusChangeResponse:
    change = run_set_status(
        SetStatusInput(user_id=user_id, new_status=request.status, actor_id=admin_id),
        service,
    )
    return StatusChangeResponse(
        record=ModerationResponse.from_record(change.record),
        previous_status=change.previous_status,
        changed=change.changed,
    )


@router.put("/{user_id}/views-limit", response_model=ModerationResponse)
def override_views_limit(
    user_id: UUID,
    request: ViewsLimitRequest,
    admin_id: UUID = Depends(get_admin_id),
    service: EntitlementService = Depends(get_entitlement_service),
) -> ModerationResponse:
    result = service.override_views_limit(user_id, request.views_limit, actor_id=admin_id)
    return ModerationResponse.from_record(result.record)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def erase_member(
    user_id: UUID,
    admin_id: UUID = Depends(get_admin_id),
    service: MemberService = Depends(get_member_service),
) -> Response:
    service.erase(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
