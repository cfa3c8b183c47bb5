"""Member routes for spending and inspecting profile views."""

from uuid import UUID

from fastapi import APIRouter, Depends

from humsafar.api.deps import get_current_member_id, get_view_service
from humsafar.api.schemas import RecordViewResponse, ViewResponse, ViewStatsResponse
from humsafar.components.views import ViewService
from humsafar.domain.errors import AlreadyViewedError

router = APIRouter()


@router.get("/stats", response_model=ViewStatsResponse)
def view_stats(
    member_id: UUID = Depends(get_current_member_id),
    service: ViewService = Depends(get_view_service),
) -> ViewStatsResponse:
    return ViewStatsResponse.from_stats(service.get_view_stats(member_id))


@router.get("", response_model=list[ViewResponse])
def list_viewed(
    member_id: UUID = Depends(get_current_member_id),
    service: ViewService = Depends(get_view_service),
) -> list[ViewResponse]:
    """Profiles this member has opened, newest first."""
    return [ViewResponse.from_view(v) for v in service.list_viewed(member_id)]


@router.get("/{target_id}")
def has_viewed(
    target_id: UUID,
    member_id: UUID = Depends(get_current_member_id),
    service: ViewService = Depends(get_view_service),
) -> dict[str, object]:
    view = service.has_viewed(member_id, target_id)
    return {
        "target_id": str(target_id),
        "viewed": view is not None,
        "viewed_at": view.viewed_at.isoformat() if view else None,
    }


@router.post("/{target_id}", response_model=RecordViewResponse)
def record_view(
    target_id: UUID,
    member_id: UUID = Depends(get_current_member_id),
    service: ViewService = Depends(get_view_service),
) -> RecordViewResponse:
    """
    Open a profile. The first open charges one view; later opens are
    free and still allowed.
    """
    try:
        result = service.record_view(member_id, target_id)
    except AlreadyViewedError as e:
        stats = service.get_view_stats(member_id)
        return RecordViewResponse(
            target_id=target_id,
            charged=False,
            viewed_at=e.viewed_at,
            remaining=stats.remaining,
        )

    return RecordViewResponse(
        target_id=target_id,
        charged=True,
        viewed_at=result.view.viewed_at,
        remaining=result.remaining,
    )
