from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from humsafar.api.deps import get_optional_viewer_id, get_visibility_service
from humsafar.api.schemas import ProfileSummaryResponse
from humsafar.components.visibility import VisibilityService

router = APIRouter()


@router.get("/profiles", response_model=list[ProfileSummaryResponse])
def list_profiles(
    limit: int | None = Query(default=None, ge=1, le=100),
    featured: bool = False,
    viewer_id: UUID | None = Depends(get_optional_viewer_id),
    service: VisibilityService = Depends(get_visibility_service),
) -> list[ProfileSummaryResponse]:
    """Browse or featured listing. Anonymous callers get the featured few."""
    summaries = service.list_visible_profiles(viewer_id, limit=limit, featured_only=featured)
    return [ProfileSummaryResponse.from_summary(s) for s in summaries]


@router.get("/visibility-info")
def visibility_info(
    viewer_id: UUID | None = Depends(get_optional_viewer_id),
    service: VisibilityService = Depends(get_visibility_service),
) -> dict[str, Any]:
    info = service.get_visibility_info(viewer_id)
    return {
        "total_profiles": info.total_profiles,
        "featured_profiles": info.featured_profiles,
        "user_package": info.user_package,
    }
