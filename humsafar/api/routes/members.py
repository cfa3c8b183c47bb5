from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from humsafar.api.deps import get_current_member_id, get_member_service
from humsafar.api.schemas import ModerationResponse
from humsafar.domain.entities import MemberProfile
from humsafar.services.members import MemberService

router = APIRouter()


class RegisterRequest(BaseModel):
    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    age: int | None = Field(default=None, ge=18, le=120)
    gender: str | None = None
    city: str | None = None
    religion: str | None = None
    sect: str | None = None
    caste: str | None = None
    mother_tongue: str | None = None
    marital_status: str | None = None
    nationality: str | None = None
    ethnicity: str | None = None
    education: str | None = None
    field_of_study: str | None = None


class ImageRequest(BaseModel):
    image_url: str = Field(min_length=1)
    is_main: bool = False


@router.post("/me", response_model=ModerationResponse, status_code=status.HTTP_201_CREATED)
def register(
    request: RegisterRequest,
    member_id: UUID = Depends(get_current_member_id),
    service: MemberService = Depends(get_member_service),
) -> ModerationResponse:
    """Store the caller's profile; it starts pending with no views."""
    _, record = service.register(MemberProfile(user_id=member_id, **request.model_dump()))
    return ModerationResponse.from_record(record)


@router.post("/me/images", status_code=status.HTTP_201_CREATED)
def add_image(
    request: ImageRequest,
    member_id: UUID = Depends(get_current_member_id),
    service: MemberService = Depends(get_member_service),
) -> dict[str, str]:
    image = service.add_image(member_id, request.image_url, request.is_main)
    return {"id": str(image.id), "image_url": image.image_url}
