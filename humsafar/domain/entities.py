from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
ProfileStatus = Literal["pending", "approved", "rejected", "terminated", "flagged"]
PaymentStatus = Literal["pending", "under_review", "accepted", "rejected"]
ReviewAction = Literal["accept", "reject"]


def _utcnow() -> datetime:
    return datetime.now(UTC)


# --- Member ---

class MemberProfile(BaseModel):
    user_id: UUID = Field(default_factory=uuid4)
    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    age: int | None = None
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
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

class ProfileImage(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    image_url: str
    is_main: bool = False
    created_at: datetime = Field(default_factory=_utcnow)

# --- Moderation ---

class ModerationRecord(BaseModel):
    user_id: UUID
    profile_status: ProfileStatus = "pending"
    subscription_status: str = "free"
    views_limit: int = Field(default=0, ge=0)
    verified_badge: bool = False
    boost_profile: bool = False
    boost_expires_at: datetime | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def boost_active(self, now: datetime) -> bool:
        """Boost counts only until its expiry; rows without an expiry stay boosted."""
        if not self.boost_profile:
            return False
        if self.boost_expires_at is None:
            return True
        return self.boost_expires_at > now

# --- Payments ---

class PaymentRecord(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    amount: float = 0
    currency: str = "PKR"
    package_type: str
    addon_key: str | None = None
    views_limit: int = Field(default=0, ge=0)
    payment_status: PaymentStatus = "pending"
    payment_method: str = "manual"
    rejection_reason: str | None = None
    screenshot_ref: str | None = None
    gateway_reference: str | None = None
    reviewed_at: datetime | None = None
    reviewed_by: UUID | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

# --- Views ---

class ProfileView(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    viewer_user_id: UUID
    viewed_profile_user_id: UUID
    viewed_at: datetime = Field(default_factory=_utcnow)
