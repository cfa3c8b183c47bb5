from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from humsafar.components.views import ViewStats, format_status_label
from humsafar.components.visibility import ProfileSummary
from humsafar.domain.entities import (
    ModerationRecord,
    PaymentRecord,
    PaymentStatus,
    ProfileStatus,
    ProfileView,
)


# --- Listings ---
class ProfileSummaryResponse(BaseModel):
    user_id: UUID
    first_name: str | None
    last_name: str | None
    age: int | None
    gender: str | None
    city: str | None
    religion: str | None
    education: str | None
    marital_status: str | None
    main_image: str
    has_photo: bool
    verified_badge: bool
    boost_profile: bool
    completion: float

    @classmethod
    def from_summary(cls, summary: ProfileSummary) -> "ProfileSummaryResponse":
        return cls(
            user_id=summary.user_id,
            first_name=summary.first_name,
            last_name=summary.last_name,
            age=summary.age,
            gender=summary.gender,
            city=summary.city,
            religion=summary.religion,
            education=summary.education,
            marital_status=summary.marital_status,
            main_image=summary.main_image,
            has_photo=summary.has_photo,
            verified_badge=summary.verified_badge,
            boost_profile=summary.boost_profile,
            completion=round(summary.completion, 2),
        )


# --- Quota ---
class StatusLabelResponse(BaseModel):
    base_status: str
    payment_annotation: str | None
    payment_status: PaymentStatus | None
    display: str


class ViewStatsResponse(BaseModel):
    views_limit: int
    consumed: int
    remaining: int
    status: StatusLabelResponse

    @classmethod
    def from_stats(cls, stats: ViewStats) -> "ViewStatsResponse":
        return cls(
            views_limit=stats.views_limit,
            consumed=stats.consumed,
            remaining=stats.remaining,
            status=StatusLabelResponse(
                base_status=stats.status.base_status,
                payment_annotation=stats.status.payment_annotation,
                payment_status=stats.status.payment_status,
                display=format_status_label(stats.status),
            ),
        )


class ViewResponse(BaseModel):
    viewed_profile_user_id: UUID
    viewed_at: datetime

    @classmethod
    def from_view(cls, view: ProfileView) -> "ViewResponse":
        return cls(viewed_profile_user_id=view.viewed_profile_user_id, viewed_at=view.viewed_at)


class RecordViewResponse(BaseModel):
    target_id: UUID
    can_view: bool = True
    charged: bool
    viewed_at: datetime | None = None
    remaining: int | None = None


# --- Payments ---
class PaymentResponse(BaseModel):
    id: UUID
    user_id: UUID
    amount: float
    currency: str
    package_type: str
    addon_key: str | None
    views_limit: int
    payment_status: PaymentStatus
    payment_method: str
    rejection_reason: str | None
    screenshot_ref: str | None
    reviewed_at: datetime | None
    reviewed_by: UUID | None
    created_at: datetime

    @classmethod
    def from_record(cls, payment: PaymentRecord) -> "PaymentResponse":
        return cls.model_validate(payment.model_dump())


# --- Moderation ---
class ModerationResponse(BaseModel):
    user_id: UUID
    profile_status: ProfileStatus
    subscription_status: str
    views_limit: int
    verified_badge: bool
    boost_profile: bool
    boost_expires_at: datetime | None
    updated_at: datetime

    @classmethod
    def from_record(cls, record: ModerationRecord) -> "ModerationResponse":
        return cls.model_validate(record.model_dump())
