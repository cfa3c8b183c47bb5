"""
Visibility component models.

Profile summaries shown in browse and featured listings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

DEFAULT_TRACKED_FIELDS: tuple[str, ...] = (
    "first_name",
    "last_name",
    "age",
    "gender",
    "city",
    "religion",
    "sect",
    "caste",
    "mother_tongue",
    "marital_status",
    "nationality",
    "ethnicity",
    "education",
    "field_of_study",
)


@dataclass(frozen=True)
class VisibilityConfig:
    featured_limit: int = 5
    placeholder_image: str = "/placeholder.jpg"
    tracked_fields: tuple[str, ...] = field(default=DEFAULT_TRACKED_FIELDS)
    field_weight: int = 80
    photo_weight: int = 20


@dataclass(frozen=True)
class ProfileSummary:
    """One card in a listing."""

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


@dataclass(frozen=True)
class VisibilityInfo:
    total_profiles: int
    featured_profiles: int
    user_package: str | None = None
