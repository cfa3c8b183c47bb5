"""
Visibility component.

Read path for browse and featured listings. Only approved profiles are
ever returned and a viewer never sees their own profile. Listing
failures degrade to an empty list because the output feeds public pages.
"""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from humsafar.domain.entities import MemberProfile, ModerationRecord
from humsafar.ports.clock import ClockPort
from humsafar.rules.models import Rules

from .models import ProfileSummary, VisibilityConfig, VisibilityInfo
from .ports import ModerationQueryPort, ProfileQueryPort

logger = logging.getLogger(__name__)


# --- Pure Functions ---


def is_filled(value: object) -> bool:
    if value is None:
        return False
    return str(value).strip() != ""


def calculate_completion(
    profile: MemberProfile,
    has_photo: bool,
    config: VisibilityConfig,
) -> float:
    """Filled tracked fields weigh ``field_weight``; a photo adds ``photo_weight``."""
    fields = config.tracked_fields
    filled = sum(1 for name in fields if is_filled(getattr(profile, name, None)))
    base = (filled / len(fields)) * config.field_weight
    bonus = config.photo_weight if has_photo else 0
    return min(100.0, base + bonus)


def rank_profiles(summaries: list[ProfileSummary], featured_only: bool) -> list[ProfileSummary]:
    """
    Featured listings lead with verified profiles, browse listings with
    boosted ones. Completion breaks ties in both.
    """
    if featured_only:
        return sorted(summaries, key=lambda s: (s.verified_badge, s.completion), reverse=True)
    return sorted(summaries, key=lambda s: (s.boost_profile, s.completion), reverse=True)


def build_summary(
    profile: MemberProfile,
    record: ModerationRecord | None,
    image_url: str | None,
    config: VisibilityConfig,
    now: datetime,
) -> ProfileSummary:
    main_image = image_url or config.placeholder_image
    has_photo = main_image != config.placeholder_image
    return ProfileSummary(
        user_id=profile.user_id,
        first_name=profile.first_name,
        last_name=profile.last_name,
        age=profile.age,
        gender=profile.gender,
        city=profile.city,
        religion=profile.religion,
        education=profile.education,
        marital_status=profile.marital_status,
        main_image=main_image,
        has_photo=has_photo,
        verified_badge=bool(record and record.verified_badge),
        boost_profile=bool(record and record.boost_active(now)),
        completion=calculate_completion(profile, has_photo, config),
    )


# --- Service ---


class VisibilityService:
    """Builds ranked profile listings for members and anonymous visitors."""

    def __init__(
        self,
        moderation: ModerationQueryPort,
        profiles: ProfileQueryPort,
        clock: ClockPort,
        config: VisibilityConfig | None = None,
    ) -> None:
        self._moderation = moderation
        self._profiles = profiles
        self._clock = clock
        self._config = config or VisibilityConfig()

    @property
    def config(self) -> VisibilityConfig:
        return self._config

    def _candidate_ids(self, viewer_id: UUID | None) -> list[UUID]:
        ids = self._moderation.list_user_ids_by_status("approved")
        if viewer_id is not None:
            ids = [uid for uid in ids if uid != viewer_id]
        return ids

    def list_visible_profiles(
        self,
        viewer_id: UUID | None = None,
        limit: int | None = None,
        featured_only: bool = False,
    ) -> list[ProfileSummary]:
        """
        Ranked listing of approved profiles.

        Anonymous callers always get the featured listing, capped at
        ``featured_limit``. A featured request without a limit uses the
        same cap.
        """
        featured_limit = self._config.featured_limit
        if viewer_id is None:
            featured_only = True
            limit = min(limit, featured_limit) if limit is not None else featured_limit
        elif featured_only and limit is None:
            limit = featured_limit

        try:
            candidate_ids = self._candidate_ids(viewer_id)
            if not candidate_ids:
                return []

            profiles = self._profiles.get_many(candidate_ids, limit=limit)
            loaded_ids = [p.user_id for p in profiles]
            records = self._moderation.get_many(loaded_ids)
            images = self._profiles.get_main_images(loaded_ids)
            now = self._clock.now_utc()

            summaries = [
                build_summary(p, records.get(p.user_id), images.get(p.user_id), self._config, now)
                for p in profiles
            ]
            return rank_profiles(summaries, featured_only)
        except Exception:
            logger.exception("Listing profiles failed for viewer %s", viewer_id)
            return []

    def get_visibility_info(self, viewer_id: UUID | None = None) -> VisibilityInfo:
        """Totals shown next to a listing, plus the caller's package."""
        try:
            user_package = None
            if viewer_id is not None:
                record = self._moderation.get(viewer_id)
                if record is not None:
                    user_package = record.subscription_status

            featured = self.list_visible_profiles(viewer_id, featured_only=True)
            total = len(self._candidate_ids(viewer_id))
            return VisibilityInfo(
                total_profiles=total,
                featured_profiles=len(featured),
                user_package=user_package,
            )
        except Exception:
            logger.exception("Visibility info failed for viewer %s", viewer_id)
            return VisibilityInfo(total_profiles=0, featured_profiles=0)


# --- Configuration Loader ---


def load_config_from_rules(rules: Rules) -> VisibilityConfig:
    v = rules.visibility
    return VisibilityConfig(
        featured_limit=v.featured_limit,
        placeholder_image=v.placeholder_image,
        tracked_fields=tuple(v.tracked_fields),
        field_weight=v.field_weight,
        photo_weight=v.photo_weight,
    )
