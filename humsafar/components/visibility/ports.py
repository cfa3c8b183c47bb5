"""
Visibility component ports.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from humsafar.domain.entities import MemberProfile, ModerationRecord, ProfileStatus


class ModerationQueryPort(Protocol):
    def list_user_ids_by_status(self, status: ProfileStatus) -> list[UUID]:
        ...

    def get_many(self, user_ids: list[UUID]) -> dict[UUID, ModerationRecord]:
        ...

    def get(self, user_id: UUID) -> ModerationRecord | None:
        ...


class ProfileQueryPort(Protocol):
    """Profile attributes and image references."""

    def get_many(self, user_ids: list[UUID], limit: int | None = None) -> list[MemberProfile]:
        ...

    def get_main_images(self, user_ids: list[UUID]) -> dict[UUID, str]:
        ...
