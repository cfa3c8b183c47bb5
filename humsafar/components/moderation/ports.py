"""
Moderation component ports.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from humsafar.domain.entities import ModerationRecord, ProfileStatus


class ModerationRepoPort(Protocol):
    """Repository interface for moderation records."""

    def get(self, user_id: UUID) -> ModerationRecord | None:
        ...

    def get_many(self, user_ids: list[UUID]) -> dict[UUID, ModerationRecord]:
        ...

    def save(self, record: ModerationRecord) -> ModerationRecord:
        ...

    def list_user_ids_by_status(self, status: ProfileStatus) -> list[UUID]:
        ...
