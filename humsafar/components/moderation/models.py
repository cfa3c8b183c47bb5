"""
Moderation component models.

A profile's approval lifecycle. Only ``approved`` profiles are ever
listed; every other state is excluded by omission.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from humsafar.domain.entities import ModerationRecord, ProfileStatus


@dataclass(frozen=True)
class SetStatusInput:
    """Admin request to move a profile to a new moderation state."""

    user_id: UUID
    new_status: ProfileStatus
    actor_id: UUID | None = None


@dataclass(frozen=True)
class ModerationChange:
    """Result of a moderation transition."""

    record: ModerationRecord
    previous_status: ProfileStatus

    @property
    def changed(self) -> bool:
        return self.previous_status != self.record.profile_status
