"""
Moderation component.

Single owner of profile_status writes. Every admin screen that changes a
profile's state goes through ``ModerationService.set_status`` so the
transition table in ``humsafar.domain.state`` is always applied.
"""

from __future__ import annotations

import logging
from uuid import UUID

from humsafar.domain.entities import ModerationRecord
from humsafar.domain.errors import NotFoundError
from humsafar.domain.state import transition
from humsafar.ports.clock import ClockPort

from .models import ModerationChange, SetStatusInput
from .ports import ModerationRepoPort

logger = logging.getLogger(__name__)


class ModerationService:
    """Moderation lifecycle for member profiles."""

    def __init__(self, repo: ModerationRepoPort, clock: ClockPort) -> None:
        self._repo = repo
        self._clock = clock

    def create_for_new_member(self, user_id: UUID) -> ModerationRecord:
        """Initial record at registration: pending, no views, free package."""
        existing = self._repo.get(user_id)
        if existing is not None:
            return existing

        now = self._clock.now_utc()
        record = ModerationRecord(
            user_id=user_id,
            profile_status="pending",
            subscription_status="free",
            views_limit=0,
            created_at=now,
            updated_at=now,
        )
        return self._repo.save(record)

    def get(self, user_id: UUID) -> ModerationRecord:
        record = self._repo.get(user_id)
        if record is None:
            raise NotFoundError("subscription", user_id)
        return record

    def set_status(self, input_data: SetStatusInput) -> ModerationChange:
        """
        Apply an admin-triggered transition.

        Re-applying the current state is a successful no-op and is not
        written back.
        """
        record = self.get(input_data.user_id)
        previous = record.profile_status

        updated = transition(record, input_data.new_status, self._clock.now_utc())
        if updated.profile_status == previous:
            return ModerationChange(record=record, previous_status=previous)

        self._repo.save(updated)
        logger.info(
            "Profile %s moved %s -> %s by %s",
            input_data.user_id,
            previous,
            updated.profile_status,
            input_data.actor_id,
        )
        return ModerationChange(record=updated, previous_status=previous)

    def approved_user_ids(self) -> list[UUID]:
        return self._repo.list_user_ids_by_status("approved")


def run_set_status(input_data: SetStatusInput, service: ModerationService) -> ModerationChange:
    """Shell entry point for moderation transitions."""
    return service.set_status(input_data)
