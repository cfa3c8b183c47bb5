"""
View component ports.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from humsafar.domain.entities import MemberProfile, ModerationRecord, PaymentRecord, ProfileView


class ViewRepoPort(Protocol):
    """Consumption log. The (viewer, target) pair is unique in storage."""

    def insert_if_absent(self, view: ProfileView) -> bool:
        ...

    def get(self, viewer_id: UUID, target_id: UUID) -> ProfileView | None:
        ...

    def count_for_viewer(self, viewer_id: UUID) -> int:
        ...

    def list_for_viewer(self, viewer_id: UUID) -> list[ProfileView]:
        ...


class ModerationReadPort(Protocol):
    def get(self, user_id: UUID) -> ModerationRecord | None:
        ...


class LatestPaymentPort(Protocol):
    def latest_for_user(self, user_id: UUID) -> PaymentRecord | None:
        ...


class ProfileLookupPort(Protocol):
    def get_by_id(self, user_id: UUID) -> MemberProfile | None:
        ...
