"""
Entitlement component ports.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from humsafar.domain.entities import ModerationRecord, PaymentRecord, PaymentStatus


class ModerationRecordPort(Protocol):
    """The slice of the moderation store the entitlement manager writes."""

    def get(self, user_id: UUID) -> ModerationRecord | None:
        ...

    def save(self, record: ModerationRecord) -> ModerationRecord:
        ...


class AcceptedPaymentsPort(Protocol):
    """Read access to the payment ledger for reconciliation."""

    def list(
        self,
        status: PaymentStatus | None = None,
        user_id: UUID | None = None,
    ) -> list[PaymentRecord]:
        ...
