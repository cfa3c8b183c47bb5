"""
Payment component ports.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from humsafar.domain.entities import PaymentRecord, PaymentStatus


class PaymentRepoPort(Protocol):
    """Payment ledger storage."""

    def save(self, payment: PaymentRecord) -> PaymentRecord:
        ...

    def get_by_id(self, payment_id: UUID) -> PaymentRecord | None:
        ...

    def delete(self, payment_id: UUID) -> None:
        ...

    def latest_for_user(self, user_id: UUID) -> PaymentRecord | None:
        ...

    def list(
        self,
        status: PaymentStatus | None = None,
        user_id: UUID | None = None,
    ) -> list[PaymentRecord]:
        ...


class EntitlementGrantPort(Protocol):
    """Folds an accepted payment into quota and feature flags."""

    def apply_accepted_payment(self, payment: PaymentRecord) -> object:
        ...
