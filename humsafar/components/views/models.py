"""
View component models.

A member's quota is never stored as a counter: remaining views are
always derived from the granted limit and the consumption log.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from humsafar.domain.entities import PaymentStatus, ProfileView


@dataclass(frozen=True)
class ViewConfig:
    """Payment-gate and status-label settings loaded from rules."""

    blocking_payment_statuses: frozenset[str] = frozenset({"pending", "under_review", "rejected"})
    status_annotations: dict[str, str] = field(
        default_factory=lambda: {
            "pending": "Payment Pending",
            "under_review": "Under Review",
            "accepted": "Active",
            "rejected": "Payment Rejected",
        }
    )
    no_subscription_label: str = "Package Purchase"


@dataclass(frozen=True)
class StatusLabel:
    """Subscription status plus an optional payment annotation."""

    base_status: str
    payment_annotation: str | None = None
    payment_status: PaymentStatus | None = None


@dataclass(frozen=True)
class ViewStats:
    views_limit: int
    consumed: int
    remaining: int
    status: StatusLabel


@dataclass(frozen=True)
class RecordViewOutput:
    """A newly charged view."""

    view: ProfileView
    remaining: int
