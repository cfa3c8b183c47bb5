from datetime import datetime
from typing import Any

from humsafar.domain.entities import (
    ModerationRecord,
    PaymentRecord,
    PaymentStatus,
    ProfileStatus,
    ReviewAction,
)
from humsafar.domain.errors import InvalidTransitionError

# "flagged" is a stored label only: nothing moves into or out of it.
MODERATION_TRANSITIONS: dict[ProfileStatus, frozenset[ProfileStatus]] = {
    "pending": frozenset({"approved", "rejected", "terminated"}),
    "approved": frozenset({"terminated", "rejected", "pending"}),
    "rejected": frozenset({"approved", "terminated", "pending"}),
    "terminated": frozenset({"approved", "rejected", "pending"}),
    "flagged": frozenset(),
}

PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    "pending": frozenset({"under_review"}),
    "under_review": frozenset({"accepted", "rejected"}),
    "accepted": frozenset(),
    "rejected": frozenset(),
}

TERMINAL_PAYMENT_STATUSES: frozenset[PaymentStatus] = frozenset({"accepted", "rejected"})

REVIEW_TARGETS: dict[ReviewAction, PaymentStatus] = {
    "accept": "accepted",
    "reject": "rejected",
}


def can_transition(current: ProfileStatus, new: ProfileStatus) -> bool:
    """
    Determine if a moderation transition is allowed.
    Re-applying the current state is always allowed (no-op).
    """
    if current == new:
        return True
    return new in MODERATION_TRANSITIONS.get(current, frozenset())


def transition(record: ModerationRecord, new_status: ProfileStatus, now: datetime) -> ModerationRecord:
    """
    Return a NEW ModerationRecord with the updated status and timestamp.
    Raises InvalidTransitionError if the transition is not in the table.
    """
    if record.profile_status == new_status:
        return record.model_copy()

    if not can_transition(record.profile_status, new_status):
        raise InvalidTransitionError(record.profile_status, new_status)

    return record.model_copy(update={"profile_status": new_status, "updated_at": now})


def can_transition_payment(current: PaymentStatus, new: PaymentStatus) -> bool:
    if current == new:
        return True
    return new in PAYMENT_TRANSITIONS.get(current, frozenset())


def review(
    payment: PaymentRecord,
    action: ReviewAction,
    reviewer_id: Any,
    now: datetime,
    reason: str | None = None,
) -> PaymentRecord:
    """
    Apply an admin review to a payment record.

    - under_review -> accepted/rejected
    - terminal record reviewed again with the same outcome: only
      reviewed_at/reviewed_by are overwritten
    - everything else raises InvalidTransitionError

    The rejection-reason precondition is checked by the caller before
    this is reached.
    """
    target = REVIEW_TARGETS[action]
    current = payment.payment_status

    if current in TERMINAL_PAYMENT_STATUSES:
        if current != target:
            raise InvalidTransitionError(current, target, "payment already reviewed")
        return payment.model_copy(
            update={"reviewed_at": now, "reviewed_by": reviewer_id, "updated_at": now}
        )

    if not can_transition_payment(current, target):
        raise InvalidTransitionError(current, target, "payment must be under review")

    updates: dict[str, Any] = {
        "payment_status": target,
        "reviewed_at": now,
        "reviewed_by": reviewer_id,
        "updated_at": now,
    }
    if target == "rejected":
        updates["rejection_reason"] = reason.strip() if reason else None

    return payment.model_copy(update=updates)


def submit_for_review(payment: PaymentRecord, screenshot_ref: str, now: datetime) -> PaymentRecord:
    """Attach the payment screenshot and move pending -> under_review."""
    if payment.payment_status == "under_review":
        return payment.model_copy(update={"screenshot_ref": screenshot_ref, "updated_at": now})
    if not can_transition_payment(payment.payment_status, "under_review"):
        raise InvalidTransitionError(payment.payment_status, "under_review")
    return payment.model_copy(
        update={
            "payment_status": "under_review",
            "screenshot_ref": screenshot_ref,
            "updated_at": now,
        }
    )
