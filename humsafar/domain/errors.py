"""
Error taxonomy for profile access, quota and review operations.

Quota and payment-gate errors carry the specific reason so callers can
explain a denial. Listing failures never reach this module; they are
swallowed to an empty result by the visibility component.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any


class HumsafarError(Exception):
    """Base error."""

    code = "error"

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": str(self)}


class SelfViewError(HumsafarError):
    """Member tried to consume a view against their own profile."""

    code = "self_view"

    def __init__(self) -> None:
        super().__init__("Cannot view your own profile")


class AlreadyViewedError(HumsafarError):
    """
    Viewer already paid for this profile.

    Soft failure: the profile may still be shown, nothing is charged.
    """

    code = "already_viewed"

    def __init__(self, viewed_at: datetime | None = None) -> None:
        self.viewed_at = viewed_at
        super().__init__("Profile already viewed")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["viewed_at"] = self.viewed_at.isoformat() if self.viewed_at else None
        return data


class QuotaExceededError(HumsafarError):
    """No views left."""

    code = "quota_exceeded"

    def __init__(self, views_limit: int, consumed: int) -> None:
        self.views_limit = views_limit
        self.consumed = consumed
        super().__init__("View limit reached")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({"views_limit": self.views_limit, "consumed": self.consumed})
        return data


class PaymentBlockedError(HumsafarError):
    """Latest payment is unresolved or rejected; consumption is frozen."""

    code = "payment_blocked"

    MESSAGES = {
        "pending": "Payment is pending. Please wait for admin review.",
        "under_review": "Payment is under review by admin. Please wait for approval.",
    }

    def __init__(self, payment_status: str, reason: str | None = None) -> None:
        self.payment_status = payment_status
        self.reason = reason
        if payment_status == "rejected":
            message = f"Payment was rejected. Reason: {reason or 'No reason provided'}"
        else:
            message = self.MESSAGES.get(payment_status, f"Payment is {payment_status}")
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({"payment_status": self.payment_status, "reason": self.reason})
        return data


class NotFoundError(HumsafarError):
    """Subscription, profile or payment missing."""

    code = "not_found"

    def __init__(self, entity: str, entity_id: object) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class StoreError(HumsafarError):
    """Transient storage failure (network/DB)."""

    code = "store_failure"

    def __init__(self, operation: str, cause: Exception | None = None) -> None:
        self.operation = operation
        self.cause = cause
        msg = f"Storage failure during {operation}"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)


class InvalidTransitionError(HumsafarError):
    """Raised when a state transition is not allowed."""

    code = "invalid_transition"

    def __init__(self, from_status: str, to_status: str, reason: str = "") -> None:
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Cannot transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ReviewPreconditionError(HumsafarError):
    """Review action refused before any state change."""

    code = "review_precondition"

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)
