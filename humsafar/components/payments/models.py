"""
Payment component models.

Checkout, screenshot submission, admin review and gateway callbacks all
produce or move a ``PaymentRecord``; these models are the inputs and
outputs of those operations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from humsafar.domain.entities import PaymentRecord, PaymentStatus, ReviewAction

# --- Configuration ---


@dataclass(frozen=True)
class AmountTierInfo:
    amounts: tuple[float, ...]
    package: str


@dataclass(frozen=True)
class PaymentConfig:
    """Package prices, views and the gateway amount mapping."""

    package_views: dict[str, int] = field(default_factory=dict)
    package_prices: dict[str, float] = field(default_factory=dict)
    addon_prices: dict[str, float] = field(default_factory=dict)
    amount_tiers: tuple[AmountTierInfo, ...] = ()
    custom_above_amount: float = 13000
    custom_base_views: int = 55
    custom_amount_per_extra_view: float = 200
    custom_package: str = "custom"
    fallback_package: str = "basic"
    addon_package_type: str = "add_on"


# --- Inputs ---


@dataclass(frozen=True)
class CheckoutInput:
    """A member starting a manual purchase of a package or add-on."""

    user_id: UUID
    package_type: str
    addon_key: str | None = None
    payment_method: str = "manual"


@dataclass(frozen=True)
class SubmitScreenshotInput:
    payment_id: UUID
    user_id: UUID
    screenshot_ref: str


@dataclass(frozen=True)
class ReviewInput:
    """Admin review of a payment."""

    payment_id: UUID
    action: ReviewAction
    reviewer_id: UUID | None = None
    reason: str | None = None


@dataclass(frozen=True)
class GatewayCallbackInput:
    """Opaque gateway result: success flag plus amount."""

    user_id: UUID
    success: bool
    amount: float
    addon_key: str | None = None
    reference: str | None = None


# --- Outputs ---


@dataclass(frozen=True)
class PackageGrant:
    """What an amount buys through the gateway."""

    package_type: str
    views: int


@dataclass(frozen=True)
class ReviewOutput:
    payment: PaymentRecord
    previous_status: PaymentStatus
    granted: bool = False


@dataclass(frozen=True)
class GatewayCallbackOutput:
    success: bool
    payment: PaymentRecord | None = None
    message: str = ""
