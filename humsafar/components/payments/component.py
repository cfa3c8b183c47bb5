"""
Payment component.

Owns the payment ledger lifecycle:

- checkout creates a ``pending`` record priced from the catalog
- screenshot submission moves it to ``under_review``
- admin review moves it to ``accepted`` or ``rejected``
- a successful gateway callback appends an already ``accepted`` record

Every transition into ``accepted`` is folded into quota exactly once,
through the entitlement port.
"""

from __future__ import annotations

import logging
import math
from uuid import UUID, uuid4

from humsafar.domain.entities import PaymentRecord, PaymentStatus
from humsafar.domain.errors import HumsafarError, NotFoundError, ReviewPreconditionError
from humsafar.domain.state import review, submit_for_review
from humsafar.ports.clock import ClockPort
from humsafar.rules.models import Rules

from .models import (
    AmountTierInfo,
    CheckoutInput,
    GatewayCallbackInput,
    GatewayCallbackOutput,
    PackageGrant,
    PaymentConfig,
    ReviewInput,
    ReviewOutput,
    SubmitScreenshotInput,
)
from .ports import EntitlementGrantPort, PaymentRepoPort

logger = logging.getLogger(__name__)


# --- Pure Functions ---


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def map_amount_to_package(amount: float | None, config: PaymentConfig) -> PackageGrant:
    """
    Translate a gateway amount into a package and its views.

    Exact tier prices (full or half price) map to their package; anything
    above the custom threshold buys base views plus one per extra step;
    any other amount falls back to the fallback package with no views.
    """
    if not amount:
        return PackageGrant(package_type=config.fallback_package, views=0)

    for tier in config.amount_tiers:
        if amount in tier.amounts:
            return PackageGrant(
                package_type=tier.package,
                views=config.package_views.get(tier.package, 0),
            )

    if amount > config.custom_above_amount:
        extra = max(
            0,
            _round_half_up((amount - config.custom_above_amount) / config.custom_amount_per_extra_view),
        )
        return PackageGrant(package_type=config.custom_package, views=config.custom_base_views + extra)

    return PackageGrant(package_type=config.fallback_package, views=0)


def validate_review(input_data: ReviewInput) -> None:
    """A rejection must carry a non-blank reason."""
    if input_data.action == "reject" and not (input_data.reason and input_data.reason.strip()):
        raise ReviewPreconditionError("A rejection reason is required")


# --- Service ---


class PaymentService:
    """Payment ledger operations."""

    def __init__(
        self,
        repo: PaymentRepoPort,
        entitlements: EntitlementGrantPort,
        clock: ClockPort,
        config: PaymentConfig | None = None,
    ) -> None:
        self._repo = repo
        self._entitlements = entitlements
        self._clock = clock
        self._config = config or PaymentConfig()

    def get(self, payment_id: UUID) -> PaymentRecord:
        payment = self._repo.get_by_id(payment_id)
        if payment is None:
            raise NotFoundError("payment", payment_id)
        return payment

    def list_payments(
        self,
        status: PaymentStatus | None = None,
        user_id: UUID | None = None,
    ) -> list[PaymentRecord]:
        return self._repo.list(status=status, user_id=user_id)

    def initiate_checkout(self, input_data: CheckoutInput) -> PaymentRecord:
        """Create a pending record for a catalog package or add-on."""
        if input_data.package_type == self._config.addon_package_type:
            if input_data.addon_key not in self._config.addon_prices:
                raise NotFoundError("addon", input_data.addon_key)
            amount = self._config.addon_prices[input_data.addon_key]
            views = 0
            addon_key = input_data.addon_key
        else:
            if input_data.package_type not in self._config.package_prices:
                raise NotFoundError("package", input_data.package_type)
            amount = self._config.package_prices[input_data.package_type]
            views = self._config.package_views.get(input_data.package_type, 0)
            addon_key = None

        now = self._clock.now_utc()
        payment = PaymentRecord(
            id=uuid4(),
            user_id=input_data.user_id,
            amount=amount,
            package_type=input_data.package_type,
            addon_key=addon_key,
            views_limit=views,
            payment_status="pending",
            payment_method=input_data.payment_method,
            created_at=now,
            updated_at=now,
        )
        self._repo.save(payment)
        logger.info(
            "Checkout %s started by %s for %s (%s)",
            payment.id,
            payment.user_id,
            payment.package_type,
            amount,
        )
        return payment

    def submit_screenshot(self, input_data: SubmitScreenshotInput) -> PaymentRecord:
        payment = self.get(input_data.payment_id)
        if payment.user_id != input_data.user_id:
            # Other members' payments are indistinguishable from missing ones
            raise NotFoundError("payment", input_data.payment_id)

        updated = submit_for_review(payment, input_data.screenshot_ref, self._clock.now_utc())
        self._repo.save(updated)
        logger.info("Payment %s submitted for review", payment.id)
        return updated

    def review(self, input_data: ReviewInput) -> ReviewOutput:
        """
        Admin review.

        The record is saved before quota is granted. If the grant fails the
        record is put back to its previous state and the error propagates,
        so the reviewer can retry the same action. Re-reviewing a terminal
        record only restamps reviewed_at/reviewed_by and grants nothing.
        """
        validate_review(input_data)

        payment = self.get(input_data.payment_id)
        previous = payment.payment_status

        updated = review(
            payment,
            input_data.action,
            input_data.reviewer_id,
            self._clock.now_utc(),
            input_data.reason,
        )
        self._repo.save(updated)

        granted = False
        if previous != "accepted" and updated.payment_status == "accepted":
            try:
                self._entitlements.apply_accepted_payment(updated)
            except HumsafarError:
                logger.error("Grant failed for payment %s, restoring %s", payment.id, previous)
                self._repo.save(payment)
                raise
            granted = True

        logger.info(
            "Payment %s reviewed %s -> %s by %s",
            payment.id,
            previous,
            updated.payment_status,
            input_data.reviewer_id,
        )
        return ReviewOutput(payment=updated, previous_status=previous, granted=granted)

    def handle_gateway_callback(self, input_data: GatewayCallbackInput) -> GatewayCallbackOutput:
        """
        Record a gateway result.

        Failure writes nothing. Success appends an accepted record and
        grants its views or add-on immediately. If the grant fails the
        record is removed again, so no accepted payment exists without
        its grant.
        """
        if not input_data.success:
            logger.info("Gateway reported failure for %s (%s)", input_data.user_id, input_data.amount)
            return GatewayCallbackOutput(success=False, message="Payment failed")

        if input_data.addon_key and input_data.addon_key in self._config.addon_prices:
            grant = PackageGrant(package_type=self._config.addon_package_type, views=0)
            addon_key = input_data.addon_key
        else:
            grant = map_amount_to_package(input_data.amount, self._config)
            addon_key = None

        now = self._clock.now_utc()
        payment = PaymentRecord(
            id=uuid4(),
            user_id=input_data.user_id,
            amount=input_data.amount,
            package_type=grant.package_type,
            addon_key=addon_key,
            views_limit=grant.views,
            payment_status="accepted",
            payment_method="gateway",
            gateway_reference=input_data.reference,
            reviewed_at=now,
            created_at=now,
            updated_at=now,
        )
        self._repo.save(payment)
        try:
            self._entitlements.apply_accepted_payment(payment)
        except HumsafarError:
            logger.error("Grant failed for gateway payment %s, removing it", payment.id)
            self._repo.delete(payment.id)
            raise

        logger.info(
            "Gateway payment %s accepted for %s: %s, %d views",
            payment.id,
            payment.user_id,
            payment.package_type,
            payment.views_limit,
        )
        return GatewayCallbackOutput(success=True, payment=payment, message="Payment accepted")


def run_review(input_data: ReviewInput, service: PaymentService) -> ReviewOutput:
    """Shell entry point for admin payment review."""
    return service.review(input_data)


# --- Configuration Loader ---


def load_config_from_rules(rules: Rules) -> PaymentConfig:
    packages = rules.packages
    custom = packages.custom_tier
    return PaymentConfig(
        package_views={key: p.views for key, p in packages.catalog.items()},
        package_prices={key: p.price for key, p in packages.catalog.items()},
        addon_prices={key: a.price for key, a in rules.addons.catalog.items()},
        amount_tiers=tuple(
            AmountTierInfo(amounts=tuple(t.amounts), package=t.package) for t in packages.amount_tiers
        ),
        custom_above_amount=custom.above_amount,
        custom_base_views=custom.base_views,
        custom_amount_per_extra_view=custom.amount_per_extra_view,
        custom_package=custom.package,
        fallback_package=packages.fallback_package,
        addon_package_type=packages.addon_package_type,
    )
