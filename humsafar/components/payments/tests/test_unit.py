"""
Unit tests for the payment component.

Tests:
- Gateway amount mapping, including the custom tier
- Checkout and screenshot submission
- Admin review: reason precondition, single grant on acceptance,
  terminal re-review
- Gateway callback success and failure
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from humsafar.adapters.clock import FixedClock
from humsafar.components.payments import (
    AmountTierInfo,
    CheckoutInput,
    GatewayCallbackInput,
    PaymentConfig,
    PaymentService,
    ReviewInput,
    SubmitScreenshotInput,
    map_amount_to_package,
    validate_review,
)
from humsafar.domain.entities import PaymentRecord, PaymentStatus
from humsafar.domain.errors import (
    InvalidTransitionError,
    NotFoundError,
    ReviewPreconditionError,
    StoreError,
)

# --- Fakes ---


class InMemoryPaymentRepo:
    def __init__(self) -> None:
        self.payments: dict[UUID, PaymentRecord] = {}
        self.fail_saves = False

    def save(self, payment: PaymentRecord) -> PaymentRecord:
        if self.fail_saves:
            raise StoreError("save payment")
        self.payments[payment.id] = payment
        return payment

    def get_by_id(self, payment_id: UUID) -> PaymentRecord | None:
        return self.payments.get(payment_id)

    def delete(self, payment_id: UUID) -> None:
        self.payments.pop(payment_id, None)

    def latest_for_user(self, user_id: UUID) -> PaymentRecord | None:
        mine = [p for p in self.payments.values() if p.user_id == user_id]
        return max(mine, key=lambda p: p.created_at) if mine else None

    def list(
        self,
        status: PaymentStatus | None = None,
        user_id: UUID | None = None,
    ) -> list[PaymentRecord]:
        return [
            p
            for p in self.payments.values()
            if (status is None or p.payment_status == status)
            and (user_id is None or p.user_id == user_id)
        ]


class RecordingEntitlements:
    def __init__(self) -> None:
        self.applied: list[PaymentRecord] = []
        self.fail_grants = False

    def apply_accepted_payment(self, payment: PaymentRecord) -> None:
        if self.fail_grants:
            raise StoreError("save moderation record")
        self.applied.append(payment)


# --- Fixtures ---


@pytest.fixture
def config() -> PaymentConfig:
    return PaymentConfig(
        package_views={"basic": 20, "standard": 35, "premium": 55},
        package_prices={"basic": 5000, "standard": 8000, "premium": 13000},
        addon_prices={"verified_badge": 1000, "boost_profile": 1500},
        amount_tiers=(
            AmountTierInfo(amounts=(5000, 2500), package="basic"),
            AmountTierInfo(amounts=(8000, 4000), package="standard"),
            AmountTierInfo(amounts=(13000, 6500), package="premium"),
        ),
    )


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 3, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def repo() -> InMemoryPaymentRepo:
    return InMemoryPaymentRepo()


@pytest.fixture
def entitlements() -> RecordingEntitlements:
    return RecordingEntitlements()


@pytest.fixture
def service(
    repo: InMemoryPaymentRepo,
    entitlements: RecordingEntitlements,
    clock: FixedClock,
    config: PaymentConfig,
) -> PaymentService:
    return PaymentService(repo, entitlements, clock, config)


@pytest.fixture
def under_review(service: PaymentService) -> PaymentRecord:
    uid = uuid4()
    payment = service.initiate_checkout(CheckoutInput(user_id=uid, package_type="standard"))
    return service.submit_screenshot(
        SubmitScreenshotInput(payment_id=payment.id, user_id=uid, screenshot_ref="s3://shot.png")
    )


# --- Amount Mapping ---


class TestMapAmountToPackage:
    @pytest.mark.parametrize(
        ("amount", "package", "views"),
        [
            (5000, "basic", 20),
            (2500, "basic", 20),
            (8000, "standard", 35),
            (4000, "standard", 35),
            (13000, "premium", 55),
            (6500, "premium", 55),
        ],
    )
    def test_tier_prices(
        self, config: PaymentConfig, amount: float, package: str, views: int
    ) -> None:
        grant = map_amount_to_package(amount, config)
        assert (grant.package_type, grant.views) == (package, views)

    def test_custom_tier_adds_one_view_per_step(self, config: PaymentConfig) -> None:
        grant = map_amount_to_package(15000, config)
        assert grant.package_type == "custom"
        assert grant.views == 65

    def test_custom_tier_rounds_half_up(self, config: PaymentConfig) -> None:
        assert map_amount_to_package(13100, config).views == 56
        assert map_amount_to_package(13099, config).views == 55

    @pytest.mark.parametrize("amount", [None, 0, 1234, 12999])
    def test_unmatched_amount_grants_nothing(self, config: PaymentConfig, amount: float) -> None:
        grant = map_amount_to_package(amount, config)
        assert grant.package_type == "basic"
        assert grant.views == 0


# --- Checkout ---


class TestCheckout:
    def test_package_checkout_is_pending_with_catalog_views(self, service: PaymentService) -> None:
        payment = service.initiate_checkout(CheckoutInput(user_id=uuid4(), package_type="premium"))
        assert payment.payment_status == "pending"
        assert payment.views_limit == 55
        assert payment.amount == 13000

    def test_addon_checkout_has_no_views(self, service: PaymentService) -> None:
        payment = service.initiate_checkout(
            CheckoutInput(user_id=uuid4(), package_type="add_on", addon_key="verified_badge")
        )
        assert payment.views_limit == 0
        assert payment.addon_key == "verified_badge"
        assert payment.amount == 1000

    def test_unknown_package_is_not_found(self, service: PaymentService) -> None:
        with pytest.raises(NotFoundError):
            service.initiate_checkout(CheckoutInput(user_id=uuid4(), package_type="gold"))

    def test_unknown_addon_is_not_found(self, service: PaymentService) -> None:
        with pytest.raises(NotFoundError):
            service.initiate_checkout(
                CheckoutInput(user_id=uuid4(), package_type="add_on", addon_key="teleport")
            )

    def test_screenshot_moves_to_under_review(self, under_review: PaymentRecord) -> None:
        assert under_review.payment_status == "under_review"
        assert under_review.screenshot_ref == "s3://shot.png"

    def test_cannot_submit_someone_elses_payment(
        self, service: PaymentService, under_review: PaymentRecord
    ) -> None:
        with pytest.raises(NotFoundError):
            service.submit_screenshot(
                SubmitScreenshotInput(
                    payment_id=under_review.id, user_id=uuid4(), screenshot_ref="x"
                )
            )


# --- Review ---


class TestReview:
    def test_reject_requires_reason(self) -> None:
        with pytest.raises(ReviewPreconditionError):
            validate_review(ReviewInput(payment_id=uuid4(), action="reject", reason="   "))

    def test_reject_without_reason_leaves_record_under_review(
        self,
        service: PaymentService,
        repo: InMemoryPaymentRepo,
        under_review: PaymentRecord,
    ) -> None:
        with pytest.raises(ReviewPreconditionError):
            service.review(ReviewInput(payment_id=under_review.id, action="reject"))

        assert repo.payments[under_review.id].payment_status == "under_review"

    def test_accept_grants_once(
        self,
        service: PaymentService,
        entitlements: RecordingEntitlements,
        under_review: PaymentRecord,
    ) -> None:
        admin = uuid4()
        result = service.review(
            ReviewInput(payment_id=under_review.id, action="accept", reviewer_id=admin)
        )

        assert result.granted is True
        assert result.previous_status == "under_review"
        assert result.payment.payment_status == "accepted"
        assert result.payment.reviewed_by == admin
        assert [p.id for p in entitlements.applied] == [under_review.id]

    def test_re_accept_only_restamps(
        self,
        service: PaymentService,
        entitlements: RecordingEntitlements,
        clock: FixedClock,
        under_review: PaymentRecord,
    ) -> None:
        service.review(ReviewInput(payment_id=under_review.id, action="accept"))
        clock.advance(hours=2)
        second_admin = uuid4()

        result = service.review(
            ReviewInput(payment_id=under_review.id, action="accept", reviewer_id=second_admin)
        )

        assert result.granted is False
        assert result.payment.reviewed_at == clock.now_utc()
        assert result.payment.reviewed_by == second_admin
        assert len(entitlements.applied) == 1

    def test_reject_stores_reason_and_grants_nothing(
        self,
        service: PaymentService,
        entitlements: RecordingEntitlements,
        under_review: PaymentRecord,
    ) -> None:
        result = service.review(
            ReviewInput(payment_id=under_review.id, action="reject", reason="  blurry screenshot ")
        )
        assert result.payment.payment_status == "rejected"
        assert result.payment.rejection_reason == "blurry screenshot"
        assert entitlements.applied == []

    def test_accepting_rejected_payment_is_refused(
        self, service: PaymentService, under_review: PaymentRecord
    ) -> None:
        service.review(ReviewInput(payment_id=under_review.id, action="reject", reason="fake"))
        with pytest.raises(InvalidTransitionError):
            service.review(ReviewInput(payment_id=under_review.id, action="accept"))

    def test_pending_payment_cannot_be_reviewed(self, service: PaymentService) -> None:
        payment = service.initiate_checkout(CheckoutInput(user_id=uuid4(), package_type="basic"))
        with pytest.raises(InvalidTransitionError):
            service.review(ReviewInput(payment_id=payment.id, action="accept"))

    def test_store_failure_propagates_without_grant(
        self,
        service: PaymentService,
        repo: InMemoryPaymentRepo,
        entitlements: RecordingEntitlements,
        under_review: PaymentRecord,
    ) -> None:
        repo.fail_saves = True
        with pytest.raises(StoreError):
            service.review(ReviewInput(payment_id=under_review.id, action="accept"))

        assert repo.payments[under_review.id].payment_status == "under_review"
        assert entitlements.applied == []

    def test_failed_grant_restores_record_and_can_be_retried(
        self,
        service: PaymentService,
        repo: InMemoryPaymentRepo,
        entitlements: RecordingEntitlements,
        under_review: PaymentRecord,
    ) -> None:
        entitlements.fail_grants = True
        with pytest.raises(StoreError):
            service.review(ReviewInput(payment_id=under_review.id, action="accept"))

        restored = repo.payments[under_review.id]
        assert restored.payment_status == "under_review"
        assert restored.reviewed_at is None
        assert restored.reviewed_by is None

        entitlements.fail_grants = False
        result = service.review(ReviewInput(payment_id=under_review.id, action="accept"))
        assert result.granted is True
        assert result.previous_status == "under_review"
        assert [p.id for p in entitlements.applied] == [under_review.id]


# --- Gateway ---


class TestGatewayCallback:
    def test_failure_records_nothing(
        self,
        service: PaymentService,
        repo: InMemoryPaymentRepo,
        entitlements: RecordingEntitlements,
    ) -> None:
        result = service.handle_gateway_callback(
            GatewayCallbackInput(user_id=uuid4(), success=False, amount=5000)
        )
        assert result.success is False
        assert repo.payments == {}
        assert entitlements.applied == []

    def test_success_appends_accepted_record_and_grants(
        self, service: PaymentService, entitlements: RecordingEntitlements
    ) -> None:
        result = service.handle_gateway_callback(
            GatewayCallbackInput(user_id=uuid4(), success=True, amount=8000, reference="TXN-1")
        )
        assert result.payment is not None
        assert result.payment.payment_status == "accepted"
        assert result.payment.package_type == "standard"
        assert result.payment.views_limit == 35
        assert result.payment.gateway_reference == "TXN-1"
        assert entitlements.applied == [result.payment]

    def test_addon_purchase_is_classified_add_on(self, service: PaymentService) -> None:
        result = service.handle_gateway_callback(
            GatewayCallbackInput(
                user_id=uuid4(), success=True, amount=5000, addon_key="boost_profile"
            )
        )
        assert result.payment is not None
        assert result.payment.package_type == "add_on"
        assert result.payment.addon_key == "boost_profile"
        assert result.payment.views_limit == 0

    def test_failed_grant_leaves_no_accepted_record(
        self,
        service: PaymentService,
        repo: InMemoryPaymentRepo,
        entitlements: RecordingEntitlements,
    ) -> None:
        entitlements.fail_grants = True
        with pytest.raises(StoreError):
            service.handle_gateway_callback(
                GatewayCallbackInput(user_id=uuid4(), success=True, amount=5000)
            )
        assert repo.payments == {}
