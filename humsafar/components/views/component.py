"""
View component.

Quota ledger and view recorder. ``record_view`` is the only write: it
inserts one consumption row per (viewer, target) pair. The storage layer
enforces uniqueness of the pair, so concurrent duplicate requests can
never both be charged.

Quota checks against different targets read a snapshot count and are
best-effort under concurrency.
"""

from __future__ import annotations

import logging
from uuid import UUID, uuid4

from humsafar.domain.entities import ModerationRecord, PaymentRecord, ProfileView
from humsafar.domain.errors import (
    AlreadyViewedError,
    NotFoundError,
    PaymentBlockedError,
    QuotaExceededError,
    SelfViewError,
)
from humsafar.ports.clock import ClockPort
from humsafar.rules.models import Rules

from .models import RecordViewOutput, StatusLabel, ViewConfig, ViewStats
from .ports import LatestPaymentPort, ModerationReadPort, ProfileLookupPort, ViewRepoPort

logger = logging.getLogger(__name__)


# --- Pure Functions ---


def compute_remaining(views_limit: int, consumed: int) -> int:
    return max(0, views_limit - consumed)


def check_payment_gate(latest: PaymentRecord | None, config: ViewConfig) -> None:
    """Raise PaymentBlockedError if the latest payment freezes consumption."""
    if latest is None:
        return
    if latest.payment_status in config.blocking_payment_statuses:
        raise PaymentBlockedError(latest.payment_status, latest.rejection_reason)


def build_status_label(
    record: ModerationRecord | None,
    latest: PaymentRecord | None,
    config: ViewConfig,
) -> StatusLabel:
    """
    Structured status for display.

    Without a moderation record the base is the generic purchase label and
    an accepted payment carries no annotation.
    """
    if record is None:
        base = config.no_subscription_label
        if latest is None or latest.payment_status == "accepted":
            return StatusLabel(base_status=base)
    else:
        base = record.subscription_status
        if latest is None:
            return StatusLabel(base_status=base)

    return StatusLabel(
        base_status=base,
        payment_annotation=config.status_annotations.get(latest.payment_status),
        payment_status=latest.payment_status,
    )


def format_status_label(label: StatusLabel) -> str:
    """``Basic Package`` + ``Under Review`` -> ``Basic Package (Under Review)``."""
    if label.payment_annotation:
        return f"{label.base_status} ({label.payment_annotation})"
    return label.base_status


# --- Service ---


class ViewService:
    """Quota accounting and view consumption."""

    def __init__(
        self,
        views: ViewRepoPort,
        moderation: ModerationReadPort,
        payments: LatestPaymentPort,
        profiles: ProfileLookupPort,
        clock: ClockPort,
        config: ViewConfig | None = None,
    ) -> None:
        self._views = views
        self._moderation = moderation
        self._payments = payments
        self._profiles = profiles
        self._clock = clock
        self._config = config or ViewConfig()

    def record_view(self, viewer_id: UUID, target_id: UUID) -> RecordViewOutput:
        """
        Charge one view for opening ``target_id``.

        Checks run in order: self view, target exists, payment gate,
        remaining quota, already viewed. Only the last step writes.
        """
        if viewer_id == target_id:
            raise SelfViewError()

        if self._profiles.get_by_id(target_id) is None:
            raise NotFoundError("profile", target_id)

        check_payment_gate(self._payments.latest_for_user(viewer_id), self._config)

        record = self._moderation.get(viewer_id)
        if record is None:
            raise NotFoundError("subscription", viewer_id)

        consumed = self._views.count_for_viewer(viewer_id)
        if compute_remaining(record.views_limit, consumed) <= 0:
            raise QuotaExceededError(record.views_limit, consumed)

        view = ProfileView(
            id=uuid4(),
            viewer_user_id=viewer_id,
            viewed_profile_user_id=target_id,
            viewed_at=self._clock.now_utc(),
        )
        if not self._views.insert_if_absent(view):
            existing = self._views.get(viewer_id, target_id)
            raise AlreadyViewedError(existing.viewed_at if existing else None)

        remaining = compute_remaining(record.views_limit, consumed + 1)
        logger.info("View charged: %s -> %s, %d remaining", viewer_id, target_id, remaining)
        return RecordViewOutput(view=view, remaining=remaining)

    def get_view_stats(self, user_id: UUID) -> ViewStats:
        latest = self._payments.latest_for_user(user_id)
        record = self._moderation.get(user_id)

        if record is None:
            if latest is None:
                raise NotFoundError("subscription", user_id)
            # Purchase in flight before any record exists
            return ViewStats(
                views_limit=latest.views_limit,
                consumed=0,
                remaining=0,
                status=build_status_label(None, latest, self._config),
            )

        consumed = self._views.count_for_viewer(user_id)
        return ViewStats(
            views_limit=record.views_limit,
            consumed=consumed,
            remaining=compute_remaining(record.views_limit, consumed),
            status=build_status_label(record, latest, self._config),
        )

    def list_viewed(self, viewer_id: UUID) -> list[ProfileView]:
        """Consumption records for a viewer, newest first."""
        return self._views.list_for_viewer(viewer_id)

    def has_viewed(self, viewer_id: UUID, target_id: UUID) -> ProfileView | None:
        return self._views.get(viewer_id, target_id)


# --- Configuration Loader ---


def load_config_from_rules(rules: Rules) -> ViewConfig:
    return ViewConfig(
        blocking_payment_statuses=frozenset(rules.quota.blocking_payment_statuses),
        status_annotations=dict(rules.quota.status_annotations),
        no_subscription_label=rules.quota.no_subscription_label,
    )
