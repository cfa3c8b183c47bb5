"""
Entitlement component.

Three write paths onto a member's moderation record, each with its own
policy for ``views_limit``:

- package path: views are ADDED and subscription_status is overwritten
  with the package label
- add-on path: views are untouched, subscription_status gets a
  ``_with_<addon>`` suffix and known add-ons set their flag
- admin path (override / sync): views_limit is SET and may go down

Nothing else in the system writes views_limit or the feature flags.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import timedelta
from uuid import UUID

from humsafar.domain.entities import ModerationRecord, PaymentRecord
from humsafar.domain.errors import NotFoundError
from humsafar.ports.clock import ClockPort
from humsafar.rules.models import Rules

from .models import (
    AddonInfo,
    EntitlementConfig,
    GrantOutput,
    PackageInfo,
    SyncOutput,
    SyncResult,
)
from .ports import AcceptedPaymentsPort, ModerationRecordPort

logger = logging.getLogger(__name__)


# --- Pure Functions ---


def apply_addon_status(current_status: str, addon_key: str) -> str:
    """``premium`` + ``boost_profile`` -> ``premium_with_boost_profile``."""
    suffix = f"_with_{addon_key}"
    if current_status.endswith(suffix) or f"{suffix}_" in current_status:
        return current_status
    return f"{current_status}{suffix}"


def aggregate_accepted_payments(
    payments: list[PaymentRecord],
    addon_package_type: str,
) -> dict[UUID, tuple[int, str | None]]:
    """
    Sum granted views per user and find the latest real package.

    Returns user_id -> (total_views, latest_package_type or None).
    """
    totals: dict[UUID, int] = defaultdict(int)
    latest: dict[UUID, PaymentRecord] = {}

    for payment in payments:
        if payment.payment_status != "accepted":
            continue
        totals[payment.user_id] += payment.views_limit
        if payment.package_type == addon_package_type:
            continue
        current = latest.get(payment.user_id)
        if current is None or payment.created_at > current.created_at:
            latest[payment.user_id] = payment

    return {
        user_id: (total, latest[user_id].package_type if user_id in latest else None)
        for user_id, total in totals.items()
    }


# --- Service ---


class EntitlementService:
    """Grants quota and feature flags."""

    def __init__(
        self,
        repo: ModerationRecordPort,
        clock: ClockPort,
        config: EntitlementConfig | None = None,
    ) -> None:
        self._repo = repo
        self._clock = clock
        self._config = config or EntitlementConfig()

    @property
    def config(self) -> EntitlementConfig:
        return self._config

    def _load(self, user_id: UUID) -> ModerationRecord:
        record = self._repo.get(user_id)
        if record is None:
            raise NotFoundError("subscription", user_id)
        return record

    def grant_package(
        self,
        user_id: UUID,
        package_type: str,
        views: int | None = None,
    ) -> GrantOutput:
        """
        Package path: add ``views`` (catalog views when omitted) and
        overwrite subscription_status.
        """
        if views is None:
            package = self._config.packages.get(package_type)
            if package is None:
                raise NotFoundError("package", package_type)
            views = package.views
        if views < 0:
            raise ValueError("views must be >= 0")

        record = self._load(user_id)
        updated = record.model_copy(
            update={
                "views_limit": record.views_limit + views,
                "subscription_status": self._config.package_label(package_type),
                "updated_at": self._clock.now_utc(),
            }
        )
        self._repo.save(updated)
        logger.info("Granted %d views (%s) to %s", views, package_type, user_id)
        return GrantOutput(record=updated, views_added=views)

    def grant_addon(self, user_id: UUID, addon_key: str) -> GrantOutput:
        """
        Add-on path. verified_badge is permanent; boost_profile is
        time-boxed through boost_expires_at.
        """
        addon = self._config.addons.get(addon_key)
        if addon is None:
            raise NotFoundError("addon", addon_key)

        record = self._load(user_id)
        now = self._clock.now_utc()
        updates: dict[str, object] = {
            "subscription_status": apply_addon_status(record.subscription_status, addon_key),
            "updated_at": now,
        }

        flag_set = None
        if addon.sets_flag:
            if addon_key == "verified_badge":
                updates["verified_badge"] = True
                flag_set = addon_key
            elif addon_key == "boost_profile":
                updates["boost_profile"] = True
                updates["boost_expires_at"] = (
                    now + timedelta(days=addon.duration_days) if addon.duration_days else None
                )
                flag_set = addon_key

        updated = record.model_copy(update=updates)
        self._repo.save(updated)
        logger.info("Add-on %s applied to %s", addon_key, user_id)
        return GrantOutput(record=updated, flag_set=flag_set)

    def apply_accepted_payment(self, payment: PaymentRecord) -> GrantOutput:
        """Fold an accepted payment into the owner's entitlements."""
        if payment.payment_status != "accepted":
            raise ValueError(f"Payment {payment.id} is not accepted")

        if payment.package_type == self._config.addon_package_type:
            addon_key = payment.addon_key
            if addon_key is None:
                logger.warning("Add-on payment %s has no add-on key", payment.id)
                return GrantOutput(record=self._load(payment.user_id))
            return self.grant_addon(payment.user_id, addon_key)

        return self.grant_package(payment.user_id, payment.package_type, payment.views_limit)

    def override_views_limit(self, user_id: UUID, views_limit: int, actor_id: UUID | None = None) -> GrantOutput:
        """Admin path: set views_limit outright."""
        if views_limit < 0:
            raise ValueError("views_limit must be >= 0")

        record = self._load(user_id)
        updated = record.model_copy(
            update={"views_limit": views_limit, "updated_at": self._clock.now_utc()}
        )
        self._repo.save(updated)
        logger.info(
            "views_limit for %s overridden %d -> %d by %s",
            user_id,
            record.views_limit,
            views_limit,
            actor_id,
        )
        return GrantOutput(record=updated, views_added=views_limit - record.views_limit)

    def sync_from_payments(
        self,
        payments: AcceptedPaymentsPort,
        user_id: UUID | None = None,
    ) -> SyncOutput:
        """
        Admin reconciliation: views_limit becomes the sum over accepted
        payments, subscription_status the label of the latest package.
        """
        accepted = payments.list(status="accepted", user_id=user_id)
        per_user = aggregate_accepted_payments(accepted, self._config.addon_package_type)

        updated: list[SyncResult] = []
        skipped: list[UUID] = []
        now = self._clock.now_utc()

        for uid, (total_views, package_type) in per_user.items():
            record = self._repo.get(uid)
            if record is None:
                skipped.append(uid)
                continue

            status = (
                self._config.package_label(package_type)
                if package_type is not None
                else record.subscription_status
            )
            self._repo.save(
                record.model_copy(
                    update={
                        "views_limit": total_views,
                        "subscription_status": status,
                        "updated_at": now,
                    }
                )
            )
            updated.append(SyncResult(user_id=uid, views_limit=total_views, subscription_status=status))

        logger.info("Subscription sync updated %d users, skipped %d", len(updated), len(skipped))
        return SyncOutput(updated=updated, skipped=skipped)


# --- Configuration Loader ---


def load_config_from_rules(rules: Rules) -> EntitlementConfig:
    packages = {
        key: PackageInfo(key=key, label=p.label, price=p.price, views=p.views)
        for key, p in rules.packages.catalog.items()
    }
    addons = {
        key: AddonInfo(
            key=key,
            label=a.label,
            price=a.price,
            sets_flag=a.sets_flag,
            duration_days=a.duration_days,
        )
        for key, a in rules.addons.catalog.items()
    }
    return EntitlementConfig(
        packages=packages,
        addons=addons,
        addon_package_type=rules.packages.addon_package_type,
    )
