from __future__ import annotations

from dataclasses import dataclass

from humsafar.adapters.clock import SystemClock
from humsafar.adapters.sqlite.repos import (
    SQLiteModerationRepo,
    SQLitePaymentRepo,
    SQLiteProfileRepo,
    SQLiteViewRepo,
)
from humsafar.components import entitlements, payments, views, visibility
from humsafar.components.entitlements import EntitlementService
from humsafar.components.moderation import ModerationService
from humsafar.components.payments import PaymentService
from humsafar.components.views import ViewService
from humsafar.components.visibility import VisibilityService
from humsafar.ports.clock import ClockPort
from humsafar.rules.models import Rules
from humsafar.services.members import MemberService


@dataclass
class ServiceContext:
    """Every service wired against one SQLite database."""

    member_service: MemberService
    moderation_service: ModerationService
    entitlement_service: EntitlementService
    payment_service: PaymentService
    view_service: ViewService
    visibility_service: VisibilityService
    profile_repo: SQLiteProfileRepo
    moderation_repo: SQLiteModerationRepo
    payment_repo: SQLitePaymentRepo
    view_repo: SQLiteViewRepo
    rules: Rules
    clock: ClockPort

    @classmethod
    def create(cls, db_path: str, rules: Rules, clock: ClockPort | None = None) -> ServiceContext:
        clock = clock or SystemClock()

        profile_repo = SQLiteProfileRepo(db_path)
        moderation_repo = SQLiteModerationRepo(db_path)
        payment_repo = SQLitePaymentRepo(db_path)
        view_repo = SQLiteViewRepo(db_path)

        moderation_service = ModerationService(moderation_repo, clock)
        entitlement_service = EntitlementService(
            moderation_repo, clock, entitlements.load_config_from_rules(rules)
        )
        payment_service = PaymentService(
            payment_repo, entitlement_service, clock, payments.load_config_from_rules(rules)
        )
        view_service = ViewService(
            view_repo,
            moderation_repo,
            payment_repo,
            profile_repo,
            clock,
            views.load_config_from_rules(rules),
        )
        visibility_service = VisibilityService(
            moderation_repo, profile_repo, clock, visibility.load_config_from_rules(rules)
        )
        member_service = MemberService(profile_repo, moderation_service, clock)

        return cls(
            member_service=member_service,
            moderation_service=moderation_service,
            entitlement_service=entitlement_service,
            payment_service=payment_service,
            view_service=view_service,
            visibility_service=visibility_service,
            profile_repo=profile_repo,
            moderation_repo=moderation_repo,
            payment_repo=payment_repo,
            view_repo=view_repo,
            rules=rules,
            clock=clock,
        )
