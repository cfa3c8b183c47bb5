import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from humsafar.adapters.clock import SystemClock
from humsafar.adapters.sqlite.repos import (
    SQLiteModerationRepo,
    SQLitePaymentRepo,
    SQLiteProfileRepo,
    SQLiteViewRepo,
)
from humsafar.api.auth_utils import decode_access_token

# Components are stateless; services are rebuilt per request around shared repos.
from humsafar.components import entitlements, payments, views, visibility
from humsafar.components.entitlements import EntitlementService
from humsafar.components.moderation import ModerationService
from humsafar.components.payments import PaymentService
from humsafar.components.views import ViewService
from humsafar.components.visibility import VisibilityService
from humsafar.rules.loader import DEFAULT_RULES_PATH, load_rules
from humsafar.rules.models import Rules
from humsafar.services.members import MemberService


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.data_dir = Path(os.environ.get("HUMSAFAR_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "humsafar.db")
        self.rules_path = Path(os.environ.get("HUMSAFAR_RULES_PATH", str(DEFAULT_RULES_PATH)))


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


# --- Clock ---
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# --- Repos ---
def get_profile_repo(settings: Settings = Depends(get_settings)) -> SQLiteProfileRepo:
    return SQLiteProfileRepo(settings.db_path)


def get_moderation_repo(settings: Settings = Depends(get_settings)) -> SQLiteModerationRepo:
    return SQLiteModerationRepo(settings.db_path)


def get_payment_repo(settings: Settings = Depends(get_settings)) -> SQLitePaymentRepo:
    return SQLitePaymentRepo(settings.db_path)


def get_view_repo(settings: Settings = Depends(get_settings)) -> SQLiteViewRepo:
    return SQLiteViewRepo(settings.db_path)


# --- Component Services ---
def get_moderation_service(
    repo: SQLiteModerationRepo = Depends(get_moderation_repo),
    clock: SystemClock = Depends(get_clock),
) -> ModerationService:
    return ModerationService(repo, clock)


def get_entitlement_service(
    repo: SQLiteModerationRepo = Depends(get_moderation_repo),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> EntitlementService:
    return EntitlementService(repo, clock, entitlements.load_config_from_rules(rules))


def get_payment_service(
    repo: SQLitePaymentRepo = Depends(get_payment_repo),
    entitlement_service: EntitlementService = Depends(get_entitlement_service),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> PaymentService:
    return PaymentService(repo, entitlement_service, clock, payments.load_config_from_rules(rules))


def get_view_service(
    view_repo: SQLiteViewRepo = Depends(get_view_repo),
    moderation_repo: SQLiteModerationRepo = Depends(get_moderation_repo),
    payment_repo: SQLitePaymentRepo = Depends(get_payment_repo),
    profile_repo: SQLiteProfileRepo = Depends(get_profile_repo),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> ViewService:
    return ViewService(
        view_repo,
        moderation_repo,
        payment_repo,
        profile_repo,
        clock,
        views.load_config_from_rules(rules),
    )


def get_visibility_service(
    moderation_repo: SQLiteModerationRepo = Depends(get_moderation_repo),
    profile_repo: SQLiteProfileRepo = Depends(get_profile_repo),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> VisibilityService:
    return VisibilityService(
        moderation_repo, profile_repo, clock, visibility.load_config_from_rules(rules)
    )


def get_member_service(
    repo: SQLiteProfileRepo = Depends(get_profile_repo),
    moderation_service: ModerationService = Depends(get_moderation_service),
    clock: SystemClock = Depends(get_clock),
) -> MemberService:
    return MemberService(repo, moderation_service, clock)


# --- Auth ---
bearer_scheme = HTTPBearer(auto_error=False)


def get_token_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> dict[str, Any] | None:
    """Decoded claims, or None when no bearer token was sent."""
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    sub = payload.get("sub")
    try:
        UUID(str(sub))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        ) from None
    return payload


def get_optional_viewer_id(
    claims: dict[str, Any] | None = Depends(get_token_claims),
) -> UUID | None:
    return UUID(claims["sub"]) if claims else None


def get_current_member_id(
    claims: dict[str, Any] | None = Depends(get_token_claims),
) -> UUID:
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return UUID(claims["sub"])


def get_admin_id(
    claims: dict[str, Any] | None = Depends(get_token_claims),
    member_id: UUID = Depends(get_current_member_id),
) -> UUID:
    if not claims or claims.get("role") != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin only")
    return member_id
