import os
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

import pytest

from humsafar.adapters.clock import FixedClock
from humsafar.adapters.sqlite.migrator import SQLiteMigrator
from humsafar.app_shell.context import ServiceContext
from humsafar.components.moderation import SetStatusInput
from humsafar.domain.entities import MemberProfile, ProfileStatus
from humsafar.rules.loader import load_rules
from humsafar.rules.models import Rules

START = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def rules() -> Rules:
    # REAL rules from the project root
    return load_rules()


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    path = os.path.join(tmp_path, "humsafar.db")
    SQLiteMigrator(path).run_migrations()
    return path


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(START)


@pytest.fixture
def test_ctx(db_path: str, rules: Rules, clock: FixedClock) -> ServiceContext:
    """
    Full ServiceContext backed by a temporary, migrated SQLite DB.
    """
    return ServiceContext.create(db_path, rules, clock)


def register_member(
    ctx: ServiceContext,
    status: ProfileStatus = "approved",
    views_limit: int = 0,
    **fields: Any,
) -> UUID:
    """Register a member, move them to ``status`` and set their quota."""
    profile = MemberProfile(user_id=uuid4(), first_name=fields.pop("first_name", "Ayesha"), **fields)
    profile, _ = ctx.member_service.register(profile)
    if status != "pending":
        ctx.moderation_service.set_status(SetStatusInput(user_id=profile.user_id, new_status=status))
    if views_limit:
        ctx.entitlement_service.override_views_limit(profile.user_id, views_limit)
    return profile.user_id


@pytest.fixture
def member_factory(test_ctx: ServiceContext) -> Any:
    def _make(status: ProfileStatus = "approved", views_limit: int = 0, **fields: Any) -> UUID:
        return register_member(test_ctx, status, views_limit, **fields)

    return _make


# --- API ---


@pytest.fixture
def api_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point the API settings at a fresh data dir for one test."""
    from humsafar.api.deps import get_rules, get_settings

    data_dir = tmp_path / "api-data"
    monkeypatch.setenv("HUMSAFAR_DATA_DIR", str(data_dir))
    get_settings.cache_clear()
    get_rules.cache_clear()
    yield data_dir
    get_settings.cache_clear()
    get_rules.cache_clear()


@pytest.fixture
def client(api_data_dir: Path) -> Iterator[Any]:
    from fastapi.testclient import TestClient

    from humsafar.api.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def api_ctx(client: Any, api_data_dir: Path, rules: Rules) -> ServiceContext:
    """Services on the same database the running app uses (already migrated)."""
    return ServiceContext.create(str(api_data_dir / "humsafar.db"), rules)


def auth_headers(user_id: UUID, role: str = "member") -> dict[str, str]:
    from humsafar.api.auth_utils import create_access_token

    token = create_access_token({"sub": str(user_id), "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers() -> Any:
    return auth_headers


@pytest.fixture
def api_member_factory(api_ctx: ServiceContext) -> Any:
    def _make(status: ProfileStatus = "approved", views_limit: int = 0, **fields: Any) -> UUID:
        return register_member(api_ctx, status, views_limit, **fields)

    return _make
