import sqlite3
from datetime import UTC, datetime, timedelta
from unittest.mock import patch
from uuid import uuid4

import pytest

from humsafar.adapters.sqlite.repos import (
    SQLiteModerationRepo,
    SQLitePaymentRepo,
    SQLiteProfileRepo,
    SQLiteViewRepo,
)
from humsafar.domain.entities import (
    MemberProfile,
    ModerationRecord,
    PaymentRecord,
    ProfileImage,
    ProfileView,
)
from humsafar.domain.errors import StoreError

T0 = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def profiles(db_path):
    return SQLiteProfileRepo(db_path)


@pytest.fixture
def moderation(db_path):
    return SQLiteModerationRepo(db_path)


@pytest.fixture
def payments(db_path):
    return SQLitePaymentRepo(db_path)


@pytest.fixture
def views(db_path):
    return SQLiteViewRepo(db_path)


def add_profile(repo, created_at=T0, **fields):
    return repo.save(MemberProfile(created_at=created_at, updated_at=created_at, **fields))


# --- Profiles ---


def test_profile_round_trip(profiles):
    saved = add_profile(profiles, first_name="Hina", age=27, city="Karachi")

    loaded = profiles.get_by_id(saved.user_id)

    assert loaded == saved


def test_profile_upsert_updates_fields(profiles):
    saved = add_profile(profiles, city="Karachi")
    profiles.save(saved.model_copy(update={"city": "Lahore"}))
    assert profiles.get_by_id(saved.user_id).city == "Lahore"


def test_get_many_newest_first_with_limit(profiles):
    old = add_profile(profiles, created_at=T0)
    mid = add_profile(profiles, created_at=T0 + timedelta(days=1))
    new = add_profile(profiles, created_at=T0 + timedelta(days=2))

    result = profiles.get_many([old.user_id, mid.user_id, new.user_id], limit=2)

    assert [p.user_id for p in result] == [new.user_id, mid.user_id]
    assert profiles.get_many([]) == []


def test_main_image_prefers_is_main(profiles):
    p = add_profile(profiles)
    profiles.add_image(ProfileImage(user_id=p.user_id, image_url="/first.jpg", created_at=T0))
    profiles.add_image(
        ProfileImage(
            user_id=p.user_id, image_url="/main.jpg", is_main=True, created_at=T0 + timedelta(1)
        )
    )
    bare = add_profile(profiles)

    images = profiles.get_main_images([p.user_id, bare.user_id])

    assert images == {p.user_id: "/main.jpg"}


# --- Moderation ---


def test_moderation_round_trip_with_boost(profiles, moderation):
    p = add_profile(profiles)
    record = ModerationRecord(
        user_id=p.user_id,
        profile_status="approved",
        views_limit=20,
        boost_profile=True,
        boost_expires_at=T0 + timedelta(days=30),
        created_at=T0,
        updated_at=T0,
    )
    moderation.save(record)

    assert moderation.get(p.user_id) == record
    assert moderation.list_user_ids_by_status("approved") == [p.user_id]
    assert moderation.get_many([p.user_id, uuid4()]) == {p.user_id: record}


def test_negative_views_limit_rejected_by_schema(profiles, moderation):
    p = add_profile(profiles)
    record = ModerationRecord.model_construct(
        user_id=p.user_id,
        profile_status="pending",
        subscription_status="free",
        views_limit=-1,
        verified_badge=False,
        boost_profile=False,
        boost_expires_at=None,
        created_at=T0,
        updated_at=T0,
    )
    with pytest.raises(StoreError):
        moderation.save(record)


# --- Payments ---


def test_latest_payment(profiles, payments):
    p = add_profile(profiles)
    older = PaymentRecord(
        user_id=p.user_id, package_type="basic", payment_status="accepted", created_at=T0
    )
    newer = PaymentRecord(
        user_id=p.user_id,
        package_type="premium",
        payment_status="under_review",
        created_at=T0 + timedelta(days=1),
    )
    payments.save(older)
    payments.save(newer)

    assert payments.latest_for_user(p.user_id).id == newer.id
    assert [x.id for x in payments.list(status="accepted")] == [older.id]
    assert [x.id for x in payments.list(user_id=p.user_id)] == [newer.id, older.id]
    assert payments.latest_for_user(uuid4()) is None


def test_payment_update_keeps_immutable_columns(profiles, payments):
    p = add_profile(profiles)
    payment = PaymentRecord(user_id=p.user_id, package_type="basic", views_limit=20)
    payments.save(payment)

    reviewer = uuid4()
    payments.save(
        payment.model_copy(
            update={
                "payment_status": "rejected",
                "rejection_reason": "fake",
                "views_limit": 999,
                "reviewed_by": reviewer,
                "reviewed_at": T0,
            }
        )
    )

    loaded = payments.get_by_id(payment.id)
    assert loaded.payment_status == "rejected"
    assert loaded.rejection_reason == "fake"
    assert loaded.reviewed_by == reviewer
    assert loaded.views_limit == 20


# --- Views ---


def test_insert_if_absent(profiles, views):
    a, b = add_profile(profiles), add_profile(profiles)
    first = ProfileView(viewer_user_id=a.user_id, viewed_profile_user_id=b.user_id, viewed_at=T0)

    assert views.insert_if_absent(first) is True
    duplicate = ProfileView(
        viewer_user_id=a.user_id, viewed_profile_user_id=b.user_id, viewed_at=T0 + timedelta(1)
    )
    assert views.insert_if_absent(duplicate) is False

    assert views.count_for_viewer(a.user_id) == 1
    assert views.get(a.user_id, b.user_id).viewed_at == T0
    assert views.get(b.user_id, a.user_id) is None


def test_list_for_viewer_newest_first(profiles, views):
    a, b, c = add_profile(profiles), add_profile(profiles), add_profile(profiles)
    views.insert_if_absent(
        ProfileView(viewer_user_id=a.user_id, viewed_profile_user_id=b.user_id, viewed_at=T0)
    )
    views.insert_if_absent(
        ProfileView(
            viewer_user_id=a.user_id,
            viewed_profile_user_id=c.user_id,
            viewed_at=T0 + timedelta(hours=1),
        )
    )

    assert [v.viewed_profile_user_id for v in views.list_for_viewer(a.user_id)] == [
        c.user_id,
        b.user_id,
    ]


# --- Erasure & failures ---


def test_erase_cascades(profiles, moderation, payments, views):
    a, b = add_profile(profiles), add_profile(profiles)
    moderation.save(ModerationRecord(user_id=b.user_id))
    payments.save(PaymentRecord(user_id=b.user_id, package_type="basic"))
    profiles.add_image(ProfileImage(user_id=b.user_id, image_url="/b.jpg"))
    views.insert_if_absent(ProfileView(viewer_user_id=a.user_id, viewed_profile_user_id=b.user_id))
    views.insert_if_absent(ProfileView(viewer_user_id=b.user_id, viewed_profile_user_id=a.user_id))

    profiles.erase(b.user_id)

    assert profiles.get_by_id(b.user_id) is None
    assert moderation.get(b.user_id) is None
    assert payments.list(user_id=b.user_id) == []
    assert profiles.get_main_images([b.user_id]) == {}
    assert views.count_for_viewer(a.user_id) == 0
    assert profiles.get_by_id(a.user_id) is not None


def test_sqlite_errors_become_store_errors(tmp_path):
    repo = SQLiteViewRepo(str(tmp_path / "unmigrated.db"))
    with pytest.raises(StoreError) as exc:
        repo.count_for_viewer(uuid4())
    assert exc.value.operation == "count views"


def test_write_failure_rolls_back(profiles, moderation):
    p = add_profile(profiles)
    with patch.object(SQLiteModerationRepo, "_get_conn") as get_conn:
        conn = get_conn.return_value
        conn.execute.side_effect = sqlite3.OperationalError("database is locked")
        with pytest.raises(StoreError):
            moderation.save(ModerationRecord(user_id=p.user_id))
        conn.rollback.assert_called_once()
        conn.close.assert_called_once()
