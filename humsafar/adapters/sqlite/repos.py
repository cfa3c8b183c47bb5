"""
SQLite repositories for profiles, moderation, payments and view consumption.

Every public method opens its own connection, so repos are safe to share
between request handlers. ``sqlite3.Error`` never escapes: it is rolled
back and re-raised as ``StoreError``.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Any
from uuid import UUID

from humsafar.domain.entities import (
    MemberProfile,
    ModerationRecord,
    PaymentRecord,
    PaymentStatus,
    ProfileImage,
    ProfileStatus,
    ProfileView,
)
from humsafar.domain.errors import StoreError

PROFILE_COLUMNS = (
    "user_id",
    "first_name",
    "middle_name",
    "last_name",
    "email",
    "phone",
    "age",
    "gender",
    "city",
    "religion",
    "sect",
    "caste",
    "mother_tongue",
    "marital_status",
    "nationality",
    "ethnicity",
    "education",
    "field_of_study",
    "created_at",
    "updated_at",
)


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def parse_dt(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


def format_dt(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


def placeholders(n: int) -> str:
    return ", ".join("?" for _ in range(n))


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, timeout: float = 10.0):
        self.db_path = db_path
        self.timeout = timeout

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _read(self, operation: str, sql: str, params: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            return conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StoreError(operation, e) from e
        finally:
            conn.close()

    def _write(self, operation: str, sql: str, params: tuple[Any, ...] = ()) -> int:
        """Run one write statement in its own transaction. Returns rowcount."""
        conn = self._get_conn()
        try:
            cursor = conn.execute(sql, params)
            conn.commit()
            return cursor.rowcount
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(operation, e) from e
        finally:
            conn.close()


# -----------------------------------------------------------------------------
# Member profiles & images
# -----------------------------------------------------------------------------


class SQLiteProfileRepo(SQLiteRepoBase):
    def save(self, profile: MemberProfile) -> MemberProfile:
        data = profile.model_dump()
        values = []
        for col in PROFILE_COLUMNS:
            value = data[col]
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, UUID):
                value = str(value)
            values.append(value)

        updates = ", ".join(
            f"{col}=excluded.{col}" for col in PROFILE_COLUMNS if col not in ("user_id", "created_at")
        )
        self._write(
            "save profile",
            f"""
            INSERT INTO member_profiles ({", ".join(PROFILE_COLUMNS)})
            VALUES ({placeholders(len(PROFILE_COLUMNS))})
            ON CONFLICT(user_id) DO UPDATE SET {updates}
            """,
            tuple(values),
        )
        return profile

    def _row_to_profile(self, row: dict[str, Any]) -> MemberProfile:
        data = dict(row)
        data["user_id"] = UUID(data["user_id"])
        data["created_at"] = parse_dt(data["created_at"])
        data["updated_at"] = parse_dt(data["updated_at"])
        return MemberProfile(**data)

    def get_by_id(self, user_id: UUID) -> MemberProfile | None:
        rows = self._read(
            "get profile",
            "SELECT * FROM member_profiles WHERE user_id = ?",
            (str(user_id),),
        )
        return self._row_to_profile(rows[0]) if rows else None

    def get_many(self, user_ids: list[UUID], limit: int | None = None) -> list[MemberProfile]:
        if not user_ids:
            return []
        query = (
            f"SELECT * FROM member_profiles WHERE user_id IN ({placeholders(len(user_ids))}) "
            "ORDER BY created_at DESC"
        )
        params: list[Any] = [str(uid) for uid in user_ids]
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        rows = self._read("list profiles", query, tuple(params))
        return [self._row_to_profile(row) for row in rows]

    def add_image(self, image: ProfileImage) -> ProfileImage:
        self._write(
            "add image",
            """
            INSERT INTO profile_images (id, user_id, image_url, is_main, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                str(image.id),
                str(image.user_id),
                image.image_url,
                int(image.is_main),
                image.created_at.isoformat(),
            ),
        )
        return image

    def get_main_images(self, user_ids: list[UUID]) -> dict[UUID, str]:
        if not user_ids:
            return {}
        rows = self._read(
            "get images",
            f"""
            SELECT user_id, image_url FROM profile_images
            WHERE user_id IN ({placeholders(len(user_ids))})
            ORDER BY is_main DESC, created_at ASC
            """,
            tuple(str(uid) for uid in user_ids),
        )
        images: dict[UUID, str] = {}
        for row in rows:
            images.setdefault(UUID(row["user_id"]), row["image_url"])
        return images

    def erase(self, user_id: UUID) -> None:
        uid = str(user_id)
        conn = self._get_conn()
        try:
            # Explicit deletes so older databases without cascades behave the same
            conn.execute(
                "DELETE FROM profile_views WHERE viewer_user_id = ? OR viewed_profile_user_id = ?",
                (uid, uid),
            )
            conn.execute("DELETE FROM payments WHERE user_id = ?", (uid,))
            conn.execute("DELETE FROM moderation_records WHERE user_id = ?", (uid,))
            conn.execute("DELETE FROM profile_images WHERE user_id = ?", (uid,))
            conn.execute("DELETE FROM member_profiles WHERE user_id = ?", (uid,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError("erase member", e) from e
        finally:
            conn.close()


# -----------------------------------------------------------------------------
# Moderation records
# -----------------------------------------------------------------------------


class SQLiteModerationRepo(SQLiteRepoBase):
    def _row_to_record(self, row: dict[str, Any]) -> ModerationRecord:
        return ModerationRecord(
            user_id=UUID(row["user_id"]),
            profile_status=row["profile_status"],
            subscription_status=row["subscription_status"],
            views_limit=row["views_limit"],
            verified_badge=bool(row["verified_badge"]),
            boost_profile=bool(row["boost_profile"]),
            boost_expires_at=parse_dt(row.get("boost_expires_at")),
            created_at=parse_dt(row["created_at"]),
            updated_at=parse_dt(row["updated_at"]),
        )

    def get(self, user_id: UUID) -> ModerationRecord | None:
        rows = self._read(
            "get moderation record",
            "SELECT * FROM moderation_records WHERE user_id = ?",
            (str(user_id),),
        )
        return self._row_to_record(rows[0]) if rows else None

    def get_many(self, user_ids: list[UUID]) -> dict[UUID, ModerationRecord]:
        if not user_ids:
            return {}
        rows = self._read(
            "get moderation records",
            f"SELECT * FROM moderation_records WHERE user_id IN ({placeholders(len(user_ids))})",
            tuple(str(uid) for uid in user_ids),
        )
        records = (self._row_to_record(row) for row in rows)
        return {record.user_id: record for record in records}

    def save(self, record: ModerationRecord) -> ModerationRecord:
        self._write(
            "save moderation record",
            """
            INSERT INTO moderation_records (
                user_id, profile_status, subscription_status, views_limit,
                verified_badge, boost_profile, boost_expires_at, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                profile_status=excluded.profile_status,
                subscription_status=excluded.subscription_status,
                views_limit=excluded.views_limit,
                verified_badge=excluded.verified_badge,
                boost_profile=excluded.boost_profile,
                boost_expires_at=excluded.boost_expires_at,
                updated_at=excluded.updated_at
            """,
            (
                str(record.user_id),
                record.profile_status,
                record.subscription_status,
                record.views_limit,
                int(record.verified_badge),
                int(record.boost_profile),
                format_dt(record.boost_expires_at),
                record.created_at.isoformat(),
                record.updated_at.isoformat(),
            ),
        )
        return record

    def list_user_ids_by_status(self, status: ProfileStatus) -> list[UUID]:
        rows = self._read(
            "list user ids by status",
            "SELECT user_id FROM moderation_records WHERE profile_status = ?",
            (status,),
        )
        return [UUID(row["user_id"]) for row in rows]


# -----------------------------------------------------------------------------
# Payments
# -----------------------------------------------------------------------------


class SQLitePaymentRepo(SQLiteRepoBase):
    def _row_to_payment(self, row: dict[str, Any]) -> PaymentRecord:
        return PaymentRecord(
            id=UUID(row["id"]),
            user_id=UUID(row["user_id"]),
            amount=row["amount"],
            currency=row["currency"],
            package_type=row["package_type"],
            addon_key=row["addon_key"],
            views_limit=row["views_limit"],
            payment_status=row["payment_status"],
            payment_method=row["payment_method"],
            rejection_reason=row["rejection_reason"],
            screenshot_ref=row["screenshot_ref"],
            gateway_reference=row["gateway_reference"],
            reviewed_at=parse_dt(row["reviewed_at"]),
            reviewed_by=UUID(row["reviewed_by"]) if row["reviewed_by"] else None,
            created_at=parse_dt(row["created_at"]),
            updated_at=parse_dt(row["updated_at"]),
        )

    def save(self, payment: PaymentRecord) -> PaymentRecord:
        self._write(
            "save payment",
            """
            INSERT INTO payments (
                id, user_id, amount, currency, package_type, addon_key, views_limit,
                payment_status, payment_method, rejection_reason, screenshot_ref,
                gateway_reference, reviewed_at, reviewed_by, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                payment_status=excluded.payment_status,
                rejection_reason=excluded.rejection_reason,
                screenshot_ref=excluded.screenshot_ref,
                reviewed_at=excluded.reviewed_at,
                reviewed_by=excluded.reviewed_by,
                updated_at=excluded.updated_at
            """,
            (
                str(payment.id),
                str(payment.user_id),
                payment.amount,
                payment.currency,
                payment.package_type,
                payment.addon_key,
                payment.views_limit,
                payment.payment_status,
                payment.payment_method,
                payment.rejection_reason,
                payment.screenshot_ref,
                payment.gateway_reference,
                format_dt(payment.reviewed_at),
                str(payment.reviewed_by) if payment.reviewed_by else None,
                payment.created_at.isoformat(),
                payment.updated_at.isoformat(),
            ),
        )
        return payment

    def get_by_id(self, payment_id: UUID) -> PaymentRecord | None:
        rows = self._read(
            "get payment", "SELECT * FROM payments WHERE id = ?", (str(payment_id),)
        )
        return self._row_to_payment(rows[0]) if rows else None

    def delete(self, payment_id: UUID) -> None:
        self._write("delete payment", "DELETE FROM payments WHERE id = ?", (str(payment_id),))

    def latest_for_user(self, user_id: UUID) -> PaymentRecord | None:
        rows = self._read(
            "latest payment",
            "SELECT * FROM payments WHERE user_id = ? ORDER BY created_at DESC, rowid DESC LIMIT 1",
            (str(user_id),),
        )
        return self._row_to_payment(rows[0]) if rows else None

    def list(
        self,
        status: PaymentStatus | None = None,
        user_id: UUID | None = None,
    ) -> list[PaymentRecord]:
        query = "SELECT * FROM payments WHERE 1=1"
        params: list[Any] = []
        if status:
            query += " AND payment_status = ?"
            params.append(status)
        if user_id:
            query += " AND user_id = ?"
            params.append(str(user_id))
        query += " ORDER BY created_at DESC, rowid DESC"
        rows = self._read("list payments", query, tuple(params))
        return [self._row_to_payment(row) for row in rows]


# -----------------------------------------------------------------------------
# View consumption log
# -----------------------------------------------------------------------------


class SQLiteViewRepo(SQLiteRepoBase):
    def _row_to_view(self, row: dict[str, Any]) -> ProfileView:
        return ProfileView(
            id=UUID(row["id"]),
            viewer_user_id=UUID(row["viewer_user_id"]),
            viewed_profile_user_id=UUID(row["viewed_profile_user_id"]),
            viewed_at=parse_dt(row["viewed_at"]),
        )

    def insert_if_absent(self, view: ProfileView) -> bool:
        # The unique index on the pair decides; no read-then-write.
        inserted = self._write(
            "record view",
            """
            INSERT INTO profile_views (id, viewer_user_id, viewed_profile_user_id, viewed_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(viewer_user_id, viewed_profile_user_id) DO NOTHING
            """,
            (
                str(view.id),
                str(view.viewer_user_id),
                str(view.viewed_profile_user_id),
                view.viewed_at.isoformat(),
            ),
        )
        return inserted == 1

    def get(self, viewer_id: UUID, target_id: UUID) -> ProfileView | None:
        rows = self._read(
            "get view",
            "SELECT * FROM profile_views WHERE viewer_user_id = ? AND viewed_profile_user_id = ?",
            (str(viewer_id), str(target_id)),
        )
        return self._row_to_view(rows[0]) if rows else None

    def count_for_viewer(self, viewer_id: UUID) -> int:
        rows = self._read(
            "count views",
            "SELECT COUNT(*) AS n FROM profile_views WHERE viewer_user_id = ?",
            (str(viewer_id),),
        )
        return int(rows[0]["n"])

    def list_for_viewer(self, viewer_id: UUID) -> list[ProfileView]:
        rows = self._read(
            "list views",
            "SELECT * FROM profile_views WHERE viewer_user_id = ? ORDER BY viewed_at DESC",
            (str(viewer_id),),
        )
        return [self._row_to_view(row) for row in rows]
