"""
Entitlement component models.

Maps package and add-on purchases onto the moderation record's quota and
feature flags.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from humsafar.domain.entities import ModerationRecord

# --- Catalog ---


@dataclass(frozen=True)
class PackageInfo:
    key: str
    label: str
    price: float
    views: int


@dataclass(frozen=True)
class AddonInfo:
    key: str
    label: str
    price: float
    sets_flag: bool = False
    duration_days: int | None = None


@dataclass(frozen=True)
class EntitlementConfig:
    """Package and add-on catalog loaded from rules."""

    packages: dict[str, PackageInfo] = field(default_factory=dict)
    addons: dict[str, AddonInfo] = field(default_factory=dict)
    addon_package_type: str = "add_on"

    def package_label(self, package_type: str) -> str:
        info = self.packages.get(package_type)
        if info is not None:
            return info.label
        # Unknown tiers (e.g. "custom") keep a readable label
        return f"{package_type.replace('_', ' ').title()} Package"


# --- Grants ---


@dataclass(frozen=True)
class GrantOutput:
    """Result of any entitlement change."""

    record: ModerationRecord
    views_added: int = 0
    flag_set: str | None = None


@dataclass(frozen=True)
class SyncResult:
    """Per-user outcome of reconciling quota with accepted payments."""

    user_id: UUID
    views_limit: int
    subscription_status: str


@dataclass(frozen=True)
class SyncOutput:
    updated: list[SyncResult]
    skipped: list[UUID]
