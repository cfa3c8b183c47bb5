"""
Entitlement component.

Public API for package, add-on and admin quota grants.
"""

from .component import (
    EntitlementService,
    aggregate_accepted_payments,
    apply_addon_status,
    load_config_from_rules,
)
from .models import (
    AddonInfo,
    EntitlementConfig,
    GrantOutput,
    PackageInfo,
    SyncOutput,
    SyncResult,
)
from .ports import AcceptedPaymentsPort, ModerationRecordPort

__all__ = [
    # Service
    "EntitlementService",
    # Functions
    "aggregate_accepted_payments",
    "apply_addon_status",
    "load_config_from_rules",
    # Models
    "AddonInfo",
    "EntitlementConfig",
    "GrantOutput",
    "PackageInfo",
    "SyncOutput",
    "SyncResult",
    # Ports
    "AcceptedPaymentsPort",
    "ModerationRecordPort",
]
