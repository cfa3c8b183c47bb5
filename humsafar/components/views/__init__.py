"""
View component.

Public API for quota stats and view consumption.
"""

from .component import (
    ViewService,
    build_status_label,
    check_payment_gate,
    compute_remaining,
    format_status_label,
    load_config_from_rules,
)
from .models import RecordViewOutput, StatusLabel, ViewConfig, ViewStats
from .ports import LatestPaymentPort, ModerationReadPort, ProfileLookupPort, ViewRepoPort

__all__ = [
    # Service
    "ViewService",
    # Functions
    "build_status_label",
    "check_payment_gate",
    "compute_remaining",
    "format_status_label",
    "load_config_from_rules",
    # Models
    "RecordViewOutput",
    "StatusLabel",
    "ViewConfig",
    "ViewStats",
    # Ports
    "LatestPaymentPort",
    "ModerationReadPort",
    "ProfileLookupPort",
    "ViewRepoPort",
]
