"""
Visibility component.

Public API for browse and featured listings.
"""

from .component import (
    VisibilityService,
    build_summary,
    calculate_completion,
    is_filled,
    load_config_from_rules,
    rank_profiles,
)
from .models import DEFAULT_TRACKED_FIELDS, ProfileSummary, VisibilityConfig, VisibilityInfo
from .ports import ModerationQueryPort, ProfileQueryPort

__all__ = [
    # Service
    "VisibilityService",
    # Functions
    "build_summary",
    "calculate_completion",
    "is_filled",
    "load_config_from_rules",
    "rank_profiles",
    # Models
    "DEFAULT_TRACKED_FIELDS",
    "ProfileSummary",
    "VisibilityConfig",
    "VisibilityInfo",
    # Ports
    "ModerationQueryPort",
    "ProfileQueryPort",
]
