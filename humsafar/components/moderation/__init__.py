"""
Moderation component.

Public API for the profile approval lifecycle.
"""

from .component import ModerationService, run_set_status
from .models import ModerationChange, SetStatusInput
from .ports import ModerationRepoPort

__all__ = [
    # Service
    "ModerationService",
    "run_set_status",
    # Models
    "ModerationChange",
    "SetStatusInput",
    # Ports
    "ModerationRepoPort",
]
