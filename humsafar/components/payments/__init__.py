"""
Payment component.

Public API for checkout, review and gateway callbacks.
"""

from .component import (
    PaymentService,
    load_config_from_rules,
    map_amount_to_package,
    run_review,
    validate_review,
)
from .models import (
    AmountTierInfo,
    CheckoutInput,
    GatewayCallbackInput,
    GatewayCallbackOutput,
    PackageGrant,
    PaymentConfig,
    ReviewInput,
    ReviewOutput,
    SubmitScreenshotInput,
)
from .ports import EntitlementGrantPort, PaymentRepoPort

__all__ = [
    # Service
    "PaymentService",
    # Functions
    "load_config_from_rules",
    "map_amount_to_package",
    "run_review",
    "validate_review",
    # Models
    "AmountTierInfo",
    "CheckoutInput",
    "GatewayCallbackInput",
    "GatewayCallbackOutput",
    "PackageGrant",
    "PaymentConfig",
    "ReviewInput",
    "ReviewOutput",
    "SubmitScreenshotInput",
    # Ports
    "EntitlementGrantPort",
    "PaymentRepoPort",
]
