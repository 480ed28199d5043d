# Core modules

from .config import Settings, get_settings, settings
from .errors import (
    ApiError,
    AuthRequiredError,
    CheckoutInProgressError,
    InvalidTransitionError,
    PaymentCancelledError,
    StorefrontError,
    TransientNetworkError,
    ValidationError,
    VerificationError,
)

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "StorefrontError",
    "ValidationError",
    "ApiError",
    "AuthRequiredError",
    "TransientNetworkError",
    "PaymentCancelledError",
    "VerificationError",
    "CheckoutInProgressError",
    "InvalidTransitionError",
]
