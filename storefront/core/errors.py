"""Storefront client exceptions"""

from typing import Optional


class StorefrontError(Exception):
    """Base exception for storefront client errors"""
    pass


class ValidationError(StorefrontError):
    """Client-side validation failed; never reaches the network"""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in self.errors.items()))


class ApiError(StorefrontError):
    """Storefront API returned an error response"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(f"{status_code}: {message}" if status_code else message)


class AuthRequiredError(ApiError):
    """Request needs an authenticated shopper (HTTP 401)"""
    pass


class TransientNetworkError(ApiError):
    """Timeout, connection failure or 5xx response"""
    pass


class PaymentCancelledError(StorefrontError):
    """Shopper dismissed the payment step"""
    pass


class VerificationError(StorefrontError):
    """Server rejected the payment proof or the re-priced draft"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class CheckoutInProgressError(StorefrontError):
    """A checkout is already running for this session"""
    pass


class InvalidTransitionError(StorefrontError):
    """Checkout state machine received an event it cannot handle"""
    pass
