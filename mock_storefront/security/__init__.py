# Security modules

from .auth import AuthDependency, create_access_token, decode_access_token, optional_user, require_user
from .payments import get_payment_verifier

__all__ = [
    "AuthDependency",
    "create_access_token",
    "decode_access_token",
    "optional_user",
    "require_user",
    "get_payment_verifier",
]
