"""Payment signature data models"""

from dataclasses import dataclass
from typing import Optional
from enum import Enum


class SignatureAlgorithm(str, Enum):
    """Supported signature algorithms"""
    HMAC_SHA256 = "hmac-sha256"


@dataclass
class PaymentSignature:
    """Proof of payment as handed back by the gateway on success"""
    gateway_order_id: str
    payment_id: str
    signature: str
    algorithm: SignatureAlgorithm = SignatureAlgorithm.HMAC_SHA256

    def to_payload(self) -> dict[str, str]:
        """Convert to the request body fields used by verify-and-create"""
        return {
            "gateway_order_id": self.gateway_order_id,
            "payment_id": self.payment_id,
            "signature": self.signature,
        }


@dataclass
class VerificationResult:
    """Result of payment signature verification"""
    is_valid: bool
    gateway_order_id: Optional[str] = None
    payment_id: Optional[str] = None
    error_message: Optional[str] = None
