"""
Payment Signature Verifier

Verifies gateway payment signatures. Used by the merchant server before
it is allowed to materialize an order.
"""

from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac

from .models import VerificationResult
from .signer import build_signature_base


class PaymentVerifier:
    """
    Verifies payment proofs produced by the gateway.

    Usage:
        verifier = PaymentVerifier(key_secret="...")

        result = verifier.verify(
            gateway_order_id="order_Nq1x...",
            payment_id="pay_Nq1y...",
            signature="5f2c...",
        )

        if result.is_valid:
            print(f"Payment {result.payment_id} is genuine")
    """

    def __init__(self, key_secret: str):
        """
        Initialize the payment verifier.

        Args:
            key_secret: Gateway key secret used to recompute signatures
        """
        if not key_secret:
            raise ValueError("Gateway key secret is required")

        self._key = key_secret.encode()

    def verify(
        self,
        gateway_order_id: Optional[str],
        payment_id: Optional[str],
        signature: Optional[str],
    ) -> VerificationResult:
        """
        Verify a payment signature.

        Args:
            gateway_order_id: Order id the payment was collected against
            payment_id: Payment id from the gateway callback
            signature: Hex encoded signature from the gateway callback

        Returns:
            VerificationResult indicating success/failure
        """
        if not gateway_order_id or not payment_id or not signature:
            return VerificationResult(
                is_valid=False,
                gateway_order_id=gateway_order_id,
                payment_id=payment_id,
                error_message="Payment verification details are incomplete",
            )

        try:
            signature_bytes = bytes.fromhex(signature)
        except ValueError:
            return VerificationResult(
                is_valid=False,
                gateway_order_id=gateway_order_id,
                payment_id=payment_id,
                error_message="Malformed payment signature",
            )

        mac = hmac.HMAC(self._key, hashes.SHA256())
        mac.update(build_signature_base(gateway_order_id, payment_id).encode())

        try:
            mac.verify(signature_bytes)
        except InvalidSignature:
            return VerificationResult(
                is_valid=False,
                gateway_order_id=gateway_order_id,
                payment_id=payment_id,
                error_message="Invalid payment signature",
            )

        return VerificationResult(
            is_valid=True,
            gateway_order_id=gateway_order_id,
            payment_id=payment_id,
        )
