"""
Payment Signature Generator

Produces the signature a payment gateway attaches to a successful
payment callback. The scheme is HMAC-SHA256 keyed with the merchant's
gateway secret over "<gateway_order_id>|<payment_id>", hex encoded.
"""

from cryptography.hazmat.primitives import hashes, hmac

from .models import PaymentSignature, SignatureAlgorithm


def build_signature_base(gateway_order_id: str, payment_id: str) -> str:
    """Build the string that is signed for a payment"""
    return f"{gateway_order_id}|{payment_id}"


class PaymentSigner:
    """
    Signs payment callbacks with the gateway key secret.

    Usage:
        signer = PaymentSigner(key_secret="...")

        sig = signer.sign(
            gateway_order_id="order_Nq1x...",
            payment_id="pay_Nq1y...",
        )

        body = sig.to_payload()
    """

    def __init__(
        self,
        key_secret: str,
        algorithm: SignatureAlgorithm = SignatureAlgorithm.HMAC_SHA256,
    ):
        """
        Initialize the payment signer.

        Args:
            key_secret: Gateway key secret shared with the merchant server
            algorithm: Signature algorithm to use
        """
        if not key_secret:
            raise ValueError("Gateway key secret is required")

        self.algorithm = algorithm
        self._key = key_secret.encode()

    def sign(self, gateway_order_id: str, payment_id: str) -> PaymentSignature:
        """
        Generate the signature for a captured payment.

        Args:
            gateway_order_id: Order id issued by the gateway for the intent
            payment_id: Payment id issued by the gateway on capture

        Returns:
            PaymentSignature carrying the proof triple
        """
        signature_base = build_signature_base(gateway_order_id, payment_id)

        return PaymentSignature(
            gateway_order_id=gateway_order_id,
            payment_id=payment_id,
            signature=self._create_signature(signature_base),
            algorithm=self.algorithm,
        )

    def _create_signature(self, signature_base: str) -> str:
        """Create the hex encoded HMAC"""
        mac = hmac.HMAC(self._key, hashes.SHA256())
        mac.update(signature_base.encode())
        return mac.finalize().hex()
