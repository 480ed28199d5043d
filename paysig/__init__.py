# Payment gateway signatures
# HMAC-SHA256 over "<gateway_order_id>|<payment_id>"

from .signer import PaymentSigner
from .verifier import PaymentVerifier
from .models import PaymentSignature, VerificationResult

__all__ = ["PaymentSigner", "PaymentVerifier", "PaymentSignature", "VerificationResult"]
