"""Gateway payment signature verification for order creation"""

import logging
from functools import lru_cache

from paysig import PaymentVerifier

from ..config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_payment_verifier() -> PaymentVerifier:
    """
    Create the verifier for gateway payment signatures.

    The gateway signs with the merchant's key secret, so the same secret
    recomputes the signature here.
    """
    logger.info(f"Payment verification enabled for gateway key {settings.gateway_key_id}")
    return PaymentVerifier(settings.gateway_key_secret)
