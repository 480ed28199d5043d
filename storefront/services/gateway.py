"""
Payment Gateway Port

The user-facing payment step. A real integration opens the gateway's
checkout widget; SimulatedGateway settles payments locally and signs the
proof the same way the gateway does, so the server can verify it.
"""

import asyncio
import logging
import uuid
from enum import Enum
from typing import Optional, Protocol

from paysig import PaymentSigner

from ..core.errors import PaymentCancelledError
from ..models.checkout import PaymentIntent, PaymentProof

logger = logging.getLogger(__name__)


class PaymentGateway(Protocol):
    """Collects a payment for an intent"""

    async def collect_payment(self, intent: PaymentIntent, prefill: dict[str, str]) -> PaymentProof:
        """
        Wait for the shopper to pay.

        The wait is unbounded and may be cancelled.

        Raises:
            PaymentCancelledError: Shopper dismissed the gateway
        """
        ...


class GatewayBehavior(str, Enum):
    APPROVE = "approve"
    DISMISS = "dismiss"
    HOLD = "hold"


class SimulatedGateway:
    """
    Local stand-in for the gateway checkout widget.

    APPROVE pays immediately, DISMISS behaves like the shopper closing the
    widget, HOLD waits until approve() or dismiss() is called.

    Usage:
        gateway = SimulatedGateway(key_secret, behavior=GatewayBehavior.HOLD)
        task = asyncio.create_task(checkout.submit(address))
        ...
        gateway.approve()
    """

    def __init__(
        self,
        key_secret: str,
        behavior: GatewayBehavior = GatewayBehavior.APPROVE,
    ):
        self.signer = PaymentSigner(key_secret)
        self.behavior = behavior
        self.collected: list[PaymentIntent] = []
        self.last_prefill: dict[str, str] = {}
        self._pending: Optional[asyncio.Future] = None
        self._pending_intent: Optional[PaymentIntent] = None

    def _proof(self, intent: PaymentIntent) -> PaymentProof:
        payment_id = f"pay_{uuid.uuid4().hex[:14]}"
        signature = self.signer.sign(intent.gateway_order_id, payment_id)
        return PaymentProof(
            gateway_order_id=intent.gateway_order_id,
            payment_id=payment_id,
            signature=signature.signature,
        )

    @property
    def is_waiting(self) -> bool:
        return self._pending is not None and not self._pending.done()

    async def collect_payment(self, intent: PaymentIntent, prefill: dict[str, str]) -> PaymentProof:
        self.collected.append(intent)
        self.last_prefill = dict(prefill)
        logger.info(f"Collecting payment for {intent.gateway_order_id}: {intent.amount} {intent.currency}")

        if self.behavior == GatewayBehavior.APPROVE:
            return self._proof(intent)
        if self.behavior == GatewayBehavior.DISMISS:
            raise PaymentCancelledError("Payment cancelled by user")

        self._pending = asyncio.get_running_loop().create_future()
        self._pending_intent = intent
        try:
            return await self._pending
        finally:
            self._pending = None
            self._pending_intent = None

    def approve(self) -> None:
        """Complete the held payment"""
        if not self.is_waiting:
            raise RuntimeError("No payment is waiting for approval")
        self._pending.set_result(self._proof(self._pending_intent))

    def dismiss(self) -> None:
        """Close the widget on the held payment"""
        if not self.is_waiting:
            raise RuntimeError("No payment is waiting to be dismissed")
        self._pending.set_exception(PaymentCancelledError("Payment cancelled by user"))
