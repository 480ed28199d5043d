"""
Order Materialization Accessor

Shipping quotes, payment intents and server-side order creation. The
client never creates an order itself: an order exists only after the
server has verified the gateway's payment proof.
"""

import logging

from ..core.errors import ApiError, AuthRequiredError, TransientNetworkError, VerificationError
from ..models.checkout import CheckoutDraft, Order, PaymentIntent, PaymentProof, ShippingQuote
from .http_client import ApiClient

logger = logging.getLogger(__name__)


class OrderClient(ApiClient):
    """Order endpoints of the storefront API"""

    async def get_shipping_quote(self) -> ShippingQuote:
        return ShippingQuote.model_validate(await self._read("/api/orders/shipping-cost"))

    async def create_payment_intent(self, draft: CheckoutDraft) -> PaymentIntent:
        """
        Ask the server to open a gateway order for the draft.

        Not retried. Creates no Order.
        """
        data = await self._request(
            "POST",
            "/api/orders/payment/create-intent",
            body=draft.to_payload(),
        )
        intent = PaymentIntent.model_validate(data)
        logger.info(f"Payment intent created: {intent.gateway_order_id} ({intent.amount} {intent.currency})")
        return intent

    async def verify_and_create_order(self, proof: PaymentProof, draft: CheckoutDraft) -> Order:
        """
        Submit the payment proof with the draft; the server verifies the
        signature, re-prices the draft and creates the order.

        Not retried. Raises:
            VerificationError: Server rejected the proof or the draft
            AuthRequiredError: Shopper is no longer authenticated
            TransientNetworkError: Outcome unknown
        """
        body = {**proof.model_dump(mode="json"), "draft": draft.to_payload()}

        try:
            data = await self._request("POST", "/api/orders/payment/verify-and-create", body=body)
        except (AuthRequiredError, TransientNetworkError):
            raise
        except ApiError as e:
            raise VerificationError(e.message, e.status_code) from e

        order = Order.model_validate(data["order"])
        logger.info(f"Order {order.order_number} created for payment {proof.payment_id}")
        return order

    async def get_order(self, order_id: str) -> Order:
        return Order.model_validate(await self._read(f"/api/orders/{order_id}"))

    async def list_my_orders(self) -> list[Order]:
        data = await self._read("/api/orders/my-orders")
        return [Order.model_validate(order) for order in data]
