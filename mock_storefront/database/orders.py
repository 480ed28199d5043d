"""Order storage for mock storefront"""

import time
import uuid
from datetime import datetime, timezone
from typing import Optional

from ..models.order import (
    CheckoutDraft,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Pricing,
)


class OrderDatabase:
    """In-memory order storage"""

    def __init__(self):
        self.orders: dict[str, Order] = {}
        self._by_payment: dict[str, str] = {}
        self._by_gateway_order: dict[str, str] = {}

    def _order_number(self) -> str:
        timestamp = str(int(time.time() * 1000))[-6:]
        return f"ORD{timestamp}{len(self.orders) + 1:04d}"

    def create_paid_order(
        self,
        user_id: str,
        draft: CheckoutDraft,
        items: list[OrderItem],
        pricing: Pricing,
        gateway_order_id: str,
        payment_id: str,
    ) -> Order:
        """Create an order whose payment the gateway has already confirmed"""
        now = datetime.now(timezone.utc)

        order = Order(
            order_id=f"ORD-{uuid.uuid4().hex[:8].upper()}",
            order_number=self._order_number(),
            user_id=user_id,
            status=OrderStatus.CONFIRMED,
            payment_status=PaymentStatus.PAID,
            items=items,
            pricing=pricing,
            shipping_address=draft.shipping_address,
            payment_method=draft.payment_method,
            gateway_order_id=gateway_order_id,
            payment_id=payment_id,
            created_at=now,
            updated_at=now,
        )

        self.orders[order.order_id] = order
        self._by_payment[payment_id] = order.order_id
        self._by_gateway_order[gateway_order_id] = order.order_id
        return order

    def get_order(self, order_id: str) -> Optional[Order]:
        """Get an order by ID"""
        return self.orders.get(order_id)

    def find_by_payment(self, payment_id: str) -> Optional[Order]:
        order_id = self._by_payment.get(payment_id)
        return self.orders.get(order_id) if order_id else None

    def find_by_gateway_order(self, gateway_order_id: str) -> Optional[Order]:
        """Order already settled against a gateway order, if any"""
        order_id = self._by_gateway_order.get(gateway_order_id)
        return self.orders.get(order_id) if order_id else None

    def list_for_user(self, user_id: str) -> list[Order]:
        """Shopper's orders, newest first"""
        orders = [o for o in self.orders.values() if o.user_id == user_id]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def clear(self) -> None:
        self.orders.clear()
        self._by_payment.clear()
        self._by_gateway_order.clear()


# Singleton instance
order_db = OrderDatabase()
