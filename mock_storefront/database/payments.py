"""Gateway order storage for mock storefront"""

import time
import uuid
from datetime import datetime, timezone
from typing import Optional

from ..models.order import GatewayOrder


class GatewayOrderDatabase:
    """In-memory stand-in for orders opened on the payment gateway"""

    def __init__(self):
        self.orders: dict[str, GatewayOrder] = {}

    def create_order(self, user_id: str, amount: int, currency: str) -> GatewayOrder:
        """Open a gateway order; amount is in the smallest currency unit"""
        order = GatewayOrder(
            id=f"order_{uuid.uuid4().hex[:14]}",
            user_id=user_id,
            amount=amount,
            currency=currency,
            receipt=f"RECEIPT_{str(int(time.time() * 1000))[-6:]}",
            created_at=datetime.now(timezone.utc),
        )
        self.orders[order.id] = order
        return order

    def get_order(self, gateway_order_id: str) -> Optional[GatewayOrder]:
        return self.orders.get(gateway_order_id)

    def mark_paid(self, gateway_order_id: str) -> Optional[GatewayOrder]:
        order = self.get_order(gateway_order_id)
        if order:
            order.status = "paid"
        return order


# Singleton instance
gateway_order_db = GatewayOrderDatabase()
