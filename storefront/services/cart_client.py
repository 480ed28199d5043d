"""
Remote Cart Accessor

Async client for the authenticated server cart resource.
"""

import logging
from typing import Iterable

from ..models.cart import Cart, CartLineItem, ItemIdentity
from .http_client import ApiClient

logger = logging.getLogger(__name__)


def _line_item_payload(item: CartLineItem) -> dict:
    return item.model_dump(mode="json", exclude={"product_snapshot"})


class CartClient(ApiClient):
    """
    Server cart operations. Every call returns the cart as the server now
    holds it.

    Usage:
        client = CartClient("http://localhost:8001", token_provider=tokens.get_access_token)
        cart = await client.get_cart()
        cart = await client.add_item(item)
    """

    @staticmethod
    def _cart(data: dict) -> Cart:
        return Cart.model_validate(data["cart"])

    async def get_cart(self) -> Cart:
        """Fetch the server cart (retried once on transient failures)"""
        return self._cart(await self._read("/api/cart"))

    async def add_item(self, item: CartLineItem) -> Cart:
        """Add an item; the server merges it by identity"""
        data = await self._request("POST", "/api/cart/items", body=_line_item_payload(item))
        return self._cart(data)

    async def update_quantity(self, identity: ItemIdentity, quantity: int) -> Cart:
        """Set an item's quantity; below 1 the server removes the item"""
        data = await self._request(
            "PUT",
            "/api/cart/items",
            body={"quantity": quantity},
            params=identity.to_params(),
        )
        return self._cart(data)

    async def remove_item(self, identity: ItemIdentity) -> Cart:
        data = await self._request("DELETE", "/api/cart/items", params=identity.to_params())
        return self._cart(data)

    async def clear_cart(self) -> Cart:
        return self._cart(await self._request("DELETE", "/api/cart"))

    async def merge_guest_cart(self, items: Iterable[CartLineItem]) -> Cart:
        """Carry guest items into the server cart, summing quantities by identity"""
        payload = {"items": [_line_item_payload(item) for item in items]}
        data = await self._request("POST", "/api/cart/merge-guest", body=payload)
        logger.info(f"Merged {len(payload['items'])} guest item(s) into server cart")
        return self._cart(data)
