"""
Cart Consistency Engine

One cart view regardless of who owns the cart. Guest carts are read and
written whole in local storage; authenticated carts are changed
optimistically in the cart cache and rolled back if the server call
fails. The owner is decided on every call, so logging in or out between
two calls switches storage without any extra step.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Protocol

from ..models.cart import Cart, CartLineItem, ItemIdentity
from .cart_cache import SERVER_CART_KEY, CartCache
from .cart_client import CartClient
from .local_store import LocalCartStore

logger = logging.getLogger(__name__)


class CartStrategy(Protocol):
    """Cart operations shared by guest and authenticated storage"""

    async def get_cart(self) -> Cart: ...

    async def add_item(self, item: CartLineItem) -> Cart: ...

    async def update_quantity(self, identity: ItemIdentity, quantity: int) -> Cart: ...

    async def remove_item(self, identity: ItemIdentity) -> Cart: ...

    async def clear(self) -> Cart: ...


class LocalCart:
    """Guest cart: read, change in memory, write back"""

    def __init__(self, store: LocalCartStore):
        self.store = store

    def _apply(self, change: Callable[[Cart], Cart]) -> Cart:
        cart = change(self.store.load())
        self.store.save(cart)
        return cart

    async def get_cart(self) -> Cart:
        return self.store.load()

    async def add_item(self, item: CartLineItem) -> Cart:
        return self._apply(lambda cart: cart.with_item(item))

    async def update_quantity(self, identity: ItemIdentity, quantity: int) -> Cart:
        return self._apply(lambda cart: cart.with_quantity(identity, quantity))

    async def remove_item(self, identity: ItemIdentity) -> Cart:
        return self._apply(lambda cart: cart.without(identity))

    async def clear(self) -> Cart:
        self.store.clear()
        return Cart()


class RemoteCart:
    """Authenticated cart: optimistic cache write, server call, rollback on failure"""

    def __init__(self, client: CartClient, cache: CartCache, key: str = SERVER_CART_KEY):
        self.client = client
        self.cache = cache
        self.key = key

    async def get_cart(self) -> Cart:
        cached = self.cache.get(self.key)
        if cached is not None and not self.cache.is_stale(self.key):
            return cached
        return await self.cache.fetch(self.key, self.client.get_cart)

    async def _mutate(
        self,
        action: str,
        change: Callable[[Cart], Cart],
        call: Callable[[], Awaitable[Cart]],
    ) -> Cart:
        # A refetch started before this write would land the pre-change cart
        self.cache.cancel_fetch(self.key)

        snapshot = self.cache.get(self.key)
        if snapshot is None:
            snapshot = await self.cache.fetch(self.key, self.client.get_cart)

        self.cache.set(self.key, change(snapshot))

        try:
            cart = await call()
        except (Exception, asyncio.CancelledError) as e:
            logger.warning(f"Cart {action} failed, restoring previous cart: {e!r}")
            self.cache.set(self.key, snapshot)
            raise

        self.cache.invalidate(self.key)
        return cart

    async def add_item(self, item: CartLineItem) -> Cart:
        return await self._mutate(
            "add",
            lambda cart: cart.with_item(item),
            lambda: self.client.add_item(item),
        )

    async def update_quantity(self, identity: ItemIdentity, quantity: int) -> Cart:
        return await self._mutate(
            "update",
            lambda cart: cart.with_quantity(identity, quantity),
            lambda: self.client.update_quantity(identity, quantity),
        )

    async def remove_item(self, identity: ItemIdentity) -> Cart:
        return await self._mutate(
            "remove",
            lambda cart: cart.without(identity),
            lambda: self.client.remove_item(identity),
        )

    async def clear(self) -> Cart:
        return await self._mutate("clear", lambda cart: cart.emptied(), self.client.clear_cart)


class CartEngine:
    """
    Single entry point for cart reads and writes.

    Usage:
        engine = CartEngine(local_store, cart_client, cache, tokens.is_authenticated)
        cart = await engine.add_item(item)
        count = await engine.item_count()
    """

    def __init__(
        self,
        local_store: LocalCartStore,
        cart_client: CartClient,
        cache: CartCache,
        is_authenticated: Callable[[], bool],
    ):
        self.local_store = local_store
        self.cart_client = cart_client
        self.cache = cache
        self.is_authenticated = is_authenticated

        self._local = LocalCart(local_store)
        self._remote = RemoteCart(cart_client, cache)

    def _strategy(self) -> CartStrategy:
        return self._remote if self.is_authenticated() else self._local

    async def get_cart(self) -> Cart:
        return await self._strategy().get_cart()

    async def add_item(self, item: CartLineItem) -> Cart:
        return await self._strategy().add_item(item)

    async def update_quantity(self, identity: ItemIdentity, quantity: int) -> Cart:
        return await self._strategy().update_quantity(identity, quantity)

    async def remove_item(self, identity: ItemIdentity) -> Cart:
        return await self._strategy().remove_item(identity)

    async def clear(self) -> Cart:
        return await self._strategy().clear()

    async def item_count(self) -> int:
        """Total quantity across all items"""
        return (await self.get_cart()).item_count

    async def merge_guest_cart(self) -> Optional[Cart]:
        """
        Move the guest cart into the server cart.

        The local cart is cleared only once the server has accepted the
        items. Returns None when there was nothing to merge.
        """
        guest = self.local_store.load()
        if guest.is_empty or not self.is_authenticated():
            return None

        self.cache.cancel_fetch(SERVER_CART_KEY)
        cart = await self.cart_client.merge_guest_cart(guest.items)

        self.local_store.clear()
        self.cache.set(SERVER_CART_KEY, cart)
        logger.info(f"Guest cart merged: {guest.item_count} unit(s)")
        return cart

    def forget_server_cart(self) -> None:
        """Drop the cached server cart, e.g. when the shopper changes"""
        self.cache.remove(SERVER_CART_KEY)
