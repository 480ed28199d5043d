"""
Cart Cache

Versioned in-memory map of server carts. Every write bumps the entry's
version; a refetch only lands if the version it started from is still
current, so an optimistic write can never be overwritten by an older
response.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from ..models.cart import Cart

logger = logging.getLogger(__name__)

SERVER_CART_KEY = "server_cart"

CartLoader = Callable[[], Awaitable[Cart]]


@dataclass
class CacheEntry:
    """Cached cart with bookkeeping"""
    value: Cart
    version: int
    updated_at: float
    stale: bool = False


class CartCache:
    """
    Usage:
        cache = CartCache(stale_seconds=1800)
        cart = await cache.fetch(SERVER_CART_KEY, client.get_cart)
        cache.cancel_fetch(SERVER_CART_KEY)
        cache.set(SERVER_CART_KEY, cart.without(identity))
    """

    def __init__(
        self,
        stale_seconds: float = 30 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.stale_seconds = stale_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._versions: dict[str, int] = {}
        self._inflight: dict[str, asyncio.Task] = {}

    def get(self, key: str) -> Optional[Cart]:
        entry = self._entries.get(key)
        return entry.value if entry else None

    def version(self, key: str) -> int:
        return self._versions.get(key, 0)

    def set(self, key: str, value: Cart) -> int:
        """Store a cart as fresh and return its new version"""
        version = self.version(key) + 1
        self._versions[key] = version
        self._entries[key] = CacheEntry(value=value, version=version, updated_at=self._clock())
        return version

    def invalidate(self, key: str) -> None:
        """Mark an entry stale; the value stays readable until refetched"""
        entry = self._entries.get(key)
        if entry:
            entry.stale = True

    def is_stale(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return True
        return entry.stale or self._clock() - entry.updated_at > self.stale_seconds

    def remove(self, key: str) -> None:
        self.cancel_fetch(key)
        self._entries.pop(key, None)
        # Version survives removal so fetches started before it cannot land
        self._versions[key] = self.version(key) + 1

    def is_fetching(self, key: str) -> bool:
        task = self._inflight.get(key)
        return task is not None and not task.done()

    def cancel_fetch(self, key: str) -> bool:
        """Cancel an in-flight refetch of the entry; returns whether one was running"""
        task = self._inflight.pop(key, None)
        if task is None or task.done():
            return False

        task.cancel()
        logger.debug(f"Cancelled in-flight fetch of {key}")
        return True

    async def _load(self, key: str, loader: CartLoader, started_at: int) -> Cart:
        value = await loader()

        if self.version(key) != started_at:
            logger.debug(f"Discarding fetch of {key}: entry changed while loading")
            current = self.get(key)
            return current if current is not None else value

        self.set(key, value)
        return value

    def _start_fetch(self, key: str, loader: CartLoader) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._load(key, loader, self.version(key)))
        self._inflight[key] = task

        def _forget(done: asyncio.Task) -> None:
            if self._inflight.get(key) is done:
                del self._inflight[key]
            if not done.cancelled():
                # Marks the exception retrieved; waiters re-raise it themselves
                done.exception()

        task.add_done_callback(_forget)
        return task

    async def fetch(self, key: str, loader: CartLoader) -> Cart:
        """
        Load an entry, joining a fetch already in flight for the same key.

        A waiter whose fetch is cancelled by cancel_fetch gets the cached
        value instead, since the canceller has just written a newer one.
        """
        while True:
            task = self._inflight.get(key)
            if task is None or task.done():
                task = self._start_fetch(key, loader)

            try:
                return await asyncio.shield(task)
            except asyncio.CancelledError:
                current = asyncio.current_task()
                if not task.cancelled() or (current is not None and current.cancelling()):
                    raise

            cached = self.get(key)
            if cached is not None:
                return cached

    def clear(self) -> None:
        for key in list(self._inflight):
            self.cancel_fetch(key)
        for key in list(self._entries):
            self.remove(key)
