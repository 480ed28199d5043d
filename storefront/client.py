"""
Storefront client wiring

Builds the local store, API accessors, cart cache, engine, session and
checkout orchestrator from settings, sharing one HTTP client between them.
"""

import logging
from typing import Optional

import httpx

from .core.config import Settings, get_settings
from .core.session import ShopperSession, TokenStore
from .services.cart_cache import CartCache
from .services.cart_client import CartClient
from .services.cart_engine import CartEngine
from .services.checkout import CheckoutOrchestrator
from .services.gateway import PaymentGateway
from .services.local_store import LocalCartStore, LocalStorage
from .services.order_client import OrderClient

logger = logging.getLogger(__name__)


class Storefront:
    """
    Usage:
        async with Storefront(gateway=gateway) as shop:
            await shop.cart.add_item(item)
            await shop.session.login(token)
            result = await shop.checkout.submit(address)
    """

    def __init__(
        self,
        gateway: PaymentGateway,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        s = self.settings

        self.storage = LocalStorage(s.local_storage_path)
        self.tokens = TokenStore(self.storage, s.token_storage_key)

        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(timeout=s.request_timeout_seconds)

        client_options = dict(
            base_url=s.api_base_url,
            token_provider=self.tokens.get_access_token,
            timeout=s.request_timeout_seconds,
            read_retry_attempts=s.read_retry_attempts,
            retry_backoff_seconds=s.retry_backoff_seconds,
            retry_backoff_max_seconds=s.retry_backoff_max_seconds,
            http_client=self.http_client,
        )
        self.cart_client = CartClient(**client_options)
        self.order_client = OrderClient(**client_options)

        self.cache = CartCache(stale_seconds=s.cart_stale_seconds)
        self.cart = CartEngine(
            LocalCartStore(self.storage, s.cart_storage_key),
            self.cart_client,
            self.cache,
            self.tokens.is_authenticated,
        )
        self.session = ShopperSession(
            self.tokens,
            self.cart,
            merge_guest_cart_on_login=s.merge_guest_cart_on_login,
        )
        self.checkout = CheckoutOrchestrator(
            self.cart,
            self.order_client,
            gateway,
            tax_rate=s.tax_rate,
            currency=s.currency,
        )
        logger.info(f"Storefront client ready for {s.api_base_url}")

    async def close(self) -> None:
        """Close HTTP client"""
        self.cache.clear()
        if self._owns_client:
            await self.http_client.aclose()

    async def __aenter__(self) -> "Storefront":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
