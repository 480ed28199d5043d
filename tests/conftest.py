"""Pytest configuration and fixtures"""
import asyncio
import time
from typing import Callable, Iterable, Optional

import jwt
import pytest

from storefront.models import Cart, CartLineItem, ItemIdentity, ProductSnapshot
from storefront.services.cart_cache import CartCache
from storefront.services.cart_engine import CartEngine
from storefront.services.local_store import LocalCartStore, LocalStorage


class FakeCartClient:
    """In-memory server cart with failure injection and per-call gates"""

    def __init__(self, cart: Optional[Cart] = None):
        self.cart = cart or Cart()
        self.calls: list[str] = []
        self.fail_with: dict[str, BaseException] = {}
        self.gates: dict[str, asyncio.Event] = {}

    async def _call(self, name: str, change: Callable[[Cart], Cart]) -> Cart:
        self.calls.append(name)
        gate = self.gates.get(name)
        if gate is not None:
            await gate.wait()
        if name in self.fail_with:
            raise self.fail_with[name]
        self.cart = change(self.cart)
        return self.cart

    async def get_cart(self) -> Cart:
        return await self._call("get_cart", lambda cart: cart)

    async def add_item(self, item: CartLineItem) -> Cart:
        return await self._call("add_item", lambda cart: cart.with_item(item))

    async def update_quantity(self, identity: ItemIdentity, quantity: int) -> Cart:
        return await self._call("update_quantity", lambda cart: cart.with_quantity(identity, quantity))

    async def remove_item(self, identity: ItemIdentity) -> Cart:
        return await self._call("remove_item", lambda cart: cart.without(identity))

    async def clear_cart(self) -> Cart:
        return await self._call("clear_cart", lambda cart: cart.emptied())

    async def merge_guest_cart(self, items: Iterable[CartLineItem]) -> Cart:
        def merge(cart: Cart) -> Cart:
            for item in items:
                cart = cart.with_item(item)
            return cart

        return await self._call("merge_guest_cart", merge)


class AuthFlag:
    """Switchable authentication predicate"""

    def __init__(self, authenticated: bool = False):
        self.authenticated = authenticated

    def __call__(self) -> bool:
        return self.authenticated


@pytest.fixture
def make_item():
    """Factory for cart line items"""
    def _make_item(
        product_id: str = "prod-001",
        variant_id: Optional[str] = None,
        quantity: int = 1,
        unit_price: int = 1000,
        size: Optional[str] = None,
        color: Optional[str] = None,
    ) -> CartLineItem:
        return CartLineItem(
            product_id=product_id,
            variant_id=variant_id,
            quantity=quantity,
            size=size,
            color=color,
            unit_price=unit_price,
            product_snapshot=ProductSnapshot(name=f"Product {product_id}", price=unit_price),
        )

    return _make_item


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    """Local storage in a temporary directory"""
    return LocalStorage(tmp_path / "local_storage.json")


@pytest.fixture
def local_store(storage) -> LocalCartStore:
    return LocalCartStore(storage)


@pytest.fixture
def fake_cart_client() -> FakeCartClient:
    return FakeCartClient()


@pytest.fixture
def auth_flag() -> AuthFlag:
    return AuthFlag()


@pytest.fixture
def engine(local_store, fake_cart_client, auth_flag) -> CartEngine:
    """Engine over a temporary local store and an in-memory server cart"""
    return CartEngine(local_store, fake_cart_client, CartCache(), auth_flag)


@pytest.fixture
def make_token():
    """Factory for HS256 access tokens expiring in `expires_in` seconds"""
    def _make_token(expires_in: int = 3600, subject: str = "user-123") -> str:
        claims = {"sub": subject, "exp": int(time.time()) + expires_in}
        return jwt.encode(claims, "test-secret", algorithm="HS256")

    return _make_token
