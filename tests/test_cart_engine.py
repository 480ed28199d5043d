"""
Tests for the cart consistency engine
"""

import asyncio

import pytest

from storefront.core.errors import TransientNetworkError
from storefront.models import Cart, ItemIdentity, ShippingQuote
from storefront.services.cart_cache import SERVER_CART_KEY
from storefront.services.local_store import LocalCartStore
from storefront.services.pricing import calculate_pricing


class TestGuestCart:
    """Unauthenticated carts live in local storage only."""

    @pytest.mark.asyncio
    async def test_adding_same_identity_merges(self, engine, make_item):
        """Test merge idempotence: one line per identity."""
        await engine.add_item(make_item(variant_id="var-1", quantity=1))
        cart = await engine.add_item(make_item(variant_id="var-1", quantity=2))

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3

    @pytest.mark.asyncio
    async def test_changes_are_persisted(self, engine, storage, make_item):
        await engine.add_item(make_item())

        assert LocalCartStore(storage).load().item_count == 1

    @pytest.mark.asyncio
    async def test_scenario_update_quantity_to_three(self, engine, make_item):
        """Guest adds A (qty 1, price 1000) then sets qty 3: subtotal 3000."""
        item = make_item(product_id="A", quantity=1, unit_price=1000)
        await engine.add_item(item)
        cart = await engine.update_quantity(item.identity, 3)

        assert cart.items[0].quantity == 3
        assert calculate_pricing(cart, ShippingQuote(shipping=0)).subtotal == 3000

    @pytest.mark.asyncio
    async def test_absent_identity_is_noop(self, engine, make_item):
        await engine.add_item(make_item())
        absent = ItemIdentity(product_id="prod-404")

        assert (await engine.update_quantity(absent, 5)).item_count == 1
        assert (await engine.remove_item(absent)).item_count == 1

    @pytest.mark.asyncio
    async def test_zero_quantity_removes(self, engine, make_item):
        item = make_item()
        await engine.add_item(item)

        assert (await engine.update_quantity(item.identity, 0)).is_empty

    @pytest.mark.asyncio
    async def test_clear(self, engine, make_item):
        await engine.add_item(make_item())

        assert (await engine.clear()).is_empty
        assert (await engine.get_cart()).is_empty

    @pytest.mark.asyncio
    async def test_guest_never_calls_server(self, engine, fake_cart_client, make_item):
        item = make_item()
        await engine.add_item(item)
        await engine.update_quantity(item.identity, 2)
        await engine.remove_item(item.identity)
        await engine.get_cart()

        assert fake_cart_client.calls == []

    @pytest.mark.asyncio
    async def test_item_count(self, engine, make_item):
        await engine.add_item(make_item(size="M", quantity=2))
        await engine.add_item(make_item(size="L", quantity=1))

        assert await engine.item_count() == 3


class TestAuthenticatedCart:
    """Authenticated carts are changed optimistically in the cache."""

    @pytest.fixture(autouse=True)
    def logged_in(self, auth_flag):
        auth_flag.authenticated = True

    @pytest.mark.asyncio
    async def test_adding_same_identity_merges(self, engine, fake_cart_client, make_item):
        """Test merge idempotence on the server path."""
        await engine.add_item(make_item(variant_id="var-1"))
        await engine.add_item(make_item(variant_id="var-1"))

        cached = engine.cache.get(SERVER_CART_KEY)
        assert len(cached.items) == 1
        assert cached.items[0].quantity == 2
        assert fake_cart_client.cart.items[0].quantity == 2

    @pytest.mark.asyncio
    async def test_success_invalidates_cache(self, engine, make_item):
        await engine.add_item(make_item())

        assert engine.cache.is_stale(SERVER_CART_KEY)

    @pytest.mark.asyncio
    async def test_optimistic_value_visible_before_server_answers(self, engine, fake_cart_client, make_item):
        gate = asyncio.Event()
        fake_cart_client.gates["add_item"] = gate
        await engine.get_cart()

        task = asyncio.create_task(engine.add_item(make_item(quantity=2)))
        while "add_item" not in fake_cart_client.calls:
            await asyncio.sleep(0)

        assert engine.cache.get(SERVER_CART_KEY).item_count == 2
        assert fake_cart_client.cart.is_empty

        gate.set()
        assert (await task).item_count == 2

    @pytest.mark.asyncio
    async def test_failure_restores_snapshot(self, engine, fake_cart_client, make_item):
        """Test rollback: a failed mutation leaves the cache as it was."""
        await engine.add_item(make_item(size="M"))
        await engine.get_cart()
        snapshot = engine.cache.get(SERVER_CART_KEY)

        fake_cart_client.fail_with["add_item"] = TransientNetworkError("offline")
        with pytest.raises(TransientNetworkError):
            await engine.add_item(make_item(size="L"))

        assert engine.cache.get(SERVER_CART_KEY) == snapshot

    @pytest.mark.asyncio
    async def test_scenario_remove_while_offline(self, engine, fake_cart_client, make_item):
        """Authenticated remove fails on the network: item reappears, error surfaces."""
        item = make_item(variant_id="var-1", quantity=2)
        await engine.add_item(item)
        before = await engine.get_cart()

        fake_cart_client.fail_with["remove_item"] = TransientNetworkError("Network error")
        with pytest.raises(TransientNetworkError):
            await engine.remove_item(item.identity)

        after = await engine.get_cart()
        assert after == before
        assert after.find(item.identity).quantity == 2

    @pytest.mark.asyncio
    async def test_cancellation_restores_snapshot(self, engine, fake_cart_client, make_item):
        await engine.get_cart()
        snapshot = engine.cache.get(SERVER_CART_KEY)
        fake_cart_client.gates["add_item"] = asyncio.Event()

        task = asyncio.create_task(engine.add_item(make_item()))
        while "add_item" not in fake_cart_client.calls:
            await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert engine.cache.get(SERVER_CART_KEY) == snapshot

    @pytest.mark.asyncio
    async def test_successive_mutations_compose(self, engine, fake_cart_client, make_item):
        """Test that a second mutation snapshots the first one's optimistic cart."""
        gate = asyncio.Event()
        fake_cart_client.gates["add_item"] = gate
        await engine.get_cart()

        first = asyncio.create_task(engine.add_item(make_item(size="M")))
        second = asyncio.create_task(engine.add_item(make_item(size="L")))
        while fake_cart_client.calls.count("add_item") < 2:
            await asyncio.sleep(0)

        assert engine.cache.get(SERVER_CART_KEY).item_count == 2
        gate.set()
        await asyncio.gather(first, second)
        assert fake_cart_client.cart.item_count == 2

    @pytest.mark.asyncio
    async def test_mutation_cancels_inflight_refetch(self, engine, fake_cart_client, make_item):
        """Test that a refetch started before a mutation cannot undo it."""
        await engine.get_cart()
        engine.cache.invalidate(SERVER_CART_KEY)
        fetch_gate = asyncio.Event()
        fake_cart_client.gates["get_cart"] = fetch_gate

        reader = asyncio.create_task(engine.get_cart())
        while fake_cart_client.calls.count("get_cart") < 2:
            await asyncio.sleep(0)
        assert engine.cache.is_fetching(SERVER_CART_KEY)

        cart = await engine.add_item(make_item())
        fetch_gate.set()

        assert (await reader).item_count == 1
        assert cart.item_count == 1
        assert engine.cache.get(SERVER_CART_KEY).item_count == 1

    @pytest.mark.asyncio
    async def test_cache_miss_loads_before_snapshot(self, engine, fake_cart_client, make_item):
        fake_cart_client.cart = Cart().with_item(make_item(size="M"))

        await engine.add_item(make_item(size="L"))

        assert fake_cart_client.calls[:2] == ["get_cart", "add_item"]
        assert engine.cache.get(SERVER_CART_KEY).item_count == 2

    @pytest.mark.asyncio
    async def test_zero_quantity_removes(self, engine, fake_cart_client, make_item):
        item = make_item()
        await engine.add_item(item)

        cart = await engine.update_quantity(item.identity, 0)

        assert cart.is_empty
        assert engine.cache.get(SERVER_CART_KEY).is_empty


class TestOwnershipSwitch:
    """Storage follows the authentication state on every call."""

    @pytest.mark.asyncio
    async def test_login_switches_to_server_cart(self, engine, auth_flag, fake_cart_client, make_item):
        await engine.add_item(make_item())
        auth_flag.authenticated = True

        assert (await engine.get_cart()).is_empty
        assert fake_cart_client.calls == ["get_cart"]

    @pytest.mark.asyncio
    async def test_merge_guest_cart(self, engine, auth_flag, local_store, fake_cart_client, make_item):
        await engine.add_item(make_item(variant_id="var-1", quantity=2))
        fake_cart_client.cart = Cart().with_item(make_item(variant_id="var-1", quantity=1))
        auth_flag.authenticated = True

        cart = await engine.merge_guest_cart()

        assert cart.items[0].quantity == 3
        assert local_store.load().is_empty
        assert engine.cache.get(SERVER_CART_KEY) == cart

    @pytest.mark.asyncio
    async def test_failed_merge_keeps_guest_cart(self, engine, auth_flag, local_store, fake_cart_client, make_item):
        await engine.add_item(make_item())
        auth_flag.authenticated = True
        fake_cart_client.fail_with["merge_guest_cart"] = TransientNetworkError("offline")

        with pytest.raises(TransientNetworkError):
            await engine.merge_guest_cart()

        assert local_store.load().item_count == 1

    @pytest.mark.asyncio
    async def test_merge_with_empty_guest_cart(self, engine, auth_flag, fake_cart_client):
        auth_flag.authenticated = True

        assert await engine.merge_guest_cart() is None
        assert fake_cart_client.calls == []
