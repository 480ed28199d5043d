"""
Tests for the token store and shopper session
"""

import pytest

from storefront.core.session import ShopperSession, TokenStore
from storefront.models import Cart
from storefront.services.cart_cache import SERVER_CART_KEY


class TestTokenStore:
    """Tests for token persistence and expiry checks."""

    def test_no_token(self, storage):
        tokens = TokenStore(storage)

        assert tokens.get_access_token() is None
        assert not tokens.is_authenticated()

    def test_valid_token(self, storage, make_token):
        tokens = TokenStore(storage)
        tokens.set_access_token(make_token())

        assert tokens.is_authenticated()

    def test_expired_token(self, storage, make_token):
        tokens = TokenStore(storage)
        tokens.set_access_token(make_token(expires_in=-60))

        assert not tokens.is_authenticated()

    def test_opaque_token_counts_as_present(self, storage):
        tokens = TokenStore(storage)
        tokens.set_access_token("opaque-session-token")

        assert tokens.is_authenticated()

    def test_clear(self, storage, make_token):
        tokens = TokenStore(storage)
        tokens.set_access_token(make_token())

        tokens.clear()

        assert tokens.get_access_token() is None

    def test_token_survives_restart(self, storage, make_token):
        """Test that the token is read back from local storage."""
        token = make_token()
        TokenStore(storage).set_access_token(token)

        assert TokenStore(storage).get_access_token() == token


@pytest.fixture
def tokens(storage):
    return TokenStore(storage)


@pytest.fixture
def wired_engine(engine, tokens):
    """Engine whose authentication follows the token store"""
    engine.is_authenticated = tokens.is_authenticated
    return engine


class TestShopperSession:
    """Tests for login and logout transitions."""

    @pytest.mark.asyncio
    async def test_login_merges_guest_cart(self, wired_engine, tokens, local_store, fake_cart_client, make_item, make_token):
        await wired_engine.add_item(make_item(quantity=2))
        session = ShopperSession(tokens, wired_engine)

        merged = await session.login(make_token())

        assert session.is_authenticated
        assert merged.item_count == 2
        assert fake_cart_client.cart.item_count == 2
        assert local_store.load().is_empty

    @pytest.mark.asyncio
    async def test_login_without_merge(self, wired_engine, tokens, local_store, fake_cart_client, make_item, make_token):
        await wired_engine.add_item(make_item())
        session = ShopperSession(tokens, wired_engine, merge_guest_cart_on_login=False)

        assert await session.login(make_token()) is None
        assert fake_cart_client.calls == []
        assert local_store.load().item_count == 1

    @pytest.mark.asyncio
    async def test_login_drops_previous_server_cart(self, wired_engine, tokens, make_item, make_token):
        wired_engine.cache.set(SERVER_CART_KEY, Cart().with_item(make_item()))
        session = ShopperSession(tokens, wired_engine, merge_guest_cart_on_login=False)

        await session.login(make_token())

        assert wired_engine.cache.get(SERVER_CART_KEY) is None

    @pytest.mark.asyncio
    async def test_logout_returns_to_guest_cart(self, wired_engine, tokens, make_item, make_token):
        session = ShopperSession(tokens, wired_engine)
        await session.login(make_token())
        await wired_engine.add_item(make_item())

        session.logout()

        assert not session.is_authenticated
        assert wired_engine.cache.get(SERVER_CART_KEY) is None
        assert (await wired_engine.get_cart()).is_empty
