"""Shopper session: access token and login/logout transitions"""

import logging
import time
from typing import TYPE_CHECKING, Optional

import jwt

from ..models.cart import Cart
from ..services.local_store import LocalStorage

if TYPE_CHECKING:
    from ..services.cart_engine import CartEngine

logger = logging.getLogger(__name__)


class TokenStore:
    """Access token kept in local storage, issued by the auth service"""

    def __init__(self, storage: LocalStorage, key: str = "access_token"):
        self.storage = storage
        self.key = key

    def get_access_token(self) -> Optional[str]:
        return self.storage.get_item(self.key)

    def set_access_token(self, token: str) -> None:
        self.storage.set_item(self.key, token)

    def clear(self) -> None:
        self.storage.remove_item(self.key)

    def is_authenticated(self) -> bool:
        """
        Whether a usable access token is present.

        JWTs are checked for expiry only; the signature belongs to the
        auth service and is verified server-side. Opaque tokens count as
        present.
        """
        token = self.get_access_token()
        if not token:
            return False

        try:
            claims = jwt.decode(token, options={"verify_signature": False})
        except jwt.DecodeError:
            return True

        exp = claims.get("exp")
        return exp is None or exp > time.time()


class ShopperSession:
    """
    Authentication state of the shopper.

    Ownership of the cart follows this state: guest carts live in local
    storage, authenticated carts on the server.
    """

    def __init__(
        self,
        tokens: TokenStore,
        engine: "CartEngine",
        merge_guest_cart_on_login: bool = True,
    ):
        self.tokens = tokens
        self.engine = engine
        self.merge_guest_cart_on_login = merge_guest_cart_on_login

    @property
    def is_authenticated(self) -> bool:
        return self.tokens.is_authenticated()

    async def login(self, access_token: str) -> Optional[Cart]:
        """
        Store the token issued by the auth service.

        Returns the merged server cart when guest items were carried over.
        """
        self.tokens.set_access_token(access_token)
        self.engine.forget_server_cart()
        logger.info("Shopper logged in")

        if self.merge_guest_cart_on_login:
            return await self.engine.merge_guest_cart()
        return None

    def logout(self) -> None:
        self.tokens.clear()
        self.engine.forget_server_cart()
        logger.info("Shopper logged out")
