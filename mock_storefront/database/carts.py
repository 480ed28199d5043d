"""Cart storage for mock storefront"""

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from ..models.cart import AddToCartRequest, Cart, CartItem, ProductSnapshot
from ..models.product import Product
from ..pricing import shipping_for, tax_for

logger = logging.getLogger(__name__)


class CartError(ValueError):
    """Cart change rejected (unknown variant, insufficient stock)"""
    pass


class CartDatabase:
    """In-memory carts, one per authenticated shopper"""

    def __init__(self):
        self.carts: dict[str, Cart] = {}

    def get_cart(self, user_id: str) -> Cart:
        """Get the shopper's cart, creating an empty one on first access"""
        cart = self.carts.get(user_id)
        if cart is None:
            cart = Cart(user_id=user_id, items=[], updated_at=datetime.now(timezone.utc))
            self.carts[user_id] = cart
        return cart

    def _find(self, cart: Cart, key: tuple) -> Optional[CartItem]:
        return next((item for item in cart.items if item.identity_key == key), None)

    def find_item(self, user_id: str, key: tuple) -> Optional[CartItem]:
        return self._find(self.get_cart(user_id), key)

    def _new_item(self, product: Product, request: AddToCartRequest) -> CartItem:
        size, color = request.size, request.color
        if request.variant_id:
            variant = product.find_variant(request.variant_id)
            if not variant:
                raise CartError(f"Variant not found: {request.variant_id}")
            size, color = variant.size, variant.color

        return CartItem(
            product_id=product.id,
            variant_id=request.variant_id,
            quantity=request.quantity,
            size=size,
            color=color,
            unit_price=product.price,
            product_snapshot=ProductSnapshot(
                name=product.name,
                image=product.image_url,
                price=product.price,
                variants=[variant.model_dump() for variant in product.variants],
            ),
        )

    def add_item(
        self,
        user_id: str,
        product: Product,
        request: AddToCartRequest,
        available: int,
    ) -> Cart:
        """Add an item, summing quantities with an item of the same identity"""
        cart = self.get_cart(user_id)
        existing_item = self._find(cart, request.identity_key)
        quantity = request.quantity + (existing_item.quantity if existing_item else 0)

        if quantity > available:
            raise CartError(f"Insufficient stock. Available: {available}")

        if existing_item:
            existing_item.quantity = quantity
        else:
            cart.items.append(self._new_item(product, request))

        self._recalculate_totals(cart)
        return cart

    def update_item_quantity(
        self,
        user_id: str,
        key: tuple,
        quantity: int,
        available: Optional[int] = None,
    ) -> Cart:
        """Set an item's quantity; below 1 removes it, an absent item is left alone"""
        cart = self.get_cart(user_id)
        item = self._find(cart, key)
        if not item:
            return cart

        if quantity <= 0:
            cart.items = [i for i in cart.items if i.identity_key != key]
        else:
            if available is not None and quantity > available:
                raise CartError(f"Insufficient stock. Available: {available}")
            item.quantity = quantity

        self._recalculate_totals(cart)
        return cart

    def remove_item(self, user_id: str, key: tuple) -> Cart:
        """Remove an item from the cart"""
        return self.update_item_quantity(user_id, key, 0)

    def clear_cart(self, user_id: str) -> Cart:
        """Clear all items from cart"""
        cart = self.get_cart(user_id)
        cart.items = []
        self._recalculate_totals(cart)
        return cart

    def merge_items(
        self,
        user_id: str,
        entries: Iterable[tuple[Product, AddToCartRequest, int]],
    ) -> Cart:
        """
        Merge guest items into the cart.

        Items that no longer fit (unknown variant, not enough stock) are
        skipped so one stale guest item cannot block the rest.
        """
        cart = self.get_cart(user_id)
        for product, request, available in entries:
            try:
                self.add_item(user_id, product, request, available)
            except CartError as e:
                logger.warning(f"Skipping guest item {request.product_id}: {e}")
        return cart

    def _recalculate_totals(self, cart: Cart) -> None:
        """Recalculate cart totals"""
        cart.shipping = shipping_for(cart.subtotal) if cart.items else 0
        cart.tax = tax_for(cart.subtotal)
        cart.updated_at = datetime.now(timezone.utc)


# Singleton instance
cart_db = CartDatabase()
