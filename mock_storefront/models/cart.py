"""Cart models for mock storefront"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


def identity_key(
    product_id: Optional[str],
    variant_id: Optional[str] = None,
    size: Optional[str] = None,
    color: Optional[str] = None,
) -> tuple:
    """Merge key of a cart item: the variant when known, else product/size/color"""
    if variant_id:
        return ("variant", variant_id)
    return ("product", product_id, size, color)


class ProductSnapshot(BaseModel):
    """Display data copied from the catalog when the item was added"""
    name: str
    image: Optional[str] = None
    price: Optional[int] = None
    variants: list[dict[str, Any]] = []


class CartItem(BaseModel):
    """Item in a server cart"""
    product_id: str
    variant_id: Optional[str] = None
    quantity: int = Field(gt=0)
    size: Optional[str] = None
    color: Optional[str] = None
    unit_price: int
    product_snapshot: Optional[ProductSnapshot] = None

    @property
    def identity_key(self) -> tuple:
        return identity_key(self.product_id, self.variant_id, self.size, self.color)


class Cart(BaseModel):
    """Server cart of one shopper"""
    user_id: str
    items: list[CartItem] = []
    discount: int = 0
    shipping: int = 0
    tax: int = 0
    updated_at: datetime

    @property
    def subtotal(self) -> int:
        return sum(item.unit_price * item.quantity for item in self.items)


class AddToCartRequest(BaseModel):
    """Item to add; the price always comes from the catalog"""
    product_id: str
    variant_id: Optional[str] = None
    quantity: int = Field(default=1, gt=0)
    size: Optional[str] = None
    color: Optional[str] = None

    @property
    def identity_key(self) -> tuple:
        return identity_key(self.product_id, self.variant_id, self.size, self.color)


class UpdateCartItemRequest(BaseModel):
    """New quantity; below 1 removes the item"""
    quantity: int


class MergeGuestCartRequest(BaseModel):
    """Guest cart items carried over at login"""
    items: list[AddToCartRequest] = []


class CartResponse(BaseModel):
    """Cart API response"""
    cart: Cart
    message: Optional[str] = None
