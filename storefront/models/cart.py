"""Cart models"""

from typing import Any, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductSnapshot(BaseModel):
    """Display data captured when the item was added"""
    model_config = ConfigDict(frozen=True)

    name: str
    image: Optional[str] = None
    price: Optional[int] = None
    variants: tuple[dict[str, Any], ...] = ()


class ItemIdentity(NamedTuple):
    """
    Merge key of a cart line item.

    The variant id alone when the item has one, otherwise the
    (product id, size, color) triple.
    """
    product_id: Optional[str] = None
    variant_id: Optional[str] = None
    size: Optional[str] = None
    color: Optional[str] = None

    @property
    def key(self) -> tuple:
        if self.variant_id:
            return ("variant", self.variant_id)
        return ("product", self.product_id, self.size, self.color)

    def matches(self, item: "CartLineItem") -> bool:
        return item.identity.key == self.key

    def to_params(self) -> dict[str, str]:
        """Query parameters addressing this item on the server cart"""
        if self.variant_id:
            return {"variant_id": self.variant_id}
        params = {"product_id": self.product_id or ""}
        if self.size is not None:
            params["size"] = self.size
        if self.color is not None:
            params["color"] = self.color
        return params


class CartLineItem(BaseModel):
    """Item in a shopping cart"""
    model_config = ConfigDict(frozen=True)

    product_id: str
    variant_id: Optional[str] = None
    quantity: int = Field(ge=1)
    size: Optional[str] = None
    color: Optional[str] = None
    unit_price: int = Field(ge=0)
    product_snapshot: Optional[ProductSnapshot] = None

    @property
    def identity(self) -> ItemIdentity:
        return ItemIdentity(
            product_id=self.product_id,
            variant_id=self.variant_id,
            size=self.size,
            color=self.color,
        )

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


class Cart(BaseModel):
    """
    Shopping cart.

    Carts are values: the mutation helpers below return a new cart and
    leave the receiver untouched, which is what makes snapshots safe to
    restore.
    """
    model_config = ConfigDict(frozen=True)

    items: tuple[CartLineItem, ...] = ()
    discount: int = 0
    shipping: int = 0
    tax: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def find(self, identity: ItemIdentity) -> Optional[CartLineItem]:
        return next((item for item in self.items if identity.matches(item)), None)

    def with_item(self, new_item: CartLineItem) -> "Cart":
        """Add an item, summing quantities when its identity is already present"""
        if self.find(new_item.identity) is None:
            return self.model_copy(update={"items": self.items + (new_item,)})

        items = tuple(
            item.model_copy(update={"quantity": item.quantity + new_item.quantity})
            if new_item.identity.matches(item)
            else item
            for item in self.items
        )
        return self.model_copy(update={"items": items})

    def with_quantity(self, identity: ItemIdentity, quantity: int) -> "Cart":
        """Set an item's quantity; below 1 removes it, absent identity is a no-op"""
        if quantity < 1:
            return self.without(identity)

        items = tuple(
            item.model_copy(update={"quantity": quantity}) if identity.matches(item) else item
            for item in self.items
        )
        return self.model_copy(update={"items": items})

    def without(self, identity: ItemIdentity) -> "Cart":
        """Remove an item; absent identity is a no-op"""
        items = tuple(item for item in self.items if not identity.matches(item))
        return self.model_copy(update={"items": items})

    def emptied(self) -> "Cart":
        return self.model_copy(update={"items": ()})
