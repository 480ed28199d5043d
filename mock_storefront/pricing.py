"""Server-side pricing: catalog prices, shipping rule and tax"""

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Iterable

from .config import settings
from .models.order import DraftItem, OrderItem, Pricing

if TYPE_CHECKING:
    from .database.products import ProductDatabase


class PricingError(ValueError):
    """Draft cannot be priced against the catalog"""
    pass


def shipping_for(subtotal: int) -> int:
    """Shipping charge for a subtotal"""
    threshold = settings.free_shipping_threshold
    if threshold is not None and subtotal >= threshold:
        return 0
    return settings.shipping_charge


def tax_for(subtotal: int) -> int:
    return int((Decimal(subtotal) * settings.tax_rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def price_items(
    items: Iterable[DraftItem],
    products: "ProductDatabase",
) -> list[OrderItem]:
    """
    Price draft items from the catalog.

    Client-submitted unit prices are ignored.

    Raises:
        PricingError: Unknown product or variant
    """
    order_items = []

    for item in items:
        product = products.get_product(item.product_id)
        if not product:
            raise PricingError(f"Product not found: {item.product_id}")

        size, color = item.size, item.color
        if item.variant_id:
            variant = product.find_variant(item.variant_id)
            if not variant:
                raise PricingError(f"Variant not found: {item.variant_id}")
            size, color = variant.size, variant.color

        order_items.append(
            OrderItem(
                product_id=product.id,
                variant_id=item.variant_id,
                product_name=product.name,
                size=size,
                color=color,
                quantity=item.quantity,
                unit_price=product.price,
                total_price=product.price * item.quantity,
            )
        )

    return order_items


def calculate_pricing(order_items: list[OrderItem], discount: int = 0) -> Pricing:
    subtotal = sum(item.total_price for item in order_items)
    shipping = shipping_for(subtotal)
    tax = tax_for(subtotal)
    return Pricing(
        subtotal=subtotal,
        discount=discount,
        shipping=shipping,
        tax=tax,
        total=subtotal - discount + shipping + tax,
    )


def to_smallest_unit(amount: int) -> int:
    """Whole currency units to the gateway's unit (paise)"""
    return amount * 100
