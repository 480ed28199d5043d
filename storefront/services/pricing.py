"""Pricing Calculator"""

from decimal import ROUND_HALF_UP, Decimal

from ..models.cart import Cart
from ..models.checkout import PricingBreakdown, ShippingQuote

DEFAULT_TAX_RATE = Decimal("0.18")


def calculate_pricing(
    cart: Cart,
    shipping_quote: ShippingQuote,
    tax_rate: Decimal = DEFAULT_TAX_RATE,
) -> PricingBreakdown:
    """
    Price a cart for checkout.

    Shipping always comes from the server quote. Tax is rounded half-up to
    whole currency units.

    Args:
        cart: Cart to price
        shipping_quote: Server-quoted shipping charge
        tax_rate: Tax rate as a Decimal fraction

    Returns:
        Breakdown where total = subtotal - discount + shipping + tax
    """
    subtotal = sum(item.unit_price * item.quantity for item in cart.items)
    tax = int((Decimal(subtotal) * Decimal(str(tax_rate))).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    discount = cart.discount
    shipping = shipping_quote.shipping

    return PricingBreakdown(
        subtotal=subtotal,
        discount=discount,
        shipping=shipping,
        tax=tax,
        total=subtotal - discount + shipping + tax,
    )
