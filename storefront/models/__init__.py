# Storefront client models

from .cart import Cart, CartLineItem, ItemIdentity, ProductSnapshot
from .checkout import (
    CheckoutDraft,
    Order,
    OrderItem,
    OrderStatus,
    PaymentIntent,
    PaymentProof,
    PaymentStatus,
    PricingBreakdown,
    ShippingAddress,
    ShippingQuote,
)

__all__ = [
    "Cart",
    "CartLineItem",
    "ItemIdentity",
    "ProductSnapshot",
    "CheckoutDraft",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentIntent",
    "PaymentProof",
    "PaymentStatus",
    "PricingBreakdown",
    "ShippingAddress",
    "ShippingQuote",
]
