# Mock Storefront Models

from .product import Product, ProductCategory, ProductVariant
from .cart import (
    Cart,
    CartItem,
    ProductSnapshot,
    AddToCartRequest,
    UpdateCartItemRequest,
    MergeGuestCartRequest,
    CartResponse,
)
from .order import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    ShippingAddress,
    Pricing,
    DraftItem,
    CheckoutDraft,
    GatewayOrder,
    PaymentIntentResponse,
    VerifyPaymentRequest,
    OrderResponse,
    ShippingCostResponse,
)

__all__ = [
    "Product",
    "ProductCategory",
    "ProductVariant",
    "Cart",
    "CartItem",
    "ProductSnapshot",
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "MergeGuestCartRequest",
    "CartResponse",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "ShippingAddress",
    "Pricing",
    "DraftItem",
    "CheckoutDraft",
    "GatewayOrder",
    "PaymentIntentResponse",
    "VerifyPaymentRequest",
    "OrderResponse",
    "ShippingCostResponse",
]
