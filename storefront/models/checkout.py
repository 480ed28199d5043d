"""Checkout models"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .cart import CartLineItem


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ShippingAddress(BaseModel):
    """Shipping address form as filled in by the shopper"""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""
    country: str = "India"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ShippingQuote(BaseModel):
    """Shipping charge quoted by the server for this checkout"""
    model_config = ConfigDict(frozen=True)

    shipping: int = Field(ge=0)


class PricingBreakdown(BaseModel):
    """Totals shown to the shopper and sent with the draft"""
    model_config = ConfigDict(frozen=True)

    subtotal: int
    discount: int
    shipping: int
    tax: int
    total: int


class CheckoutDraft(BaseModel):
    """Everything the server needs to price and create the order"""
    model_config = ConfigDict(frozen=True)

    shipping_address: ShippingAddress
    items: tuple[CartLineItem, ...]
    pricing: PricingBreakdown
    payment_method: str = "razorpay"

    def to_payload(self) -> dict:
        """Request body; display snapshots stay on the client"""
        return self.model_dump(mode="json", exclude={"items": {"__all__": {"product_snapshot"}}})


class PaymentIntent(BaseModel):
    """Gateway order awaiting payment; not an Order"""
    model_config = ConfigDict(frozen=True)

    gateway_order_id: str
    amount: int
    currency: str
    receipt: str
    gateway_public_key: Optional[str] = None


class PaymentProof(BaseModel):
    """Payload of the gateway success callback"""
    model_config = ConfigDict(frozen=True)

    gateway_order_id: str
    payment_id: str
    signature: str


class OrderItem(BaseModel):
    """Server-priced order line"""
    product_id: str
    variant_id: Optional[str] = None
    product_name: str
    size: Optional[str] = None
    color: Optional[str] = None
    quantity: int
    unit_price: int
    total_price: int


class Order(BaseModel):
    """Durable order record, created by the server after payment verification"""
    order_id: str
    order_number: str
    status: OrderStatus
    payment_status: PaymentStatus
    items: list[OrderItem]
    pricing: PricingBreakdown
    shipping_address: ShippingAddress
    payment_method: str
    gateway_order_id: Optional[str] = None
    payment_id: Optional[str] = None
    created_at: datetime
