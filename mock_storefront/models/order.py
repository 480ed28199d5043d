"""Order and payment models for mock storefront"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class ShippingAddress(BaseModel):
    """Shipping address for order"""
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    pincode: str
    country: str = "India"


class Pricing(BaseModel):
    """Order totals in whole currency units"""
    subtotal: int
    discount: int = 0
    shipping: int
    tax: int
    total: int


class DraftItem(BaseModel):
    """Line item as submitted with a checkout draft"""
    product_id: str
    variant_id: Optional[str] = None
    quantity: int = Field(gt=0)
    size: Optional[str] = None
    color: Optional[str] = None
    unit_price: Optional[int] = None


class CheckoutDraft(BaseModel):
    """Order data held by the client until payment is verified"""
    shipping_address: ShippingAddress
    items: list[DraftItem]
    pricing: Pricing
    payment_method: str = "razorpay"


class GatewayOrder(BaseModel):
    """Order opened on the payment gateway; not a storefront order"""
    id: str
    user_id: str
    amount: int
    currency: str
    receipt: str
    status: str = "created"
    created_at: datetime


class PaymentIntentResponse(BaseModel):
    """Gateway order handed to the client, with the public key to open it"""
    gateway_order_id: str
    amount: int
    currency: str
    receipt: str
    gateway_public_key: str


class VerifyPaymentRequest(BaseModel):
    """Payment proof from the gateway callback plus the draft it pays for"""
    gateway_order_id: Optional[str] = None
    payment_id: Optional[str] = None
    signature: Optional[str] = None
    draft: Optional[CheckoutDraft] = None


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
    """Completed order"""
    order_id: str
    order_number: str
    user_id: str
    status: OrderStatus
    payment_status: PaymentStatus
    items: list[OrderItem]
    pricing: Pricing
    shipping_address: ShippingAddress
    payment_method: str
    gateway_order_id: Optional[str] = None
    payment_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class OrderResponse(BaseModel):
    """Order API response"""
    order: Order
    message: Optional[str] = None


class ShippingCostResponse(BaseModel):
    """Shipping quote"""
    shipping: int
