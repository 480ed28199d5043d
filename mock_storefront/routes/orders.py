"""Order and payment API routes for mock storefront"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ..config import settings
from ..database.carts import cart_db
from ..database.orders import order_db
from ..database.payments import gateway_order_db
from ..database.products import product_db
from ..models.order import (
    CheckoutDraft,
    Order,
    OrderItem,
    OrderResponse,
    PaymentIntentResponse,
    Pricing,
    ShippingCostResponse,
    VerifyPaymentRequest,
)
from ..pricing import PricingError, calculate_pricing, price_items, shipping_for, to_smallest_unit
from ..security.auth import optional_user, require_user
from ..security.payments import get_payment_verifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Orders"])


def _price_draft(draft: CheckoutDraft) -> tuple[list[OrderItem], Pricing]:
    """Re-price a draft from the catalog and check it against the client's totals"""
    if not draft.items:
        raise HTTPException(status_code=400, detail="Order items are required")

    try:
        items = price_items(draft.items, product_db)
    except PricingError as e:
        raise HTTPException(status_code=400, detail=str(e))

    pricing = calculate_pricing(items)
    if pricing.total != draft.pricing.total:
        logger.warning(f"Draft total {draft.pricing.total} does not match server total {pricing.total}")
        raise HTTPException(status_code=400, detail="Order total mismatch")

    return items, pricing


@router.get("/shipping-cost", response_model=ShippingCostResponse)
async def get_shipping_cost(user_id: Optional[str] = Depends(optional_user)):
    """Shipping charge for the shopper's current cart"""
    subtotal = cart_db.get_cart(user_id).subtotal if user_id else 0
    return ShippingCostResponse(shipping=shipping_for(subtotal))


@router.post("/payment/create-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    draft: CheckoutDraft,
    user_id: str = Depends(require_user),
):
    """
    Open a gateway order for the draft.

    No storefront order is created here; that only happens once the
    payment has been verified.
    """
    _, pricing = _price_draft(draft)

    amount = to_smallest_unit(pricing.total)
    if amount <= 0:
        raise HTTPException(status_code=400, detail="Invalid payment amount")
    if amount > settings.gateway_max_amount:
        raise HTTPException(status_code=400, detail="Order amount exceeds supported limit")

    gateway_order = gateway_order_db.create_order(user_id, amount, settings.currency)
    logger.info(f"Gateway order created: {gateway_order.id} for {user_id} ({amount} {settings.currency})")

    return PaymentIntentResponse(
        gateway_order_id=gateway_order.id,
        amount=gateway_order.amount,
        currency=gateway_order.currency,
        receipt=gateway_order.receipt,
        gateway_public_key=settings.gateway_key_id,
    )


@router.post("/payment/verify-and-create", response_model=OrderResponse)
async def verify_payment_and_create_order(
    request: VerifyPaymentRequest,
    user_id: str = Depends(require_user),
):
    """
    Verify the gateway's payment proof and create the order.

    Replaying a proof that already produced an order returns that order. A
    second payment against an already settled gateway order is rejected.
    """
    result = get_payment_verifier().verify(
        request.gateway_order_id,
        request.payment_id,
        request.signature,
    )
    if not result.is_valid:
        logger.warning(f"Payment verification failed: {result.error_message}")
        raise HTTPException(status_code=400, detail=result.error_message)

    if request.draft is None:
        raise HTTPException(status_code=400, detail="Order data is required")

    existing = order_db.find_by_payment(request.payment_id)
    if existing:
        if existing.user_id != user_id:
            raise HTTPException(status_code=400, detail="Payment already used")
        logger.info(f"Payment {request.payment_id} already verified, returning {existing.order_number}")
        return OrderResponse(order=existing, message="Order already created")

    gateway_order = gateway_order_db.get_order(request.gateway_order_id)
    if not gateway_order or gateway_order.user_id != user_id:
        raise HTTPException(status_code=400, detail="Unknown payment order")

    settled = order_db.find_by_gateway_order(gateway_order.id)
    if settled or gateway_order.status == "paid":
        logger.warning(f"Gateway order {gateway_order.id} already settled, rejecting payment {request.payment_id}")
        raise HTTPException(status_code=400, detail="Payment order already settled")

    items, pricing = _price_draft(request.draft)
    if to_smallest_unit(pricing.total) != gateway_order.amount:
        raise HTTPException(status_code=400, detail="Payment amount does not match order total")

    order = order_db.create_paid_order(
        user_id=user_id,
        draft=request.draft,
        items=items,
        pricing=pricing,
        gateway_order_id=gateway_order.id,
        payment_id=request.payment_id,
    )
    for item in order.items:
        product_db.decrement_stock(item.product_id, item.variant_id, item.quantity)
    gateway_order_db.mark_paid(gateway_order.id)
    cart_db.clear_cart(user_id)

    logger.info(f"Payment verified and order created: {order.order_number}")
    return OrderResponse(order=order, message="Payment verified and order created successfully")


@router.get("/my-orders", response_model=list[Order])
async def list_my_orders(user_id: str = Depends(require_user)):
    """Orders of the authenticated shopper, newest first"""
    return order_db.list_for_user(user_id)


@router.get("/{order_id}", response_model=Order)
async def get_order(order_id: str, user_id: str = Depends(require_user)):
    """Get order details"""
    order = order_db.get_order(order_id)
    if not order or order.user_id != user_id:
        raise HTTPException(status_code=404, detail="Order not found")
    return order
