"""Cart API routes for mock storefront"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..database.carts import CartError, cart_db
from ..database.products import product_db
from ..models.cart import (
    AddToCartRequest,
    CartResponse,
    MergeGuestCartRequest,
    UpdateCartItemRequest,
    identity_key,
)
from ..security.auth import require_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cart", tags=["Cart"])


def item_key(
    variant_id: Optional[str] = Query(None),
    product_id: Optional[str] = Query(None),
    size: Optional[str] = Query(None),
    color: Optional[str] = Query(None),
) -> tuple:
    """Identity of the addressed cart item, from query parameters"""
    if not variant_id and not product_id:
        raise HTTPException(status_code=400, detail="variant_id or product_id is required")
    return identity_key(product_id, variant_id, size, color)


@router.get("", response_model=CartResponse)
async def get_cart(user_id: str = Depends(require_user)):
    """Get the shopper's cart"""
    return CartResponse(cart=cart_db.get_cart(user_id))


@router.post("/items", response_model=CartResponse)
async def add_to_cart(
    request: AddToCartRequest,
    user_id: str = Depends(require_user),
):
    """Add an item to the cart"""
    product = product_db.get_product(request.product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    if request.variant_id and not product.find_variant(request.variant_id):
        raise HTTPException(status_code=404, detail="Variant not found")

    available = product_db.available_stock(product, request.variant_id)
    try:
        cart = cart_db.add_item(user_id, product, request, available)
    except CartError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return CartResponse(
        cart=cart,
        message=f"Added {request.quantity}x {product.name} to cart",
    )


@router.put("/items", response_model=CartResponse)
async def update_cart_item(
    request: UpdateCartItemRequest,
    key: tuple = Depends(item_key),
    user_id: str = Depends(require_user),
):
    """Update item quantity in cart; below 1 removes the item"""
    item = cart_db.find_item(user_id, key)
    available = None
    if item:
        product = product_db.get_product(item.product_id)
        if product:
            available = product_db.available_stock(product, item.variant_id)

    try:
        cart = cart_db.update_item_quantity(user_id, key, request.quantity, available)
    except CartError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return CartResponse(cart=cart, message="Cart updated")


@router.delete("/items", response_model=CartResponse)
async def remove_from_cart(
    key: tuple = Depends(item_key),
    user_id: str = Depends(require_user),
):
    """Remove an item from the cart"""
    return CartResponse(cart=cart_db.remove_item(user_id, key), message="Item removed")


@router.delete("", response_model=CartResponse)
async def clear_cart(user_id: str = Depends(require_user)):
    """Clear all items from cart"""
    return CartResponse(cart=cart_db.clear_cart(user_id), message="Cart cleared")


@router.post("/merge-guest", response_model=CartResponse)
async def merge_guest_cart(
    request: MergeGuestCartRequest,
    user_id: str = Depends(require_user),
):
    """Merge the guest cart into the shopper's cart; unknown products are skipped"""
    entries = []
    for item in request.items:
        product = product_db.get_product(item.product_id)
        if not product:
            logger.warning(f"Skipping unknown guest item {item.product_id}")
            continue
        entries.append((product, item, product_db.available_stock(product, item.variant_id)))

    cart = cart_db.merge_items(user_id, entries)
    logger.info(f"Merged {len(entries)} guest item(s) for {user_id}")
    return CartResponse(cart=cart, message="Guest cart merged")
