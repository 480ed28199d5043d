# Mock Storefront Routes

from .auth import router as auth_router
from .cart import router as cart_router
from .orders import router as orders_router

__all__ = ["auth_router", "cart_router", "orders_router"]
