# Database modules

from .products import product_db, ProductDatabase
from .carts import cart_db, CartDatabase, CartError
from .orders import order_db, OrderDatabase
from .payments import gateway_order_db, GatewayOrderDatabase

__all__ = [
    "product_db",
    "ProductDatabase",
    "cart_db",
    "CartDatabase",
    "CartError",
    "order_db",
    "OrderDatabase",
    "gateway_order_db",
    "GatewayOrderDatabase",
]


def reset_databases() -> None:
    """Drop all carts, gateway orders and orders, and restock the catalog"""
    product_db.reset()
    cart_db.carts.clear()
    order_db.clear()
    gateway_order_db.orders.clear()
