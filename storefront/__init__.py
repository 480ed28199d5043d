"""
Storefront Client

Cart consistency engine and checkout orchestrator for a retail storefront.
Keeps one view of the shopper's cart across the guest (local) and
authenticated (server) stores and drives the payment protocol that ends
in a server-side order.
"""

__version__ = "1.0.0"
