"""
Mock Storefront

In-memory storefront API for local development and integration tests:
server cart, shipping quotes, gateway payment intents and order creation
after payment verification.
"""

__version__ = "1.0.0"
