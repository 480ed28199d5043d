#!/usr/bin/env python3
"""
Checkout walkthrough against a running mock storefront.

Fills a guest cart, logs in (merging the guest cart), checks out through
the simulated gateway and lists the shopper's orders.

    python -m mock_storefront.main          # in one terminal
    python scripts/demo_checkout.py         # in another
"""

import asyncio
import logging
import sys
import tempfile
from pathlib import Path

import httpx

from mock_storefront.config import settings as mock_settings
from storefront.client import Storefront
from storefront.core.config import Settings, get_settings
from storefront.core.errors import StorefrontError
from storefront.models import CartLineItem, ProductSnapshot, ShippingAddress
from storefront.services.gateway import SimulatedGateway

logging.basicConfig(
    level=logging.DEBUG if get_settings().debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

API_BASE_URL = f"http://localhost:{mock_settings.port}"

DEMO_ADDRESS = ShippingAddress(
    first_name="Asha",
    last_name="Rao",
    email="asha@example.com",
    phone="98765 43210",
    address="12 MG Road",
    city="Bengaluru",
    state="Karnataka",
    pincode="560001",
)


async def issue_token(user_id: str) -> str:
    """Ask the mock auth service for an access token."""
    async with httpx.AsyncClient(timeout=10.0) as client:
        response = await client.post(f"{API_BASE_URL}/api/auth/token", json={"user_id": user_id})
        response.raise_for_status()
        return response.json()["access_token"]


async def run_demo(storage_dir: Path) -> None:
    settings = Settings(
        api_base_url=API_BASE_URL,
        local_storage_path=str(storage_dir / "local_storage.json"),
    )
    gateway = SimulatedGateway(settings.gateway_key_secret or mock_settings.gateway_key_secret)

    async with Storefront(gateway=gateway, settings=settings) as shop:
        kurta = CartLineItem(
            product_id="prod-001",
            variant_id="var-001-m-white",
            quantity=1,
            size="M",
            color="White",
            unit_price=1000,
            product_snapshot=ProductSnapshot(name="Classic Cotton Kurta", price=1000),
        )
        await shop.cart.add_item(kurta)
        await shop.cart.update_quantity(kurta.identity, 3)
        print(f"✓ Guest cart holds {await shop.cart.item_count()} item(s)")

        merged = await shop.session.login(await issue_token("demo-shopper"))
        print(f"✓ Logged in, server cart holds {merged.item_count if merged else 0} item(s)")

        pricing = await shop.checkout.load_summary()
        print(f"✓ Total {pricing.total} {settings.currency} "
              f"(subtotal {pricing.subtotal}, shipping {pricing.shipping}, tax {pricing.tax})")

        result = await shop.checkout.submit(DEMO_ADDRESS)
        print(f"✓ Order {result.order.order_number} is {result.order.payment_status.value}")

        orders = await shop.order_client.list_my_orders()
        print(f"✓ Shopper has {len(orders)} order(s)")


def main() -> int:
    with tempfile.TemporaryDirectory() as storage_dir:
        try:
            asyncio.run(run_demo(Path(storage_dir)))
        except httpx.ConnectError:
            print(f"✗ Mock storefront is not running on {API_BASE_URL}")
            print("\nRun: python -m mock_storefront.main")
            return 1
        except StorefrontError as e:
            print(f"✗ Checkout failed: {e}")
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
