"""
Tests for the cart and order API accessors
"""

import json

import httpx
import pytest

from storefront.core.errors import (
    ApiError,
    AuthRequiredError,
    TransientNetworkError,
    VerificationError,
)
from storefront.models import (
    CheckoutDraft,
    ItemIdentity,
    PaymentProof,
    PricingBreakdown,
    ShippingAddress,
)
from storefront.services.cart_client import CartClient
from storefront.services.order_client import OrderClient

BASE_URL = "http://storefront.test"

EMPTY_CART = {"cart": {"items": [], "discount": 0, "shipping": 0, "tax": 0}}


def make_client(cls, handler, token="token-abc", retries=1):
    """Accessor over a MockTransport, with no backoff delay"""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return cls(
        BASE_URL,
        token_provider=lambda: token,
        read_retry_attempts=retries,
        retry_backoff_seconds=0,
        http_client=http_client,
    )


def cart_json(*items):
    return {"cart": {"items": list(items), "discount": 0, "shipping": 0, "tax": 0}}


@pytest.fixture
def draft(make_item):
    return CheckoutDraft(
        shipping_address=ShippingAddress(first_name="Asha", last_name="Rao", email="a@b.co"),
        items=(make_item(),),
        pricing=PricingBreakdown(subtotal=1000, discount=0, shipping=80, tax=180, total=1260),
    )


class TestApiTransport:
    """Tests for status mapping, headers and the read retry policy."""

    @pytest.mark.asyncio
    async def test_bearer_token_sent(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=EMPTY_CART)

        await make_client(CartClient, handler).get_cart()

        assert seen["auth"] == "Bearer token-abc"

    @pytest.mark.asyncio
    async def test_no_token_no_header(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=EMPTY_CART)

        await make_client(CartClient, handler, token=None).get_cart()

        assert seen["auth"] is None

    @pytest.mark.asyncio
    async def test_401_is_auth_required_and_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(401, json={"detail": "Not authenticated"})

        with pytest.raises(AuthRequiredError) as exc_info:
            await make_client(CartClient, handler).get_cart()

        assert exc_info.value.status_code == 401
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_read_retried_once_on_5xx(self):
        responses = [httpx.Response(503, json={"detail": "busy"}), httpx.Response(200, json=EMPTY_CART)]

        def handler(request):
            return responses.pop(0)

        cart = await make_client(CartClient, handler).get_cart()

        assert cart.is_empty
        assert responses == []

    @pytest.mark.asyncio
    async def test_read_gives_up_after_one_retry(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransientNetworkError):
            await make_client(CartClient, handler).get_cart()

        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_timeout_is_transient(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(TransientNetworkError):
            await make_client(CartClient, handler, retries=0).get_cart()

    @pytest.mark.asyncio
    async def test_4xx_uses_detail_message(self, make_item):
        def handler(request):
            return httpx.Response(400, json={"detail": "Insufficient stock. Available: 2"})

        with pytest.raises(ApiError) as exc_info:
            await make_client(CartClient, handler).add_item(make_item())

        assert exc_info.value.message == "Insufficient stock. Available: 2"
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_mutations_are_not_retried(self, make_item):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(502, json={"detail": "bad gateway"})

        with pytest.raises(TransientNetworkError):
            await make_client(CartClient, handler).add_item(make_item())

        assert len(calls) == 1


class TestCartClient:
    """Tests for server cart requests."""

    @pytest.mark.asyncio
    async def test_add_item_body(self, make_item):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=cart_json(seen["body"]))

        cart = await make_client(CartClient, handler).add_item(make_item(variant_id="var-1", quantity=2))

        assert (seen["method"], seen["path"]) == ("POST", "/api/cart/items")
        assert seen["body"]["variant_id"] == "var-1"
        assert "product_snapshot" not in seen["body"]
        assert cart.item_count == 2

    @pytest.mark.asyncio
    async def test_update_quantity_addresses_item_by_query(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=EMPTY_CART)

        identity = ItemIdentity(product_id="prod-001", size="M", color="Red")
        await make_client(CartClient, handler).update_quantity(identity, 4)

        assert seen["params"] == {"product_id": "prod-001", "size": "M", "color": "Red"}
        assert seen["body"] == {"quantity": 4}

    @pytest.mark.asyncio
    async def test_remove_and_clear(self):
        seen = []

        def handler(request):
            seen.append((request.method, request.url.path, dict(request.url.params)))
            return httpx.Response(200, json=EMPTY_CART)

        client = make_client(CartClient, handler)
        await client.remove_item(ItemIdentity(product_id="p", variant_id="v"))
        await client.clear_cart()

        assert seen == [
            ("DELETE", "/api/cart/items", {"variant_id": "v"}),
            ("DELETE", "/api/cart", {}),
        ]

    @pytest.mark.asyncio
    async def test_merge_guest_cart(self, make_item):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=EMPTY_CART)

        await make_client(CartClient, handler).merge_guest_cart([make_item(), make_item(size="L")])

        assert seen["path"] == "/api/cart/merge-guest"
        assert len(seen["body"]["items"]) == 2


class TestOrderClient:
    """Tests for order and payment requests."""

    @pytest.mark.asyncio
    async def test_shipping_quote(self):
        def handler(request):
            assert request.url.path == "/api/orders/shipping-cost"
            return httpx.Response(200, json={"shipping": 80})

        quote = await make_client(OrderClient, handler).get_shipping_quote()

        assert quote.shipping == 80

    @pytest.mark.asyncio
    async def test_create_payment_intent_not_retried(self, draft):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500, json={"detail": "Failed to create payment order"})

        with pytest.raises(TransientNetworkError):
            await make_client(OrderClient, handler).create_payment_intent(draft)

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_create_payment_intent(self, draft):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "gateway_order_id": "order_1",
                "amount": 126000,
                "currency": "INR",
                "receipt": "RECEIPT_123456",
                "gateway_public_key": "rzp_test_key",
            })

        intent = await make_client(OrderClient, handler).create_payment_intent(draft)

        assert intent.gateway_order_id == "order_1"
        assert seen["body"]["pricing"]["total"] == 1260
        assert "product_snapshot" not in seen["body"]["items"][0]

    @pytest.mark.asyncio
    async def test_verification_rejection(self, draft):
        def handler(request):
            return httpx.Response(400, json={"detail": "Invalid payment signature"})

        proof = PaymentProof(gateway_order_id="order_1", payment_id="pay_1", signature="00")
        with pytest.raises(VerificationError) as exc_info:
            await make_client(OrderClient, handler).verify_and_create_order(proof, draft)

        assert exc_info.value.message == "Invalid payment signature"

    @pytest.mark.asyncio
    async def test_verification_transport_error_is_not_rejection(self, draft):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("connection reset", request=request)

        proof = PaymentProof(gateway_order_id="order_1", payment_id="pay_1", signature="00")
        with pytest.raises(TransientNetworkError):
            await make_client(OrderClient, handler).verify_and_create_order(proof, draft)

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_verify_sends_proof_and_draft(self, draft):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"order": {
                "order_id": "ORD-1",
                "order_number": "ORD1234560001",
                "status": "confirmed",
                "payment_status": "paid",
                "items": [],
                "pricing": {"subtotal": 1000, "discount": 0, "shipping": 80, "tax": 180, "total": 1260},
                "shipping_address": draft.shipping_address.model_dump(),
                "payment_method": "razorpay",
                "created_at": "2026-01-01T00:00:00Z",
            }})

        proof = PaymentProof(gateway_order_id="order_1", payment_id="pay_1", signature="ab")
        order = await make_client(OrderClient, handler).verify_and_create_order(proof, draft)

        assert seen["body"]["payment_id"] == "pay_1"
        assert seen["body"]["draft"]["pricing"]["total"] == 1260
        assert order.payment_status.value == "paid"
