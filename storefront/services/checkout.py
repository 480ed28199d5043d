"""
Checkout Orchestrator

Drives a purchase from the address form to a server-created order:

    IDLE -> VALIDATING -> AWAITING_GATEWAY_INTENT -> AWAITING_USER_PAYMENT
         -> VERIFYING_PAYMENT -> COMPLETED

Every failure exit (VALIDATION_FAILED, INTENT_CREATION_FAILED,
PAYMENT_CANCELLED, VERIFICATION_FAILED) returns straight to IDLE. No order
exists until the server has verified the payment proof, and the proof is
submitted exactly once per payment.
"""

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from ..core.errors import (
    ApiError,
    CheckoutInProgressError,
    InvalidTransitionError,
    PaymentCancelledError,
    ValidationError,
)
from ..core.validators import validate_shipping_address
from ..models.cart import Cart
from ..models.checkout import (
    CheckoutDraft,
    Order,
    PaymentIntent,
    PaymentProof,
    PricingBreakdown,
    ShippingAddress,
    ShippingQuote,
)
from .cart_engine import CartEngine
from .gateway import PaymentGateway
from .order_client import OrderClient
from .pricing import DEFAULT_TAX_RATE, calculate_pricing

logger = logging.getLogger(__name__)


class CheckoutState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    AWAITING_GATEWAY_INTENT = "awaiting_gateway_intent"
    AWAITING_USER_PAYMENT = "awaiting_user_payment"
    VERIFYING_PAYMENT = "verifying_payment"
    COMPLETED = "completed"
    VALIDATION_FAILED = "validation_failed"
    INTENT_CREATION_FAILED = "intent_creation_failed"
    PAYMENT_CANCELLED = "payment_cancelled"
    VERIFICATION_FAILED = "verification_failed"


class CheckoutEvent(str, Enum):
    SUBMIT = "submit"
    VALIDATION_PASSED = "validation_passed"
    VALIDATION_REJECTED = "validation_rejected"
    INTENT_CREATED = "intent_created"
    INTENT_FAILED = "intent_failed"
    PAYMENT_SUCCEEDED = "payment_succeeded"
    PAYMENT_CANCELLED = "payment_cancelled"
    ORDER_CREATED = "order_created"
    VERIFICATION_REJECTED = "verification_rejected"
    RESET = "reset"


S = CheckoutState
E = CheckoutEvent

TRANSITIONS: dict[tuple[CheckoutState, CheckoutEvent], CheckoutState] = {
    (S.IDLE, E.SUBMIT): S.VALIDATING,
    (S.VALIDATING, E.VALIDATION_PASSED): S.AWAITING_GATEWAY_INTENT,
    (S.VALIDATING, E.VALIDATION_REJECTED): S.VALIDATION_FAILED,
    (S.AWAITING_GATEWAY_INTENT, E.INTENT_CREATED): S.AWAITING_USER_PAYMENT,
    (S.AWAITING_GATEWAY_INTENT, E.INTENT_FAILED): S.INTENT_CREATION_FAILED,
    (S.AWAITING_GATEWAY_INTENT, E.PAYMENT_CANCELLED): S.PAYMENT_CANCELLED,
    (S.AWAITING_USER_PAYMENT, E.PAYMENT_SUCCEEDED): S.VERIFYING_PAYMENT,
    (S.AWAITING_USER_PAYMENT, E.PAYMENT_CANCELLED): S.PAYMENT_CANCELLED,
    (S.VERIFYING_PAYMENT, E.ORDER_CREATED): S.COMPLETED,
    (S.VERIFYING_PAYMENT, E.VERIFICATION_REJECTED): S.VERIFICATION_FAILED,
    (S.VALIDATION_FAILED, E.RESET): S.IDLE,
    (S.INTENT_CREATION_FAILED, E.RESET): S.IDLE,
    (S.PAYMENT_CANCELLED, E.RESET): S.IDLE,
    (S.VERIFICATION_FAILED, E.RESET): S.IDLE,
    (S.COMPLETED, E.RESET): S.IDLE,
}


@dataclass
class CheckoutResult:
    """Outcome of a completed checkout"""
    order: Order
    intent: PaymentIntent
    pricing: PricingBreakdown


@dataclass
class CheckoutSummary:
    """Cart and server quote loaded when the shopper enters checkout"""
    cart: Cart
    quote: ShippingQuote
    pricing: PricingBreakdown


class CheckoutOrchestrator:
    """
    Checkout state machine for one shopper.

    Only IDLE accepts submit(); a second submit while one is running raises
    CheckoutInProgressError.

    Usage:
        checkout = CheckoutOrchestrator(engine, order_client, gateway)
        pricing = await checkout.load_summary()
        result = await checkout.submit(address)
    """

    def __init__(
        self,
        engine: CartEngine,
        order_client: OrderClient,
        gateway: PaymentGateway,
        tax_rate: Decimal = DEFAULT_TAX_RATE,
        currency: Optional[str] = None,
    ):
        self.engine = engine
        self.order_client = order_client
        self.gateway = gateway
        self.tax_rate = tax_rate
        self.currency = currency

        self.state = CheckoutState.IDLE
        self.history: list[CheckoutState] = [CheckoutState.IDLE]
        self.draft: Optional[CheckoutDraft] = None
        self.intent: Optional[PaymentIntent] = None
        self.summary: Optional[CheckoutSummary] = None

        self._cancel_requested = False
        self._payment_task: Optional[asyncio.Task] = None

    # ==================== State machine ====================

    def _fire(self, event: CheckoutEvent) -> CheckoutState:
        target = TRANSITIONS.get((self.state, event))
        if target is None:
            raise InvalidTransitionError(f"No transition from {self.state.value} on {event.value}")

        logger.info(f"Checkout {self.state.value} -> {target.value} ({event.value})")
        self.state = target
        self.history.append(target)
        return target

    def _fail(self, event: CheckoutEvent) -> None:
        self._fire(event)
        self._fire(CheckoutEvent.RESET)
        self.summary = None

    @property
    def can_retry(self) -> bool:
        return self.state == CheckoutState.IDLE and self.draft is not None

    # ==================== Operations ====================

    async def load_summary(self, refresh: bool = False) -> PricingBreakdown:
        """Load the cart and shipping quote once per checkout entry"""
        if self.summary is None or refresh:
            cart = await self.engine.get_cart()
            quote = await self.order_client.get_shipping_quote()
            self.summary = self._summarize(cart, quote)
        return self.summary.pricing

    def _summarize(self, cart: Cart, quote: ShippingQuote) -> CheckoutSummary:
        return CheckoutSummary(
            cart=cart,
            quote=quote,
            pricing=calculate_pricing(cart, quote, self.tax_rate),
        )

    async def _build_draft(self, address: ShippingAddress) -> CheckoutDraft:
        """
        Snapshot the live cart into a draft.

        The cart is re-read on every attempt so the order covers exactly
        what will be cleared afterwards; the shipping quote is reused
        within one checkout entry.
        """
        if self.summary is None:
            await self.load_summary()
        else:
            cart = await self.engine.get_cart()
            self.summary = self._summarize(cart, self.summary.quote)

        if self.summary.cart.is_empty:
            raise ValidationError({"cart": "Your cart is empty"})

        return CheckoutDraft(
            shipping_address=address,
            items=self.summary.cart.items,
            pricing=self.summary.pricing,
        )

    async def submit(self, address: ShippingAddress) -> CheckoutResult:
        """
        Validate the form, open a payment intent, collect the payment and
        have the server create the order.

        Raises:
            CheckoutInProgressError: A checkout is already running
            ValidationError: Form or cart is invalid; nothing was sent
            PaymentCancelledError: Shopper dismissed the payment step
            VerificationError: Server rejected the payment proof
        """
        if self.state != CheckoutState.IDLE:
            raise CheckoutInProgressError(f"Checkout is {self.state.value}")

        self._fire(CheckoutEvent.SUBMIT)
        self._cancel_requested = False

        errors = validate_shipping_address(address)
        if errors:
            self._fail(CheckoutEvent.VALIDATION_REJECTED)
            raise ValidationError(errors)

        return await self._draft_and_pay(address)

    async def retry(self) -> CheckoutResult:
        """
        Pay again after a cancelled or failed attempt, reusing its
        shipping address. The draft is rebuilt from the current cart.
        """
        if self.state != CheckoutState.IDLE:
            raise CheckoutInProgressError(f"Checkout is {self.state.value}")
        if self.draft is None:
            raise InvalidTransitionError("No checkout draft to retry")

        self._fire(CheckoutEvent.SUBMIT)
        self._cancel_requested = False
        return await self._draft_and_pay(self.draft.shipping_address)

    def cancel_payment(self) -> bool:
        """
        Abandon the payment step.

        Returns False once the payment proof is already being verified,
        since the order may exist by then.
        """
        if self.state not in (CheckoutState.AWAITING_GATEWAY_INTENT, CheckoutState.AWAITING_USER_PAYMENT):
            return False

        self._cancel_requested = True
        if self._payment_task is not None and not self._payment_task.done():
            self._payment_task.cancel()
        return True

    def reset(self) -> None:
        """Return a completed checkout to IDLE for the next purchase"""
        self._fire(CheckoutEvent.RESET)
        self.intent = None
        self.summary = None

    # ==================== Steps ====================

    async def _draft_and_pay(self, address: ShippingAddress) -> CheckoutResult:
        try:
            self.draft = await self._build_draft(address)
        except (Exception, asyncio.CancelledError):
            self._fail(CheckoutEvent.VALIDATION_REJECTED)
            raise

        self._fire(CheckoutEvent.VALIDATION_PASSED)
        return await self._pay(self.draft)

    async def _pay(self, draft: CheckoutDraft) -> CheckoutResult:
        try:
            intent = await self.order_client.create_payment_intent(draft)
        except asyncio.CancelledError:
            logger.warning("Checkout cancelled while creating payment intent")
            self._fail(CheckoutEvent.PAYMENT_CANCELLED)
            raise
        except Exception as e:
            logger.error(f"Payment intent creation failed: {e}")
            self._fail(CheckoutEvent.INTENT_FAILED)
            raise

        if self.currency and intent.currency != self.currency:
            logger.error(f"Payment intent {intent.gateway_order_id} is in {intent.currency}, expected {self.currency}")
            self._fail(CheckoutEvent.INTENT_FAILED)
            raise ApiError(f"Payment intent currency {intent.currency} does not match {self.currency}")

        self.intent = intent
        if self._cancel_requested:
            logger.warning(f"Payment cancelled before gateway opened for {intent.gateway_order_id}")
            self._fail(CheckoutEvent.PAYMENT_CANCELLED)
            raise PaymentCancelledError("Payment cancelled by user")

        self._fire(CheckoutEvent.INTENT_CREATED)
        proof = await self._collect_payment(intent, draft)

        self._fire(CheckoutEvent.PAYMENT_SUCCEEDED)
        order = await self._verify(proof, draft)

        self._fire(CheckoutEvent.ORDER_CREATED)
        self.draft = None

        try:
            await self.engine.clear()
        except Exception as e:
            # The order exists; a stale cart must not turn this into a failure
            logger.warning(f"Order {order.order_number} created but cart clear failed: {e}")

        return CheckoutResult(order=order, intent=intent, pricing=draft.pricing)

    async def _collect_payment(self, intent: PaymentIntent, draft: CheckoutDraft) -> PaymentProof:
        address = draft.shipping_address
        prefill = {
            "name": address.full_name,
            "email": address.email,
            "contact": address.phone,
        }

        self._payment_task = asyncio.get_running_loop().create_task(
            self.gateway.collect_payment(intent, prefill)
        )
        try:
            return await self._payment_task
        except asyncio.CancelledError:
            self._fail(CheckoutEvent.PAYMENT_CANCELLED)
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.warning(f"Payment cancelled for {intent.gateway_order_id}")
            raise PaymentCancelledError("Payment cancelled by user") from None
        except PaymentCancelledError:
            logger.warning(f"Payment dismissed for {intent.gateway_order_id}")
            self._fail(CheckoutEvent.PAYMENT_CANCELLED)
            raise
        except Exception as e:
            logger.error(f"Payment collection failed for {intent.gateway_order_id}: {e}")
            self._fail(CheckoutEvent.PAYMENT_CANCELLED)
            raise
        finally:
            self._payment_task = None

    async def _verify(self, proof: PaymentProof, draft: CheckoutDraft) -> Order:
        try:
            return await self.order_client.verify_and_create_order(proof, draft)
        except (Exception, asyncio.CancelledError) as e:
            logger.error(f"Payment verification failed for {proof.payment_id}: {e!r}")
            self.draft = None
            self._fail(CheckoutEvent.VERIFICATION_REJECTED)
            raise
