"""Stripe payment gateway.

The Stripe SDK is synchronous; calls run in a worker thread so they do not
block the event loop. Provider failures surface as ExternalServiceError.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

import stripe
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from vatcounsel.core.config import settings
from vatcounsel.core.exceptions import ExternalServiceError
from vatcounsel.core.logging import logger
from vatcounsel.core.protocols.payment import PaymentGatewayProtocol
from vatcounsel.domains.billing.exceptions import StripeConfigError

stripe_logger = logger.with_prefix("Stripe: ")

# Network failures and rate limiting are worth another attempt
TRANSIENT_ERRORS = (stripe.APIConnectionError, stripe.RateLimitError)


class StripePaymentGateway(PaymentGatewayProtocol):
    """PaymentGatewayProtocol backed by the Stripe API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        premium_price_id: Optional[str] = None,
    ) -> None:
        """Initialize from explicit values or settings.

        Raises:
            StripeConfigError: If no secret key is configured
        """
        self._api_key = api_key or settings.STRIPE_SECRET_KEY
        self._webhook_secret = webhook_secret or settings.STRIPE_WEBHOOK_SECRET
        self._premium_price_id = premium_price_id or settings.STRIPE_PREMIUM_PRICE_ID or None
        if not self._api_key:
            raise StripeConfigError(
                "STRIPE_SECRET_KEY is not configured. Please set it in your environment."
            )

    @retry(
        stop=stop_after_attempt(3),
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        wait=wait_exponential(multiplier=0.5, max=4),
        reraise=True,
    )
    async def _send(self, fn: Callable[..., Any], **params: Any) -> Any:
        return await asyncio.to_thread(fn, api_key=self._api_key, **params)

    async def _call(self, operation: str, fn: Callable[..., Any], **params: Any) -> Any:
        try:
            return await self._send(fn, **params)
        except stripe.StripeError as e:
            stripe_logger.error(f"{operation} failed: {e}")
            message = getattr(e, "user_message", None) or str(e)
            raise ExternalServiceError("Stripe", f"Failed to {operation}: {message}") from e

    def get_premium_price_id(self) -> Optional[str]:
        """Configured PREMIUM price id."""
        return self._premium_price_id

    async def create_customer(
        self,
        email: str,
        metadata: Optional[Dict[str, str]] = None,
        preferred_locales: Optional[List[str]] = None,
    ) -> Any:
        """Create a Stripe customer."""
        params: Dict[str, Any] = {"email": email, "metadata": metadata or {}}
        if preferred_locales:
            params["preferred_locales"] = preferred_locales
        return await self._call("create customer", stripe.Customer.create, **params)

    async def create_checkout_session(
        self,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Create a subscription checkout session."""
        return await self._call(
            "create checkout session",
            stripe.checkout.Session.create,
            mode="subscription",
            customer=customer_id,
            payment_method_types=["card"],
            line_items=[{"price": price_id, "quantity": 1}],
            success_url=success_url,
            cancel_url=cancel_url,
            metadata=metadata or {},
            subscription_data={"metadata": metadata or {}},
            billing_address_collection="required",
            customer_update={"address": "auto", "name": "auto"},
        )

    async def create_portal_session(self, customer_id: str, return_url: str) -> Any:
        """Create a billing portal session."""
        return await self._call(
            "create portal session",
            stripe.billing_portal.Session.create,
            customer=customer_id,
            return_url=return_url,
        )

    async def get_subscription(self, subscription_id: str) -> Any:
        """Retrieve a subscription."""
        return await self._call(
            "retrieve subscription", stripe.Subscription.retrieve, id=subscription_id
        )

    def verify_webhook_signature(self, payload: bytes, signature: str) -> Any:
        """Verify the Stripe-Signature header and construct the event.

        Raises:
            ValueError: If the payload or signature is invalid
        """
        if not self._webhook_secret:
            raise StripeConfigError("STRIPE_WEBHOOK_SECRET is not configured")
        try:
            return stripe.Webhook.construct_event(payload, signature, self._webhook_secret)
        except stripe.SignatureVerificationError as e:
            raise ValueError(f"Invalid signature: {e}") from e
