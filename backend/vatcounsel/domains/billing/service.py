"""Billing service.

Coordinates the subscription store and the payment gateway for the
user-facing billing operations: status, checkout and customer portal.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel.core.exceptions import InvalidStateError
from vatcounsel.core.logging import logger
from vatcounsel.core.protocols.payment import PaymentGatewayProtocol
from vatcounsel.domains.billing.exceptions import (
    AlreadySubscribedError,
    BillingError,
    StripeConfigError,
    SubscriptionNotFoundError,
    wrap_gateway_errors,
)
from vatcounsel.domains.billing.protocols import BillingServiceProtocol
from vatcounsel.domains.billing.repository import SubscriptionRepositoryProtocol
from vatcounsel.domains.billing.types import (
    FREE_BILLING_STATUS,
    BillingStatus,
    SubscriptionPlan,
    SubscriptionStatus,
    parse_status,
)

CHECKOUT_SESSION_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"
CUSTOMER_LOCALES = ["bg"]


class BillingService(BillingServiceProtocol):
    """Service for managing user subscriptions."""

    def __init__(
        self,
        payment_gateway: PaymentGatewayProtocol,
        subscription_repo: SubscriptionRepositoryProtocol,
        site_url: str,
        checkout_success_path: str,
        checkout_cancel_path: str,
        portal_return_path: str,
    ) -> None:
        """Initialize with dependencies and the redirect targets."""
        self._payment_gateway = payment_gateway
        self._subscription_repo = subscription_repo
        self._site_url = site_url.rstrip("/")
        self._checkout_success_path = checkout_success_path
        self._checkout_cancel_path = checkout_cancel_path
        self._portal_return_path = portal_return_path

    @property
    def success_url(self) -> str:
        """Checkout success redirect; Stripe fills in the session id."""
        return (
            f"{self._site_url}{self._checkout_success_path}"
            f"?session_id={CHECKOUT_SESSION_PLACEHOLDER}"
        )

    @property
    def cancel_url(self) -> str:
        """Checkout cancel redirect."""
        return f"{self._site_url}{self._checkout_cancel_path}"

    @property
    def portal_return_url(self) -> str:
        """Where the customer portal sends the user back to."""
        return f"{self._site_url}{self._portal_return_path}"

    async def get_billing_status(self, db: AsyncSession, user_id: UUID) -> BillingStatus:
        """Current subscription state. Users without a row are FREE/inactive."""
        subscription = await self._subscription_repo.get_by_user_id(db, user_id=user_id)
        if subscription is None:
            return FREE_BILLING_STATUS
        try:
            plan_key = SubscriptionPlan(subscription.plan_key)
        except ValueError:
            plan_key = SubscriptionPlan.FREE
        return BillingStatus(
            plan_key=plan_key,
            status=parse_status(subscription.status),
            current_period_end=subscription.current_period_end,
            cancel_at_period_end=bool(subscription.cancel_at_period_end),
        )

    @wrap_gateway_errors
    async def create_checkout_session(
        self, db: AsyncSession, user_id: UUID, email: Optional[str]
    ) -> str:
        """Start a PREMIUM subscription checkout.

        Reuses the stored Stripe customer, creating and storing one first
        when the user has none.

        Raises:
            AlreadySubscribedError: If the subscription is active or trialing
            StripeConfigError: If no PREMIUM price is configured
            BillingError: If the payment provider fails
        """
        log = logger.with_context(user_id=str(user_id))
        subscription = await self._subscription_repo.get_by_user_id(db, user_id=user_id)
        if subscription is not None and parse_status(subscription.status) in (
            SubscriptionStatus.ACTIVE,
            SubscriptionStatus.TRIALING,
        ):
            raise AlreadySubscribedError()

        price_id = self._payment_gateway.get_premium_price_id()
        if not price_id:
            raise StripeConfigError(
                "STRIPE_PREMIUM_PRICE_ID is not configured. Please set it in your environment."
            )

        customer_id = subscription.stripe_customer_id if subscription else None
        if not customer_id:
            if not email:
                raise InvalidStateError("An email address is required to start checkout")
            customer = await self._payment_gateway.create_customer(
                email=email,
                metadata={"userId": str(user_id)},
                preferred_locales=CUSTOMER_LOCALES,
            )
            customer_id = customer.id
            await self._subscription_repo.upsert_for_user(
                db, user_id=user_id, values={"stripe_customer_id": customer_id}
            )
            log.info(f"Created Stripe customer {customer_id}")

        session = await self._payment_gateway.create_checkout_session(
            customer_id=customer_id,
            price_id=price_id,
            success_url=self.success_url,
            cancel_url=self.cancel_url,
            metadata={"userId": str(user_id)},
        )
        url = getattr(session, "url", None)
        if not url:
            raise BillingError("Failed to create checkout session URL")
        log.info("Checkout session created")
        return url

    @wrap_gateway_errors
    async def create_portal_session(self, db: AsyncSession, user_id: UUID) -> str:
        """Open the customer portal for the user's Stripe customer.

        Raises:
            SubscriptionNotFoundError: If the user has no Stripe customer
            BillingError: If the payment provider fails
        """
        subscription = await self._subscription_repo.get_by_user_id(db, user_id=user_id)
        if subscription is None or not subscription.stripe_customer_id:
            raise SubscriptionNotFoundError("No billing account found for this user")

        session = await self._payment_gateway.create_portal_session(
            customer_id=subscription.stripe_customer_id,
            return_url=self.portal_return_url,
        )
        return session.url
