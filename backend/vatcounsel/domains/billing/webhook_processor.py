"""Webhook processor for Stripe billing events.

Verifies the signature, skips event ids that were already processed,
dispatches to a handler by event type and records the event id once the
handler succeeded. A failing handler leaves the event unrecorded so that
Stripe's retry is processed again.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel.core.logging import ContextualLogger, logger
from vatcounsel.core.protocols.payment import PaymentGatewayProtocol
from vatcounsel.domains.billing.exceptions import WebhookVerificationError, wrap_gateway_errors
from vatcounsel.domains.billing.protocols import BillingWebhookProtocol
from vatcounsel.domains.billing.repository import (
    StripeEventRepositoryProtocol,
    SubscriptionRepositoryProtocol,
)
from vatcounsel.domains.billing.types import (
    SubscriptionPlan,
    SubscriptionProvider,
    SubscriptionStatus,
    parse_status,
)


def _field(obj: Any, key: str, default: Any = None) -> Any:
    """Read a field from a Stripe object, a dict or an attribute bag.

    Stripe objects are dicts, so ``obj.items`` would be ``dict.items``.
    """
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _id_of(value: Any) -> Optional[str]:
    """Expandable Stripe references are either an id string or an object."""
    if value is None or isinstance(value, str):
        return value
    return _field(value, "id")


def _timestamp(value: Optional[int]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc).replace(tzinfo=None)


def _user_id_from_metadata(obj: Any) -> Optional[UUID]:
    raw = _field(_field(obj, "metadata"), "userId")
    if not raw:
        return None
    try:
        return UUID(str(raw))
    except ValueError:
        return None


class BillingWebhookProcessor(BillingWebhookProtocol):
    """Process Stripe webhook events for billing."""

    def __init__(
        self,
        payment_gateway: PaymentGatewayProtocol,
        subscription_repo: SubscriptionRepositoryProtocol,
        event_repo: StripeEventRepositoryProtocol,
    ) -> None:
        """Initialize with all required dependencies."""
        self._payment_gateway = payment_gateway
        self._subscription_repo = subscription_repo
        self._event_repo = event_repo

        # Event handler mapping
        self.handlers = {
            "checkout.session.completed": self._handle_checkout_completed,
            "customer.subscription.created": self._handle_subscription_updated,
            "customer.subscription.updated": self._handle_subscription_updated,
            "customer.subscription.deleted": self._handle_subscription_deleted,
            "invoice.payment_succeeded": self._handle_payment_succeeded,
            "invoice.payment_failed": self._handle_payment_failed,
        }

    async def process_webhook(self, db: AsyncSession, payload: bytes, signature: str) -> None:
        """Verify, de-duplicate and apply one webhook event.

        Raises:
            WebhookVerificationError: If the signature does not verify
        """
        if not signature:
            raise WebhookVerificationError("Missing stripe-signature header")
        try:
            event = self._payment_gateway.verify_webhook_signature(payload, signature)
        except ValueError as e:
            logger.warning(f"Webhook verification failed: {e}")
            raise WebhookVerificationError("Invalid signature") from e

        event_id = _field(event, "id")
        event_type = _field(event, "type")
        log = logger.with_context(event_id=event_id, event_type=event_type)

        if await self._event_repo.exists(db, event_id=event_id):
            log.info(f"Event {event_id} already processed, skipping")
            return

        handler = self.handlers.get(event_type)
        if handler is None:
            log.info(f"Unhandled event type: {event_type}")
        else:
            log.info(f"Processing Stripe event: {event_type} ({event_id})")
            await handler(db, _field(_field(event, "data"), "object"), log)

        await self._event_repo.record(db, event_id=event_id, event_type=event_type)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    @wrap_gateway_errors
    async def _handle_checkout_completed(
        self, db: AsyncSession, session: Any, log: ContextualLogger
    ) -> None:
        user_id = _user_id_from_metadata(session)
        if user_id is None:
            log.error("No userId in checkout session metadata")
            return

        subscription_id = _id_of(_field(session, "subscription"))
        if not subscription_id:
            log.info("Checkout session has no subscription, nothing to update")
            return

        subscription = await self._payment_gateway.get_subscription(subscription_id)
        await self._upsert_subscription(db, user_id, subscription, log)

    async def _handle_subscription_updated(
        self, db: AsyncSession, subscription: Any, log: ContextualLogger
    ) -> None:
        user_id = _user_id_from_metadata(subscription)
        if user_id is None:
            log.error("No userId in subscription metadata")
            return
        await self._upsert_subscription(db, user_id, subscription, log)

    async def _handle_subscription_deleted(
        self, db: AsyncSession, subscription: Any, log: ContextualLogger
    ) -> None:
        user_id = _user_id_from_metadata(subscription)
        if user_id is None:
            log.error("No userId in subscription metadata")
            return

        await self._subscription_repo.upsert_for_user(
            db,
            user_id=user_id,
            values={
                "plan_key": SubscriptionPlan.FREE.value,
                "status": SubscriptionStatus.INACTIVE.value,
                "stripe_customer_id": None,
                "stripe_subscription_id": None,
                "stripe_price_id": None,
                "current_period_end": None,
                "cancel_at_period_end": False,
                "provider": SubscriptionProvider.NONE.value,
            },
        )
        log.info(f"Subscription deleted for user {user_id}, reverted to FREE plan")

    async def _handle_payment_succeeded(
        self, db: AsyncSession, invoice: Any, log: ContextualLogger
    ) -> None:
        await self._set_status_from_invoice(db, invoice, SubscriptionStatus.ACTIVE, log)

    async def _handle_payment_failed(
        self, db: AsyncSession, invoice: Any, log: ContextualLogger
    ) -> None:
        await self._set_status_from_invoice(db, invoice, SubscriptionStatus.PAST_DUE, log)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _set_status_from_invoice(
        self,
        db: AsyncSession,
        invoice: Any,
        status: SubscriptionStatus,
        log: ContextualLogger,
    ) -> None:
        subscription_id = _id_of(_field(invoice, "subscription"))
        if not subscription_id:
            # Newer API versions nest the subscription under parent.subscription_details
            details = _field(_field(invoice, "parent"), "subscription_details")
            subscription_id = _id_of(_field(details, "subscription"))
        if not subscription_id:
            return

        updated = await self._subscription_repo.update_by_stripe_subscription_id(
            db, stripe_subscription_id=subscription_id, values={"status": status.value}
        )
        if updated is None:
            log.warning(f"No subscription row for {subscription_id}, status not updated")
            return
        log.info(f"Subscription {subscription_id} set to {status.value}")

    async def _upsert_subscription(
        self, db: AsyncSession, user_id: UUID, subscription: Any, log: ContextualLogger
    ) -> None:
        status = parse_status(_field(subscription, "status"))
        items = _field(_field(subscription, "items"), "data") or []
        first_item = items[0] if items else None
        price_id = _id_of(_field(first_item, "price"))

        # Period end lives on the items in newer API versions; trials end at trial_end
        if status == SubscriptionStatus.TRIALING and _field(subscription, "trial_end"):
            current_period_end = _timestamp(_field(subscription, "trial_end"))
        else:
            current_period_end = _timestamp(
                _field(first_item, "current_period_end")
                or _field(subscription, "current_period_end")
            )

        await self._subscription_repo.upsert_for_user(
            db,
            user_id=user_id,
            values={
                "plan_key": SubscriptionPlan.PREMIUM.value,
                "status": status.value,
                "stripe_customer_id": _id_of(_field(subscription, "customer")),
                "stripe_subscription_id": _field(subscription, "id"),
                "stripe_price_id": price_id,
                "current_period_end": current_period_end,
                "cancel_at_period_end": bool(_field(subscription, "cancel_at_period_end", False)),
                "provider": SubscriptionProvider.STRIPE.value,
            },
        )
        log.info(f"Subscription upserted for user {user_id}: {status.value}")
