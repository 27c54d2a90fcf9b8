"""Billing domain protocols.

BillingServiceProtocol: the only thing billing endpoints need injected.
BillingWebhookProtocol: single method for webhook event processing.
"""

from typing import Optional, Protocol, runtime_checkable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel.domains.billing.types import BillingStatus


@runtime_checkable
class BillingServiceProtocol(Protocol):
    """Public billing service interface."""

    async def get_billing_status(self, db: AsyncSession, user_id: UUID) -> BillingStatus:
        """Current subscription state. Users without a row are FREE/inactive."""
        ...

    async def create_checkout_session(
        self, db: AsyncSession, user_id: UUID, email: Optional[str]
    ) -> str:
        """Start a PREMIUM subscription checkout. Returns the checkout URL."""
        ...

    async def create_portal_session(self, db: AsyncSession, user_id: UUID) -> str:
        """Open the customer portal. Returns the portal URL."""
        ...


@runtime_checkable
class BillingWebhookProtocol(Protocol):
    """Processes payment provider webhook events."""

    async def process_webhook(self, db: AsyncSession, payload: bytes, signature: str) -> None:
        """Verify, de-duplicate and apply one webhook event.

        Raises WebhookVerificationError when the signature does not verify.
        """
        ...
