"""Null payment gateway for when Stripe is disabled.

Satisfies PaymentGatewayProtocol so the container can always be fully
constructed. User-facing billing operations raise BillingNotAvailableError.
verify_webhook_signature raises ValueError, matching the Stripe adapter's
contract for invalid signatures.
"""

from typing import Any, Dict, List, Optional

from vatcounsel.core.protocols.payment import PaymentGatewayProtocol
from vatcounsel.domains.billing.exceptions import BillingNotAvailableError


class NullPaymentGateway(PaymentGatewayProtocol):
    """No-op payment gateway used when Stripe is disabled."""

    def get_premium_price_id(self) -> Optional[str]:
        """Raise, no prices exist without a payment provider."""
        raise BillingNotAvailableError()

    async def create_customer(
        self,
        email: str,
        metadata: Optional[Dict[str, str]] = None,
        preferred_locales: Optional[List[str]] = None,
    ) -> Any:
        """Raise, requires a real payment provider."""
        raise BillingNotAvailableError()

    async def create_checkout_session(
        self,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Raise, requires a real payment provider."""
        raise BillingNotAvailableError()

    async def create_portal_session(self, customer_id: str, return_url: str) -> Any:
        """Raise, requires a real payment provider."""
        raise BillingNotAvailableError()

    async def get_subscription(self, subscription_id: str) -> Any:
        """Raise, requires a real payment provider."""
        raise BillingNotAvailableError()

    def verify_webhook_signature(self, payload: bytes, signature: str) -> Any:
        """Raise ValueError, billing is not enabled."""
        raise ValueError("Billing is not enabled")
