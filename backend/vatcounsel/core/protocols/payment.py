"""Payment gateway protocol.

Cross-cutting infrastructure protocol for payment processing (Stripe).
Adapters raise ExternalServiceError for provider failures and ValueError for
webhook payloads that fail signature verification.

Direct consumers: BillingService, BillingWebhookProcessor.
"""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class PaymentGatewayProtocol(Protocol):
    """Protocol for payment gateway operations."""

    def get_premium_price_id(self) -> Optional[str]:
        """Price id of the PREMIUM subscription, or None when not configured."""
        ...

    async def create_customer(
        self,
        email: str,
        metadata: Optional[Dict[str, str]] = None,
        preferred_locales: Optional[List[str]] = None,
    ) -> Any:
        """Create a customer in the payment provider."""
        ...

    async def create_checkout_session(
        self,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Create a subscription-mode checkout session. The result has a ``url``."""
        ...

    async def create_portal_session(self, customer_id: str, return_url: str) -> Any:
        """Create a customer portal session. The result has a ``url``."""
        ...

    async def get_subscription(self, subscription_id: str) -> Any:
        """Retrieve a subscription."""
        ...

    def verify_webhook_signature(self, payload: bytes, signature: str) -> Any:
        """Verify and construct a webhook event from payload and signature."""
        ...
