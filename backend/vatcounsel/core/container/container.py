"""Dependency Injection Container.

The container is an immutable dataclass that holds protocol implementations.
It has no construction logic; that belongs in the factory.
"""

from dataclasses import dataclass, replace
from typing import Any

from vatcounsel.core.protocols import EventBus, PaymentGatewayProtocol
from vatcounsel.domains.billing.protocols import BillingServiceProtocol, BillingWebhookProtocol
from vatcounsel.domains.billing.repository import (
    StripeEventRepositoryProtocol,
    SubscriptionRepositoryProtocol,
)
from vatcounsel.domains.usage.protocols import (
    EntitlementResolverProtocol,
    UsageMeterProtocol,
    UsageServiceProtocol,
)
from vatcounsel.domains.usage.repository import UsageCounterRepositoryProtocol
from vatcounsel.domains.users.repository import UserRepositoryProtocol


@dataclass(frozen=True)
class Container:
    """Immutable container holding all protocol implementations.

    Usage:
        # FastAPI endpoints: use Inject() to pull individual protocols
        from vatcounsel.api.deps import Inject

        async def get_usage(usage_service: UsageServiceProtocol = Inject(UsageServiceProtocol)):
            ...

        # Testing: construct directly with fakes (see backend/conftest.py)
        test_container = Container(event_bus=FakeEventBus(), ...)
    """

    # Event bus for domain event fan-out
    event_bus: EventBus

    # Payment provider (Stripe, or null when billing is disabled)
    payment_gateway: PaymentGatewayProtocol

    # Repository protocols (thin wrappers around crud singletons)
    user_repo: UserRepositoryProtocol
    subscription_repo: SubscriptionRepositoryProtocol
    stripe_event_repo: StripeEventRepositoryProtocol
    usage_counter_repo: UsageCounterRepositoryProtocol

    # Usage domain
    entitlement_resolver: EntitlementResolverProtocol
    usage_service: UsageServiceProtocol
    usage_meter: UsageMeterProtocol

    # Billing domain
    billing_service: BillingServiceProtocol
    billing_webhook: BillingWebhookProtocol

    # -----------------------------------------------------------------
    # Convenience methods
    # -----------------------------------------------------------------

    def replace(self, **changes: Any) -> "Container":
        """Create a new container with some dependencies replaced.

        Useful for partial overrides in tests:

            modified = container.replace(payment_gateway=FakePaymentGateway())

        Args:
            **changes: Dependency name -> new implementation

        Returns:
            New Container with specified dependencies replaced
        """
        return replace(self, **changes)
