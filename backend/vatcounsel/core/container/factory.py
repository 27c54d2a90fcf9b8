"""Container Factory.

All construction logic lives here. The factory reads settings and builds
the container with environment-appropriate implementations.
"""

from vatcounsel.adapters.event_bus.in_memory import InMemoryEventBus
from vatcounsel.core.config import Settings
from vatcounsel.core.container.container import Container
from vatcounsel.core.logging import logger
from vatcounsel.core.protocols.event_bus import EventBus
from vatcounsel.core.protocols.payment import PaymentGatewayProtocol
from vatcounsel.domains.billing.repository import StripeEventRepository, SubscriptionRepository
from vatcounsel.domains.billing.service import BillingService
from vatcounsel.domains.billing.webhook_processor import BillingWebhookProcessor
from vatcounsel.domains.usage.entitlement import EntitlementResolver
from vatcounsel.domains.usage.metering import UsageMeter
from vatcounsel.domains.usage.repository import UsageCounterRepository
from vatcounsel.domains.usage.service import UsageService
from vatcounsel.domains.usage.subscribers.audit_listener import UsageAuditListener
from vatcounsel.domains.users.repository import UserRepository


def create_container(settings: Settings) -> Container:
    """Build container with environment-appropriate implementations.

    This is the single source of truth for dependency wiring.

    Args:
        settings: Application settings (from core/config)

    Returns:
        Fully constructed Container ready for use
    """
    event_bus = _create_event_bus()
    payment_gateway = _create_payment_gateway(settings)

    user_repo = UserRepository()
    subscription_repo = SubscriptionRepository()
    stripe_event_repo = StripeEventRepository()
    usage_counter_repo = UsageCounterRepository()

    entitlement_resolver = EntitlementResolver(
        user_repo=user_repo,
        subscription_repo=subscription_repo,
        free_period_kind=settings.FREE_PLAN_PERIOD_KIND,
    )
    usage_service = UsageService(
        counter_repo=usage_counter_repo,
        entitlement_resolver=entitlement_resolver,
        event_bus=event_bus,
    )

    billing_service = BillingService(
        payment_gateway=payment_gateway,
        subscription_repo=subscription_repo,
        site_url=settings.SITE_URL,
        checkout_success_path=settings.BILLING_CHECKOUT_SUCCESS_PATH,
        checkout_cancel_path=settings.BILLING_CHECKOUT_CANCEL_PATH,
        portal_return_path=settings.BILLING_PORTAL_RETURN_PATH,
    )
    billing_webhook = BillingWebhookProcessor(
        payment_gateway=payment_gateway,
        subscription_repo=subscription_repo,
        event_repo=stripe_event_repo,
    )

    return Container(
        event_bus=event_bus,
        payment_gateway=payment_gateway,
        user_repo=user_repo,
        subscription_repo=subscription_repo,
        stripe_event_repo=stripe_event_repo,
        usage_counter_repo=usage_counter_repo,
        entitlement_resolver=entitlement_resolver,
        usage_service=usage_service,
        usage_meter=UsageMeter(usage_service=usage_service),
        billing_service=billing_service,
        billing_webhook=billing_webhook,
    )


def _create_event_bus() -> EventBus:
    """Create event bus with subscribers wired up."""
    bus = InMemoryEventBus()

    audit_listener = UsageAuditListener()
    for pattern in audit_listener.EVENT_PATTERNS:
        bus.subscribe(pattern, audit_listener.handle)

    return bus


def _create_payment_gateway(settings: Settings) -> PaymentGatewayProtocol:
    """Create payment gateway: Stripe if enabled, otherwise a null implementation."""
    if settings.STRIPE_ENABLED:
        from vatcounsel.adapters.payment.stripe import StripePaymentGateway

        return StripePaymentGateway(
            api_key=settings.STRIPE_SECRET_KEY,
            webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
            premium_price_id=settings.STRIPE_PREMIUM_PRICE_ID,
        )

    from vatcounsel.adapters.payment.null import NullPaymentGateway

    logger.info("Stripe disabled, billing operations are unavailable")
    return NullPaymentGateway()
