"""Billing domain exceptions."""

import functools

from vatcounsel.core.exceptions import (
    ExternalServiceError,
    InvalidStateError,
    NotFoundException,
    VatCounselException,
)


class BillingError(ExternalServiceError):
    """Raised when the payment provider rejects or fails a billing operation."""

    code = "BILLING_ERROR"
    status_code = 502

    def __init__(self, message: str = "Payment provider error"):
        """Initialize with default message."""
        super().__init__(service_name="Stripe", message=message)


class StripeConfigError(VatCounselException):
    """Raised when Stripe is enabled but not fully configured."""

    code = "STRIPE_CONFIG_ERROR"
    status_code = 500

    def __init__(self, message: str = "Stripe is not configured"):
        """Initialize with default message."""
        super().__init__(message)


class SubscriptionNotFoundError(NotFoundException):
    """Raised when a user has no Stripe customer or subscription."""

    code = "SUBSCRIPTION_NOT_FOUND"

    def __init__(self, message: str = "No subscription found for this user"):
        """Initialize with default message."""
        super().__init__(message)


class AlreadySubscribedError(InvalidStateError):
    """Raised when starting checkout while a subscription is active or trialing."""

    code = "ALREADY_SUBSCRIBED"
    status_code = 400

    def __init__(self, message: str = "You already have an active subscription"):
        """Initialize with default message."""
        super().__init__(message)


class WebhookVerificationError(InvalidStateError):
    """Raised when a webhook payload fails signature verification."""

    code = "WEBHOOK_VERIFICATION_ERROR"
    status_code = 400

    def __init__(self, message: str = "Invalid webhook signature"):
        """Initialize with default message."""
        super().__init__(message)


class BillingNotAvailableError(InvalidStateError):
    """Raised by NullPaymentGateway when billing is not enabled."""

    code = "BILLING_NOT_AVAILABLE"
    status_code = 503

    def __init__(self, message: str = "Billing is not enabled for this instance"):
        """Initialize with default message."""
        super().__init__(message)


def wrap_gateway_errors(fn):
    """Decorator: catch ExternalServiceError from the payment gateway, wrap as BillingError."""

    @functools.wraps(fn)
    async def wrapper(*args, **kwargs):
        try:
            return await fn(*args, **kwargs)
        except BillingError:
            raise
        except ExternalServiceError as e:
            raise BillingError(message=e.message) from e

    return wrapper
