"""CRUD singletons used by the domain repositories."""

from .crud_stripe_event import stripe_event
from .crud_subscription import subscription
from .crud_usage_counter import usage_counter
from .crud_user_profile import user_profile

__all__ = ["stripe_event", "subscription", "usage_counter", "user_profile"]
