"""Models for the application."""

from ._base import Base, TimestampedBase
from .stripe_event import StripeEvent
from .subscription import Subscription
from .usage_counter import UsageCounter
from .user_profile import UserProfile

__all__ = [
    "Base",
    "TimestampedBase",
    "StripeEvent",
    "Subscription",
    "UsageCounter",
    "UserProfile",
]
