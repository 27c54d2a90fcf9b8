"""Processed Stripe webhook events."""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from vatcounsel.models._base import TimestampedBase, utcnow


class StripeEvent(TimestampedBase):
    """A Stripe event id that has been handled; replays are skipped."""

    __tablename__ = "stripe_events"

    event_id: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    event_type: Mapped[str] = mapped_column(String, nullable=False)
    processed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
