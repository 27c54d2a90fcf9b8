"""Subscription model."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from vatcounsel.models._base import TimestampedBase


class Subscription(TimestampedBase):
    """Per-user subscription state mirrored from Stripe webhooks."""

    __tablename__ = "subscriptions"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, unique=True)
    plan_key: Mapped[str] = mapped_column(String(20), nullable=False, default="FREE")
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="inactive")
    current_period_end: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    stripe_customer_id: Mapped[Optional[str]] = mapped_column(String, nullable=True, index=True)
    stripe_subscription_id: Mapped[Optional[str]] = mapped_column(
        String, nullable=True, index=True
    )
    stripe_price_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    cancel_at_period_end: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    provider: Mapped[str] = mapped_column(String(20), nullable=False, default="none")
