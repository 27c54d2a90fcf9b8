"""User profile model."""

from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from vatcounsel.models._base import TimestampedBase


class UserProfile(TimestampedBase):
    """Mirror of the identity provider's user record.

    ``id`` is the identity provider's user id and ``created_at`` the account
    creation time, which anchors the user's accounting periods.
    """

    __tablename__ = "user_profile"

    email: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    plan_override: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    monthly_limit_override: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
