"""Usage counter model."""

import uuid

from sqlalchemy import CheckConstraint, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from vatcounsel.models._base import TimestampedBase


class UsageCounter(TimestampedBase):
    """Messages consumed by one user within one accounting period.

    Rows are created on the first consumption of a period and never deleted.
    """

    __tablename__ = "usage_counters"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    period_key: Mapped[str] = mapped_column(String(10), nullable=False)
    used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("user_id", "period_key", name="uq_usage_counters_user_period"),
        CheckConstraint("used >= 0", name="ck_usage_counters_used_non_negative"),
    )
