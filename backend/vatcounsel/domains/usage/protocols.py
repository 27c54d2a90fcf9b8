"""Usage domain protocols.

EntitlementResolverProtocol: which plan and quota apply to a user right now.
UsageServiceProtocol: snapshot, pre-flight check and authoritative consumption.
UsageMeterProtocol: gate that charges one message for successfully completed work.
"""

from datetime import datetime
from typing import Awaitable, Callable, Optional, Protocol, TypeVar, runtime_checkable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel.domains.usage.types import (
    ConsumeMeta,
    ConsumeOk,
    ConsumeOutcome,
    Entitlement,
    LimitExceeded,
    UsageSnapshot,
)

T = TypeVar("T")


@runtime_checkable
class EntitlementResolverProtocol(Protocol):
    """Resolves a user's entitlement from override, subscription or default."""

    async def resolve(self, db: AsyncSession, user_id: UUID) -> Entitlement:
        """Resolve the entitlement in effect for ``user_id``.

        Raises EntitlementLookupError when the user cannot be looked up.
        """
        ...


@runtime_checkable
class UsageServiceProtocol(Protocol):
    """Usage accounting facade used by request handlers."""

    async def get_usage_snapshot(
        self, db: AsyncSession, user_id: UUID, now: Optional[datetime] = None
    ) -> UsageSnapshot:
        """Read-only view of the user's current period."""
        ...

    async def check_within_limit(
        self, db: AsyncSession, user_id: UUID, now: Optional[datetime] = None
    ) -> Optional[LimitExceeded]:
        """Pre-flight check. Returns LimitExceeded when the quota is exhausted, else None."""
        ...

    async def assert_within_limit(
        self, db: AsyncSession, user_id: UUID, now: Optional[datetime] = None
    ) -> None:
        """Pre-flight check that raises UsageLimitExceededError."""
        ...

    async def consume_usage(
        self,
        db: AsyncSession,
        user_id: UUID,
        amount: int = 1,
        meta: Optional[ConsumeMeta] = None,
        now: Optional[datetime] = None,
    ) -> ConsumeOutcome:
        """Atomically charge ``amount`` messages. The sole enforcement point."""
        ...


@runtime_checkable
class UsageMeterProtocol(Protocol):
    """Charges one message for work that completed successfully."""

    async def run(
        self,
        db: AsyncSession,
        user_id: UUID,
        work: Callable[[], Awaitable[T]],
        meta: Optional[ConsumeMeta] = None,
    ) -> tuple[T, ConsumeOk]:
        """Check the limit, run ``work``, then consume one message."""
        ...
