"""Metering gate for chargeable work (one chat answer = one message)."""

from typing import Awaitable, Callable, Optional, TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel.domains.usage.protocols import UsageMeterProtocol, UsageServiceProtocol
from vatcounsel.domains.usage.service import unwrap
from vatcounsel.domains.usage.types import ConsumeMeta, ConsumeOk

T = TypeVar("T")


class UsageMeter(UsageMeterProtocol):
    """Charges one message after the gated work completes.

    Work that raises or is cancelled is never charged. The pre-flight check
    only avoids starting work that would be refused; the consumption after
    the work is what enforces the quota.
    """

    def __init__(self, usage_service: UsageServiceProtocol) -> None:
        """Initialize with the usage service."""
        self._usage_service = usage_service

    async def run(
        self,
        db: AsyncSession,
        user_id: UUID,
        work: Callable[[], Awaitable[T]],
        meta: Optional[ConsumeMeta] = None,
    ) -> tuple[T, ConsumeOk]:
        """Check the limit, run ``work``, then consume one message.

        Raises:
            UsageLimitExceededError: Before the work when no message is left, or
                after it when a concurrent request took the last message
            UsageError: When the counter store fails
        """
        await self._usage_service.assert_within_limit(db, user_id)
        result = await work()
        outcome = await self._usage_service.consume_usage(db, user_id, amount=1, meta=meta)
        return result, unwrap(outcome)
