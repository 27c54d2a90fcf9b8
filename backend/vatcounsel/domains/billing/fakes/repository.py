"""Fake billing repositories for testing."""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel.models.subscription import Subscription


class FakeSubscriptionRepository:
    """In-memory fake for SubscriptionRepositoryProtocol."""

    def __init__(self) -> None:
        """Initialize with empty store and call log."""
        self._store: dict[UUID, Subscription] = {}
        self._calls: list[tuple] = []
        self._should_raise: Optional[Exception] = None

    def seed(self, user_id: UUID, **fields: Any) -> Subscription:
        """Populate store with a subscription row built from ``fields``."""
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        defaults: dict[str, Any] = dict(
            id=uuid4(),
            user_id=user_id,
            plan_key="FREE",
            status="inactive",
            current_period_end=None,
            stripe_customer_id=None,
            stripe_subscription_id=None,
            stripe_price_id=None,
            cancel_at_period_end=False,
            provider="none",
            created_at=now,
            modified_at=now,
        )
        defaults.update(fields)
        obj = Subscription(**defaults)
        self._store[user_id] = obj
        return obj

    def set_error(self, error: Exception) -> None:
        """Make every read raise ``error``."""
        self._should_raise = error

    def get(self, user_id: UUID) -> Optional[Subscription]:
        """Synchronous accessor for assertions."""
        return self._store.get(user_id)

    def call_count(self, method: str) -> int:
        """Return the number of times a method was called."""
        return sum(1 for name, *_ in self._calls if name == method)

    async def get_by_user_id(self, db: AsyncSession, *, user_id: UUID) -> Optional[Subscription]:
        """Get subscription row by user ID."""
        self._calls.append(("get_by_user_id", db, user_id))
        if self._should_raise:
            raise self._should_raise
        return self._store.get(user_id)

    async def get_by_stripe_subscription_id(
        self, db: AsyncSession, *, stripe_subscription_id: str
    ) -> Optional[Subscription]:
        """Get subscription row by Stripe subscription ID."""
        self._calls.append(("get_by_stripe_subscription_id", db, stripe_subscription_id))
        for obj in self._store.values():
            if obj.stripe_subscription_id == stripe_subscription_id:
                return obj
        return None

    async def upsert_for_user(
        self, db: AsyncSession, *, user_id: UUID, values: dict[str, Any]
    ) -> Subscription:
        """Create or update the user's row in memory."""
        self._calls.append(("upsert_for_user", db, user_id, values))
        obj = self._store.get(user_id)
        if obj is None:
            return self.seed(user_id, **values)
        for field, value in values.items():
            setattr(obj, field, value)
        return obj

    async def update_by_stripe_subscription_id(
        self, db: AsyncSession, *, stripe_subscription_id: str, values: dict[str, Any]
    ) -> Optional[Subscription]:
        """Update the row holding ``stripe_subscription_id``."""
        self._calls.append(("update_by_stripe_subscription_id", db, stripe_subscription_id, values))
        for obj in self._store.values():
            if obj.stripe_subscription_id == stripe_subscription_id:
                for field, value in values.items():
                    setattr(obj, field, value)
                return obj
        return None


class FakeStripeEventRepository:
    """In-memory fake for StripeEventRepositoryProtocol."""

    def __init__(self) -> None:
        """Initialize with an empty ledger."""
        self._events: dict[str, str] = {}
        self._calls: list[tuple] = []

    def seed(self, event_id: str, event_type: str = "test.event") -> None:
        """Mark an event as already processed."""
        self._events[event_id] = event_type

    def recorded(self, event_id: str) -> bool:
        """Synchronous accessor for assertions."""
        return event_id in self._events

    def call_count(self, method: str) -> int:
        """Return the number of times a method was called."""
        return sum(1 for name, *_ in self._calls if name == method)

    async def exists(self, db: AsyncSession, *, event_id: str) -> bool:
        """Whether the event id is in the ledger."""
        self._calls.append(("exists", db, event_id))
        return event_id in self._events

    async def record(self, db: AsyncSession, *, event_id: str, event_type: str) -> None:
        """Add the event id to the ledger."""
        self._calls.append(("record", db, event_id, event_type))
        self._events.setdefault(event_id, event_type)
