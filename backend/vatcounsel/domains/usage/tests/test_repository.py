"""Tests for the SQL counter store against a file-backed SQLite database.

Sessions are built with the same options as the application session factory.
Each session gets its own connection, so the race test exercises the
database's own serialization of the conditional upsert.
"""

import asyncio
from datetime import datetime, timezone
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from vatcounsel.adapters.event_bus.fake import FakeEventBus
from vatcounsel.domains.billing.repository import SubscriptionRepository
from vatcounsel.domains.usage.entitlement import EntitlementResolver
from vatcounsel.domains.usage.repository import UsageCounterRepository
from vatcounsel.domains.usage.service import UsageService
from vatcounsel.domains.usage.types import ConsumeOk, LimitExceeded, PlanKey
from vatcounsel.domains.users.repository import UserRepository
from vatcounsel.models import Base, UserProfile

PERIOD_KEY = "2024-01-01"


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'usage.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(autocommit=False, autoflush=False, bind=engine)
    await engine.dispose()


@pytest.fixture
def repo():
    return UsageCounterRepository()


async def _consume(session_factory, repo, user_id, amount=1, limit=10):
    async with session_factory() as db:
        return await repo.consume_atomic(
            db, user_id=user_id, period_key=PERIOD_KEY, amount=amount, limit=limit
        )


async def _used(session_factory, repo, user_id):
    async with session_factory() as db:
        counter = await repo.get_counter(db, user_id=user_id, period_key=PERIOD_KEY)
        return counter.used if counter else None


class TestConsumeAtomic:
    @pytest.mark.asyncio
    async def test_first_consumption_creates_row(self, session_factory, repo):
        user_id = uuid4()
        assert await _used(session_factory, repo, user_id) is None

        counter = await _consume(session_factory, repo, user_id, amount=2)

        assert counter.used == 2
        assert counter.period_key == PERIOD_KEY
        assert await _used(session_factory, repo, user_id) == 2

    @pytest.mark.asyncio
    async def test_increments_existing_row(self, session_factory, repo):
        user_id = uuid4()
        await _consume(session_factory, repo, user_id)
        counter = await _consume(session_factory, repo, user_id)
        assert counter.used == 2

    @pytest.mark.asyncio
    async def test_ceiling_rejects_without_writing(self, session_factory, repo):
        user_id = uuid4()
        await _consume(session_factory, repo, user_id, amount=9)

        assert await _consume(session_factory, repo, user_id, amount=2) is None
        assert await _used(session_factory, repo, user_id) == 9

        counter = await _consume(session_factory, repo, user_id, amount=1)
        assert counter.used == 10
        assert await _consume(session_factory, repo, user_id, amount=1) is None

    @pytest.mark.asyncio
    async def test_amount_above_limit_on_empty_period(self, session_factory, repo):
        user_id = uuid4()
        assert await _consume(session_factory, repo, user_id, amount=3, limit=2) is None
        assert await _used(session_factory, repo, user_id) is None

    @pytest.mark.asyncio
    async def test_zero_limit_refuses_everything(self, session_factory, repo):
        assert await _consume(session_factory, repo, uuid4(), limit=0) is None

    @pytest.mark.asyncio
    async def test_invalid_amount(self, session_factory, repo):
        with pytest.raises(ValueError):
            await _consume(session_factory, repo, uuid4(), amount=0)

    @pytest.mark.asyncio
    async def test_periods_and_users_are_independent(self, session_factory, repo):
        alice, bob = uuid4(), uuid4()
        await _consume(session_factory, repo, alice, amount=10)
        counter = await _consume(session_factory, repo, bob)
        assert counter.used == 1

        async with session_factory() as db:
            other = await repo.consume_atomic(
                db, user_id=alice, period_key="2024-02-01", amount=1, limit=10
            )
        assert other.used == 1
        assert await _used(session_factory, repo, alice) == 10


class TestRace:
    @pytest.mark.asyncio
    async def test_last_unit_is_granted_once(self, session_factory, repo):
        user_id = uuid4()
        await _consume(session_factory, repo, user_id, amount=9)

        results = await asyncio.gather(
            _consume(session_factory, repo, user_id),
            _consume(session_factory, repo, user_id),
        )

        granted = [r for r in results if r is not None]
        assert len(granted) == 1
        assert granted[0].used == 10
        assert await _used(session_factory, repo, user_id) == 10


class TestUsageServiceOverStore:
    """UsageService wired to the SQL repositories, one session per request."""

    NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

    @pytest_asyncio.fixture
    async def user_id(self, session_factory):
        user_id = uuid4()
        async with session_factory() as db:
            db.add(UserProfile(id=user_id, created_at=datetime(2024, 1, 10, 8, 0)))
            await db.commit()
        return user_id

    @pytest.fixture
    def service(self):
        resolver = EntitlementResolver(UserRepository(), SubscriptionRepository())
        return UsageService(UsageCounterRepository(), resolver, FakeEventBus())

    async def _consume(self, session_factory, service, user_id):
        async with session_factory() as db:
            return await service.consume_usage(db, user_id, now=self.NOW)

    @pytest.mark.asyncio
    async def test_consume_returns_committed_count(self, session_factory, service, user_id):
        outcome = await self._consume(session_factory, service, user_id)

        assert outcome == ConsumeOk(
            used=1,
            remaining=9,
            plan_key=PlanKey.FREE,
            monthly_limit=10,
            period_key="2024-01-10",
        )
        async with session_factory() as db:
            snapshot = await service.get_usage_snapshot(db, user_id, now=self.NOW)
        assert snapshot.used == 1
        assert snapshot.remaining == 9
        assert snapshot.percent_used == 10

    @pytest.mark.asyncio
    async def test_eleventh_message_is_refused(self, session_factory, service, user_id):
        for expected in range(1, 11):
            outcome = await self._consume(session_factory, service, user_id)
            assert isinstance(outcome, ConsumeOk)
            assert outcome.used == expected

        outcome = await self._consume(session_factory, service, user_id)

        assert isinstance(outcome, LimitExceeded)
        assert outcome.used == 10
        assert outcome.limit == 10
        async with session_factory() as db:
            snapshot = await service.get_usage_snapshot(db, user_id, now=self.NOW)
        assert snapshot.used == 10
        assert snapshot.remaining == 0
