"""Tests for UserRepository against a file-backed SQLite database."""

from datetime import datetime
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from vatcounsel.domains.users.repository import UserRepository
from vatcounsel.models import Base, UserProfile


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'users.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.mark.asyncio
async def test_get_existing_user(session_factory):
    user_id = uuid4()
    async with session_factory() as db:
        db.add(
            UserProfile(
                id=user_id,
                email="user@example.com",
                created_at=datetime(2024, 1, 10, 8, 0),
                plan_override="INTERNAL",
            )
        )
        await db.commit()

    async with session_factory() as db:
        user = await UserRepository().get(db, user_id=user_id)

    assert user.email == "user@example.com"
    assert user.created_at == datetime(2024, 1, 10, 8, 0)
    assert user.plan_override == "INTERNAL"
    assert user.monthly_limit_override is None


@pytest.mark.asyncio
async def test_unknown_user(session_factory):
    async with session_factory() as db:
        assert await UserRepository().get(db, user_id=uuid4()) is None
