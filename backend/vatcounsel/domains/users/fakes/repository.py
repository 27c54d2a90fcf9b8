"""Fake user repository for testing."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel.models.user_profile import UserProfile


class FakeUserRepository:
    """In-memory fake for UserRepositoryProtocol."""

    def __init__(self) -> None:
        """Initialize empty in-memory store."""
        self._store: dict[UUID, UserProfile] = {}
        self._calls: list[tuple] = []
        self._should_raise: Optional[Exception] = None

    def seed(
        self,
        user_id: UUID,
        *,
        created_at: datetime,
        email: Optional[str] = None,
        plan_override: Optional[str] = None,
        monthly_limit_override: Optional[int] = None,
    ) -> UserProfile:
        """Store a user record and return it."""
        user = UserProfile(
            id=user_id,
            email=email,
            created_at=created_at,
            modified_at=created_at,
            plan_override=plan_override,
            monthly_limit_override=monthly_limit_override,
        )
        self._store[user_id] = user
        return user

    def set_error(self, error: Exception) -> None:
        """Make every lookup raise ``error``."""
        self._should_raise = error

    def call_count(self, method: str) -> int:
        """Return the number of times a method was called."""
        return sum(1 for name, *_ in self._calls if name == method)

    async def get(self, db: AsyncSession, *, user_id: UUID) -> Optional[UserProfile]:
        """Get a user record from memory."""
        self._calls.append(("get", db, user_id))
        if self._should_raise:
            raise self._should_raise
        return self._store.get(user_id)
