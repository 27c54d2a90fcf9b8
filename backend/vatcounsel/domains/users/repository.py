"""User directory repository wrapping crud.user_profile."""

from typing import Optional, Protocol, runtime_checkable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel import crud
from vatcounsel.models.user_profile import UserProfile


@runtime_checkable
class UserRepositoryProtocol(Protocol):
    """Read-only access to user records mirrored from the identity provider."""

    async def get(self, db: AsyncSession, *, user_id: UUID) -> Optional[UserProfile]:
        """Get a user record, or None if the user does not exist."""
        ...


class UserRepository(UserRepositoryProtocol):
    """Delegates to the crud.user_profile singleton."""

    async def get(self, db: AsyncSession, *, user_id: UUID) -> Optional[UserProfile]:
        """Get a user record, or None if the user does not exist."""
        return await crud.user_profile.get(db, user_id)
