"""Base class for CRUD operations."""

from typing import Any, Generic, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel.models._base import Base

ModelType = TypeVar("ModelType", bound=Base)


def dialect_insert(db: AsyncSession, model: Type[Base]) -> Any:
    """Build an INSERT that supports ON CONFLICT for the session's dialect.

    PostgreSQL in production, SQLite in the store tests.
    """
    if db.get_bind().dialect.name == "sqlite":
        return sqlite.insert(model)
    return postgresql.insert(model)


class CRUDBase(Generic[ModelType]):
    """Base class for CRUD operations keyed by primary id."""

    def __init__(self, model: Type[ModelType]):
        """Initialize the CRUD object.

        Args:
        ----
            model (Type[ModelType]): The model to be used in the CRUD operations.

        """
        self.model = model

    async def get(self, db: AsyncSession, id: UUID) -> Optional[ModelType]:
        """Get a single object by ID.

        Args:
        ----
            db (AsyncSession): The database session.
            id (UUID): The UUID of the object to get.

        Returns:
        -------
            Optional[ModelType]: The object with the given ID, or None.

        """
        result = await db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()
