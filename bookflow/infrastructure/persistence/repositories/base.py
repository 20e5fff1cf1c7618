"""Base repository: add/flush/refresh plus post-write hooks."""

from typing import Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from bookflow.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Shared write path for the workflow repositories.

    Writes are flushed so generated ids and server defaults are visible
    immediately; committing is left to whoever owns the session
    (see session_scope).
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def create(self, obj: ModelType) -> ModelType:
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        await self._on_after_create(obj)
        return obj

    async def update(self, obj: ModelType) -> ModelType:
        """Flush pending changes on an attached row and reload server-side values."""
        await self.db.flush()
        await self.db.refresh(obj)
        await self._on_after_update(obj)
        return obj

    async def _on_after_create(self, obj: ModelType) -> None:
        """Hook for subclasses (logging)."""

    async def _on_after_update(self, obj: ModelType) -> None:
        """Hook for subclasses (logging)."""
