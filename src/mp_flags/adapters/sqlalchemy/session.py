"""SQLAlchemy adapter – SqlAlchemySessionFactory."""
from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from mp_flags.adapters.sqlalchemy.models import Base


class SqlAlchemySessionFactory:
    """Creates async SQLAlchemy sessions from an engine URL (or an existing engine)."""

    def __init__(self, database_url: str | None = None, *, engine: AsyncEngine | None = None, **engine_kwargs: Any) -> None:
        if engine is None:
            if database_url is None:
                raise ValueError("database_url or engine is required")
            engine = create_async_engine(database_url, **engine_kwargs)
        self._engine = engine
        self._session_factory = async_sessionmaker(self._engine, class_=AsyncSession, expire_on_commit=False)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    def __call__(self) -> AsyncSession:
        return self._session_factory()

    async def create_all(self) -> None:
        """Create the flag tables if they do not exist yet."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self._engine.dispose()


__all__ = ["SqlAlchemySessionFactory"]
