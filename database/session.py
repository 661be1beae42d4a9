"""
Async SQLAlchemy engine and session factory.

One ``Database`` is built by the application factory and shared by every
request.  The engine (and its connection pool) is created on first use.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config.settings import Settings
from database.models import Base

logger = logging.getLogger(__name__)


class Database:
    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_size: int = 10,
        max_overflow: int = 20,
    ) -> None:
        self.url = url
        self._echo = echo
        self._pool_size = pool_size
        self._max_overflow = max_overflow
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            echo=settings.database_echo,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            if self.url.startswith("sqlite"):
                # SQLite has no server-side pool to size
                self._engine = create_async_engine(self.url, echo=self._echo)
            else:
                self._engine = create_async_engine(
                    self.url,
                    echo=self._echo,
                    pool_size=self._pool_size,
                    max_overflow=self._max_overflow,
                    pool_recycle=3600,
                    pool_pre_ping=True,
                )
            logger.info("Database engine created (%s)", self.engine_name)
        return self._engine

    @property
    def engine_name(self) -> str:
        return self.url.split("://", 1)[0]

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_factory

    async def create_all(self) -> None:
        """Create missing tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine disposed")


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency function — use in FastAPI `Depends(get_db_session)`."""
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
