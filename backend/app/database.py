"""Async SQLAlchemy engine and session factory.

The store handle is owned by a ``Database`` object that the application
lifespan opens and closes. Routes receive a per-request session through
``get_db``:

    from app.database import get_db

    @router.get("/items")
    async def list_items(db: AsyncSession = Depends(get_db)):
        result = await db.execute(select(Item))
        return result.scalars().all()
"""
import logging
from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.models import Base

logger = logging.getLogger(__name__)


class Database:
    """Single shared store handle with an explicit open/close lifecycle."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    async def open(self) -> "Database":
        if self.engine is not None:
            return self
        self.engine = create_async_engine(self.url, echo=self.echo)
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )
        logger.info("Opened database %s", self.engine.url.render_as_string(hide_password=True))
        return self

    async def init_schema(self) -> None:
        """Create all tables if they do not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        if self.engine is None:
            return
        await self.engine.dispose()
        self.engine = None
        self.session_factory = None
        logger.info("Database connection closed")

    def session(self) -> AsyncSession:
        if self.session_factory is None:
            raise RuntimeError("Database is not open")
        return self.session_factory()

    async def ping(self) -> bool:
        """Return True when the store answers a trivial query."""
        if self.engine is None:
            return False
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def __aenter__(self) -> "Database":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the application's store handle."""
    return request.app.state.database


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields an async DB session."""
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
        finally:
            await session.close()
