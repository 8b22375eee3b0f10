"""Async database engine, session factory and store-error guard."""

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from app.core.config import get_settings
from app.core.exceptions import StoreFailure

logger = logging.getLogger(__name__)

settings = get_settings()

engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,
)

async_session_factory = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async DB session."""
    async with async_session_factory() as session:
        yield session


async def init_db() -> None:
    """Create all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


@asynccontextmanager
async def store_operation(session: AsyncSession, failure_message: str) -> AsyncIterator[None]:
    """Run store calls, turning persistence errors into StoreFailure.

    The session is rolled back so it stays usable for the rest of the
    request. Domain errors raised inside the block pass through untouched.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Store operation failed: %s", failure_message)
        await session.rollback()
        raise StoreFailure(failure_message) from exc
