"""
SQLAlchemy async session setup for ReasonBridge.

Request handlers get a session per request from get_async_session; the
aggregate backfill job opens its own with get_async_session_context.
"""

import logging

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from reasonbridge_backend.config import DATABASE_ECHO, DATABASE_URL as _CONFIGURED_URL, async_database_url

logger = logging.getLogger(__name__)

DATABASE_URL = async_database_url(_CONFIGURED_URL)

async_engine = create_async_engine(
    DATABASE_URL,
    echo=DATABASE_ECHO,
    future=True,
    pool_pre_ping=True,
)

AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_session():
    """
    FastAPI dependency yielding one session per request.

    Commits when the handler returns and rolls back if it raises; leaving the
    `async with` block closes the session either way.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error(f"Rolling back database session: {e}")
            await session.rollback()
            raise


def get_async_session_context():
    """
    Session for work outside a request, e.g. the aggregate backfill job:

        async with get_async_session_context() as db:
            ...
    """
    return AsyncSessionLocal()
