"""Database session management."""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from catalog.config import settings
from catalog.core.errors import DatabaseError
from catalog.db.base import Base

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"echo": settings.debug}
    return {
        "echo": settings.debug,
        "pool_pre_ping": True,
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
    }


# Create async engine
engine: AsyncEngine = create_async_engine(
    str(settings.database_url),
    **_engine_options(str(settings.database_url)),
)

# Create async session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create missing tables and seed the permission codes."""
    from catalog.models import Permission  # noqa: F401  (registers every table)
    from catalog.models.permission import seed_permissions

    bind = bind or engine
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with async_sessionmaker(bind, expire_on_commit=False)() as session:
        await seed_permissions(session)
        await session.commit()
    logger.info("Database schema ready")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session.

    Handlers that write call ``commit`` themselves before returning; whatever
    is left uncommitted when the request ends is rolled back.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def commit(session: AsyncSession) -> None:
    """Commit the request's transaction, surfacing failure as ``DatabaseError``."""
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        logger.error("Commit failed: %s", exc)
        await session.rollback()
        raise DatabaseError("commit", str(exc)) from exc
