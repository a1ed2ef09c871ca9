"""Async database engine and session dependencies."""

from collections.abc import AsyncGenerator
from contextlib import AbstractAsyncContextManager

from sqlalchemy import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from cfp.config import settings


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


def build_database_url() -> URL:
    """
    Database URL from DATABASE_URL when set, otherwise from the POSTGRES_* settings.

    A bare postgres:// or postgresql:// URL is switched to the asyncpg driver.
    """
    if settings.DATABASE_URL:
        url = make_url(settings.DATABASE_URL)
        if url.drivername in ("postgres", "postgresql"):
            url = url.set(drivername="postgresql+asyncpg")
        return url

    return URL.create(
        "postgresql+asyncpg",
        database=settings.POSTGRES_DB_NAME,
        host=settings.POSTGRES_HOST,
        password=settings.POSTGRES_DB_PASSWORD,
        port=settings.POSTGRES_PORT,
        username=settings.POSTGRES_DB_USER,
    )


database_url = build_database_url()

# asyncpg-only options
connect_args = (
    {
        "server_settings": {"application_name": settings.APP_NAME},
        "command_timeout": 60,
    }
    if database_url.drivername == "postgresql+asyncpg"
    else {}
)

async_engine: AsyncEngine = create_async_engine(
    database_url,
    echo=settings.DB_ECHO,
    pool_pre_ping=True,
    pool_recycle=3600,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    connect_args=connect_args,
)

AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=True,
)

AsyncSessionReadOnly = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_async_db() -> AsyncGenerator[AsyncSession]:
    """
    Session dependency for write routes.

    The whole request runs inside one transaction: it commits when the route
    returns and rolls back if anything raises. Activity updates rely on this
    so that the parent row and its per-language contents change together.
    """
    async with AsyncSessionLocal.begin() as session:
        yield session


async def get_async_db_read_only() -> AsyncGenerator[AsyncSession]:
    """Session dependency for read-only routes (no explicit transaction)."""
    async with AsyncSessionReadOnly() as session:
        yield session


def create_async_session() -> AbstractAsyncContextManager[AsyncSession]:
    """Session for health checks and scripts outside of request handling."""
    return AsyncSessionLocal()
