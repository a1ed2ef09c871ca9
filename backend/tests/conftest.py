"""Test configuration and fixtures."""

import asyncio
import os
import uuid
from collections.abc import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from sqlalchemy import event, text
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from cfp.api.v1 import app_v1
from cfp.db.config import Base, get_async_db, get_async_db_read_only
from cfp.models import *  # noqa: F403
from cfp.security.tokens import create_access_token


@pytest_asyncio.fixture(scope="function")
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """
    Create a test database engine.

    Strategy:
    - Local/Unit testing: uses SQLite in-memory database (no postgres required)
    - CI/Docker: uses DATABASE_URL environment variable if set (postgres)
    - Tables created for each test function for complete isolation
    """
    database_url_env = os.environ.get("DATABASE_URL")

    if database_url_env:
        # CI/Docker mode: one database per pytest-xdist worker
        url_obj = make_url(database_url_env)
        worker_id = os.environ.get("PYTEST_XDIST_WORKER", "")
        if worker_id:
            url_obj = url_obj.set(database=f"{url_obj.database}_{worker_id}")
        test_db_name = url_obj.database

        admin_engine = create_async_engine(
            url_obj.set(database="postgres"), isolation_level="AUTOCOMMIT"
        )
        try:
            async with admin_engine.connect() as conn:
                result = await conn.execute(
                    text("SELECT 1 FROM pg_database WHERE datname = :db_name"),
                    {"db_name": test_db_name},
                )
                if not result.fetchone():
                    await conn.execute(text(f'CREATE DATABASE "{test_db_name}"'))
        finally:
            await admin_engine.dispose()

        engine = create_async_engine(url_obj, echo=False, pool_pre_ping=True)

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
    else:
        # Local mode: one in-memory database shared by every connection of the engine
        engine = create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

        # Enable foreign key support for SQLite
        @event.listens_for(engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()
    # Brief pause for async connection cleanup
    await asyncio.sleep(0.01)


@pytest_asyncio.fixture(scope="function")
async def async_session(
    async_engine: AsyncEngine,
) -> AsyncGenerator[AsyncSession]:
    """
    Create database session for testing with transaction rollback.

    Uses nested transactions (savepoints) to isolate each test.
    After the test completes, all changes are rolled back.
    """
    connection = await async_engine.connect()
    transaction = await connection.begin()

    async_session_maker = async_sessionmaker(
        bind=connection,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    session = async_session_maker()

    await session.begin_nested()

    # Recreate the savepoint whenever the code under test ends it
    @event.listens_for(session.sync_session, "after_transaction_end")
    def restart_savepoint(session, transaction):
        if transaction.nested and not transaction._parent.nested:
            session.begin_nested()

    yield session

    await session.close()
    await transaction.rollback()
    await connection.close()


@pytest.fixture
def db_override(async_session: AsyncSession):
    """Route every database dependency of the v1 app to the test session."""

    async def override_get_db():
        yield async_session

    app_v1.dependency_overrides[get_async_db] = override_get_db
    app_v1.dependency_overrides[get_async_db_read_only] = override_get_db

    yield

    app_v1.dependency_overrides.clear()


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Return a helper that issues a session token with the given permissions."""

    def _make_token(
        permissions: list[str] | None = None,
        member_id: uuid.UUID | None = None,
        email: str = "admin@example.com",
        version: int = 0,
    ) -> str:
        return create_access_token(
            member_id=member_id or uuid.uuid4(),
            email=email,
            permissions=permissions or [],
            version=version,
        )

    return _make_token


@pytest.fixture
def auth_headers(make_token) -> Callable[..., dict[str, str]]:
    """Return a helper that builds an Authorization header for the given permissions."""

    def _auth_headers(*permissions: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(list(permissions))}"}

    return _auth_headers
