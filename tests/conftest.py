"""Pytest fixtures for database-backed tests.

Database fixtures start an ephemeral py-pglite Postgres, migrate it with
Alembic and hand out session factories, a registered contributor and a Falcon
test client wired to the catalogue API.

Examples
--------
Run database-backed tests with py-pglite:

>>> REELBASE_TEST_DB=pglite pytest -k watchlist
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import typing as typ

import pytest
import pytest_asyncio
import sqlalchemy as sa
import sqlalchemy.exc as sa_exc
from sqlalchemy.pool import NullPool

from reelbase.catalogue.storage.alembic_helpers import apply_migrations

if typ.TYPE_CHECKING:
    from pathlib import Path

    from falcon import testing
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

    from reelbase.catalogue.domain import User

try:
    from py_pglite import PGliteConfig, PGliteManager

    _PGLITE_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    _PGLITE_AVAILABLE = False


def _should_use_pglite() -> bool:
    """Return True when tests should attempt py-pglite.

    If a non-SQLite backend is requested but py-pglite is unavailable,
    fail fast with a clear error instead of silently skipping tests.
    """
    target = os.getenv("REELBASE_TEST_DB", "pglite").lower()
    if target == "sqlite":
        return False
    if not _PGLITE_AVAILABLE:
        msg = (
            "Database-backed tests requested via REELBASE_TEST_DB="
            f"{target!r}, but py-pglite is not installed or unavailable. "
            "Install the test extra or set REELBASE_TEST_DB=sqlite."
        )
        raise RuntimeError(msg)
    return True


@contextlib.asynccontextmanager
async def _pglite_engine(tmp_path: Path) -> typ.AsyncIterator[AsyncEngine]:
    """Start a py-pglite Postgres and yield an async engine bound to it.

    The engine does not pool connections: the Falcon test client and the BDD
    runner drive it from event loops other than the fixture's.
    """
    if not _PGLITE_AVAILABLE:  # pragma: no cover - defensive guard
        msg = "py-pglite is not available for test fixtures."
        raise RuntimeError(msg)

    work_dir = tmp_path / "pglite"
    config = PGliteConfig(work_dir=work_dir)

    with PGliteManager(config):
        from sqlalchemy.ext.asyncio import create_async_engine

        dsn = config.get_connection_string()
        engine = create_async_engine(dsn, poolclass=NullPool)
        try:
            await _wait_for_engine_ready(engine)
            yield engine
        finally:
            await engine.dispose()


async def _wait_for_engine_ready(engine: AsyncEngine) -> None:
    """Wait for py-pglite to accept SQLAlchemy connections.

    py-pglite can report startup before the socket is ready for the first
    connection. This retry keeps tests stable.
    """
    max_attempts = 30
    delay_seconds = 0.1
    for attempt in range(1, max_attempts + 1):
        try:
            async with engine.connect() as connection:
                await connection.execute(sa.text("SELECT 1"))
        except sa_exc.OperationalError:
            if attempt == max_attempts:
                raise
            await asyncio.sleep(delay_seconds)
        else:
            return


@pytest_asyncio.fixture
async def pglite_engine(tmp_path: Path) -> typ.AsyncIterator[AsyncEngine]:
    """Yield an async engine backed by py-pglite Postgres."""
    if not _should_use_pglite():
        pytest.skip("REELBASE_TEST_DB=sqlite disables py-pglite-backed fixtures.")

    async with _pglite_engine(tmp_path) as engine:
        yield engine


@pytest.fixture
def _function_scoped_runner() -> typ.Iterator[asyncio.Runner]:
    """Provide a function-scoped asyncio.Runner for sync BDD steps."""
    with asyncio.Runner() as runner:
        yield runner


@pytest_asyncio.fixture
async def migrated_engine(
    pglite_engine: AsyncEngine,
) -> typ.AsyncIterator[AsyncEngine]:
    """Yield a py-pglite engine with migrations applied."""
    await apply_migrations(pglite_engine)
    yield pglite_engine


@pytest.fixture
def session_factory(
    migrated_engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Yield an async session factory bound to the migrated engine."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    return async_sessionmaker(
        migrated_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def _register_user(
    session_factory: async_sessionmaker[AsyncSession],
    email: str,
) -> User:
    """Register a contributor through the user service."""
    from reelbase.catalogue.payloads import UserCreateData
    from reelbase.catalogue.services import create_user
    from reelbase.catalogue.storage import SqlAlchemyUnitOfWork

    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        return await create_user(
            uow,
            data=UserCreateData(email=email, hashed_password="argon2$hash"),
        )


@pytest_asyncio.fixture
async def contributor(
    session_factory: async_sessionmaker[AsyncSession],
) -> User:
    """Persist the user that contributes versions in service tests."""
    return await _register_user(session_factory, "editor@example.com")


@pytest_asyncio.fixture
async def other_user(
    session_factory: async_sessionmaker[AsyncSession],
) -> User:
    """Persist a second user for ownership checks."""
    return await _register_user(session_factory, "viewer@example.com")


@pytest.fixture
def api_client(
    session_factory: async_sessionmaker[AsyncSession],
) -> testing.TestClient:
    """Build a Falcon test client for the catalogue REST endpoints."""
    from falcon import testing

    from reelbase.api import create_app
    from reelbase.catalogue.storage import SqlAlchemyUnitOfWork

    app = create_app(lambda: SqlAlchemyUnitOfWork(session_factory))
    return testing.TestClient(app)
