"""Unit tests for catalogue unit-of-work behaviour.

Examples
--------
Run the unit-of-work tests:

>>> pytest tests/test_unit_of_work.py
"""

from __future__ import annotations

import datetime as dt
import typing as typ
import uuid

import pytest
import sqlalchemy as sa

from reelbase.catalogue.domain import Series
from reelbase.catalogue.errors import ConflictError, StorageError
from reelbase.catalogue.storage import SqlAlchemyUnitOfWork

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from reelbase.catalogue.domain import User


def _series(contributed_by: uuid.UUID) -> Series:
    return Series(
        id=uuid.uuid4(),
        title="Twin Peaks",
        descriptions=None,
        date_started=dt.date(1990, 4, 8),
        date_ended=None,
        invalidation=None,
        poster=None,
        contributed_by=contributed_by,
        contributed_at=dt.datetime.now(dt.UTC),
    )


@pytest.mark.asyncio
async def test_uow_rollback_discards_uncommitted_changes(
    session_factory: async_sessionmaker[AsyncSession],
    contributor: User,
) -> None:
    """Rollback discards uncommitted changes."""
    series = _series(contributor.id)

    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        await uow.series.add(series)
        await uow.rollback()

    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        result = await uow.series.get(series.id)

    assert result is None, "Expected rollback to discard the uncommitted series."


@pytest.mark.asyncio
async def test_uow_rolls_back_on_exception(
    session_factory: async_sessionmaker[AsyncSession],
    contributor: User,
) -> None:
    """UoW context manager rolls back on unhandled exception."""
    series = _series(contributor.id)

    async def _add_and_raise() -> None:
        async with SqlAlchemyUnitOfWork(session_factory) as uow:
            await uow.series.add(series)
            await uow.flush()
            msg = "Simulated failure."
            raise RuntimeError(msg)

    with pytest.raises(RuntimeError):
        await _add_and_raise()

    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        result = await uow.series.get(series.id)

    assert result is None, "Expected exception to trigger rollback."


@pytest.mark.asyncio
async def test_commit_constraint_violation_is_retryable_conflict(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    """Constraint violations at commit surface as a retryable ConflictError."""
    orphan = _series(uuid.uuid4())

    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        await uow.series.add(orphan)
        with pytest.raises(ConflictError) as exc_info:
            await uow.commit()

    assert exc_info.value.retryable is True, "Expected the conflict to be retryable."
    assert exc_info.value.__cause__ is not None, "Expected the driver error chained."
    assert not isinstance(exc_info.value, StorageError), (
        "Expected a constraint violation to stay out of the storage failure path."
    )


@pytest.mark.asyncio
async def test_flush_constraint_violation_is_retryable_conflict(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    """Flushing pending rows translates failures the same way commit does."""
    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        await uow.series.add(_series(uuid.uuid4()))
        with pytest.raises(ConflictError) as exc_info:
            await uow.flush()

    assert exc_info.value.retryable is True, "Expected the conflict to be retryable."
    assert exc_info.value.__cause__ is not None, "Expected the driver error chained."


@pytest.mark.asyncio
async def test_statement_failure_is_storage_error(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    """Failures other than constraint violations surface as StorageError."""
    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        with pytest.raises(StorageError) as exc_info:
            await uow.series._execute(  # noqa: SLF001
                sa.text("SELECT * FROM reelbase_missing_table")
            )

    assert exc_info.value.__cause__ is not None, "Expected the driver error chained."


def test_uow_requires_active_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    """Using a unit of work outside its context is a programming error."""
    uow = SqlAlchemyUnitOfWork(session_factory)

    with pytest.raises(RuntimeError, match="Session not initialized"):
        uow._require_session()  # noqa: SLF001
