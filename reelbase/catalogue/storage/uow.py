"""Unit-of-work implementation for catalogue persistence.

One unit of work is one database transaction. Services open it, read and lock
what they need through the repositories, and commit once; leaving the context
with an exception (cancellation included) rolls everything back.

Examples
--------
Commit work in a single unit-of-work:

>>> async with SqlAlchemyUnitOfWork(session_factory) as uow:
...     await uow.films.add(film)
...     await uow.commit()
"""

import typing as typ

from sqlalchemy import exc as sa_exc

from reelbase.catalogue.ports import CatalogueUnitOfWork
from reelbase.logging import get_logger, log_debug

from .repositories import (
    SqlAlchemyFilmAuditRepository,
    SqlAlchemyFilmRepository,
    SqlAlchemySeriesAuditRepository,
    SqlAlchemySeriesRepository,
    SqlAlchemyUserRepository,
    SqlAlchemyWatchlistRepository,
    translate_storage_error,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from types import TracebackType

    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class SqlAlchemyUnitOfWork(CatalogueUnitOfWork):
    """Async unit-of-work backed by SQLAlchemy sessions.

    Parameters
    ----------
    session_factory : collections.abc.Callable[[], AsyncSession]
        Factory that produces new async sessions for the unit-of-work scope.

    Attributes
    ----------
    films : SqlAlchemyFilmRepository
        Repository for live movies and episodes.
    film_audits : SqlAlchemyFilmAuditRepository
        Repository for historical film versions.
    series : SqlAlchemySeriesRepository
        Repository for live series.
    series_audits : SqlAlchemySeriesAuditRepository
        Repository for historical series versions.
    watchlist : SqlAlchemyWatchlistRepository
        Repository for watchlist rows.
    users : SqlAlchemyUserRepository
        Repository for registered users.
    """

    def __init__(self, session_factory: cabc.Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    async def __aenter__(self) -> SqlAlchemyUnitOfWork:
        """Open a unit-of-work session.

        Returns
        -------
        SqlAlchemyUnitOfWork
            The active unit-of-work instance.
        """
        self._session = self._session_factory()
        self.films = SqlAlchemyFilmRepository(self._session)
        self.film_audits = SqlAlchemyFilmAuditRepository(self._session)
        self.series = SqlAlchemySeriesRepository(self._session)
        self.series_audits = SqlAlchemySeriesAuditRepository(self._session)
        self.watchlist = SqlAlchemyWatchlistRepository(self._session)
        self.users = SqlAlchemyUserRepository(self._session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Roll back on error and close the session.

        Parameters
        ----------
        exc_type : type[BaseException] | None
            Exception type raised within the context, if any.
        exc : BaseException | None
            Exception instance raised within the context, if any.
        traceback : TracebackType | None
            Traceback for the raised exception, if any.
        """
        if self._session is None:
            return
        try:
            if exc is not None:
                await self._session.rollback()
        finally:
            await self._session.close()
            self._session = None

    def _require_session(self) -> AsyncSession:
        """Return the active session or raise when missing."""
        if self._session is None:
            msg = "Session not initialized for unit of work."
            raise RuntimeError(msg)
        return self._session

    async def commit(self) -> None:
        """Commit the current unit-of-work transaction.

        Raises
        ------
        RuntimeError
            If no session has been initialized for the unit of work.
        ConflictError
            If a concurrent writer took a unique position or row first.
        StorageError
            If flushing or committing fails in the backing store.
        """
        session = self._require_session()
        try:
            await session.commit()
        except sa_exc.SQLAlchemyError as exc:
            raise translate_storage_error(exc, "commit") from exc
        log_debug(logger, "Committed catalogue unit of work.")

    async def flush(self) -> None:
        """Flush pending changes, translating failures like :meth:`commit`."""
        try:
            await self._require_session().flush()
        except sa_exc.SQLAlchemyError as exc:
            raise translate_storage_error(exc, "flush") from exc
        log_debug(logger, "Flushed catalogue unit of work.")

    async def rollback(self) -> None:
        """Roll back the current unit-of-work session."""
        await self._require_session().rollback()
