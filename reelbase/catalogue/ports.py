"""Ports for catalogue persistence.

This module defines the protocol interfaces the catalogue services depend on.
Storage adapters implement them; services only ever see these shapes.

Examples
--------
Implement a repository that satisfies the protocol:

>>> class MemorySeriesRepository(SeriesRepository):
...     async def add(self, series: Series) -> None:
...         self._items[series.id] = series
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt
    import uuid
    from types import TracebackType

    from .domain import (
        EpisodeKey,
        Film,
        FilmAudit,
        Series,
        SeriesAudit,
        User,
        Watchfilm,
        WatchlistItem,
    )
    from .query import Page, QueryOptions


class FilmRepository(typ.Protocol):
    """Persistence interface for live film rows (movies and episodes).

    Methods
    -------
    add(film)
        Persist a new film.
    get(film_id)
        Fetch any film, movie or episode, by identifier.
    get_movie(film_id, for_update=False)
        Fetch a movie by identifier, optionally locking its row.
    get_episode(key, for_update=False)
        Fetch an episode by its series position, optionally locking its row.
    update(film)
        Overwrite the stored row with the values of ``film``.
    list_movies(options)
        Page through movies.
    list_by_series(series_id, options)
        Page through the episodes of a series.
    list_by_season(series_id, season_number, options)
        Page through the episodes of one season.
    list_season_for_update(series_id, season_number)
        Lock and return every episode of one season.
    """

    async def add(self, film: Film) -> None: ...

    async def get(self, film_id: uuid.UUID) -> Film | None: ...

    async def get_movie(
        self,
        film_id: uuid.UUID,
        *,
        for_update: bool = False,
    ) -> Film | None: ...

    async def get_episode(
        self,
        key: EpisodeKey,
        *,
        for_update: bool = False,
    ) -> Film | None: ...

    async def update(self, film: Film) -> None: ...

    async def list_movies(self, options: QueryOptions) -> Page[Film]: ...

    async def list_by_series(
        self,
        series_id: uuid.UUID,
        options: QueryOptions,
    ) -> Page[Film]: ...

    async def list_by_season(
        self,
        series_id: uuid.UUID,
        season_number: int,
        options: QueryOptions,
    ) -> Page[Film]: ...

    async def list_season_for_update(
        self,
        series_id: uuid.UUID,
        season_number: int,
    ) -> list[Film]: ...


class FilmAuditRepository(typ.Protocol):
    """Persistence interface for film audit rows.

    Audit rows are append-only: there is no update or delete.
    """

    async def add(self, audit: FilmAudit) -> None: ...

    async def list_for_film(
        self,
        film_id: uuid.UUID,
        options: QueryOptions,
    ) -> Page[FilmAudit]: ...

    async def list_for_season(
        self,
        series_id: uuid.UUID,
        season_number: int,
        options: QueryOptions,
    ) -> Page[FilmAudit]: ...


class SeriesRepository(typ.Protocol):
    """Persistence interface for live series rows."""

    async def add(self, series: Series) -> None: ...

    async def get(
        self,
        series_id: uuid.UUID,
        *,
        for_update: bool = False,
    ) -> Series | None: ...

    async def update(self, series: Series) -> None: ...

    async def list(self, options: QueryOptions) -> Page[Series]: ...


class SeriesAuditRepository(typ.Protocol):
    """Persistence interface for series audit rows."""

    async def add(self, audit: SeriesAudit) -> None: ...

    async def list_for_series(
        self,
        series_id: uuid.UUID,
        options: QueryOptions,
    ) -> Page[SeriesAudit]: ...


class WatchlistRepository(typ.Protocol):
    """Persistence interface for watchlist rows.

    Every lookup by watch identifier is scoped to the owning user, so rows of
    other users are indistinguishable from missing ones.
    """

    async def add(self, watchfilm: Watchfilm) -> None: ...

    async def get(
        self,
        watch_id: uuid.UUID,
        user_id: uuid.UUID,
        *,
        for_update: bool = False,
    ) -> Watchfilm | None: ...

    async def find_for_film(
        self,
        user_id: uuid.UUID,
        film_id: uuid.UUID,
    ) -> Watchfilm | None: ...

    async def delete(self, watch_id: uuid.UUID, user_id: uuid.UUID) -> bool: ...

    async def set_watched(
        self,
        watch_id: uuid.UUID,
        user_id: uuid.UUID,
        time_watched: dt.datetime,
    ) -> None: ...

    async def list_for_user(
        self,
        user_id: uuid.UUID,
        options: QueryOptions,
    ) -> Page[WatchlistItem]: ...


class UserRepository(typ.Protocol):
    """Persistence interface for users."""

    async def add(self, user: User) -> None: ...

    async def get(self, user_id: uuid.UUID) -> User | None: ...

    async def get_by_email(self, email: str) -> User | None: ...


class CatalogueUnitOfWork(typ.Protocol):
    """Unit-of-work boundary for catalogue persistence.

    Attributes
    ----------
    films : FilmRepository
        Live movies and episodes.
    film_audits : FilmAuditRepository
        Historical film versions.
    series : SeriesRepository
        Live series.
    series_audits : SeriesAuditRepository
        Historical series versions.
    watchlist : WatchlistRepository
        Watchlist rows.
    users : UserRepository
        Registered contributors.
    """

    films: FilmRepository
    film_audits: FilmAuditRepository
    series: SeriesRepository
    series_audits: SeriesAuditRepository
    watchlist: WatchlistRepository
    users: UserRepository

    async def __aenter__(self) -> CatalogueUnitOfWork: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None: ...

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def flush(self) -> None:
        """Flush pending changes without committing."""
        ...

    async def rollback(self) -> None:
        """Roll back the current transaction."""
        ...
