"""SQLAlchemy repositories for the catalogue.

This module implements repository adapters that translate domain entities to
SQLAlchemy ORM records. Repositories operate within a supplied async session
and are intended to be composed through the catalogue unit-of-work.

Every statement goes through :meth:`_RepositoryBase._execute`, which passes
driver and ORM failures through :func:`translate_storage_error`.
Sort columns come from ``__table__.c`` and only ever after the column registry
has vetted the name; watchlist filters come from a fixed lookup table.

Examples
--------
Create a repository with the unit-of-work session:

>>> async with SqlAlchemyUnitOfWork(session_factory) as uow:
...     await uow.series.add(series)
...     await uow.commit()
"""

import dataclasses as dc
import typing as typ

import sqlalchemy as sa
from sqlalchemy import exc as sa_exc

from reelbase.catalogue.domain import FilmAudit, SeriesAudit, WatchlistItem
from reelbase.catalogue.errors import CatalogueError, ConflictError, StorageError
from reelbase.catalogue.ports import (
    FilmAuditRepository,
    FilmRepository,
    SeriesAuditRepository,
    SeriesRepository,
    UserRepository,
    WatchlistRepository,
)
from reelbase.catalogue.query import Page, SortOrder, WatchlistFilter
from reelbase.logging import get_logger, log_error, log_warning

from .mappers import (
    FILM_MUTABLE_FIELDS,
    SERIES_MUTABLE_FIELDS,
    _film_audit_from_record,
    _film_audit_to_record,
    _film_from_record,
    _film_to_record,
    _series_audit_from_record,
    _series_audit_to_record,
    _series_from_record,
    _series_to_record,
    _user_from_record,
    _user_to_record,
    _watchfilm_from_record,
    _watchfilm_to_record,
)
from .models import (
    FilmAuditRecord,
    FilmRecord,
    SeriesAuditRecord,
    SeriesRecord,
    UserRecord,
    WatchfilmRecord,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from reelbase.catalogue.domain import (
        EpisodeKey,
        Film,
        Series,
        User,
        Watchfilm,
    )
    from reelbase.catalogue.query import QueryOptions

logger = get_logger(__name__)


def translate_storage_error(
    exc: sa_exc.SQLAlchemyError,
    action: str,
) -> CatalogueError:
    """Map a SQLAlchemy failure onto the catalogue error taxonomy.

    Services check references before writing, so an integrity violation means
    a concurrent writer got there first: that is a retryable ``ConflictError``.
    Anything else is a ``StorageError``.
    """
    if isinstance(exc, sa_exc.IntegrityError):
        log_warning(logger, "Catalogue %s violated a constraint: %s", action, exc.orig)
        msg = f"Catalogue {action} conflicts with a concurrent change."
        return ConflictError(msg, retryable=True)
    log_error(logger, "Catalogue %s failed.", action, exc_info=exc)
    return StorageError(f"Catalogue {action} failed.")


_MOVIE_CLAUSE = sa.and_(
    FilmRecord.series_id.is_(None),
    FilmRecord.season_number.is_(None),
    FilmRecord.episode_number.is_(None),
)

_WATCH_FILTER_CLAUSES: typ.Final[dict[WatchlistFilter, sa.ColumnElement[bool]]] = {
    WatchlistFilter.WATCHED: WatchfilmRecord.time_watched.is_not(None),
    WatchlistFilter.NOT_WATCHED: WatchfilmRecord.time_watched.is_(None),
    WatchlistFilter.ALL: sa.true(),
}


def _episode_clause(key: EpisodeKey) -> sa.ColumnElement[bool]:
    return sa.and_(
        FilmRecord.series_id == key.series_id,
        FilmRecord.season_number == key.season_number,
        FilmRecord.episode_number == key.episode_number,
    )


def _directed(
    column: typ.Any,  # noqa: ANN401
    sort_order: SortOrder,
) -> sa.UnaryExpression[typ.Any]:
    """Apply the requested direction to an order-by column."""
    return column.desc() if sort_order is SortOrder.DESC else column.asc()


def _sort_column(
    record_type: type[object],
    options: QueryOptions,
    default_field: str,
) -> sa.ColumnElement[typ.Any]:
    """Resolve the registry-checked sort field against the mapped table."""
    table = typ.cast("sa.Table", getattr(record_type, "__table__"))
    return table.c[options.sort_field or default_field]


@dc.dataclass(frozen=True, slots=True)
class AuditRepositoryConfig[AuditT, AuditRecordT]:
    """Configuration for an audit repository."""

    record_type: type[AuditRecordT]
    mapper: typ.Callable[[AuditRecordT], AuditT]
    record_builder: typ.Callable[[AuditT], AuditRecordT]


@dc.dataclass(slots=True)
class _RepositoryBase:
    """Shared helpers for SQLAlchemy repositories."""

    _session: AsyncSession

    async def _execute(
        self,
        statement: typ.Any,  # noqa: ANN401
    ) -> sa.Result[typ.Any]:
        """Execute a statement, translating SQLAlchemy failures."""
        try:
            return await self._session.execute(statement)
        except sa_exc.SQLAlchemyError as exc:
            raise translate_storage_error(exc, "storage statement") from exc

    async def _get_one_or_none[RecordT, DomainT](
        self,
        record_type: type[RecordT],
        where_clause: typ.Any,  # noqa: ANN401
        mapper: cabc.Callable[[RecordT], DomainT],
        *,
        for_update: bool = False,
    ) -> DomainT | None:
        """Return a mapped record for the query or None."""
        statement = sa.select(record_type).where(where_clause)
        if for_update:
            statement = statement.with_for_update()
        result = await self._execute(statement)
        record = result.scalar_one_or_none()
        if record is None:
            return None
        return mapper(record)

    async def _add_record[RecordT](self, record: RecordT) -> None:
        """Add a record to the current SQLAlchemy session."""
        self._session.add(record)

    async def _count_where(
        self,
        record_type: type[object],
        where_clause: typ.Any,  # noqa: ANN401
    ) -> int:
        """Count records matching a filter."""
        result = await self._execute(
            sa.select(sa.func.count()).select_from(record_type).where(where_clause)
        )
        return int(result.scalar_one())

    async def _page_where[RecordT, DomainT](  # noqa: PLR0913
        self,
        record_type: type[RecordT],
        where_clause: typ.Any,  # noqa: ANN401
        order_by: cabc.Sequence[typ.Any],
        options: QueryOptions,
        mapper: cabc.Callable[[RecordT], DomainT],
    ) -> Page[DomainT]:
        """Return one page of mapped records and the total matching count."""
        result = await self._execute(
            sa
            .select(record_type)
            .where(where_clause)
            .order_by(*order_by)
            .offset(options.offset)
            .limit(options.limit)
        )
        items = [mapper(row) for row in result.scalars()]
        total = await self._count_where(record_type, where_clause)
        return Page(items=items, total=total)

    async def _update_where(
        self,
        record_type: type[object],
        where_clause: typ.Any,  # noqa: ANN401
        values: dict[str, typ.Any],
    ) -> int:
        """Execute an update statement and return the matched row count."""
        result = await self._execute(
            sa.update(record_type).where(where_clause).values(**values)
        )
        return typ.cast("sa.CursorResult[typ.Any]", result).rowcount

    async def _update_entity_fields[EntityT](
        self,
        record_type: type[object],
        entity: EntityT,
        field_names: cabc.Sequence[str],
    ) -> None:
        """Update entity fields using the entity's current attribute values."""
        values = {field: getattr(entity, field) for field in field_names}
        id_field_name = "id"
        entity_id = getattr(entity, id_field_name)
        id_field = getattr(record_type, id_field_name)
        await self._update_where(record_type, id_field == entity_id, values)


class _AuditRepositoryBase[AuditT, AuditRecordT](_RepositoryBase):
    """Shared implementation for append-only audit repositories."""

    def __init__(
        self,
        session: AsyncSession,
        config: AuditRepositoryConfig[AuditT, AuditRecordT],
    ) -> None:
        super().__init__(session)
        self._record_type = config.record_type
        self._mapper = config.mapper
        self._record_builder = config.record_builder

    def _field(self, name: str) -> typ.Any:  # noqa: ANN401
        """Retrieve a mapped column attribute from the audit record type."""
        return getattr(self._record_type, name)

    async def add(self, audit: AuditT) -> None:
        """Append an audit row."""
        await self._add_record(self._record_builder(audit))

    async def _page_audits(
        self,
        where_clause: typ.Any,  # noqa: ANN401
        options: QueryOptions,
    ) -> Page[AuditT]:
        """Page through audits ordered by contribution time."""
        return await self._page_where(
            self._record_type,
            where_clause,
            (
                _directed(self._field("contributed_at"), options.sort_order),
                self._field("id"),
            ),
            options,
            self._mapper,
        )


class SqlAlchemyFilmRepository(_RepositoryBase, FilmRepository):
    """Persist movies and episodes using SQLAlchemy."""

    async def add(self, film: Film) -> None:
        """Add a film record.

        Parameters
        ----------
        film : Film
            Movie or episode to persist.
        """
        await self._add_record(_film_to_record(film))

    async def get(self, film_id: uuid.UUID) -> Film | None:
        """Fetch a movie or an episode by identifier."""
        return await self._get_one_or_none(
            FilmRecord,
            FilmRecord.id == film_id,
            _film_from_record,
        )

    async def get_movie(
        self,
        film_id: uuid.UUID,
        *,
        for_update: bool = False,
    ) -> Film | None:
        """Fetch a movie by identifier; episodes never match."""
        return await self._get_one_or_none(
            FilmRecord,
            sa.and_(FilmRecord.id == film_id, _MOVIE_CLAUSE),
            _film_from_record,
            for_update=for_update,
        )

    async def get_episode(
        self,
        key: EpisodeKey,
        *,
        for_update: bool = False,
    ) -> Film | None:
        """Fetch an episode by its position in a series."""
        return await self._get_one_or_none(
            FilmRecord,
            _episode_clause(key),
            _film_from_record,
            for_update=for_update,
        )

    async def update(self, film: Film) -> None:
        """Overwrite the live row with the values of ``film``."""
        await self._update_entity_fields(FilmRecord, film, FILM_MUTABLE_FIELDS)

    async def list_movies(self, options: QueryOptions) -> Page[Film]:
        """Page through movies ordered by the requested column."""
        return await self._page_where(
            FilmRecord,
            _MOVIE_CLAUSE,
            (
                _directed(_sort_column(FilmRecord, options, "id"), options.sort_order),
                FilmRecord.id,
            ),
            options,
            _film_from_record,
        )

    async def list_by_series(
        self,
        series_id: uuid.UUID,
        options: QueryOptions,
    ) -> Page[Film]:
        """Page through a series' episodes by season, then episode number."""
        return await self._page_where(
            FilmRecord,
            FilmRecord.series_id == series_id,
            (
                _directed(FilmRecord.season_number, options.sort_order),
                FilmRecord.episode_number,
            ),
            options,
            _film_from_record,
        )

    async def list_by_season(
        self,
        series_id: uuid.UUID,
        season_number: int,
        options: QueryOptions,
    ) -> Page[Film]:
        """Page through one season's episodes by episode number."""
        return await self._page_where(
            FilmRecord,
            sa.and_(
                FilmRecord.series_id == series_id,
                FilmRecord.season_number == season_number,
            ),
            (_directed(FilmRecord.episode_number, options.sort_order),),
            options,
            _film_from_record,
        )

    async def list_season_for_update(
        self,
        series_id: uuid.UUID,
        season_number: int,
    ) -> list[Film]:
        """Lock and return every episode of one season in episode order."""
        result = await self._execute(
            sa
            .select(FilmRecord)
            .where(
                FilmRecord.series_id == series_id,
                FilmRecord.season_number == season_number,
            )
            .order_by(FilmRecord.episode_number)
            .with_for_update()
        )
        return [_film_from_record(row) for row in result.scalars()]


class SqlAlchemyFilmAuditRepository(
    _AuditRepositoryBase[FilmAudit, FilmAuditRecord],
    FilmAuditRepository,
):
    """Persist film audit rows using SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(
            session,
            AuditRepositoryConfig(
                record_type=FilmAuditRecord,
                mapper=_film_audit_from_record,
                record_builder=_film_audit_to_record,
            ),
        )

    async def list_for_film(
        self,
        film_id: uuid.UUID,
        options: QueryOptions,
    ) -> Page[FilmAudit]:
        """Page through the historical versions of one film."""
        return await self._page_audits(FilmAuditRecord.id == film_id, options)

    async def list_for_season(
        self,
        series_id: uuid.UUID,
        season_number: int,
        options: QueryOptions,
    ) -> Page[FilmAudit]:
        """Page through the historical versions of every episode in a season."""
        return await self._page_audits(
            sa.and_(
                FilmAuditRecord.series_id == series_id,
                FilmAuditRecord.season_number == season_number,
            ),
            options,
        )


class SqlAlchemySeriesRepository(_RepositoryBase, SeriesRepository):
    """Persist series using SQLAlchemy."""

    async def add(self, series: Series) -> None:
        """Add a series record."""
        await self._add_record(_series_to_record(series))

    async def get(
        self,
        series_id: uuid.UUID,
        *,
        for_update: bool = False,
    ) -> Series | None:
        """Fetch a series by identifier."""
        return await self._get_one_or_none(
            SeriesRecord,
            SeriesRecord.id == series_id,
            _series_from_record,
            for_update=for_update,
        )

    async def update(self, series: Series) -> None:
        """Overwrite the live row with the values of ``series``."""
        await self._update_entity_fields(SeriesRecord, series, SERIES_MUTABLE_FIELDS)

    async def list(self, options: QueryOptions) -> Page[Series]:
        """Page through series ordered by the requested column."""
        return await self._page_where(
            SeriesRecord,
            sa.true(),
            (
                _directed(
                    _sort_column(SeriesRecord, options, "id"), options.sort_order
                ),
                SeriesRecord.id,
            ),
            options,
            _series_from_record,
        )


class SqlAlchemySeriesAuditRepository(
    _AuditRepositoryBase[SeriesAudit, SeriesAuditRecord],
    SeriesAuditRepository,
):
    """Persist series audit rows using SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(
            session,
            AuditRepositoryConfig(
                record_type=SeriesAuditRecord,
                mapper=_series_audit_from_record,
                record_builder=_series_audit_to_record,
            ),
        )

    async def list_for_series(
        self,
        series_id: uuid.UUID,
        options: QueryOptions,
    ) -> Page[SeriesAudit]:
        """Page through the historical versions of one series."""
        return await self._page_audits(SeriesAuditRecord.id == series_id, options)


class SqlAlchemyWatchlistRepository(_RepositoryBase, WatchlistRepository):
    """Persist watchlist rows using SQLAlchemy."""

    async def add(self, watchfilm: Watchfilm) -> None:
        """Add a watchlist record."""
        await self._add_record(_watchfilm_to_record(watchfilm))

    async def get(
        self,
        watch_id: uuid.UUID,
        user_id: uuid.UUID,
        *,
        for_update: bool = False,
    ) -> Watchfilm | None:
        """Fetch a watchlist row owned by ``user_id``."""
        return await self._get_one_or_none(
            WatchfilmRecord,
            sa.and_(
                WatchfilmRecord.id == watch_id,
                WatchfilmRecord.user_id == user_id,
            ),
            _watchfilm_from_record,
            for_update=for_update,
        )

    async def find_for_film(
        self,
        user_id: uuid.UUID,
        film_id: uuid.UUID,
    ) -> Watchfilm | None:
        """Fetch the active row for a user and film, if any."""
        return await self._get_one_or_none(
            WatchfilmRecord,
            sa.and_(
                WatchfilmRecord.user_id == user_id,
                WatchfilmRecord.film_id == film_id,
            ),
            _watchfilm_from_record,
        )

    async def delete(self, watch_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Delete a row owned by ``user_id``; return whether one matched."""
        result = await self._execute(
            sa.delete(WatchfilmRecord).where(
                WatchfilmRecord.id == watch_id,
                WatchfilmRecord.user_id == user_id,
            )
        )
        return typ.cast("sa.CursorResult[typ.Any]", result).rowcount > 0

    async def set_watched(
        self,
        watch_id: uuid.UUID,
        user_id: uuid.UUID,
        time_watched: dt.datetime,
    ) -> None:
        """Stamp ``time_watched`` on a row that has not been watched yet."""
        await self._update_where(
            WatchfilmRecord,
            sa.and_(
                WatchfilmRecord.id == watch_id,
                WatchfilmRecord.user_id == user_id,
                WatchfilmRecord.time_watched.is_(None),
            ),
            {"time_watched": time_watched},
        )

    async def list_for_user(
        self,
        user_id: uuid.UUID,
        options: QueryOptions,
    ) -> Page[WatchlistItem]:
        """Page through a user's watchlist joined with the listed films."""
        watch_filter = options.watch_filter or WatchlistFilter.ALL
        where_clause = sa.and_(
            WatchfilmRecord.user_id == user_id,
            _WATCH_FILTER_CLAUSES[watch_filter],
        )
        result = await self._execute(
            sa
            .select(WatchfilmRecord, FilmRecord)
            .join(FilmRecord, FilmRecord.id == WatchfilmRecord.film_id)
            .where(where_clause)
            .order_by(
                _directed(
                    _sort_column(WatchfilmRecord, options, "time_added"),
                    options.sort_order,
                ),
                WatchfilmRecord.id,
            )
            .offset(options.offset)
            .limit(options.limit)
        )
        items = [
            WatchlistItem(
                watchfilm=_watchfilm_from_record(watch_record),
                film=_film_from_record(film_record),
            )
            for watch_record, film_record in result.tuples()
        ]
        total = await self._count_where(WatchfilmRecord, where_clause)
        return Page(items=items, total=total)


class SqlAlchemyUserRepository(_RepositoryBase, UserRepository):
    """Persist users using SQLAlchemy."""

    async def add(self, user: User) -> None:
        """Add a user record."""
        await self._add_record(_user_to_record(user))

    async def get(self, user_id: uuid.UUID) -> User | None:
        """Fetch a user by identifier."""
        return await self._get_one_or_none(
            UserRecord,
            UserRecord.id == user_id,
            _user_from_record,
        )

    async def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email address."""
        return await self._get_one_or_none(
            UserRecord,
            UserRecord.email == email,
            _user_from_record,
        )
