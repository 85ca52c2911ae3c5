"""SQLAlchemy ORM models for the catalogue schema.

Movies and episodes share the ``films`` table; the nullable
``series_id``/``season_number``/``episode_number`` triple tells them apart and
a check constraint keeps it all-or-nothing. Each versioned table has an
``_audit`` twin keyed by ``(id, contributed_at)``. Attribute names match column
names so registry-checked sort fields resolve directly against ``__table__.c``.

Examples
--------
Use the base metadata to create the catalogue tables:

>>> from sqlalchemy import create_engine
>>> engine = create_engine("postgresql://example")
>>> Base.metadata.create_all(engine)
"""

from __future__ import annotations

# SQLAlchemy evaluates annotations at runtime; keep stdlib types imported.
import datetime as dt  # noqa: TC003
import uuid  # noqa: TC003

import sqlalchemy as sa
from sqlalchemy import orm
from sqlalchemy.dialects import postgresql

_EPISODE_TRIPLE_CHECK = (
    "(series_id IS NULL AND season_number IS NULL AND episode_number IS NULL) "
    "OR (series_id IS NOT NULL AND season_number IS NOT NULL "
    "AND episode_number IS NOT NULL)"
)


class Base(orm.DeclarativeBase):
    """Base class for catalogue SQLAlchemy models.

    Notes
    -----
    Alembic and test scaffolding rely on ``Base.metadata`` when applying
    migrations or comparing the column registry against the schema.
    """


def _uuid_pk() -> orm.MappedColumn[uuid.UUID]:
    return orm.mapped_column(postgresql.UUID(as_uuid=True), primary_key=True)


def _contributor_fk() -> orm.MappedColumn[uuid.UUID]:
    return orm.mapped_column(
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("users.id"),
    )


class UserRecord(Base):
    """SQLAlchemy model for registered users."""

    __tablename__ = "users"

    id: orm.Mapped[uuid.UUID] = _uuid_pk()
    email: orm.Mapped[str] = orm.mapped_column(sa.String(254), unique=True)
    hashed_password: orm.Mapped[str] = orm.mapped_column(sa.Text)
    first_name: orm.Mapped[str | None] = orm.mapped_column(sa.String(64))
    last_name: orm.Mapped[str | None] = orm.mapped_column(sa.String(64))
    bio: orm.Mapped[str | None] = orm.mapped_column(sa.Text)
    birthdate: orm.Mapped[dt.date | None] = orm.mapped_column(sa.Date)
    avatar: orm.Mapped[str | None] = orm.mapped_column(sa.Text)
    jointime: orm.Mapped[dt.datetime] = orm.mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
    )


class SeriesRecord(Base):
    """SQLAlchemy model for the live version of a series.

    Attributes
    ----------
    id : uuid.UUID
        Primary key for the series.
    title : str
        Display title.
    descriptions : str | None
        Optional synopsis.
    date_started : datetime.date
        First air date.
    date_ended : datetime.date | None
        Last air date, unset while the series is running.
    poster : str | None
        URI of the poster image in external object storage.
    invalidation : str | None
        Dispute note on the current version.
    contributed_by : uuid.UUID
        User who produced the current version.
    contributed_at : datetime.datetime
        When the current version was produced.
    """

    __tablename__ = "serieses"

    id: orm.Mapped[uuid.UUID] = _uuid_pk()
    title: orm.Mapped[str] = orm.mapped_column(sa.Text)
    descriptions: orm.Mapped[str | None] = orm.mapped_column(sa.Text)
    date_started: orm.Mapped[dt.date] = orm.mapped_column(sa.Date)
    date_ended: orm.Mapped[dt.date | None] = orm.mapped_column(sa.Date)
    poster: orm.Mapped[str | None] = orm.mapped_column(sa.Text)
    invalidation: orm.Mapped[str | None] = orm.mapped_column(sa.Text)
    contributed_by: orm.Mapped[uuid.UUID] = _contributor_fk()
    contributed_at: orm.Mapped[dt.datetime] = orm.mapped_column(
        sa.DateTime(timezone=True),
    )

    __table_args__ = (
        sa.CheckConstraint(
            "date_ended IS NULL OR date_ended >= date_started",
            name="ck_serieses_date_range",
        ),
    )


class SeriesAuditRecord(Base):
    """SQLAlchemy model for one historical version of a series."""

    __tablename__ = "serieses_audit"

    id: orm.Mapped[uuid.UUID] = orm.mapped_column(
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("serieses.id"),
        primary_key=True,
    )
    title: orm.Mapped[str] = orm.mapped_column(sa.Text)
    descriptions: orm.Mapped[str | None] = orm.mapped_column(sa.Text)
    date_started: orm.Mapped[dt.date] = orm.mapped_column(sa.Date)
    date_ended: orm.Mapped[dt.date | None] = orm.mapped_column(sa.Date)
    invalidation: orm.Mapped[str | None] = orm.mapped_column(sa.Text)
    contributed_by: orm.Mapped[uuid.UUID] = _contributor_fk()
    contributed_at: orm.Mapped[dt.datetime] = orm.mapped_column(
        sa.DateTime(timezone=True),
        primary_key=True,
    )


class FilmRecord(Base):
    """SQLAlchemy model for the live version of a movie or an episode.

    Attributes
    ----------
    id : uuid.UUID
        Primary key for the film.
    title : str
        Display title.
    descriptions : str | None
        Optional synopsis.
    date_released : datetime.date
        Release or air date.
    duration : int | None
        Running time in minutes.
    series_id : uuid.UUID | None
        Parent series, set only for episodes.
    season_number : int | None
        Season number, set only for episodes.
    episode_number : int | None
        Episode number within the season, set only for episodes.
    poster : str | None
        URI of the poster image in external object storage.
    invalidation : str | None
        Dispute note on the current version.
    contributed_by : uuid.UUID
        User who produced the current version.
    contributed_at : datetime.datetime
        When the current version was produced.
    """

    __tablename__ = "films"

    id: orm.Mapped[uuid.UUID] = _uuid_pk()
    title: orm.Mapped[str] = orm.mapped_column(sa.Text)
    descriptions: orm.Mapped[str | None] = orm.mapped_column(sa.Text)
    date_released: orm.Mapped[dt.date] = orm.mapped_column(sa.Date)
    duration: orm.Mapped[int | None] = orm.mapped_column(sa.Integer)
    series_id: orm.Mapped[uuid.UUID | None] = orm.mapped_column(
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("serieses.id"),
    )
    season_number: orm.Mapped[int | None] = orm.mapped_column(sa.Integer)
    episode_number: orm.Mapped[int | None] = orm.mapped_column(sa.Integer)
    poster: orm.Mapped[str | None] = orm.mapped_column(sa.Text)
    invalidation: orm.Mapped[str | None] = orm.mapped_column(sa.Text)
    contributed_by: orm.Mapped[uuid.UUID] = _contributor_fk()
    contributed_at: orm.Mapped[dt.datetime] = orm.mapped_column(
        sa.DateTime(timezone=True),
    )

    __table_args__ = (
        sa.CheckConstraint(_EPISODE_TRIPLE_CHECK, name="ck_films_episode_triple"),
        sa.UniqueConstraint(
            "series_id",
            "season_number",
            "episode_number",
            name="uq_films_episode_position",
        ),
    )


class FilmAuditRecord(Base):
    """SQLAlchemy model for one historical version of a film."""

    __tablename__ = "films_audit"

    id: orm.Mapped[uuid.UUID] = orm.mapped_column(
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("films.id"),
        primary_key=True,
    )
    title: orm.Mapped[str] = orm.mapped_column(sa.Text)
    descriptions: orm.Mapped[str | None] = orm.mapped_column(sa.Text)
    date_released: orm.Mapped[dt.date] = orm.mapped_column(sa.Date)
    duration: orm.Mapped[int | None] = orm.mapped_column(sa.Integer)
    series_id: orm.Mapped[uuid.UUID | None] = orm.mapped_column(
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("serieses.id"),
    )
    season_number: orm.Mapped[int | None] = orm.mapped_column(sa.Integer)
    episode_number: orm.Mapped[int | None] = orm.mapped_column(sa.Integer)
    invalidation: orm.Mapped[str | None] = orm.mapped_column(sa.Text)
    contributed_by: orm.Mapped[uuid.UUID] = _contributor_fk()
    contributed_at: orm.Mapped[dt.datetime] = orm.mapped_column(
        sa.DateTime(timezone=True),
        primary_key=True,
    )

    __table_args__ = (
        sa.CheckConstraint(_EPISODE_TRIPLE_CHECK, name="ck_films_audit_episode_triple"),
        sa.Index("ix_films_audit_season", "series_id", "season_number"),
    )


class WatchfilmRecord(Base):
    """SQLAlchemy model for a film on a user's watchlist."""

    __tablename__ = "watchfilms"

    id: orm.Mapped[uuid.UUID] = _uuid_pk()
    user_id: orm.Mapped[uuid.UUID] = orm.mapped_column(
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("users.id"),
    )
    film_id: orm.Mapped[uuid.UUID] = orm.mapped_column(
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("films.id"),
    )
    time_added: orm.Mapped[dt.datetime] = orm.mapped_column(
        sa.DateTime(timezone=True),
    )
    time_watched: orm.Mapped[dt.datetime | None] = orm.mapped_column(
        sa.DateTime(timezone=True),
    )

    __table_args__ = (
        sa.UniqueConstraint("user_id", "film_id", name="uq_watchfilms_user_film"),
    )
