"""Record-to-domain mapping helpers for catalogue persistence.

This module converts SQLAlchemy ORM records into domain entities and back.
Keeping the conversions here lets repositories stay focused on queries.

Examples
--------
Convert a record to a domain entity:

>>> film = _film_from_record(record)
"""

import typing as typ

from reelbase.catalogue.domain import (
    EpisodeKey,
    Film,
    FilmAudit,
    Series,
    SeriesAudit,
    User,
    Watchfilm,
)

from .models import (
    FilmAuditRecord,
    FilmRecord,
    SeriesAuditRecord,
    SeriesRecord,
    UserRecord,
    WatchfilmRecord,
)


def _episode_key_from_record(record: FilmRecord | FilmAuditRecord) -> EpisodeKey | None:
    """Rebuild the optional episode key from the stored triple."""
    return EpisodeKey.from_parts(
        record.series_id,
        record.season_number,
        record.episode_number,
    )


def _film_from_record(record: FilmRecord) -> Film:
    """Map a film record to a domain entity."""
    return Film(
        id=record.id,
        title=record.title,
        descriptions=record.descriptions,
        date_released=record.date_released,
        duration=record.duration,
        episode=_episode_key_from_record(record),
        invalidation=record.invalidation,
        poster=record.poster,
        contributed_by=record.contributed_by,
        contributed_at=record.contributed_at,
    )


def _film_to_record(film: Film) -> FilmRecord:
    """Map a film entity to a new record."""
    return FilmRecord(
        id=film.id,
        title=film.title,
        descriptions=film.descriptions,
        date_released=film.date_released,
        duration=film.duration,
        poster=film.poster,
        invalidation=film.invalidation,
        contributed_by=film.contributed_by,
        contributed_at=film.contributed_at,
        **film.episode_columns(),
    )


def _film_audit_from_record(record: FilmAuditRecord) -> FilmAudit:
    """Map a film audit record to a domain entity."""
    return FilmAudit(
        id=record.id,
        title=record.title,
        descriptions=record.descriptions,
        date_released=record.date_released,
        duration=record.duration,
        episode=_episode_key_from_record(record),
        invalidation=record.invalidation,
        contributed_by=record.contributed_by,
        contributed_at=record.contributed_at,
    )


def _film_audit_to_record(audit: FilmAudit) -> FilmAuditRecord:
    return FilmAuditRecord(
        id=audit.id,
        title=audit.title,
        descriptions=audit.descriptions,
        date_released=audit.date_released,
        duration=audit.duration,
        invalidation=audit.invalidation,
        contributed_by=audit.contributed_by,
        contributed_at=audit.contributed_at,
        **audit.episode_columns(),
    )


def _series_from_record(record: SeriesRecord) -> Series:
    """Map a series record to a domain entity."""
    return Series(
        id=record.id,
        title=record.title,
        descriptions=record.descriptions,
        date_started=record.date_started,
        date_ended=record.date_ended,
        invalidation=record.invalidation,
        poster=record.poster,
        contributed_by=record.contributed_by,
        contributed_at=record.contributed_at,
    )


def _series_to_record(series: Series) -> SeriesRecord:
    return SeriesRecord(
        id=series.id,
        title=series.title,
        descriptions=series.descriptions,
        date_started=series.date_started,
        date_ended=series.date_ended,
        poster=series.poster,
        invalidation=series.invalidation,
        contributed_by=series.contributed_by,
        contributed_at=series.contributed_at,
    )


def _series_audit_from_record(record: SeriesAuditRecord) -> SeriesAudit:
    """Map a series audit record to a domain entity."""
    return SeriesAudit(
        id=record.id,
        title=record.title,
        descriptions=record.descriptions,
        date_started=record.date_started,
        date_ended=record.date_ended,
        invalidation=record.invalidation,
        contributed_by=record.contributed_by,
        contributed_at=record.contributed_at,
    )


def _series_audit_to_record(audit: SeriesAudit) -> SeriesAuditRecord:
    return SeriesAuditRecord(
        id=audit.id,
        title=audit.title,
        descriptions=audit.descriptions,
        date_started=audit.date_started,
        date_ended=audit.date_ended,
        invalidation=audit.invalidation,
        contributed_by=audit.contributed_by,
        contributed_at=audit.contributed_at,
    )


def _watchfilm_from_record(record: WatchfilmRecord) -> Watchfilm:
    """Map a watchlist record to a domain entity."""
    return Watchfilm(
        id=record.id,
        user_id=record.user_id,
        film_id=record.film_id,
        time_added=record.time_added,
        time_watched=record.time_watched,
    )


def _watchfilm_to_record(watchfilm: Watchfilm) -> WatchfilmRecord:
    return WatchfilmRecord(
        id=watchfilm.id,
        user_id=watchfilm.user_id,
        film_id=watchfilm.film_id,
        time_added=watchfilm.time_added,
        time_watched=watchfilm.time_watched,
    )


def _user_from_record(record: UserRecord) -> User:
    """Map a user record to a domain entity."""
    return User(
        id=record.id,
        email=record.email,
        hashed_password=record.hashed_password,
        first_name=record.first_name,
        last_name=record.last_name,
        bio=record.bio,
        birthdate=record.birthdate,
        avatar=record.avatar,
        jointime=record.jointime,
    )


def _user_to_record(user: User) -> UserRecord:
    return UserRecord(
        id=user.id,
        email=user.email,
        hashed_password=user.hashed_password,
        first_name=user.first_name,
        last_name=user.last_name,
        bio=user.bio,
        birthdate=user.birthdate,
        avatar=user.avatar,
        jointime=user.jointime,
    )


# Columns rewritten when a live row is overwritten in place.
FILM_MUTABLE_FIELDS: typ.Final[tuple[str, ...]] = (
    "title",
    "descriptions",
    "date_released",
    "duration",
    "poster",
    "invalidation",
    "contributed_by",
    "contributed_at",
)
SERIES_MUTABLE_FIELDS: typ.Final[tuple[str, ...]] = (
    "title",
    "descriptions",
    "date_started",
    "date_ended",
    "poster",
    "invalidation",
    "contributed_by",
    "contributed_at",
)
