"""Response serializers for Falcon catalogue endpoints."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt

    from reelbase.catalogue.domain import (
        EpisodeKey,
        Film,
        FilmAudit,
        Series,
        SeriesAudit,
        Watchfilm,
        WatchlistItem,
    )


def _iso(value: dt.date | dt.datetime | None) -> str | None:
    return None if value is None else value.isoformat()


def _episode_fields(episode: EpisodeKey | None) -> dict[str, typ.Any]:
    if episode is None:
        return {"series_id": None, "season_number": None, "episode_number": None}
    return {
        "series_id": str(episode.series_id),
        "season_number": episode.season_number,
        "episode_number": episode.episode_number,
    }


def _serialize_film_version(film: Film | FilmAudit) -> dict[str, typ.Any]:
    """Serialize the fields a live film shares with its audit rows."""
    return {
        "id": str(film.id),
        "title": film.title,
        "descriptions": film.descriptions,
        "date_released": _iso(film.date_released),
        "duration": film.duration,
        **_episode_fields(film.episode),
        "invalidation": film.invalidation,
        "contributed_by": str(film.contributed_by),
        "contributed_at": _iso(film.contributed_at),
    }


def serialize_film(film: Film) -> dict[str, typ.Any]:
    """Serialize a live movie or episode."""
    return {
        **_serialize_film_version(film),
        "kind": str(film.kind),
        "poster": film.poster,
    }


def serialize_film_audit(audit: FilmAudit) -> dict[str, typ.Any]:
    """Serialize a historical film version."""
    return _serialize_film_version(audit)


def _serialize_series_version(series: Series | SeriesAudit) -> dict[str, typ.Any]:
    return {
        "id": str(series.id),
        "title": series.title,
        "descriptions": series.descriptions,
        "date_started": _iso(series.date_started),
        "date_ended": _iso(series.date_ended),
        "invalidation": series.invalidation,
        "contributed_by": str(series.contributed_by),
        "contributed_at": _iso(series.contributed_at),
    }


def serialize_series(series: Series) -> dict[str, typ.Any]:
    """Serialize a live series."""
    return {**_serialize_series_version(series), "poster": series.poster}


def serialize_series_audit(audit: SeriesAudit) -> dict[str, typ.Any]:
    """Serialize a historical series version."""
    return _serialize_series_version(audit)


def serialize_watchfilm(watchfilm: Watchfilm) -> dict[str, typ.Any]:
    """Serialize a watchlist row."""
    return {
        "id": str(watchfilm.id),
        "film_id": str(watchfilm.film_id),
        "time_added": _iso(watchfilm.time_added),
        "time_watched": _iso(watchfilm.time_watched),
        "watched": watchfilm.watched,
    }


def serialize_watchlist_item(item: WatchlistItem) -> dict[str, typ.Any]:
    """Serialize a watchlist row together with the film it lists."""
    return {**serialize_watchfilm(item.watchfilm), "film": serialize_film(item.film)}
