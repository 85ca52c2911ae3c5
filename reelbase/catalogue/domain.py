"""Domain entities for the catalogue.

Movies and episodes share one :class:`Film` entity. What makes a film an
episode is its optional :class:`EpisodeKey`; a film without one is a movie.
:meth:`EpisodeKey.from_parts` is the only place the stored triple of series,
season and episode numbers is turned into that variant, and it rejects partial
triples.

Every versioned entity (:class:`Film`, :class:`Series`) has an audit twin that
mirrors its fields minus the presentation-only ``poster``.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt
    import uuid


class FilmKind(enum.StrEnum):
    """Variant of a film row."""

    MOVIE = "movie"
    EPISODE = "episode"


@dc.dataclass(frozen=True, slots=True)
class EpisodeKey:
    """Position of an episode inside a series.

    Attributes
    ----------
    series_id : uuid.UUID
        Series the episode belongs to.
    season_number : int
        One-based season number.
    episode_number : int
        One-based episode number within the season.
    """

    series_id: uuid.UUID
    season_number: int
    episode_number: int

    def __post_init__(self) -> None:
        """Validate that season and episode numbers are positive."""
        if self.season_number < 1 or self.episode_number < 1:
            msg = "EpisodeKey season_number and episode_number must be positive."
            raise ValueError(msg)

    @classmethod
    def from_parts(
        cls,
        series_id: uuid.UUID | None,
        season_number: int | None,
        episode_number: int | None,
    ) -> EpisodeKey | None:
        """Build a key from the stored triple.

        Returns None when all three parts are absent (a movie).

        Raises
        ------
        ValueError
            If only some of the parts are present.
        """
        parts = (series_id, season_number, episode_number)
        if all(part is None for part in parts):
            return None
        if series_id is None or season_number is None or episode_number is None:
            msg = (
                "Film series_id, season_number and episode_number must be "
                "either all set or all unset."
            )
            raise ValueError(msg)
        return cls(series_id, season_number, episode_number)


def _episode_columns(episode: EpisodeKey | None) -> dict[str, object]:
    """Flatten an optional episode key into its three column values."""
    if episode is None:
        return {"series_id": None, "season_number": None, "episode_number": None}
    return {
        "series_id": episode.series_id,
        "season_number": episode.season_number,
        "episode_number": episode.episode_number,
    }


@dc.dataclass(frozen=True, slots=True)
class Film:
    """Current version of a movie or an episode."""

    id: uuid.UUID
    title: str
    descriptions: str | None
    date_released: dt.date
    duration: int | None
    episode: EpisodeKey | None
    invalidation: str | None
    poster: str | None
    contributed_by: uuid.UUID
    contributed_at: dt.datetime

    def __post_init__(self) -> None:
        """Validate that the film has a title."""
        if not self.title:
            msg = "Film title must not be empty."
            raise ValueError(msg)

    @property
    def kind(self) -> FilmKind:
        """Return whether this film is a movie or an episode."""
        return FilmKind.MOVIE if self.episode is None else FilmKind.EPISODE

    @property
    def is_invalidated(self) -> bool:
        """Return True when the current version carries an invalidation note."""
        return self.invalidation is not None

    def episode_columns(self) -> dict[str, object]:
        """Return the stored series/season/episode column values."""
        return _episode_columns(self.episode)

    def snapshot(self) -> FilmAudit:
        """Return this version as an audit row."""
        return FilmAudit(
            id=self.id,
            title=self.title,
            descriptions=self.descriptions,
            date_released=self.date_released,
            duration=self.duration,
            episode=self.episode,
            invalidation=self.invalidation,
            contributed_by=self.contributed_by,
            contributed_at=self.contributed_at,
        )


@dc.dataclass(frozen=True, slots=True)
class FilmAudit:
    """Immutable historical version of a film, without its poster."""

    id: uuid.UUID
    title: str
    descriptions: str | None
    date_released: dt.date
    duration: int | None
    episode: EpisodeKey | None
    invalidation: str | None
    contributed_by: uuid.UUID
    contributed_at: dt.datetime

    def episode_columns(self) -> dict[str, object]:
        """Return the stored series/season/episode column values."""
        return _episode_columns(self.episode)


@dc.dataclass(frozen=True, slots=True)
class Series:
    """Current version of a series."""

    id: uuid.UUID
    title: str
    descriptions: str | None
    date_started: dt.date
    date_ended: dt.date | None
    invalidation: str | None
    poster: str | None
    contributed_by: uuid.UUID
    contributed_at: dt.datetime

    def __post_init__(self) -> None:
        """Validate the title and the date range."""
        if not self.title:
            msg = "Series title must not be empty."
            raise ValueError(msg)
        if self.date_ended is not None and self.date_ended < self.date_started:
            msg = "Series date_ended must not precede date_started."
            raise ValueError(msg)

    @property
    def is_invalidated(self) -> bool:
        """Return True when the current version carries an invalidation note."""
        return self.invalidation is not None

    def snapshot(self) -> SeriesAudit:
        """Return this version as an audit row."""
        return SeriesAudit(
            id=self.id,
            title=self.title,
            descriptions=self.descriptions,
            date_started=self.date_started,
            date_ended=self.date_ended,
            invalidation=self.invalidation,
            contributed_by=self.contributed_by,
            contributed_at=self.contributed_at,
        )


@dc.dataclass(frozen=True, slots=True)
class SeriesAudit:
    """Immutable historical version of a series, without its poster."""

    id: uuid.UUID
    title: str
    descriptions: str | None
    date_started: dt.date
    date_ended: dt.date | None
    invalidation: str | None
    contributed_by: uuid.UUID
    contributed_at: dt.datetime


@dc.dataclass(frozen=True, slots=True)
class Watchfilm:
    """A film on a user's watchlist."""

    id: uuid.UUID
    user_id: uuid.UUID
    film_id: uuid.UUID
    time_added: dt.datetime
    time_watched: dt.datetime | None

    def __post_init__(self) -> None:
        """Validate that a film cannot be watched before it was added."""
        if self.time_watched is not None and self.time_watched < self.time_added:
            msg = "Watchfilm time_watched must not precede time_added."
            raise ValueError(msg)

    @property
    def watched(self) -> bool:
        """Return True once the film has been marked as watched."""
        return self.time_watched is not None


@dc.dataclass(frozen=True, slots=True)
class WatchlistItem:
    """Watchlist row joined with the film it points at."""

    watchfilm: Watchfilm
    film: Film


@dc.dataclass(frozen=True, slots=True)
class User:
    """Registered contributor. Credentials are hashed before they get here."""

    id: uuid.UUID
    email: str
    hashed_password: str
    first_name: str | None
    last_name: str | None
    bio: str | None
    birthdate: dt.date | None
    avatar: str | None
    jointime: dt.datetime


__all__ = [
    "EpisodeKey",
    "Film",
    "FilmAudit",
    "FilmKind",
    "Series",
    "SeriesAudit",
    "User",
    "Watchfilm",
    "WatchlistItem",
]
