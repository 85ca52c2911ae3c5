"""Process configuration for the catalogue service.

Settings are immutable dataclasses built once at start-up and passed to the
components that need them (the query options builder, payload validation and
the HTTP adapter). Nothing in the service re-reads the environment per call.

Environment variables
---------------------
``REELBASE_DATABASE_URL`` (falls back to ``DATABASE_URL``)
    SQLAlchemy async URL of the PostgreSQL database.
``REELBASE_LOG_LEVEL``
    femtologging level name, ``INFO`` by default.
``REELBASE_PAGE_MIN``
    Number of the first page, ``1`` by default.
``REELBASE_PAGE_SIZE_DEFAULT``, ``REELBASE_PAGE_SIZE_MIN``, ``REELBASE_PAGE_SIZE_MAX``
    Page size default and bounds.
``REELBASE_INVALIDATION_MIN_LENGTH``, ``REELBASE_INVALIDATION_MAX_LENGTH``
    Length bounds of an invalidation note.
``REELBASE_MAX_BATCH_SIZE``
    Largest episode list accepted by a whole-season put.

Examples
--------
>>> settings = load_settings({"REELBASE_PAGE_SIZE_MAX": "50"})
>>> settings.pagination.max_page_size
50
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import os
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


@dc.dataclass(frozen=True, slots=True)
class LengthRange:
    """Inclusive bounds on the length of a text value."""

    min_length: int
    max_length: int

    def __post_init__(self) -> None:
        """Reject empty or inverted ranges."""
        if self.min_length < 0 or self.max_length < self.min_length:
            msg = (
                "LengthRange requires 0 <= min_length <= max_length, got "
                f"{self.min_length}..{self.max_length}."
            )
            raise ValueError(msg)

    def describe_violation(self, value: str) -> str | None:
        """Return a reason when ``value`` falls outside the range."""
        if len(value) < self.min_length:
            return f"must be at least {self.min_length} characters long"
        if len(value) > self.max_length:
            return f"must be at most {self.max_length} characters long"
        return None


@dc.dataclass(frozen=True, slots=True)
class PaginationSettings:
    """Page numbering and page size bounds.

    Attributes
    ----------
    min_page : int
        Number of the first page. Offsets are computed relative to it.
    default_page_size : int
        Page size used when the caller does not ask for one.
    min_page_size : int
        Smallest page size a caller may request.
    max_page_size : int
        Largest page size a caller may request.
    """

    min_page: int = 1
    default_page_size: int = 10
    min_page_size: int = 1
    max_page_size: int = 100

    def __post_init__(self) -> None:
        """Check that the default page size lies inside the bounds."""
        if not (
            1 <= self.min_page_size <= self.default_page_size <= self.max_page_size
        ):
            msg = (
                "Pagination requires 1 <= min_page_size <= default_page_size "
                "<= max_page_size."
            )
            raise ValueError(msg)


@dc.dataclass(frozen=True, slots=True)
class FilmRules:
    """Validation thresholds for movie and episode payloads."""

    title: LengthRange = LengthRange(1, 200)
    descriptions: LengthRange = LengthRange(1, 2000)
    min_date_released: dt.date = dt.date(1888, 1, 1)
    min_duration: int = 1
    max_duration: int = 6000
    max_season_number: int = 200
    max_episode_number: int = 5000


@dc.dataclass(frozen=True, slots=True)
class SeriesRules:
    """Validation thresholds for series payloads."""

    title: LengthRange = LengthRange(1, 200)
    descriptions: LengthRange = LengthRange(1, 2000)
    min_date_started: dt.date = dt.date(1900, 1, 1)
    min_date_ended: dt.date = dt.date(1900, 1, 1)


@dc.dataclass(frozen=True, slots=True)
class UserRules:
    """Validation thresholds for user registration payloads."""

    email: LengthRange = LengthRange(3, 254)
    first_name: LengthRange = LengthRange(1, 64)
    last_name: LengthRange = LengthRange(1, 64)
    bio: LengthRange = LengthRange(1, 1000)
    min_birthdate: dt.date = dt.date(1900, 1, 1)


@dc.dataclass(frozen=True, slots=True)
class ValidationRules:
    """All payload thresholds, grouped per entity."""

    film: FilmRules = dc.field(default_factory=FilmRules)
    series: SeriesRules = dc.field(default_factory=SeriesRules)
    user: UserRules = dc.field(default_factory=UserRules)
    invalidation: LengthRange = LengthRange(1, 1000)
    max_batch_size: int = 100


@dc.dataclass(frozen=True, slots=True)
class Settings:
    """Top-level service settings."""

    pagination: PaginationSettings = dc.field(default_factory=PaginationSettings)
    validation: ValidationRules = dc.field(default_factory=ValidationRules)
    database_url: str | None = None
    log_level: str | None = None


def _parse_int(value: str | None, default: int) -> int:
    """Parse an integer environment value, falling back to ``default``."""
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _non_empty(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def load_settings(environ: cabc.Mapping[str, str] | None = None) -> Settings:
    """Build settings from environment variables.

    Parameters
    ----------
    environ : collections.abc.Mapping[str, str] | None, optional
        Variables to read. Defaults to ``os.environ``.

    Returns
    -------
    Settings
        Immutable settings populated from the environment and defaults.

    Raises
    ------
    ValueError
        If the resulting bounds are inconsistent, for example a default page
        size above the maximum.
    """
    env = os.environ if environ is None else environ
    base_pagination = PaginationSettings()
    pagination = PaginationSettings(
        min_page=_parse_int(env.get("REELBASE_PAGE_MIN"), base_pagination.min_page),
        default_page_size=_parse_int(
            env.get("REELBASE_PAGE_SIZE_DEFAULT"),
            base_pagination.default_page_size,
        ),
        min_page_size=_parse_int(
            env.get("REELBASE_PAGE_SIZE_MIN"),
            base_pagination.min_page_size,
        ),
        max_page_size=_parse_int(
            env.get("REELBASE_PAGE_SIZE_MAX"),
            base_pagination.max_page_size,
        ),
    )
    base_rules = ValidationRules()
    validation = dc.replace(
        base_rules,
        invalidation=LengthRange(
            _parse_int(
                env.get("REELBASE_INVALIDATION_MIN_LENGTH"),
                base_rules.invalidation.min_length,
            ),
            _parse_int(
                env.get("REELBASE_INVALIDATION_MAX_LENGTH"),
                base_rules.invalidation.max_length,
            ),
        ),
        max_batch_size=_parse_int(
            env.get("REELBASE_MAX_BATCH_SIZE"),
            base_rules.max_batch_size,
        ),
    )
    return Settings(
        pagination=pagination,
        validation=validation,
        database_url=_non_empty(env.get("REELBASE_DATABASE_URL"))
        or _non_empty(env.get("DATABASE_URL")),
        log_level=_non_empty(env.get("REELBASE_LOG_LEVEL")),
    )


__all__ = [
    "FilmRules",
    "LengthRange",
    "PaginationSettings",
    "SeriesRules",
    "Settings",
    "UserRules",
    "ValidationRules",
    "load_settings",
]
