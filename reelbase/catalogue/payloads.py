"""Create and patch payloads accepted by the mutation services.

Create payloads carry every required field. Patch payloads carry only the
fields a caller wants to change: a field left as None is absent and keeps its
stored value. Each payload validates itself against the configured thresholds
and reports every offending field at once.

Examples
--------
>>> patch = FilmPatch(title="New title")
>>> patch.validate(FilmRules())
>>> patch.changes()
{'title': 'New title'}
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from .errors import ValidationErrors

if typ.TYPE_CHECKING:
    import datetime as dt

    from reelbase.config import FilmRules, LengthRange, SeriesRules, UserRules

    from .domain import EpisodeKey


def _check_text(
    errors: ValidationErrors,
    field: str,
    value: str | None,
    bounds: LengthRange,
) -> None:
    if value is not None:
        errors.add(field, bounds.describe_violation(value))


def _check_min_date(
    errors: ValidationErrors,
    field: str,
    value: dt.date | None,
    minimum: dt.date,
) -> None:
    if value is not None and value < minimum:
        errors.add(field, f"must not be earlier than {minimum.isoformat()}")


def _check_int_range(
    errors: ValidationErrors,
    field: str,
    value: int | None,
    minimum: int,
    maximum: int,
) -> None:
    if value is not None and not minimum <= value <= maximum:
        errors.add(field, f"must be between {minimum} and {maximum}")


def _present_fields(payload: object) -> dict[str, object]:
    """Return the dataclass fields of ``payload`` that are not None."""
    return {
        field.name: value
        for field in dc.fields(typ.cast("typ.Any", payload))
        if (value := getattr(payload, field.name)) is not None
    }


@dc.dataclass(frozen=True, slots=True)
class FilmCreateData:
    """Fields for creating a movie or an episode."""

    title: str
    date_released: dt.date
    descriptions: str | None = None
    duration: int | None = None
    poster: str | None = None

    def validate(self, rules: FilmRules) -> None:
        """Raise ``ValidationError`` listing every field that breaks ``rules``."""
        errors = ValidationErrors()
        _collect_film_errors(errors, self, rules)
        errors.raise_if_any()

    def replacement(self) -> dict[str, object]:
        """Return the values that replace an existing film wholesale.

        Optional descriptive fields are replaced even when unset; the poster is
        only replaced when a new one is given.
        """
        values = dc.asdict(self)
        if self.poster is None:
            del values["poster"]
        return values


@dc.dataclass(frozen=True, slots=True)
class FilmPatch:
    """Partial update of a movie or an episode."""

    title: str | None = None
    date_released: dt.date | None = None
    descriptions: str | None = None
    duration: int | None = None
    poster: str | None = None

    def validate(self, rules: FilmRules) -> None:
        """Raise ``ValidationError`` listing every field that breaks ``rules``."""
        errors = ValidationErrors()
        _collect_film_errors(errors, self, rules)
        errors.raise_if_any()

    def changes(self) -> dict[str, object]:
        """Return the fields this patch overwrites."""
        return _present_fields(self)


def _collect_film_errors(
    errors: ValidationErrors,
    data: FilmCreateData | FilmPatch,
    rules: FilmRules,
) -> None:
    _check_text(errors, "title", data.title, rules.title)
    _check_text(errors, "descriptions", data.descriptions, rules.descriptions)
    _check_min_date(
        errors, "date_released", data.date_released, rules.min_date_released
    )
    _check_int_range(
        errors, "duration", data.duration, rules.min_duration, rules.max_duration
    )


def validate_episode_key(key: EpisodeKey, rules: FilmRules) -> None:
    """Raise ``ValidationError`` when season or episode numbers exceed ``rules``."""
    errors = ValidationErrors()
    _check_int_range(
        errors, "season_number", key.season_number, 1, rules.max_season_number
    )
    _check_int_range(
        errors, "episode_number", key.episode_number, 1, rules.max_episode_number
    )
    errors.raise_if_any()


@dc.dataclass(frozen=True, slots=True)
class SeriesCreateData:
    """Fields for creating a series."""

    title: str
    date_started: dt.date
    descriptions: str | None = None
    date_ended: dt.date | None = None
    poster: str | None = None

    def validate(self, rules: SeriesRules) -> None:
        """Raise ``ValidationError`` listing every field that breaks ``rules``."""
        errors = ValidationErrors()
        _collect_series_errors(errors, self, rules)
        if self.date_ended is not None and self.date_ended < self.date_started:
            errors.add("date_ended", "must not precede date_started")
        errors.raise_if_any()


@dc.dataclass(frozen=True, slots=True)
class SeriesPatch:
    """Partial update of a series."""

    title: str | None = None
    date_started: dt.date | None = None
    descriptions: str | None = None
    date_ended: dt.date | None = None
    poster: str | None = None

    def validate(self, rules: SeriesRules) -> None:
        """Raise ``ValidationError`` listing every field that breaks ``rules``."""
        errors = ValidationErrors()
        _collect_series_errors(errors, self, rules)
        errors.raise_if_any()

    def changes(self) -> dict[str, object]:
        """Return the fields this patch overwrites."""
        return _present_fields(self)


def _collect_series_errors(
    errors: ValidationErrors,
    data: SeriesCreateData | SeriesPatch,
    rules: SeriesRules,
) -> None:
    _check_text(errors, "title", data.title, rules.title)
    _check_text(errors, "descriptions", data.descriptions, rules.descriptions)
    _check_min_date(errors, "date_started", data.date_started, rules.min_date_started)
    _check_min_date(errors, "date_ended", data.date_ended, rules.min_date_ended)


def normalise_invalidation_note(note: str | None, bounds: LengthRange) -> str | None:
    """Validate an invalidation note.

    An empty or missing note means "clear the invalidation" and normalises to
    None. Any other note must respect ``bounds``.

    Raises
    ------
    ValidationError
        If a non-empty note is too short or too long.
    """
    if note is None or not note.strip():
        return None
    errors = ValidationErrors()
    errors.add("invalidation", bounds.describe_violation(note))
    errors.raise_if_any()
    return note


@dc.dataclass(frozen=True, slots=True)
class UserCreateData:
    """Fields for registering a user. ``hashed_password`` is already hashed."""

    email: str
    hashed_password: str
    first_name: str | None = None
    last_name: str | None = None
    bio: str | None = None
    birthdate: dt.date | None = None
    avatar: str | None = None

    def validate(self, rules: UserRules) -> None:
        """Raise ``ValidationError`` listing every field that breaks ``rules``."""
        errors = ValidationErrors()
        _check_text(errors, "email", self.email, rules.email)
        if "@" not in self.email:
            errors.add("email", "must be an email address")
        if not self.hashed_password:
            errors.add("hashed_password", "must not be empty")
        _check_text(errors, "first_name", self.first_name, rules.first_name)
        _check_text(errors, "last_name", self.last_name, rules.last_name)
        _check_text(errors, "bio", self.bio, rules.bio)
        _check_min_date(errors, "birthdate", self.birthdate, rules.min_birthdate)
        errors.raise_if_any()


__all__ = [
    "FilmCreateData",
    "FilmPatch",
    "SeriesCreateData",
    "SeriesPatch",
    "UserCreateData",
    "normalise_invalidation_note",
    "validate_episode_key",
]
