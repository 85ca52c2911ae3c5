"""Request parsing and payload builders for Falcon resource adapters.

This module centralizes the API-layer transformations used by resource
classes: identifier and path-number parsing, payload shape validation, the
typed payload builders for create, patch and invalidate requests, query-string
extraction and the default requesting-user authenticator.

Payload builders report every malformed field of one request together, as a
:class:`~reelbase.catalogue.errors.ValidationError`, so a client sees the same
``errors`` map whether a value has the wrong JSON type or breaks a configured
threshold.

Examples
--------
Parse and validate identifiers before service dispatch:

>>> film_id = parse_uuid(raw_film_id, "film_id")

Build a typed patch from a JSON payload:

>>> patch = build_film_patch({"title": "Alien", "duration": 117})
"""

from __future__ import annotations

import datetime as dt
import re
import typing as typ
import uuid

import falcon

from reelbase.catalogue.columns import Entity
from reelbase.catalogue.domain import EpisodeKey
from reelbase.catalogue.errors import ValidationError, ValidationErrors
from reelbase.catalogue.payloads import (
    FilmCreateData,
    FilmPatch,
    SeriesCreateData,
    SeriesPatch,
)
from reelbase.catalogue.query import (
    QueryDefaults,
    QueryParams,
    SortOrder,
    WatchlistFilter,
)

if typ.TYPE_CHECKING:
    from .types import JsonPayload

_INT_RE = re.compile(r"\+?\d+")

USER_ID_HEADER: typ.Final = "X-User-Id"

# Read profiles: builder defaults plus the entity whose columns may be sorted on.
MOVIES_QUERY: typ.Final = (QueryDefaults(sort_field="id"), Entity.FILMS)
SERIES_QUERY: typ.Final = (QueryDefaults(sort_field="id"), Entity.SERIESES)
EPISODES_QUERY: typ.Final = (QueryDefaults(), None)
AUDITS_QUERY: typ.Final = (QueryDefaults(sort_order=SortOrder.DESC), None)
WATCHLIST_QUERY: typ.Final = (
    QueryDefaults(
        sort_field="time_added",
        sort_order=SortOrder.DESC,
        filter=WatchlistFilter.ALL,
    ),
    Entity.WATCHFILMS,
)


def parse_uuid(raw_value: str, field_name: str) -> uuid.UUID:
    """Parse a UUID string for a named request field.

    Parameters
    ----------
    raw_value : str
        Raw string value to parse.
    field_name : str
        Request field name used in validation error messages.

    Returns
    -------
    uuid.UUID
        Parsed UUID value.

    Raises
    ------
    falcon.HTTPBadRequest
        Raised when ``raw_value`` cannot be parsed as a UUID.
    """
    try:
        return uuid.UUID(raw_value)
    except (TypeError, ValueError, AttributeError) as exc:
        msg = f"Invalid UUID for {field_name}: {raw_value!r}."
        raise falcon.HTTPBadRequest(description=msg) from exc


def parse_positive_int(raw_value: str, field_name: str) -> int:
    """Parse a strictly positive integer path segment.

    Raises
    ------
    falcon.HTTPBadRequest
        Raised when ``raw_value`` is not a positive decimal integer.
    """
    stripped = raw_value.strip()
    if _INT_RE.fullmatch(stripped) is None or int(stripped) < 1:
        msg = f"Invalid positive integer for {field_name}: {raw_value!r}."
        raise falcon.HTTPBadRequest(description=msg)
    return int(stripped)


def parse_episode_key(
    series_id: str,
    season_number: str,
    episode_number: str,
) -> EpisodeKey:
    """Parse the three path segments that address an episode."""
    return EpisodeKey(
        series_id=parse_uuid(series_id, "series_id"),
        season_number=parse_positive_int(season_number, "season_number"),
        episode_number=parse_positive_int(episode_number, "episode_number"),
    )


def require_payload_dict(payload: object) -> JsonPayload:
    """Validate that request media is a JSON object mapping.

    Parameters
    ----------
    payload : object
        Parsed Falcon request media.

    Returns
    -------
    JsonPayload
        Validated JSON object payload.

    Raises
    ------
    falcon.HTTPBadRequest
        Raised when request media is not a JSON object.
    """
    if not isinstance(payload, dict):
        msg = "JSON object payload is required."
        raise falcon.HTTPBadRequest(description=msg)
    return typ.cast("JsonPayload", payload)


def query_params(req: falcon.Request) -> QueryParams:
    """Extract paging, sorting and filter inputs from the query string."""
    return QueryParams.from_mapping(req.params)


def header_user_id(req: falcon.Request) -> uuid.UUID:
    """Resolve the requesting user from the ``X-User-Id`` header.

    Token verification happens in front of this service; the header carries
    the already-authenticated user identifier.

    Raises
    ------
    falcon.HTTPUnauthorized
        Raised when the header is missing or is not a UUID.
    """
    raw_value = req.get_header(USER_ID_HEADER)
    if raw_value is None:
        msg = f"Missing {USER_ID_HEADER} header."
        raise falcon.HTTPUnauthorized(title="Unauthorized", description=msg)
    try:
        return uuid.UUID(raw_value)
    except ValueError as exc:
        msg = f"Invalid {USER_ID_HEADER} header."
        raise falcon.HTTPUnauthorized(title="Unauthorized", description=msg) from exc


class _PayloadReader:
    """Typed accessors over a JSON payload that collect type errors."""

    __slots__ = ("errors", "payload")

    def __init__(self, payload: JsonPayload) -> None:
        self.payload = payload
        self.errors = ValidationErrors()

    def text(self, field: str, *, required: bool = False) -> str | None:
        value = self.payload.get(field)
        if value is None:
            if required:
                self.errors.add(field, "is required")
            return None
        if not isinstance(value, str):
            self.errors.add(field, "must be a string")
            return None
        return value

    def integer(self, field: str) -> int | None:
        value = self.payload.get(field)
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            self.errors.add(field, "must be an integer")
            return None
        return value

    def date(self, field: str, *, required: bool = False) -> dt.date | None:
        value = self.text(field, required=required)
        if value is None:
            return None
        try:
            return dt.date.fromisoformat(value)
        except ValueError:
            self.errors.add(field, "must be an ISO 8601 date")
            return None

    def raise_if_any(self) -> None:
        self.errors.raise_if_any()


def _read_film_create(reader: _PayloadReader) -> FilmCreateData | None:
    title = reader.text("title", required=True)
    date_released = reader.date("date_released", required=True)
    descriptions = reader.text("descriptions")
    duration = reader.integer("duration")
    poster = reader.text("poster")
    if title is None or date_released is None:
        return None
    return FilmCreateData(
        title=title,
        date_released=date_released,
        descriptions=descriptions,
        duration=duration,
        poster=poster,
    )


def build_film_create_data(payload: JsonPayload) -> FilmCreateData:
    """Build ``FilmCreateData`` for a movie or episode create or put.

    Raises
    ------
    ValidationError
        Raised when a required field is missing or a value has the wrong type.
    """
    reader = _PayloadReader(payload)
    data = _read_film_create(reader)
    reader.raise_if_any()
    return typ.cast("FilmCreateData", data)


def build_film_patch(payload: JsonPayload) -> FilmPatch:
    """Build a ``FilmPatch`` from the fields present in ``payload``."""
    reader = _PayloadReader(payload)
    patch = FilmPatch(
        title=reader.text("title"),
        date_released=reader.date("date_released"),
        descriptions=reader.text("descriptions"),
        duration=reader.integer("duration"),
        poster=reader.text("poster"),
    )
    reader.raise_if_any()
    return patch


def build_season_episodes(payload: JsonPayload) -> list[FilmCreateData]:
    """Build the ordered episode list of a whole-season put.

    The payload carries an ``episodes`` array of episode objects; errors are
    reported per element as ``episodes[i].field``.
    """
    raw_episodes = payload.get("episodes")
    errors = ValidationErrors()
    if not isinstance(raw_episodes, list):
        errors.add("episodes", "must be a list of episode objects")
        errors.raise_if_any()
    episodes: list[FilmCreateData] = []
    for index, raw in enumerate(typ.cast("list[object]", raw_episodes)):
        if not isinstance(raw, dict):
            errors.add(f"episodes[{index}]", "must be an object")
            continue
        reader = _PayloadReader(typ.cast("JsonPayload", raw))
        data = _read_film_create(reader)
        try:
            reader.raise_if_any()
        except ValidationError as exc:
            errors.merge(exc, prefix=f"episodes[{index}].")
            continue
        episodes.append(typ.cast("FilmCreateData", data))
    errors.raise_if_any()
    return episodes


def build_series_create_data(payload: JsonPayload) -> SeriesCreateData:
    """Build ``SeriesCreateData`` from a create payload."""
    reader = _PayloadReader(payload)
    title = reader.text("title", required=True)
    date_started = reader.date("date_started", required=True)
    descriptions = reader.text("descriptions")
    date_ended = reader.date("date_ended")
    poster = reader.text("poster")
    reader.raise_if_any()
    return SeriesCreateData(
        title=typ.cast("str", title),
        date_started=typ.cast("dt.date", date_started),
        descriptions=descriptions,
        date_ended=date_ended,
        poster=poster,
    )


def build_series_patch(payload: JsonPayload) -> SeriesPatch:
    """Build a ``SeriesPatch`` from the fields present in ``payload``."""
    reader = _PayloadReader(payload)
    patch = SeriesPatch(
        title=reader.text("title"),
        date_started=reader.date("date_started"),
        descriptions=reader.text("descriptions"),
        date_ended=reader.date("date_ended"),
        poster=reader.text("poster"),
    )
    reader.raise_if_any()
    return patch


def parse_invalidation_note(payload: JsonPayload) -> str | None:
    """Return the ``note`` of an invalidate request; missing means clear."""
    reader = _PayloadReader(payload)
    note = reader.text("note")
    reader.raise_if_any()
    return note


def parse_film_reference(payload: JsonPayload) -> uuid.UUID:
    """Return the ``film_id`` of a watchlist add request."""
    reader = _PayloadReader(payload)
    raw_film_id = reader.text("film_id", required=True)
    reader.raise_if_any()
    return parse_uuid(typ.cast("str", raw_film_id), "film_id")

