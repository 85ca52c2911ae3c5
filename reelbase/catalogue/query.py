"""Pagination, sorting and filtering options for catalogue read paths.

Callers hand raw page, page size, sort field, sort order and filter values to
:class:`QueryOptionsBuilder`, which fills in defaults, validates everything
against the configured bounds, the closed enumerations and the column registry,
and returns a bounded :class:`QueryOptions` value. Every invalid input is
reported in one :class:`~reelbase.catalogue.errors.ValidationError`.

Examples
--------
Build options for the second page of movies sorted by title:

>>> builder = QueryOptionsBuilder(PaginationSettings())
>>> options = builder.build(
...     QueryParams(page="2", page_size="5", sort_field="title"),
...     defaults=QueryDefaults(sort_field="id"),
...     entity=Entity.FILMS,
... )
>>> (options.offset, options.limit, options.sort_field)
(5, 5, 'title')
"""

from __future__ import annotations

import dataclasses as dc
import enum
import math
import re
import typing as typ

from .columns import COLUMN_REGISTRY, ColumnRegistry, Entity
from .errors import ValidationErrors

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from reelbase.config import PaginationSettings

_INT_RE = re.compile(r"[+-]?\d+")

# OFFSET is a PostgreSQL bigint.
MAX_OFFSET: typ.Final = 2**63 - 1


class SortOrder(enum.StrEnum):
    """Direction applied to the sort field."""

    ASC = "asc"
    DESC = "desc"


class WatchlistFilter(enum.StrEnum):
    """Closed set of watchlist filters."""

    WATCHED = "watched"
    NOT_WATCHED = "not-watched"
    ALL = "all"


@dc.dataclass(frozen=True, slots=True)
class QueryParams:
    """Raw query inputs as supplied by a caller.

    Any value may be None to request the default. Integers may be given as
    strings since they usually come straight from a query string.
    """

    page: int | str | None = None
    page_size: int | str | None = None
    sort_field: str | None = None
    sort_order: str | None = None
    filter: str | None = None

    @classmethod
    def from_mapping(cls, values: cabc.Mapping[str, object]) -> QueryParams:
        """Pick the recognised keys out of a query-string style mapping."""

        def _text(key: str) -> str | None:
            value = values.get(key)
            return None if value is None else str(value)

        return cls(
            page=_text("page"),
            page_size=_text("page_size"),
            sort_field=_text("sort_field"),
            sort_order=_text("sort_order"),
            filter=_text("filter"),
        )


@dc.dataclass(frozen=True, slots=True)
class QueryDefaults:
    """Per-endpoint defaults for values the caller left unset."""

    sort_field: str | None = None
    sort_order: SortOrder = SortOrder.ASC
    filter: WatchlistFilter | None = None


@dc.dataclass(frozen=True, slots=True)
class QueryOptions:
    """Validated, bounded query options.

    Attributes
    ----------
    offset : int
        Number of rows to skip.
    limit : int
        Maximum number of rows to return.
    sort_order : SortOrder
        Direction of the primary ordering.
    sort_field : str | None
        Registry-checked column to sort by, when the read path supports one.
    watch_filter : WatchlistFilter | None
        Watchlist filter, for watchlist reads only.
    """

    offset: int
    limit: int
    sort_order: SortOrder = SortOrder.ASC
    sort_field: str | None = None
    watch_filter: WatchlistFilter | None = None

    def __post_init__(self) -> None:
        """Reject negative offsets and non-positive limits."""
        if self.offset < 0 or self.limit < 1:
            msg = "QueryOptions requires offset >= 0 and limit >= 1."
            raise ValueError(msg)

    def page_count(self, total: int) -> int:
        """Return how many pages of ``limit`` rows ``total`` rows fill."""
        return math.ceil(total / self.limit)


@dc.dataclass(frozen=True, slots=True)
class Page[ItemT]:
    """One page of results plus the number of rows across all pages."""

    items: list[ItemT]
    total: int


def _coerce_int(value: int | str) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    stripped = value.strip()
    if _INT_RE.fullmatch(stripped) is None:
        return None
    try:
        return int(stripped)
    except ValueError:
        # Longer than the interpreter's int conversion limit.
        return None


class QueryOptionsBuilder:
    """Validate raw query inputs and turn them into :class:`QueryOptions`.

    Parameters
    ----------
    pagination : PaginationSettings
        Page numbering and page size bounds.
    registry : ColumnRegistry, optional
        Registry consulted for sort fields. Defaults to the process-wide
        registry.
    """

    __slots__ = ("_pagination", "_registry")

    def __init__(
        self,
        pagination: PaginationSettings,
        registry: ColumnRegistry = COLUMN_REGISTRY,
    ) -> None:
        self._pagination = pagination
        self._registry = registry

    @property
    def pagination(self) -> PaginationSettings:
        """Return the pagination bounds used by this builder."""
        return self._pagination

    def build(
        self,
        params: QueryParams,
        *,
        defaults: QueryDefaults | None = None,
        entity: Entity | None = None,
    ) -> QueryOptions:
        """Validate ``params`` and compute offset and limit.

        Parameters
        ----------
        params : QueryParams
            Raw caller input.
        defaults : QueryDefaults | None, optional
            Values used for inputs the caller omitted.
        entity : Entity | None, optional
            Entity whose columns a sort field must belong to. When omitted any
            explicit sort field is rejected.

        Returns
        -------
        QueryOptions
            Normalised options ready for a repository query.

        Raises
        ------
        ValidationError
            With one entry per invalid input.
        """
        defaults = defaults or QueryDefaults()
        errors = ValidationErrors()

        page = self._parse_page(params.page, errors)
        page_size = self._parse_page_size(params.page_size, errors)
        offset = page_size * (page - self._pagination.min_page)
        if offset > MAX_OFFSET:
            errors.add("page", f"must not skip more than {MAX_OFFSET} rows")
        sort_field = self._parse_sort_field(
            params.sort_field, defaults.sort_field, entity, errors
        )
        sort_order = self._parse_enum(
            "sort_order", params.sort_order, SortOrder, errors
        )
        watch_filter = self._parse_enum(
            "filter", params.filter, WatchlistFilter, errors
        )
        errors.raise_if_any()

        return QueryOptions(
            offset=offset,
            limit=page_size,
            sort_order=sort_order or defaults.sort_order,
            sort_field=sort_field,
            watch_filter=watch_filter or defaults.filter,
        )

    def _parse_page(self, raw: int | str | None, errors: ValidationErrors) -> int:
        minimum = self._pagination.min_page
        if raw is None:
            return minimum
        parsed = _coerce_int(raw)
        if parsed is None:
            errors.add("page", "must be an integer")
            return minimum
        if parsed < minimum:
            errors.add("page", f"must be at least {minimum}")
            return minimum
        return parsed

    def _parse_page_size(self, raw: int | str | None, errors: ValidationErrors) -> int:
        bounds = self._pagination
        if raw is None:
            return bounds.default_page_size
        parsed = _coerce_int(raw)
        if parsed is None:
            errors.add("page_size", "must be an integer")
            return bounds.default_page_size
        if not bounds.min_page_size <= parsed <= bounds.max_page_size:
            errors.add(
                "page_size",
                f"must be between {bounds.min_page_size} and {bounds.max_page_size}",
            )
            return bounds.default_page_size
        return parsed

    def _parse_sort_field(
        self,
        raw: str | None,
        default: str | None,
        entity: Entity | None,
        errors: ValidationErrors,
    ) -> str | None:
        if raw is None:
            return default
        if entity is None:
            errors.add("sort_field", "sorting by field is not supported here")
            return default
        if not self._registry.exists(entity, raw):
            errors.add(
                "sort_field",
                f"unknown field {raw!r} for entity {str(entity)!r}",
            )
            return default
        return raw

    @staticmethod
    def _parse_enum[EnumT: enum.StrEnum](
        name: str,
        raw: str | None,
        enum_type: type[EnumT],
        errors: ValidationErrors,
    ) -> EnumT | None:
        if raw is None:
            return None
        try:
            return enum_type(raw.strip().lower())
        except ValueError:
            allowed = ", ".join(member.value for member in enum_type)
            errors.add(name, f"must be one of: {allowed}")
            return None


__all__ = [
    "Page",
    "QueryDefaults",
    "QueryOptions",
    "QueryOptionsBuilder",
    "QueryParams",
    "SortOrder",
    "WatchlistFilter",
]
