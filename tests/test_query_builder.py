"""Unit tests for query option validation.

Examples
--------
Run the query builder tests:

>>> pytest tests/test_query_builder.py -v
"""

from __future__ import annotations

import pytest

from reelbase.catalogue.columns import Entity
from reelbase.catalogue.errors import ValidationError
from reelbase.catalogue.query import (
    MAX_OFFSET,
    QueryDefaults,
    QueryOptions,
    QueryOptionsBuilder,
    QueryParams,
    SortOrder,
    WatchlistFilter,
)
from reelbase.config import PaginationSettings


@pytest.fixture
def builder() -> QueryOptionsBuilder:
    """Return a builder with default pagination bounds."""
    return QueryOptionsBuilder(PaginationSettings())


def test_defaults_fill_missing_values(builder: QueryOptionsBuilder) -> None:
    """An empty request yields the first page at the default size."""
    options = builder.build(
        QueryParams(),
        defaults=QueryDefaults(sort_field="id"),
        entity=Entity.FILMS,
    )

    assert options == QueryOptions(
        offset=0,
        limit=10,
        sort_order=SortOrder.ASC,
        sort_field="id",
    ), "Expected default options."


def test_offset_uses_page_and_page_size(builder: QueryOptionsBuilder) -> None:
    """Offsets are page-size multiples relative to the first page."""
    options = builder.build(QueryParams(page="3", page_size="25"))

    assert (options.offset, options.limit) == (50, 25), "Expected offset 50."


def test_offset_respects_configured_first_page() -> None:
    """A zero-based first page shifts the offset calculation."""
    zero_based = QueryOptionsBuilder(PaginationSettings(min_page=0))

    options = zero_based.build(QueryParams(page=2, page_size=5))

    assert options.offset == 10, "Expected page 2 of a zero-based scheme at 10."


def test_all_invalid_inputs_reported_together(builder: QueryOptionsBuilder) -> None:
    """Every invalid input appears in one validation error."""
    with pytest.raises(ValidationError) as exc_info:
        builder.build(
            QueryParams(
                page="0",
                page_size="1000",
                sort_field="title; DROP TABLE films",
                sort_order="sideways",
                filter="maybe",
            ),
            entity=Entity.FILMS,
        )

    assert set(exc_info.value.errors) == {
        "page",
        "page_size",
        "sort_field",
        "sort_order",
        "filter",
    }, "Expected one error per invalid input."


@pytest.mark.parametrize("raw", ["abc", "1.5", "", "true"])
def test_non_integer_page_rejected(builder: QueryOptionsBuilder, raw: str) -> None:
    """Page numbers must be integers."""
    with pytest.raises(ValidationError) as exc_info:
        builder.build(QueryParams(page=raw))

    assert exc_info.value.errors["page"] == "must be an integer", (
        f"Expected {raw!r} to be rejected as a page number."
    )


def test_page_beyond_largest_offset_rejected(builder: QueryOptionsBuilder) -> None:
    """Pages whose offset overflows a bigint are a validation failure."""
    with pytest.raises(ValidationError) as exc_info:
        builder.build(QueryParams(page="99999999999999999999"))

    assert exc_info.value.errors["page"].startswith("must not skip more than"), (
        "Expected an oversized page to be rejected before reaching storage."
    )


def test_last_addressable_page_accepted(builder: QueryOptionsBuilder) -> None:
    """The page that lands exactly on the largest offset is still valid."""
    options = builder.build(QueryParams(page=MAX_OFFSET + 1, page_size=1))

    assert options.offset == MAX_OFFSET, "Expected the largest bigint offset."


def test_page_longer_than_int_conversion_limit_rejected(
    builder: QueryOptionsBuilder,
) -> None:
    """A page string too long to convert is reported as not an integer."""
    with pytest.raises(ValidationError) as exc_info:
        builder.build(QueryParams(page="9" * 5000))

    assert exc_info.value.errors["page"] == "must be an integer", (
        "Expected an unconvertible page number to be rejected."
    )


def test_sort_field_rejected_without_entity(builder: QueryOptionsBuilder) -> None:
    """Read paths without a sortable entity refuse explicit sort fields."""
    with pytest.raises(ValidationError) as exc_info:
        builder.build(QueryParams(sort_field="title"))

    assert "sort_field" in exc_info.value.errors, "Expected sort_field error."


def test_sort_field_checked_against_entity(builder: QueryOptionsBuilder) -> None:
    """A sort field of a different entity is rejected."""
    with pytest.raises(ValidationError):
        builder.build(QueryParams(sort_field="time_added"), entity=Entity.FILMS)


def test_enums_are_case_insensitive(builder: QueryOptionsBuilder) -> None:
    """Sort order and filter values ignore case and surrounding whitespace."""
    options = builder.build(QueryParams(sort_order=" DESC ", filter="Not-Watched"))

    assert options.sort_order is SortOrder.DESC, "Expected descending order."
    assert options.watch_filter is WatchlistFilter.NOT_WATCHED, (
        "Expected the not-watched filter."
    )


def test_from_mapping_ignores_unknown_keys() -> None:
    """Only recognised query-string keys are picked up."""
    params = QueryParams.from_mapping({"page": 2, "limit": "7", "filter": "all"})

    assert params == QueryParams(page="2", filter="all"), (
        "Expected unrecognised keys to be ignored."
    )


@pytest.mark.parametrize(
    ("total", "expected"),
    [(0, 0), (1, 1), (10, 1), (11, 2), (95, 10)],
)
def test_page_count(total: int, expected: int) -> None:
    """Page counts round up partial pages."""
    options = QueryOptions(offset=0, limit=10)

    assert options.page_count(total) == expected, (
        f"Expected {total} rows to fill {expected} pages."
    )


def test_query_options_reject_bad_bounds() -> None:
    """Negative offsets and zero limits are programming errors."""
    with pytest.raises(ValueError, match="offset"):
        QueryOptions(offset=-1, limit=10)
    with pytest.raises(ValueError, match="limit"):
        QueryOptions(offset=0, limit=0)
