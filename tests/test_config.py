"""Unit tests for environment-driven settings."""

from __future__ import annotations

import pytest

from reelbase.config import LengthRange, PaginationSettings, Settings, load_settings


def test_defaults_without_environment() -> None:
    """An empty environment produces the default settings."""
    assert load_settings({}) == Settings(), "Expected default settings."


def test_environment_overrides() -> None:
    """Recognised variables override pagination and validation bounds."""
    settings = load_settings(
        {
            "REELBASE_DATABASE_URL": "postgresql+psycopg://db/reelbase",
            "REELBASE_LOG_LEVEL": "debug",
            "REELBASE_PAGE_SIZE_DEFAULT": "20",
            "REELBASE_PAGE_SIZE_MAX": "50",
            "REELBASE_INVALIDATION_MIN_LENGTH": "5",
            "REELBASE_MAX_BATCH_SIZE": "12",
        }
    )

    assert settings.database_url == "postgresql+psycopg://db/reelbase", (
        "Expected the database URL from the environment."
    )
    assert settings.log_level == "debug", "Expected the raw log level."
    assert settings.pagination.default_page_size == 20, "Expected page size 20."
    assert settings.pagination.max_page_size == 50, "Expected max page size 50."
    assert settings.validation.invalidation == LengthRange(5, 1000), (
        "Expected the invalidation minimum from the environment."
    )
    assert settings.validation.max_batch_size == 12, "Expected batch size 12."


def test_database_url_fallback() -> None:
    """DATABASE_URL is used when the prefixed variable is blank."""
    settings = load_settings(
        {"REELBASE_DATABASE_URL": "  ", "DATABASE_URL": "postgresql://fallback"}
    )

    assert settings.database_url == "postgresql://fallback", (
        "Expected the unprefixed database URL."
    )


def test_unparseable_integers_fall_back() -> None:
    """Malformed integers keep their default."""
    settings = load_settings({"REELBASE_PAGE_SIZE_MAX": "lots"})

    assert settings.pagination.max_page_size == 100, "Expected the default."


def test_inconsistent_pagination_rejected() -> None:
    """A default page size above the maximum is refused at start-up."""
    with pytest.raises(ValueError, match="Pagination"):
        load_settings({"REELBASE_PAGE_SIZE_MAX": "5"})


def test_pagination_settings_validate_bounds() -> None:
    """Pagination bounds must be ordered."""
    with pytest.raises(ValueError, match="min_page_size"):
        PaginationSettings(min_page_size=0)


def test_length_range_describes_violations() -> None:
    """Length ranges explain which bound was broken."""
    bounds = LengthRange(2, 4)

    assert bounds.describe_violation("abc") is None, "Expected a valid value."
    assert bounds.describe_violation("a") == "must be at least 2 characters long", (
        "Expected a too-short reason."
    )
    assert bounds.describe_violation("abcde") == "must be at most 4 characters long", (
        "Expected a too-long reason."
    )
