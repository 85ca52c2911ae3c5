"""Unit tests for create and patch payload validation."""

from __future__ import annotations

import datetime as dt
import uuid

import pytest

from reelbase.catalogue.domain import EpisodeKey
from reelbase.catalogue.errors import ValidationError
from reelbase.catalogue.payloads import (
    FilmCreateData,
    FilmPatch,
    SeriesCreateData,
    SeriesPatch,
    UserCreateData,
    normalise_invalidation_note,
    validate_episode_key,
)
from reelbase.config import FilmRules, LengthRange, SeriesRules, UserRules


def test_film_create_reports_every_bad_field() -> None:
    """All threshold violations are reported together."""
    data = FilmCreateData(
        title="x" * 201,
        date_released=dt.date(1800, 1, 1),
        descriptions="",
        duration=0,
    )

    with pytest.raises(ValidationError) as exc_info:
        data.validate(FilmRules())

    assert set(exc_info.value.errors) == {
        "title",
        "date_released",
        "descriptions",
        "duration",
    }, "Expected every invalid film field to be reported."


def test_film_create_accepts_boundaries() -> None:
    """Values on the configured bounds are valid."""
    rules = FilmRules()
    FilmCreateData(
        title="x" * rules.title.max_length,
        date_released=rules.min_date_released,
        duration=rules.max_duration,
    ).validate(rules)


def test_film_patch_changes_skip_absent_fields() -> None:
    """Only fields present in a patch are overwritten."""
    patch = FilmPatch(title="Alien", duration=117)

    assert patch.changes() == {"title": "Alien", "duration": 117}, (
        "Expected absent fields to be omitted from the changes."
    )


def test_empty_film_patch_is_valid() -> None:
    """A patch without fields validates and changes nothing."""
    patch = FilmPatch()
    patch.validate(FilmRules())

    assert patch.changes() == {}, "Expected no changes."


def test_replacement_keeps_poster_when_absent() -> None:
    """Whole-record replacement clears optional fields but not the poster."""
    values = FilmCreateData(title="Pilot", date_released=dt.date(2001, 1, 1))

    replacement = values.replacement()

    assert "poster" not in replacement, "Expected the stored poster to survive."
    assert replacement["descriptions"] is None, "Expected descriptions cleared."


def test_series_create_rejects_inverted_dates() -> None:
    """A series cannot end before it starts."""
    data = SeriesCreateData(
        title="Lost",
        date_started=dt.date(2004, 9, 22),
        date_ended=dt.date(2004, 1, 1),
    )

    with pytest.raises(ValidationError) as exc_info:
        data.validate(SeriesRules())

    assert "date_ended" in exc_info.value.errors, "Expected a date_ended error."


def test_series_patch_checks_present_fields() -> None:
    """Series patches validate the fields they carry."""
    with pytest.raises(ValidationError) as exc_info:
        SeriesPatch(date_started=dt.date(1850, 1, 1)).validate(SeriesRules())

    assert list(exc_info.value.errors) == ["date_started"], (
        "Expected only date_started to be reported."
    )


def test_episode_key_bounds() -> None:
    """Season and episode numbers are capped by the configured maxima."""
    rules = FilmRules(max_season_number=3, max_episode_number=10)
    key = EpisodeKey(uuid.uuid4(), season_number=4, episode_number=11)

    with pytest.raises(ValidationError) as exc_info:
        validate_episode_key(key, rules)

    assert set(exc_info.value.errors) == {"season_number", "episode_number"}, (
        "Expected both numbers to be rejected."
    )


@pytest.mark.parametrize("note", [None, "", "   "])
def test_empty_note_clears_invalidation(note: str | None) -> None:
    """Missing or blank notes normalise to None."""
    assert normalise_invalidation_note(note, LengthRange(5, 10)) is None, (
        "Expected a blank note to clear the invalidation."
    )


def test_note_length_is_bounded() -> None:
    """Non-empty notes must respect the configured length bounds."""
    bounds = LengthRange(5, 10)

    assert normalise_invalidation_note("wrong year", bounds) == "wrong year", (
        "Expected a note within bounds to pass through."
    )
    with pytest.raises(ValidationError) as exc_info:
        normalise_invalidation_note("bad", bounds)

    assert "invalidation" in exc_info.value.errors, "Expected a length error."


def test_user_create_validation() -> None:
    """User registration checks the email and profile fields."""
    data = UserCreateData(
        email="not-an-email",
        hashed_password="",
        first_name="",
        birthdate=dt.date(1800, 1, 1),
    )

    with pytest.raises(ValidationError) as exc_info:
        data.validate(UserRules())

    assert set(exc_info.value.errors) == {
        "email",
        "hashed_password",
        "first_name",
        "birthdate",
    }, "Expected every invalid user field to be reported."
