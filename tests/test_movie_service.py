"""Integration tests for movie services and their audit trail.

Examples
--------
Run the movie service tests:

>>> pytest tests/test_movie_service.py -v
"""

from __future__ import annotations

import datetime as dt
import typing as typ
import uuid

import pytest

from reelbase.catalogue.errors import NotFoundError, StorageError, ValidationError
from reelbase.catalogue.payloads import FilmCreateData, FilmPatch
from reelbase.catalogue.query import QueryOptions, SortOrder
from reelbase.catalogue.services import (
    create_movie,
    get_movie,
    invalidate_movie,
    list_movie_audits,
    list_movies,
    update_movie,
)
from reelbase.catalogue.storage import SqlAlchemyUnitOfWork

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from reelbase.catalogue.domain import Film, User

_HEAT = FilmCreateData(
    title="Heat",
    date_released=dt.date(1995, 12, 15),
    descriptions="A crew of thieves and a detective.",
    duration=170,
    poster="heat.jpg",
)
_ALL = QueryOptions(offset=0, limit=100)


async def _create(
    session_factory: async_sessionmaker[AsyncSession],
    user: User,
    data: FilmCreateData = _HEAT,
) -> Film:
    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        return await create_movie(uow, data=data, user_id=user.id)


@pytest.mark.asyncio
async def test_create_movie_has_no_history(
    session_factory: async_sessionmaker[AsyncSession],
    contributor: User,
) -> None:
    """A new movie is live with an empty audit trail."""
    movie = await _create(session_factory, contributor)

    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        stored = await get_movie(uow, film_id=movie.id)
        audits = await list_movie_audits(uow, film_id=movie.id, options=_ALL)

    assert stored == movie, "Expected the stored movie to match the created one."
    assert audits.total == 0, "Expected no audit rows after create."


@pytest.mark.asyncio
async def test_updates_audit_previous_versions(
    session_factory: async_sessionmaker[AsyncSession],
    contributor: User,
) -> None:
    """N mutations leave N audit rows, the oldest equal to the created state."""
    movie = await _create(session_factory, contributor)
    titles = ["Heat (1995)", "Heat: Director's Cut", "Heat"]

    for title in titles:
        async with SqlAlchemyUnitOfWork(session_factory) as uow:
            await update_movie(
                uow,
                film_id=movie.id,
                user_id=contributor.id,
                patch=FilmPatch(title=title),
            )

    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        live = await get_movie(uow, film_id=movie.id)
        audits = await list_movie_audits(
            uow,
            film_id=movie.id,
            options=QueryOptions(offset=0, limit=100, sort_order=SortOrder.ASC),
        )

    assert audits.total == len(titles), "Expected one audit row per mutation."
    assert audits.items[0] == movie.snapshot(), (
        "Expected the oldest audit row to equal the created version."
    )
    stamps = [audit.contributed_at for audit in audits.items]
    assert stamps == sorted(stamps), "Expected audit rows in contribution order."
    assert len(set(stamps)) == len(stamps), "Expected distinct contribution times."
    assert live.contributed_at > stamps[-1], (
        "Expected the live version to be newer than its history."
    )
    assert live.duration == movie.duration, "Expected absent fields to survive."
    assert live.poster == movie.poster, "Expected the poster to survive."


@pytest.mark.asyncio
async def test_update_rejects_invalid_patch_without_writing(
    session_factory: async_sessionmaker[AsyncSession],
    contributor: User,
) -> None:
    """An invalid patch changes nothing."""
    movie = await _create(session_factory, contributor)

    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        with pytest.raises(ValidationError) as exc_info:
            await update_movie(
                uow,
                film_id=movie.id,
                user_id=contributor.id,
                patch=FilmPatch(duration=-5),
            )

    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        audits = await list_movie_audits(uow, film_id=movie.id, options=_ALL)

    assert "duration" in exc_info.value.errors, "Expected a duration error."
    assert audits.total == 0, "Expected no audit row for a rejected patch."


@pytest.mark.asyncio
async def test_invalidate_only_touches_invalidation(
    session_factory: async_sessionmaker[AsyncSession],
    contributor: User,
    other_user: User,
) -> None:
    """Invalidation sets the note and stamp and clears with an empty note."""
    movie = await _create(session_factory, contributor)

    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        flagged = await invalidate_movie(
            uow, film_id=movie.id, user_id=other_user.id, note="Wrong release year"
        )
    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        cleared = await invalidate_movie(
            uow, film_id=movie.id, user_id=contributor.id, note=""
        )
        audits = await list_movie_audits(uow, film_id=movie.id, options=_ALL)

    assert flagged.invalidation == "Wrong release year", "Expected the note."
    assert flagged.contributed_by == other_user.id, "Expected the new contributor."
    assert (flagged.title, flagged.duration, flagged.poster) == (
        movie.title,
        movie.duration,
        movie.poster,
    ), "Expected descriptive fields to be preserved."
    assert cleared.invalidation is None, "Expected an empty note to clear."
    assert audits.total == 2, "Expected both invalidations to be audited."


@pytest.mark.asyncio
async def test_update_keeps_invalidation(
    session_factory: async_sessionmaker[AsyncSession],
    contributor: User,
) -> None:
    """Editing a disputed movie does not clear its invalidation."""
    movie = await _create(session_factory, contributor)
    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        await invalidate_movie(
            uow, film_id=movie.id, user_id=contributor.id, note="Duplicate entry"
        )

    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        updated = await update_movie(
            uow,
            film_id=movie.id,
            user_id=contributor.id,
            patch=FilmPatch(descriptions="Los Angeles crime saga."),
        )

    assert updated.invalidation == "Duplicate entry", "Expected the note to stay."


@pytest.mark.asyncio
async def test_missing_movie_is_not_found(
    session_factory: async_sessionmaker[AsyncSession],
    contributor: User,
) -> None:
    """Unknown identifiers raise NotFoundError on read and write."""
    missing = uuid.uuid4()

    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        with pytest.raises(NotFoundError):
            await get_movie(uow, film_id=missing)
        with pytest.raises(NotFoundError):
            await update_movie(
                uow,
                film_id=missing,
                user_id=contributor.id,
                patch=FilmPatch(title="Ghost"),
            )
        with pytest.raises(NotFoundError):
            await list_movie_audits(uow, film_id=missing, options=_ALL)


@pytest.mark.asyncio
async def test_unknown_contributor_is_not_found(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    """An unregistered contributor is a caller error and nothing is written."""
    stranger = uuid.uuid4()

    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        with pytest.raises(NotFoundError) as exc_info:
            await create_movie(uow, data=_HEAT, user_id=stranger)

    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        page = await list_movies(uow, options=_ALL)

    assert not isinstance(exc_info.value, StorageError), (
        "Expected an unknown contributor to stay out of the storage failure path."
    )
    assert exc_info.value.entity_id == str(stranger), (
        "Expected the error to name the unknown contributor."
    )
    assert page.total == 0, "Expected no movie to be stored."


@pytest.mark.asyncio
async def test_update_by_unknown_contributor_is_not_found(
    session_factory: async_sessionmaker[AsyncSession],
    contributor: User,
) -> None:
    """Updates by an unregistered user leave the movie and its history alone."""
    movie = await _create(session_factory, contributor)

    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        with pytest.raises(NotFoundError):
            await update_movie(
                uow,
                film_id=movie.id,
                user_id=uuid.uuid4(),
                patch=FilmPatch(title="Heat 2"),
            )

    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        stored = await get_movie(uow, film_id=movie.id)
        audits = await list_movie_audits(uow, film_id=movie.id, options=_ALL)

    assert stored == movie, "Expected the movie to be unchanged."
    assert audits.total == 0, "Expected no audit row for a rejected update."


@pytest.mark.asyncio
async def test_list_movies_pages_and_sorts(
    session_factory: async_sessionmaker[AsyncSession],
    contributor: User,
) -> None:
    """Pages partition the movies and respect the sort field."""
    titles = ["Alien", "Brazil", "Casablanca", "Dune", "Eraserhead"]
    for title in reversed(titles):
        await _create(
            session_factory,
            contributor,
            FilmCreateData(title=title, date_released=dt.date(1980, 1, 1)),
        )

    seen: list[str] = []
    async with SqlAlchemyUnitOfWork(session_factory) as uow:
        for offset in (0, 2, 4):
            page = await list_movies(
                uow,
                options=QueryOptions(offset=offset, limit=2, sort_field="title"),
            )
            assert page.total == len(titles), "Expected the total across pages."
            seen.extend(movie.title for movie in page.items)

    assert seen == titles, "Expected pages to partition the sorted movies."
