"""Movie services.

Movies are films without an episode key. Every mutation here runs in the
caller's unit of work, locks the live row, snapshots it to ``films_audit`` and
commits once.

Examples
--------
>>> async with SqlAlchemyUnitOfWork(session_factory) as uow:
...     movie = await create_movie(uow, data=data, user_id=user_id)
"""

from __future__ import annotations

import typing as typ
import uuid

from reelbase.catalogue.domain import Film
from reelbase.catalogue.payloads import normalise_invalidation_note
from reelbase.logging import get_logger, log_info

from ._versioning import (
    DEFAULT_RULES,
    apply_mutation,
    film_store,
    require_contributor,
    require_found,
    utc_now,
)

if typ.TYPE_CHECKING:
    from reelbase.catalogue.domain import FilmAudit
    from reelbase.catalogue.payloads import FilmCreateData, FilmPatch
    from reelbase.catalogue.ports import CatalogueUnitOfWork
    from reelbase.catalogue.query import Page, QueryOptions
    from reelbase.config import ValidationRules

logger = get_logger(__name__)

_LABEL = "Movie"


async def create_movie(
    uow: CatalogueUnitOfWork,
    *,
    data: FilmCreateData,
    user_id: uuid.UUID,
    rules: ValidationRules = DEFAULT_RULES,
) -> Film:
    """Create a movie with an empty audit history.

    Parameters
    ----------
    uow : CatalogueUnitOfWork
        Unit-of-work providing repositories and transactional boundaries.
    data : FilmCreateData
        Movie fields.
    user_id : uuid.UUID
        Contributor of the first version.
    rules : ValidationRules, optional
        Validation thresholds.

    Returns
    -------
    Film
        The stored movie.

    Raises
    ------
    ValidationError
        If any field breaks the configured thresholds.
    NotFoundError
        If ``user_id`` is not a registered user.
    """
    data.validate(rules.film)
    await require_contributor(uow, user_id)
    movie = Film(
        id=uuid.uuid4(),
        title=data.title,
        descriptions=data.descriptions,
        date_released=data.date_released,
        duration=data.duration,
        episode=None,
        invalidation=None,
        poster=data.poster,
        contributed_by=user_id,
        contributed_at=utc_now(),
    )
    await uow.films.add(movie)
    await uow.commit()
    log_info(logger, "Created movie %s by %s.", movie.id, user_id)
    return movie


async def get_movie(uow: CatalogueUnitOfWork, *, film_id: uuid.UUID) -> Film:
    """Fetch the live version of a movie.

    Raises
    ------
    NotFoundError
        If no movie has this identifier.
    """
    movie = await uow.films.get_movie(film_id)
    return require_found(movie, f"Movie {film_id} not found.", film_id)


async def _mutate_movie(
    uow: CatalogueUnitOfWork,
    *,
    film_id: uuid.UUID,
    user_id: uuid.UUID,
    changes: dict[str, object],
) -> Film:
    await require_contributor(uow, user_id)
    current = require_found(
        await uow.films.get_movie(film_id, for_update=True),
        f"Movie {film_id} not found.",
        film_id,
    )
    updated = await apply_mutation(
        current,
        film_store(uow, _LABEL),
        user_id=user_id,
        changes=changes,
    )
    await uow.commit()
    return updated


async def update_movie(
    uow: CatalogueUnitOfWork,
    *,
    film_id: uuid.UUID,
    user_id: uuid.UUID,
    patch: FilmPatch,
    rules: ValidationRules = DEFAULT_RULES,
) -> Film:
    """Apply a partial update to a movie.

    The previous version is appended to the audit trail. Fields absent from
    ``patch`` keep their value and the invalidation note is left untouched.

    Raises
    ------
    ValidationError
        If a present field breaks the configured thresholds.
    NotFoundError
        If no movie has this identifier or ``user_id`` is unknown.
    """
    patch.validate(rules.film)
    updated = await _mutate_movie(
        uow, film_id=film_id, user_id=user_id, changes=patch.changes()
    )
    log_info(logger, "Updated movie %s by %s.", film_id, user_id)
    return updated


async def invalidate_movie(
    uow: CatalogueUnitOfWork,
    *,
    film_id: uuid.UUID,
    user_id: uuid.UUID,
    note: str | None,
    rules: ValidationRules = DEFAULT_RULES,
) -> Film:
    """Mark a movie as disputed, or clear the mark with an empty note.

    Only ``invalidation`` and the contribution stamp change; the previous
    version is appended to the audit trail first.

    Raises
    ------
    ValidationError
        If a non-empty note breaks the configured length bounds.
    NotFoundError
        If no movie has this identifier or ``user_id`` is unknown.
    """
    normalised = normalise_invalidation_note(note, rules.invalidation)
    updated = await _mutate_movie(
        uow,
        film_id=film_id,
        user_id=user_id,
        changes={"invalidation": normalised},
    )
    log_info(logger, "Invalidated movie %s by %s.", film_id, user_id)
    return updated


async def list_movies(uow: CatalogueUnitOfWork, *, options: QueryOptions) -> Page[Film]:
    """Return one page of movies and the total number of movies."""
    return await uow.films.list_movies(options)


async def list_movie_audits(
    uow: CatalogueUnitOfWork,
    *,
    film_id: uuid.UUID,
    options: QueryOptions,
) -> Page[FilmAudit]:
    """Return one page of a movie's historical versions.

    Raises
    ------
    NotFoundError
        If no movie has this identifier.
    """
    await get_movie(uow, film_id=film_id)
    return await uow.film_audits.list_for_film(film_id, options)
