"""Episode services.

Episodes are films addressed by an :class:`~reelbase.catalogue.domain.EpisodeKey`
(series, season number, episode number). Besides the single-episode operations
this module provides the whole-season operations: replacing a season's
numbered episode list and invalidating every episode of a season, each in one
transaction with one audit row per touched episode.

Examples
--------
>>> key = EpisodeKey(series_id, season_number=1, episode_number=3)
>>> async with SqlAlchemyUnitOfWork(session_factory) as uow:
...     episode = await update_episode(
...         uow, key=key, user_id=user_id, patch=FilmPatch(title="Pilot")
...     )
"""

from __future__ import annotations

import typing as typ
import uuid

from reelbase.catalogue.domain import EpisodeKey, Film
from reelbase.catalogue.errors import (
    NotFoundError,
    ValidationError,
    ValidationErrors,
)
from reelbase.catalogue.payloads import (
    normalise_invalidation_note,
    validate_episode_key,
)
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
    import collections.abc as cabc

    from reelbase.catalogue.domain import FilmAudit
    from reelbase.catalogue.payloads import FilmCreateData, FilmPatch
    from reelbase.catalogue.ports import CatalogueUnitOfWork
    from reelbase.catalogue.query import Page, QueryOptions
    from reelbase.config import ValidationRules

logger = get_logger(__name__)

_LABEL = "Episode"


def _describe(key: EpisodeKey) -> str:
    return (
        f"Episode S{key.season_number:02d}E{key.episode_number:02d} "
        f"of series {key.series_id}"
    )


def _new_episode(key: EpisodeKey, data: FilmCreateData, user_id: uuid.UUID) -> Film:
    return Film(
        id=uuid.uuid4(),
        title=data.title,
        descriptions=data.descriptions,
        date_released=data.date_released,
        duration=data.duration,
        episode=key,
        invalidation=None,
        poster=data.poster,
        contributed_by=user_id,
        contributed_at=utc_now(),
    )


async def _require_series(uow: CatalogueUnitOfWork, series_id: uuid.UUID) -> None:
    series = await uow.series.get(series_id)
    require_found(series, f"Series {series_id} not found.", series_id)


async def _lock_episode(uow: CatalogueUnitOfWork, key: EpisodeKey) -> Film:
    return require_found(
        await uow.films.get_episode(key, for_update=True),
        f"{_describe(key)} not found.",
        key.series_id,
    )


async def create_episode(
    uow: CatalogueUnitOfWork,
    *,
    key: EpisodeKey,
    data: FilmCreateData,
    user_id: uuid.UUID,
    rules: ValidationRules = DEFAULT_RULES,
) -> Film:
    """Create an episode at a free position of an existing series.

    Parameters
    ----------
    uow : CatalogueUnitOfWork
        Unit-of-work providing repositories and transactional boundaries.
    key : EpisodeKey
        Position of the new episode.
    data : FilmCreateData
        Episode fields.
    user_id : uuid.UUID
        Contributor of the first version.
    rules : ValidationRules, optional
        Validation thresholds.

    Returns
    -------
    Film
        The stored episode.

    Raises
    ------
    ValidationError
        If a field breaks the configured thresholds or the position is taken.
    NotFoundError
        If the series does not exist or ``user_id`` is unknown.
    """
    data.validate(rules.film)
    validate_episode_key(key, rules.film)
    await _require_series(uow, key.series_id)
    await require_contributor(uow, user_id)
    if await uow.films.get_episode(key) is not None:
        raise ValidationError(
            {"episode_number": f"{_describe(key)} already exists"},
            entity_id=str(key.series_id),
        )
    episode = _new_episode(key, data, user_id)
    await uow.films.add(episode)
    await uow.commit()
    log_info(logger, "Created episode %s (%s) by %s.", episode.id, key, user_id)
    return episode


async def _put_one(
    uow: CatalogueUnitOfWork,
    *,
    key: EpisodeKey,
    data: FilmCreateData,
    user_id: uuid.UUID,
    current: Film | None,
) -> Film:
    """Replace the episode at ``key``, creating it when ``current`` is None."""
    if current is None:
        episode = _new_episode(key, data, user_id)
        await uow.films.add(episode)
        return episode
    return await apply_mutation(
        current,
        film_store(uow, _LABEL),
        user_id=user_id,
        changes=data.replacement(),
    )


async def put_episode(
    uow: CatalogueUnitOfWork,
    *,
    key: EpisodeKey,
    data: FilmCreateData,
    user_id: uuid.UUID,
    rules: ValidationRules = DEFAULT_RULES,
) -> Film:
    """Create the episode at ``key`` or replace the one already there.

    Replacing an existing episode appends its previous version to the audit
    trail like any other update.

    Raises
    ------
    ValidationError
        If a field breaks the configured thresholds.
    NotFoundError
        If the series does not exist or ``user_id`` is unknown.
    """
    data.validate(rules.film)
    validate_episode_key(key, rules.film)
    await _require_series(uow, key.series_id)
    await require_contributor(uow, user_id)
    current = await uow.films.get_episode(key, for_update=True)
    episode = await _put_one(
        uow, key=key, data=data, user_id=user_id, current=current
    )
    await uow.commit()
    log_info(logger, "Put episode %s (%s) by %s.", episode.id, key, user_id)
    return episode


async def get_episode(uow: CatalogueUnitOfWork, *, key: EpisodeKey) -> Film:
    """Fetch the live version of an episode.

    Raises
    ------
    NotFoundError
        If no episode is stored at ``key``.
    """
    episode = await uow.films.get_episode(key)
    return require_found(episode, f"{_describe(key)} not found.", key.series_id)


async def update_episode(
    uow: CatalogueUnitOfWork,
    *,
    key: EpisodeKey,
    user_id: uuid.UUID,
    patch: FilmPatch,
    rules: ValidationRules = DEFAULT_RULES,
) -> Film:
    """Apply a partial update to an episode.

    Raises
    ------
    ValidationError
        If a present field breaks the configured thresholds.
    NotFoundError
        If no episode is stored at ``key`` or ``user_id`` is unknown.
    """
    patch.validate(rules.film)
    await require_contributor(uow, user_id)
    current = await _lock_episode(uow, key)
    updated = await apply_mutation(
        current,
        film_store(uow, _LABEL),
        user_id=user_id,
        changes=patch.changes(),
    )
    await uow.commit()
    log_info(logger, "Updated episode %s by %s.", updated.id, user_id)
    return updated


async def invalidate_episode(
    uow: CatalogueUnitOfWork,
    *,
    key: EpisodeKey,
    user_id: uuid.UUID,
    note: str | None,
    rules: ValidationRules = DEFAULT_RULES,
) -> Film:
    """Mark an episode as disputed, or clear the mark with an empty note.

    Raises
    ------
    ValidationError
        If a non-empty note breaks the configured length bounds.
    NotFoundError
        If no episode is stored at ``key`` or ``user_id`` is unknown.
    """
    normalised = normalise_invalidation_note(note, rules.invalidation)
    await require_contributor(uow, user_id)
    current = await _lock_episode(uow, key)
    updated = await apply_mutation(
        current,
        film_store(uow, _LABEL),
        user_id=user_id,
        changes={"invalidation": normalised},
    )
    await uow.commit()
    log_info(logger, "Invalidated episode %s by %s.", updated.id, user_id)
    return updated


async def list_episode_audits(
    uow: CatalogueUnitOfWork,
    *,
    key: EpisodeKey,
    options: QueryOptions,
) -> Page[FilmAudit]:
    """Return one page of an episode's historical versions.

    Raises
    ------
    NotFoundError
        If no episode is stored at ``key``.
    """
    episode = await get_episode(uow, key=key)
    return await uow.film_audits.list_for_film(episode.id, options)


async def list_episodes_by_series(
    uow: CatalogueUnitOfWork,
    *,
    series_id: uuid.UUID,
    options: QueryOptions,
) -> Page[Film]:
    """Return one page of a series' episodes.

    Episodes are ordered by season number in the requested direction, then by
    episode number.

    Raises
    ------
    NotFoundError
        If the series does not exist.
    """
    await _require_series(uow, series_id)
    return await uow.films.list_by_series(series_id, options)


async def list_episodes_by_season(
    uow: CatalogueUnitOfWork,
    *,
    series_id: uuid.UUID,
    season_number: int,
    options: QueryOptions,
) -> Page[Film]:
    """Return one page of a season's episodes ordered by episode number.

    Raises
    ------
    NotFoundError
        If the series does not exist.
    """
    await _require_series(uow, series_id)
    return await uow.films.list_by_season(series_id, season_number, options)


async def list_season_audits(
    uow: CatalogueUnitOfWork,
    *,
    series_id: uuid.UUID,
    season_number: int,
    options: QueryOptions,
) -> Page[FilmAudit]:
    """Return one page of historical versions across a season's episodes.

    Raises
    ------
    NotFoundError
        If the series does not exist.
    """
    await _require_series(uow, series_id)
    return await uow.film_audits.list_for_season(series_id, season_number, options)


def _validate_season(
    episodes: cabc.Sequence[FilmCreateData],
    season_number: int,
    rules: ValidationRules,
) -> None:
    """Validate a whole-season payload, reporting every bad element at once."""
    errors = ValidationErrors()
    if season_number < 1 or season_number > rules.film.max_season_number:
        errors.add(
            "season_number",
            f"must be between 1 and {rules.film.max_season_number}",
        )
    if not episodes:
        errors.add("episodes", "must not be empty")
    elif len(episodes) > min(rules.max_batch_size, rules.film.max_episode_number):
        errors.add(
            "episodes",
            "must hold at most "
            f"{min(rules.max_batch_size, rules.film.max_episode_number)} items",
        )
    for index, data in enumerate(episodes):
        try:
            data.validate(rules.film)
        except ValidationError as exc:
            errors.merge(exc, prefix=f"episodes[{index}].")
    errors.raise_if_any()


async def put_all_by_season(  # noqa: PLR0913
    uow: CatalogueUnitOfWork,
    *,
    series_id: uuid.UUID,
    season_number: int,
    user_id: uuid.UUID,
    episodes: cabc.Sequence[FilmCreateData],
    rules: ValidationRules = DEFAULT_RULES,
) -> list[Film]:
    """Replace a season's numbered episode list.

    The first element becomes episode 1, the second episode 2 and so on. An
    episode already stored at a position is updated (and audited); a free
    position gets a new episode. Stored episodes numbered beyond the end of
    ``episodes`` are left as they are.

    Parameters
    ----------
    uow : CatalogueUnitOfWork
        Unit-of-work providing repositories and transactional boundaries.
    series_id : uuid.UUID
        Series owning the season.
    season_number : int
        Season to replace.
    user_id : uuid.UUID
        Contributor of every written version.
    episodes : collections.abc.Sequence[FilmCreateData]
        Episodes in broadcast order.
    rules : ValidationRules, optional
        Validation thresholds.

    Returns
    -------
    list[Film]
        The live episodes at positions ``1..len(episodes)``.

    Raises
    ------
    ValidationError
        If the season number, the list length or any element is invalid.
    NotFoundError
        If the series does not exist or ``user_id`` is unknown.
    """
    _validate_season(episodes, season_number, rules)
    await _require_series(uow, series_id)
    await require_contributor(uow, user_id)
    existing = {
        typ.cast("EpisodeKey", film.episode).episode_number: film
        for film in await uow.films.list_season_for_update(series_id, season_number)
    }
    written = [
        await _put_one(
            uow,
            key=EpisodeKey(series_id, season_number, position),
            data=data,
            user_id=user_id,
            current=existing.get(position),
        )
        for position, data in enumerate(episodes, start=1)
    ]
    await uow.commit()
    log_info(
        logger,
        "Put %d episodes of series %s season %d by %s.",
        len(written),
        series_id,
        season_number,
        user_id,
    )
    return written


async def invalidate_all_by_season(
    uow: CatalogueUnitOfWork,
    *,
    series_id: uuid.UUID,
    season_number: int,
    user_id: uuid.UUID,
    note: str | None,
    rules: ValidationRules = DEFAULT_RULES,
) -> list[Film]:
    """Invalidate every episode of a season, auditing each one.

    Raises
    ------
    ValidationError
        If a non-empty note breaks the configured length bounds.
    NotFoundError
        If the season has no episodes or ``user_id`` is unknown.
    """
    normalised = normalise_invalidation_note(note, rules.invalidation)
    await require_contributor(uow, user_id)
    current = await uow.films.list_season_for_update(series_id, season_number)
    if not current:
        msg = f"Season {season_number} of series {series_id} has no episodes."
        raise NotFoundError(msg, entity_id=str(series_id))
    store = film_store(uow, _LABEL)
    updated = [
        await apply_mutation(
            episode,
            store,
            user_id=user_id,
            changes={"invalidation": normalised},
        )
        for episode in current
    ]
    await uow.commit()
    log_info(
        logger,
        "Invalidated %d episodes of series %s season %d by %s.",
        len(updated),
        series_id,
        season_number,
        user_id,
    )
    return updated
