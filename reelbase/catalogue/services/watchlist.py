"""Watchlist services.

A watchlist row links a user to a film they intend to watch. Rows are private:
a row owned by another user is reported exactly like a missing one.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
import uuid

from reelbase.catalogue.domain import Watchfilm
from reelbase.catalogue.errors import NotFoundError
from reelbase.logging import get_logger, log_info

from ._versioning import require_contributor, require_found, utc_now

if typ.TYPE_CHECKING:
    from reelbase.catalogue.domain import WatchlistItem
    from reelbase.catalogue.ports import CatalogueUnitOfWork
    from reelbase.catalogue.query import Page, QueryOptions

logger = get_logger(__name__)


def _missing_row(watch_id: uuid.UUID) -> str:
    return f"Watchlist entry {watch_id} not found."


async def add_to_watchlist(
    uow: CatalogueUnitOfWork,
    *,
    user_id: uuid.UUID,
    film_id: uuid.UUID,
) -> Watchfilm:
    """Add a movie or an episode to the user's watchlist.

    Adding a film that is already listed returns the existing row unchanged.

    Raises
    ------
    NotFoundError
        If the film does not exist or ``user_id`` is not a registered user.
    """
    await require_contributor(uow, user_id)
    film = await uow.films.get(film_id)
    require_found(film, f"Film {film_id} not found.", film_id)
    existing = await uow.watchlist.find_for_film(user_id, film_id)
    if existing is not None:
        return existing
    watchfilm = Watchfilm(
        id=uuid.uuid4(),
        user_id=user_id,
        film_id=film_id,
        time_added=utc_now(),
        time_watched=None,
    )
    await uow.watchlist.add(watchfilm)
    await uow.commit()
    log_info(logger, "Added film %s to watchlist of %s.", film_id, user_id)
    return watchfilm


async def remove_from_watchlist(
    uow: CatalogueUnitOfWork,
    *,
    user_id: uuid.UUID,
    watch_id: uuid.UUID,
) -> None:
    """Delete a watchlist row owned by the user.

    Raises
    ------
    NotFoundError
        If the row does not exist or belongs to another user.
    """
    if not await uow.watchlist.delete(watch_id, user_id):
        raise NotFoundError(_missing_row(watch_id), entity_id=str(watch_id))
    await uow.commit()
    log_info(logger, "Removed watchlist entry %s of %s.", watch_id, user_id)


async def mark_watched(
    uow: CatalogueUnitOfWork,
    *,
    user_id: uuid.UUID,
    watch_id: uuid.UUID,
) -> Watchfilm:
    """Record that the user watched a listed film.

    A row that is already watched keeps its original ``time_watched``.

    Raises
    ------
    NotFoundError
        If the row does not exist or belongs to another user.
    """
    current = require_found(
        await uow.watchlist.get(watch_id, user_id, for_update=True),
        _missing_row(watch_id),
        watch_id,
    )
    if current.watched:
        return current
    time_watched = max(utc_now(), current.time_added)
    await uow.watchlist.set_watched(watch_id, user_id, time_watched)
    await uow.commit()
    log_info(logger, "Marked watchlist entry %s of %s watched.", watch_id, user_id)
    return dc.replace(current, time_watched=time_watched)


async def list_watchlist(
    uow: CatalogueUnitOfWork,
    *,
    user_id: uuid.UUID,
    options: QueryOptions,
) -> Page[WatchlistItem]:
    """Return one page of the user's watchlist with the listed films."""
    return await uow.watchlist.list_for_user(user_id, options)
