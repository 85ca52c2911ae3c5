"""Catalogue service entry points.

Every function takes a :class:`~reelbase.catalogue.ports.CatalogueUnitOfWork`
as its first argument and keyword-only inputs after it. Mutations commit the
unit of work once; reads never commit.

Examples
--------
>>> async with SqlAlchemyUnitOfWork(session_factory) as uow:
...     movie = await create_movie(uow, data=data, user_id=user_id)
...     page = await list_movie_audits(uow, film_id=movie.id, options=options)
"""

from ._versioning import DEFAULT_RULES, next_contribution_time
from .episodes import (
    create_episode,
    get_episode,
    invalidate_all_by_season,
    invalidate_episode,
    list_episode_audits,
    list_episodes_by_season,
    list_episodes_by_series,
    list_season_audits,
    put_all_by_season,
    put_episode,
    update_episode,
)
from .movies import (
    create_movie,
    get_movie,
    invalidate_movie,
    list_movie_audits,
    list_movies,
    update_movie,
)
from .series import (
    create_series,
    get_series,
    invalidate_series,
    list_series,
    list_series_audits,
    update_series,
)
from .users import create_user, get_user
from .watchlist import (
    add_to_watchlist,
    list_watchlist,
    mark_watched,
    remove_from_watchlist,
)

__all__: list[str] = [
    "DEFAULT_RULES",
    "add_to_watchlist",
    "create_episode",
    "create_movie",
    "create_series",
    "create_user",
    "get_episode",
    "get_movie",
    "get_series",
    "get_user",
    "invalidate_all_by_season",
    "invalidate_episode",
    "invalidate_movie",
    "invalidate_series",
    "list_episode_audits",
    "list_episodes_by_season",
    "list_episodes_by_series",
    "list_movie_audits",
    "list_movies",
    "list_season_audits",
    "list_series",
    "list_series_audits",
    "list_watchlist",
    "mark_watched",
    "next_contribution_time",
    "put_all_by_season",
    "put_episode",
    "remove_from_watchlist",
    "update_episode",
    "update_movie",
    "update_series",
]
