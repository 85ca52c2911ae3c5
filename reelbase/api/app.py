"""Falcon ASGI application factory for the catalogue API."""

from __future__ import annotations

import typing as typ

from falcon import asgi

from reelbase.catalogue.query import QueryOptionsBuilder
from reelbase.config import Settings

from .helpers import header_user_id
from .resources import (
    EpisodeAuditsResource,
    EpisodeInvalidateResource,
    EpisodeResource,
    MovieAuditsResource,
    MovieInvalidateResource,
    MovieResource,
    MoviesResource,
    SeasonAuditsResource,
    SeasonEpisodesResource,
    SeasonInvalidateResource,
    SeriesAuditsResource,
    SeriesCollectionResource,
    SeriesEpisodesResource,
    SeriesInvalidateResource,
    SeriesResource,
    WatchlistEntryResource,
    WatchlistResource,
    WatchlistWatchedResource,
)
from .types import ApiContext

if typ.TYPE_CHECKING:
    from .types import Authenticator, UowFactory

_SEASON = "/series/{series_id}/seasons/{season_number}"
_EPISODE = f"{_SEASON}/episodes/{{episode_number}}"


def create_app(
    uow_factory: UowFactory,
    *,
    settings: Settings | None = None,
    authenticate: Authenticator | None = None,
) -> asgi.App:
    """Build the Falcon ASGI application for the catalogue.

    Parameters
    ----------
    uow_factory : UowFactory
        Factory returning a fresh unit of work per request.
    settings : Settings | None, optional
        Pagination bounds and validation thresholds. Defaults to
        ``Settings()``.
    authenticate : Authenticator | None, optional
        Resolves the requesting user from a request. Defaults to reading the
        ``X-User-Id`` header.

    Returns
    -------
    falcon.asgi.App
        Application with every catalogue route registered.
    """
    resolved = settings or Settings()
    context = ApiContext(
        uow_factory=uow_factory,
        query_builder=QueryOptionsBuilder(resolved.pagination),
        rules=resolved.validation,
        authenticate=authenticate or header_user_id,
    )
    app = asgi.App()

    app.add_route("/movies", MoviesResource(context))
    app.add_route("/movies/{film_id}", MovieResource(context))
    app.add_route("/movies/{film_id}/invalidate", MovieInvalidateResource(context))
    app.add_route("/movies/{film_id}/audits", MovieAuditsResource(context))

    app.add_route("/series", SeriesCollectionResource(context))
    app.add_route("/series/{series_id}", SeriesResource(context))
    app.add_route(
        "/series/{series_id}/invalidate", SeriesInvalidateResource(context)
    )
    app.add_route("/series/{series_id}/audits", SeriesAuditsResource(context))
    app.add_route("/series/{series_id}/episodes", SeriesEpisodesResource(context))

    app.add_route(f"{_SEASON}/episodes", SeasonEpisodesResource(context))
    app.add_route(f"{_SEASON}/invalidate", SeasonInvalidateResource(context))
    app.add_route(f"{_SEASON}/audits", SeasonAuditsResource(context))

    app.add_route(_EPISODE, EpisodeResource(context))
    app.add_route(f"{_EPISODE}/invalidate", EpisodeInvalidateResource(context))
    app.add_route(f"{_EPISODE}/audits", EpisodeAuditsResource(context))

    app.add_route("/watchlist", WatchlistResource(context))
    app.add_route("/watchlist/{watch_id}", WatchlistEntryResource(context))
    app.add_route("/watchlist/{watch_id}/watched", WatchlistWatchedResource(context))

    return app
