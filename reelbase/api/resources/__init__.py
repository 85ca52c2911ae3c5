"""Falcon resources for catalogue endpoints.

This package exposes route adapter classes that translate Falcon request and
response handling into calls to catalogue services.

Utilities provided
------------------
- Movie resources: ``MoviesResource``, ``MovieResource``,
  ``MovieInvalidateResource``, ``MovieAuditsResource``
- Series resources: ``SeriesCollectionResource``, ``SeriesResource``,
  ``SeriesInvalidateResource``, ``SeriesAuditsResource``
- Episode and season resources: ``SeriesEpisodesResource``,
  ``SeasonEpisodesResource``, ``SeasonInvalidateResource``,
  ``SeasonAuditsResource``, ``EpisodeResource``,
  ``EpisodeInvalidateResource``, ``EpisodeAuditsResource``
- Watchlist resources: ``WatchlistResource``, ``WatchlistEntryResource``,
  ``WatchlistWatchedResource``

Examples
--------
>>> from reelbase.api.resources import MoviesResource
>>> app.add_route("/movies", MoviesResource(context))
"""

from .episodes import (
    EpisodeAuditsResource,
    EpisodeInvalidateResource,
    EpisodeResource,
    SeasonAuditsResource,
    SeasonEpisodesResource,
    SeasonInvalidateResource,
    SeriesEpisodesResource,
)
from .movies import (
    MovieAuditsResource,
    MovieInvalidateResource,
    MovieResource,
    MoviesResource,
)
from .series import (
    SeriesAuditsResource,
    SeriesCollectionResource,
    SeriesInvalidateResource,
    SeriesResource,
)
from .watchlist import (
    WatchlistEntryResource,
    WatchlistResource,
    WatchlistWatchedResource,
)

__all__ = [
    "EpisodeAuditsResource",
    "EpisodeInvalidateResource",
    "EpisodeResource",
    "MovieAuditsResource",
    "MovieInvalidateResource",
    "MovieResource",
    "MoviesResource",
    "SeasonAuditsResource",
    "SeasonEpisodesResource",
    "SeasonInvalidateResource",
    "SeriesAuditsResource",
    "SeriesCollectionResource",
    "SeriesEpisodesResource",
    "SeriesInvalidateResource",
    "SeriesResource",
    "WatchlistEntryResource",
    "WatchlistResource",
    "WatchlistWatchedResource",
]
