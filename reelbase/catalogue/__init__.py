"""Versioned film and series catalogue.

This package exposes the catalogue domain model, the payloads accepted by the
mutation services, the query options builder and the error taxonomy. Storage
adapters live in :mod:`reelbase.catalogue.storage` and service entry points in
:mod:`reelbase.catalogue.services`.

Examples
--------
>>> key = EpisodeKey(series_id, season_number=1, episode_number=1)
>>> options = QueryOptionsBuilder(PaginationSettings()).build(QueryParams())
"""

from .columns import COLUMN_REGISTRY, ColumnRegistry, ColumnRegistryError, Entity
from .domain import (
    EpisodeKey,
    Film,
    FilmAudit,
    FilmKind,
    Series,
    SeriesAudit,
    User,
    Watchfilm,
    WatchlistItem,
)
from .errors import (
    CatalogueError,
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from .payloads import (
    FilmCreateData,
    FilmPatch,
    SeriesCreateData,
    SeriesPatch,
    UserCreateData,
)
from .query import (
    Page,
    QueryDefaults,
    QueryOptions,
    QueryOptionsBuilder,
    QueryParams,
    SortOrder,
    WatchlistFilter,
)

__all__: list[str] = [
    "COLUMN_REGISTRY",
    "CatalogueError",
    "ColumnRegistry",
    "ColumnRegistryError",
    "ConflictError",
    "Entity",
    "EpisodeKey",
    "Film",
    "FilmAudit",
    "FilmCreateData",
    "FilmKind",
    "FilmPatch",
    "NotFoundError",
    "Page",
    "QueryDefaults",
    "QueryOptions",
    "QueryOptionsBuilder",
    "QueryParams",
    "Series",
    "SeriesAudit",
    "SeriesCreateData",
    "SeriesPatch",
    "SortOrder",
    "StorageError",
    "User",
    "UserCreateData",
    "ValidationError",
    "Watchfilm",
    "WatchlistFilter",
    "WatchlistItem",
]
