"""SQLAlchemy persistence adapters for the catalogue.

This package provides the SQLAlchemy models, repositories, and unit-of-work
implementation used by catalogue services. It keeps persistence logic isolated
from the domain layer while exposing a port-oriented API.

Examples
--------
Use the unit-of-work to fetch a series:

>>> async with SqlAlchemyUnitOfWork(session_factory) as uow:
...     series = await uow.series.get(series_id)
"""

from .alembic_helpers import alembic_config, apply_migrations, current_revision
from .migration_check import detect_schema_drift
from .models import (
    Base,
    FilmAuditRecord,
    FilmRecord,
    SeriesAuditRecord,
    SeriesRecord,
    UserRecord,
    WatchfilmRecord,
)
from .repositories import (
    SqlAlchemyFilmAuditRepository,
    SqlAlchemyFilmRepository,
    SqlAlchemySeriesAuditRepository,
    SqlAlchemySeriesRepository,
    SqlAlchemyUserRepository,
    SqlAlchemyWatchlistRepository,
)
from .uow import SqlAlchemyUnitOfWork

__all__ = (
    "Base",
    "FilmAuditRecord",
    "FilmRecord",
    "SeriesAuditRecord",
    "SeriesRecord",
    "SqlAlchemyFilmAuditRepository",
    "SqlAlchemyFilmRepository",
    "SqlAlchemySeriesAuditRepository",
    "SqlAlchemySeriesRepository",
    "SqlAlchemyUnitOfWork",
    "SqlAlchemyUserRepository",
    "SqlAlchemyWatchlistRepository",
    "UserRecord",
    "WatchfilmRecord",
    "alembic_config",
    "apply_migrations",
    "current_revision",
    "detect_schema_drift",
)
