"""Process wiring for serving the catalogue API.

Reads :class:`~reelbase.config.Settings` from the environment, configures
femtologging, builds the async engine and session factory, and returns the
Falcon application. Serve it with any ASGI server that accepts a factory:

Examples
--------
>>> uvicorn --factory reelbase.api.runtime:create_runtime_app  # doctest: +SKIP
"""

from __future__ import annotations

import typing as typ

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from reelbase.catalogue.storage import SqlAlchemyUnitOfWork
from reelbase.config import load_settings
from reelbase.logging import configure_logging, get_logger, log_info, log_warning

from .app import create_app

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from falcon import asgi

    from reelbase.config import Settings

logger = get_logger(__name__)


def create_runtime_app(
    settings: Settings | None = None,
    *,
    environ: cabc.Mapping[str, str] | None = None,
) -> asgi.App:
    """Build the production application from settings or the environment.

    Raises
    ------
    RuntimeError
        If no database URL is configured.
    """
    resolved = settings or load_settings(environ)
    if not resolved.database_url:
        msg = "REELBASE_DATABASE_URL is not set."
        raise RuntimeError(msg)
    level, used_default = configure_logging(resolved.log_level)
    if used_default and resolved.log_level:
        log_warning(
            logger,
            "Unknown log level %r; using %s.",
            resolved.log_level,
            level,
        )

    engine = create_async_engine(resolved.database_url, pool_pre_ping=True)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    log_info(logger, "Catalogue API configured at log level %s.", level)
    return create_app(
        lambda: SqlAlchemyUnitOfWork(session_factory),
        settings=resolved,
    )
