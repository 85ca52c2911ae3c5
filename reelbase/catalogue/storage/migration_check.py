"""Catalogue schema drift check.

Brings an ephemeral py-pglite database to the head revision and asks Alembic's
autogenerate comparison whether ``Base.metadata`` still matches it. A model
edited without a migration shows up as a difference.

Examples
--------
Check the schema from CI:

>>> python -m reelbase.catalogue.storage.migration_check
"""

from __future__ import annotations

import asyncio
import contextlib
import importlib.util
import pathlib
import sys
import tempfile
import typing as typ

from alembic.autogenerate import compare_metadata
from alembic.migration import MigrationContext

from reelbase.logging import get_logger, log_error, log_info

from .alembic_helpers import apply_migrations
from .models import Base

if typ.TYPE_CHECKING:
    from sqlalchemy.engine import Connection
    from sqlalchemy.ext.asyncio import AsyncEngine

_logger = get_logger(__name__)

EXIT_CLEAN = 0
EXIT_DRIFT = 1
EXIT_UNAVAILABLE = 2


def _diff_against_models(connection: Connection) -> list[tuple[object, ...]]:
    migration_context = MigrationContext.configure(connection)
    diffs = compare_metadata(migration_context, Base.metadata)
    return typ.cast("list[tuple[object, ...]]", diffs)


async def detect_schema_drift(engine: AsyncEngine) -> list[tuple[object, ...]]:
    """Return Alembic's differences between ``engine``'s schema and the models.

    ``engine`` must already be migrated; an empty list means the catalogue
    models and migrations agree.
    """
    async with engine.connect() as connection:
        return await connection.run_sync(_diff_against_models)


@contextlib.asynccontextmanager
async def _ephemeral_engine() -> typ.AsyncIterator[AsyncEngine]:
    from py_pglite import PGliteConfig, PGliteManager
    from sqlalchemy.ext.asyncio import create_async_engine

    work_dir = pathlib.Path(tempfile.mkdtemp(prefix="reelbase-drift-"))
    pglite = PGliteConfig(work_dir=work_dir)
    with PGliteManager(pglite):
        engine = create_async_engine(pglite.get_connection_string())
        try:
            yield engine
        finally:
            await engine.dispose()


async def check_migrations_cli() -> int:
    """Run the drift check and return a process exit code.

    Returns
    -------
    int
        ``EXIT_CLEAN`` without drift, ``EXIT_DRIFT`` with drift, and
        ``EXIT_UNAVAILABLE`` when py-pglite is not installed.
    """
    if importlib.util.find_spec("py_pglite") is None:
        log_error(_logger, "py-pglite is required for the schema drift check.")
        return EXIT_UNAVAILABLE

    async with _ephemeral_engine() as engine:
        await apply_migrations(engine)
        diffs = await detect_schema_drift(engine)

    if not diffs:
        log_info(_logger, "Catalogue models match the migrations.")
        return EXIT_CLEAN
    log_error(_logger, "Catalogue schema drift: %s difference(s).", len(diffs))
    for diff in diffs:
        log_error(_logger, "drift: %s", diff)
    return EXIT_DRIFT


if __name__ == "__main__":
    sys.exit(asyncio.run(check_migrations_cli()))
