"""Run the catalogue's Alembic migrations from async code.

Tests and the drift check build the schema by upgrading to head, never through
``Base.metadata.create_all``.

Examples
--------
Apply all migrations to an async engine:

>>> await apply_migrations(engine)
>>> await current_revision(engine)
'20261019_000001'
"""

import pathlib
import typing as typ

from alembic.config import Config
from alembic.migration import MigrationContext

from alembic import command

if typ.TYPE_CHECKING:
    from sqlalchemy.engine import Connection
    from sqlalchemy.ext.asyncio import AsyncEngine

_REPO_ROOT = pathlib.Path(__file__).resolve().parents[3]


def alembic_config(database_url: str) -> Config:
    """Build an Alembic ``Config`` for the repository's migration scripts.

    ``%`` in ``database_url`` is doubled because Alembic stores options in a
    ``ConfigParser``.
    """
    cfg = Config(str(_REPO_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(_REPO_ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return cfg


def _upgrade(connection: Connection, cfg: Config, revision: str) -> None:
    cfg.attributes["connection"] = connection
    command.upgrade(cfg, revision)


def _read_revision(connection: Connection) -> str | None:
    return MigrationContext.configure(connection).get_current_revision()


async def apply_migrations(engine: AsyncEngine, revision: str = "head") -> None:
    """Upgrade the database behind ``engine`` to ``revision``.

    Parameters
    ----------
    engine : AsyncEngine
        Engine bound to the database to migrate.
    revision : str, default "head"
        Alembic revision identifier to upgrade to.
    """
    cfg = alembic_config(engine.url.render_as_string(hide_password=False))
    async with engine.begin() as connection:
        await connection.run_sync(_upgrade, cfg, revision)


async def current_revision(engine: AsyncEngine) -> str | None:
    """Return the revision stamped in ``alembic_version``, if any."""
    async with engine.connect() as connection:
        return await connection.run_sync(_read_revision)
