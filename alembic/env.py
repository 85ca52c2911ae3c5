"""Alembic environment for the reelbase catalogue schema.

Migrations normally run on a connection handed over by
``reelbase.catalogue.storage.alembic_helpers``. Invoked from the ``alembic``
command line, the environment resolves the database URL through
``reelbase.config`` so the CLI and the service read the same variables.
"""

from __future__ import annotations

import asyncio
import typing as typ
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import AsyncConnection, async_engine_from_config

from alembic import context
from reelbase.catalogue.storage import Base
from reelbase.config import load_settings

if typ.TYPE_CHECKING:
    from sqlalchemy.engine import Connection

config = context.config

if config.config_file_name:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    """Return the configured URL, preferring the environment over the ini."""
    url = load_settings().database_url or config.get_main_option("sqlalchemy.url")
    if not url:
        msg = "REELBASE_DATABASE_URL is not set and sqlalchemy.url is empty."
        raise RuntimeError(msg)
    return url


def _migrate(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    """Emit the migration SQL without connecting."""
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


async def _migrate_with_new_engine() -> None:
    section = config.get_section(config.config_ini_section) or {}
    section["sqlalchemy.url"] = _database_url()
    engine = async_engine_from_config(
        section, prefix="sqlalchemy.", poolclass=pool.NullPool
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


def run_migrations_online() -> None:
    """Migrate over a supplied connection, or open one from the settings."""
    supplied = config.attributes.get("connection")
    if supplied is None:
        asyncio.run(_migrate_with_new_engine())
    elif isinstance(supplied, AsyncConnection):
        asyncio.run(supplied.run_sync(_migrate))
    else:
        _migrate(supplied)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
