"""Tests for the catalogue migrations and the schema drift CLI.

Examples
--------
Run the migration tests:

>>> pytest tests/test_migration_check.py -v
"""

from __future__ import annotations

import os
import typing as typ

import pytest
import sqlalchemy as sa

from reelbase.catalogue.columns import Entity
from reelbase.catalogue.storage import apply_migrations, current_revision
from reelbase.catalogue.storage.migration_check import EXIT_CLEAN, check_migrations_cli

if typ.TYPE_CHECKING:
    from sqlalchemy.engine import Connection
    from sqlalchemy.ext.asyncio import AsyncEngine


def _table_names(connection: Connection) -> set[str]:
    return set(sa.inspect(connection).get_table_names())


@pytest.mark.asyncio
async def test_upgrade_stamps_head_revision(pglite_engine: AsyncEngine) -> None:
    """Upgrading stamps the head revision on a previously empty database."""
    before = await current_revision(pglite_engine)
    await apply_migrations(pglite_engine)
    after = await current_revision(pglite_engine)

    assert before is None, "Expected an unmigrated database to have no revision."
    assert after == "20261019_000001", "Expected the catalogue schema revision."


@pytest.mark.asyncio
async def test_migrations_create_every_catalogue_table(
    migrated_engine: AsyncEngine,
) -> None:
    """Upgrading to head creates exactly the registry's entities."""
    async with migrated_engine.connect() as connection:
        tables = await connection.run_sync(_table_names)

    assert tables - {"alembic_version"} == {entity.value for entity in Entity}, (
        "Expected one table per catalogue entity."
    )


@pytest.mark.asyncio
async def test_audit_primary_key_includes_contribution_time(
    migrated_engine: AsyncEngine,
) -> None:
    """Audit tables key versions by identifier and contribution time."""

    def _audit_keys(connection: Connection) -> dict[str, list[str]]:
        inspector = sa.inspect(connection)
        return {
            table: inspector.get_pk_constraint(table)["constrained_columns"]
            for table in (Entity.FILMS_AUDIT.value, Entity.SERIESES_AUDIT.value)
        }

    async with migrated_engine.connect() as connection:
        keys = await connection.run_sync(_audit_keys)

    assert all(
        sorted(columns) == ["contributed_at", "id"] for columns in keys.values()
    ), f"Expected (id, contributed_at) audit keys, found: {keys}"


@pytest.mark.asyncio
async def test_check_migrations_cli_reports_clean_schema() -> None:
    """The drift CLI exits cleanly when models match the migrations."""
    if os.getenv("REELBASE_TEST_DB", "pglite").lower() == "sqlite":
        pytest.skip("REELBASE_TEST_DB=sqlite disables py-pglite-backed tests.")

    assert await check_migrations_cli() == EXIT_CLEAN, "Expected no schema drift."
