"""Create the catalogue schema for versioned films, series and watchlists.

This migration defines the users table, the live ``films`` and ``serieses``
tables with their append-only ``_audit`` twins, and the ``watchfilms`` join
table. Movies and episodes share ``films``; the episode triple is either fully
set or fully unset.

Examples
--------
Apply the migration with Alembic:

>>> alembic upgrade head
"""

from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision = "20261019_000001"
down_revision = None
branch_labels = None
depends_on = None

_EPISODE_TRIPLE_CHECK = (
    "(series_id IS NULL AND season_number IS NULL AND episode_number IS NULL) "
    "OR (series_id IS NOT NULL AND season_number IS NOT NULL "
    "AND episode_number IS NOT NULL)"
)


def _contribution_columns(*, audit: bool) -> list[sa.Column]:
    """Create the invalidation and contributor columns shared by versioned tables."""
    return [
        sa.Column("invalidation", sa.Text(), nullable=True),
        sa.Column(
            "contributed_by",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column(
            "contributed_at",
            sa.DateTime(timezone=True),
            nullable=False,
            primary_key=audit,
        ),
    ]


def _create_users_table() -> None:
    """Create the users table."""
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(254), nullable=False, unique=True),
        sa.Column("hashed_password", sa.Text(), nullable=False),
        sa.Column("first_name", sa.String(64), nullable=True),
        sa.Column("last_name", sa.String(64), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("birthdate", sa.Date(), nullable=True),
        sa.Column("avatar", sa.Text(), nullable=True),
        sa.Column(
            "jointime",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )


def _create_series_tables() -> None:
    """Create the serieses and serieses_audit tables."""
    op.create_table(
        "serieses",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("descriptions", sa.Text(), nullable=True),
        sa.Column("date_started", sa.Date(), nullable=False),
        sa.Column("date_ended", sa.Date(), nullable=True),
        sa.Column("poster", sa.Text(), nullable=True),
        *_contribution_columns(audit=False),
        sa.CheckConstraint(
            "date_ended IS NULL OR date_ended >= date_started",
            name="ck_serieses_date_range",
        ),
    )
    op.create_table(
        "serieses_audit",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("serieses.id"),
            primary_key=True,
        ),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("descriptions", sa.Text(), nullable=True),
        sa.Column("date_started", sa.Date(), nullable=False),
        sa.Column("date_ended", sa.Date(), nullable=True),
        *_contribution_columns(audit=True),
    )


def _film_columns() -> list[sa.Column]:
    """Create the descriptive and episode columns shared by film tables."""
    return [
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("descriptions", sa.Text(), nullable=True),
        sa.Column("date_released", sa.Date(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column(
            "series_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("serieses.id"),
            nullable=True,
        ),
        sa.Column("season_number", sa.Integer(), nullable=True),
        sa.Column("episode_number", sa.Integer(), nullable=True),
    ]


def _create_film_tables() -> None:
    """Create the films and films_audit tables."""
    op.create_table(
        "films",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        *_film_columns(),
        sa.Column("poster", sa.Text(), nullable=True),
        *_contribution_columns(audit=False),
        sa.CheckConstraint(_EPISODE_TRIPLE_CHECK, name="ck_films_episode_triple"),
        sa.UniqueConstraint(
            "series_id",
            "season_number",
            "episode_number",
            name="uq_films_episode_position",
        ),
    )
    op.create_table(
        "films_audit",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("films.id"),
            primary_key=True,
        ),
        *_film_columns(),
        *_contribution_columns(audit=True),
        sa.CheckConstraint(
            _EPISODE_TRIPLE_CHECK,
            name="ck_films_audit_episode_triple",
        ),
    )
    op.create_index(
        "ix_films_audit_season",
        "films_audit",
        ["series_id", "season_number"],
    )


def _create_watchfilms_table() -> None:
    """Create the watchfilms table."""
    op.create_table(
        "watchfilms",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column(
            "film_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("films.id"),
            nullable=False,
        ),
        sa.Column("time_added", sa.DateTime(timezone=True), nullable=False),
        sa.Column("time_watched", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "film_id", name="uq_watchfilms_user_film"),
    )


def upgrade() -> None:
    """Apply schema changes."""
    _create_users_table()
    _create_series_tables()
    _create_film_tables()
    _create_watchfilms_table()


def downgrade() -> None:
    """Revert schema changes."""
    op.drop_table("watchfilms")
    op.drop_index("ix_films_audit_season", table_name="films_audit")
    op.drop_table("films_audit")
    op.drop_table("films")
    op.drop_table("serieses_audit")
    op.drop_table("serieses")
    op.drop_table("users")
