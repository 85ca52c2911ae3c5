"""Snapshot-before-overwrite helpers shared by the mutation services.

Every mutation of a live film or series row follows the same steps: take the
row as currently stored (already locked by the caller), append it unchanged to
the audit table, then overwrite the live row with the requested changes and a
fresh contribution stamp.
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import typing as typ

from reelbase.catalogue.errors import NotFoundError
from reelbase.config import ValidationRules
from reelbase.logging import get_logger, log_debug

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import uuid

    from reelbase.catalogue.domain import Film, FilmAudit, Series, SeriesAudit
    from reelbase.catalogue.ports import CatalogueUnitOfWork

logger = get_logger(__name__)

DEFAULT_RULES: typ.Final[ValidationRules] = ValidationRules()

_TIMESTAMP_RESOLUTION = dt.timedelta(microseconds=1)


class _Versioned[AuditT](typ.Protocol):
    """Live entity that can be snapshotted and re-stamped."""

    @property
    def id(self) -> uuid.UUID: ...

    @property
    def contributed_at(self) -> dt.datetime: ...

    def snapshot(self) -> AuditT: ...


@dc.dataclass(frozen=True, slots=True)
class VersionedStore[EntityT, AuditT]:
    """Repository callables used to persist one kind of versioned entity.

    ``label`` names the entity kind in log records.
    """

    label: str
    update: cabc.Callable[[EntityT], cabc.Awaitable[None]]
    add_audit: cabc.Callable[[AuditT], cabc.Awaitable[None]]


def film_store(uow: CatalogueUnitOfWork, label: str) -> VersionedStore[Film, FilmAudit]:
    """Return the store for movies or episodes."""
    return VersionedStore(
        label=label,
        update=uow.films.update,
        add_audit=uow.film_audits.add,
    )


def series_store(uow: CatalogueUnitOfWork) -> VersionedStore[Series, SeriesAudit]:
    """Return the store for series."""
    return VersionedStore(
        label="Series",
        update=uow.series.update,
        add_audit=uow.series_audits.add,
    )


def utc_now() -> dt.datetime:
    """Return the current time in UTC."""
    return dt.datetime.now(dt.UTC)


def next_contribution_time(
    previous: dt.datetime,
    now: dt.datetime | None = None,
) -> dt.datetime:
    """Return a contribution timestamp strictly later than ``previous``.

    Clock skew or two mutations within one microsecond would otherwise produce
    equal or decreasing stamps, and audit rows are keyed by them.
    """
    current = utc_now() if now is None else now
    if current > previous:
        return current
    return previous + _TIMESTAMP_RESOLUTION


def require_found[EntityT](
    entity: EntityT | None, message: str, entity_id: object
) -> EntityT:
    """Return ``entity`` or raise ``NotFoundError`` with ``message``."""
    if entity is None:
        raise NotFoundError(message, entity_id=str(entity_id))
    return entity


async def require_contributor(uow: CatalogueUnitOfWork, user_id: uuid.UUID) -> None:
    """Raise ``NotFoundError`` unless ``user_id`` names a registered user.

    Contributor and watchlist owner columns reference ``users``; checking first
    keeps an unknown user a caller error instead of a constraint violation.
    """
    if await uow.users.get(user_id) is None:
        msg = f"User {user_id} is not registered."
        raise NotFoundError(msg, entity_id=str(user_id))


async def apply_mutation[EntityT: _Versioned[typ.Any], AuditT](
    current: EntityT,
    store: VersionedStore[EntityT, AuditT],
    *,
    user_id: uuid.UUID,
    changes: cabc.Mapping[str, object],
) -> EntityT:
    """Audit ``current`` and overwrite it with ``changes``.

    Parameters
    ----------
    current : EntityT
        Live entity as stored, locked for update by the caller.
    store : VersionedStore[EntityT, AuditT]
        Repository callables for the entity kind.
    user_id : uuid.UUID
        Contributor of the new version.
    changes : collections.abc.Mapping[str, object]
        Field values to overwrite. Fields not named keep their value.

    Returns
    -------
    EntityT
        The new live version.
    """
    await store.add_audit(current.snapshot())
    updated = dc.replace(
        current,
        **changes,
        contributed_by=user_id,
        contributed_at=next_contribution_time(current.contributed_at),
    )
    await store.update(updated)
    log_debug(
        logger,
        "Audited %s %s version of %s before overwrite.",
        store.label,
        current.id,
        current.contributed_at.isoformat(),
    )
    return updated
