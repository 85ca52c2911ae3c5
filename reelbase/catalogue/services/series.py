"""Series services.

Series follow the same versioning rules as films: create writes one live row,
and every update or invalidation first appends the stored version to
``serieses_audit``.
"""

from __future__ import annotations

import typing as typ
import uuid

from reelbase.catalogue.domain import Series
from reelbase.catalogue.errors import ValidationErrors
from reelbase.catalogue.payloads import normalise_invalidation_note
from reelbase.logging import get_logger, log_info

from ._versioning import (
    DEFAULT_RULES,
    apply_mutation,
    require_contributor,
    require_found,
    series_store,
    utc_now,
)

if typ.TYPE_CHECKING:
    import datetime as dt

    from reelbase.catalogue.domain import SeriesAudit
    from reelbase.catalogue.payloads import SeriesCreateData, SeriesPatch
    from reelbase.catalogue.ports import CatalogueUnitOfWork
    from reelbase.catalogue.query import Page, QueryOptions
    from reelbase.config import ValidationRules

logger = get_logger(__name__)


async def create_series(
    uow: CatalogueUnitOfWork,
    *,
    data: SeriesCreateData,
    user_id: uuid.UUID,
    rules: ValidationRules = DEFAULT_RULES,
) -> Series:
    """Create a series with an empty audit history.

    Parameters
    ----------
    uow : CatalogueUnitOfWork
        Unit-of-work providing repositories and transactional boundaries.
    data : SeriesCreateData
        Series fields.
    user_id : uuid.UUID
        Contributor of the first version.
    rules : ValidationRules, optional
        Validation thresholds.

    Returns
    -------
    Series
        The stored series.

    Raises
    ------
    ValidationError
        If any field breaks the configured thresholds.
    NotFoundError
        If ``user_id`` is not a registered user.
    """
    data.validate(rules.series)
    await require_contributor(uow, user_id)
    series = Series(
        id=uuid.uuid4(),
        title=data.title,
        descriptions=data.descriptions,
        date_started=data.date_started,
        date_ended=data.date_ended,
        invalidation=None,
        poster=data.poster,
        contributed_by=user_id,
        contributed_at=utc_now(),
    )
    await uow.series.add(series)
    await uow.commit()
    log_info(logger, "Created series %s by %s.", series.id, user_id)
    return series


async def get_series(uow: CatalogueUnitOfWork, *, series_id: uuid.UUID) -> Series:
    """Fetch the live version of a series.

    Raises
    ------
    NotFoundError
        If no series has this identifier.
    """
    series = await uow.series.get(series_id)
    return require_found(series, f"Series {series_id} not found.", series_id)


async def _lock_series(uow: CatalogueUnitOfWork, series_id: uuid.UUID) -> Series:
    return require_found(
        await uow.series.get(series_id, for_update=True),
        f"Series {series_id} not found.",
        series_id,
    )


def _check_date_range(current: Series, changes: dict[str, object]) -> None:
    """Reject patches that would end a series before it started."""
    started = typ.cast("dt.date", changes.get("date_started", current.date_started))
    ended = typ.cast("dt.date | None", changes.get("date_ended", current.date_ended))
    errors = ValidationErrors()
    if ended is not None and ended < started:
        errors.add("date_ended", "must not precede date_started")
    errors.raise_if_any(entity_id=str(current.id))


async def update_series(
    uow: CatalogueUnitOfWork,
    *,
    series_id: uuid.UUID,
    user_id: uuid.UUID,
    patch: SeriesPatch,
    rules: ValidationRules = DEFAULT_RULES,
) -> Series:
    """Apply a partial update to a series.

    Raises
    ------
    ValidationError
        If a present field breaks the configured thresholds, or the patched
        dates would be out of order.
    NotFoundError
        If no series has this identifier or ``user_id`` is unknown.
    """
    patch.validate(rules.series)
    changes = patch.changes()
    await require_contributor(uow, user_id)
    current = await _lock_series(uow, series_id)
    _check_date_range(current, changes)
    updated = await apply_mutation(
        current, series_store(uow), user_id=user_id, changes=changes
    )
    await uow.commit()
    log_info(logger, "Updated series %s by %s.", series_id, user_id)
    return updated


async def invalidate_series(
    uow: CatalogueUnitOfWork,
    *,
    series_id: uuid.UUID,
    user_id: uuid.UUID,
    note: str | None,
    rules: ValidationRules = DEFAULT_RULES,
) -> Series:
    """Mark a series as disputed, or clear the mark with an empty note.

    Raises
    ------
    ValidationError
        If a non-empty note breaks the configured length bounds.
    NotFoundError
        If no series has this identifier or ``user_id`` is unknown.
    """
    normalised = normalise_invalidation_note(note, rules.invalidation)
    await require_contributor(uow, user_id)
    current = await _lock_series(uow, series_id)
    updated = await apply_mutation(
        current,
        series_store(uow),
        user_id=user_id,
        changes={"invalidation": normalised},
    )
    await uow.commit()
    log_info(logger, "Invalidated series %s by %s.", series_id, user_id)
    return updated


async def list_series(
    uow: CatalogueUnitOfWork,
    *,
    options: QueryOptions,
) -> Page[Series]:
    """Return one page of series and the total number of series."""
    return await uow.series.list(options)


async def list_series_audits(
    uow: CatalogueUnitOfWork,
    *,
    series_id: uuid.UUID,
    options: QueryOptions,
) -> Page[SeriesAudit]:
    """Return one page of a series' historical versions.

    Raises
    ------
    NotFoundError
        If no series has this identifier.
    """
    await get_series(uow, series_id=series_id)
    return await uow.series_audits.list_for_series(series_id, options)
