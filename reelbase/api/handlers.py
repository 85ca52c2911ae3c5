"""Shared Falcon endpoint handlers for catalogue API resources.

The module provides the pieces every resource uses to reach a service:
``run_service`` opens a request-scoped unit of work and calls one service
function, ``translate_errors`` turns the catalogue error taxonomy into Falcon
HTTP errors and ``page_response`` renders a paged read.

Examples
--------
>>> movie = await run_service(context.uow_factory, get_movie, film_id=film_id)
>>> media = page_response(page, options, serialize_film)
"""

from __future__ import annotations

import contextlib
import typing as typ

import falcon

from reelbase.catalogue.errors import (
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from reelbase.logging import get_logger, log_error

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from reelbase.catalogue.query import Page, QueryOptions

    from .types import JsonPayload, UowFactory

logger = get_logger(__name__)


class HTTPValidationError(falcon.HTTPBadRequest):
    """HTTP 400 whose body lists every rejected field under ``errors``."""

    def __init__(self, error: ValidationError) -> None:
        super().__init__(title="Validation failed", description=str(error))
        self.errors = dict(error.errors)

    def to_dict(
        self,
        obj_type: type[dict[str, typ.Any]] = dict,
    ) -> dict[str, typ.Any]:
        """Extend Falcon's error body with the field error map."""
        body = super().to_dict(obj_type)
        body["errors"] = dict(self.errors)
        return body


@contextlib.contextmanager
def translate_errors() -> cabc.Iterator[None]:
    """Map catalogue errors raised inside the block to Falcon HTTP errors.

    Raises
    ------
    HTTPValidationError
        For :class:`ValidationError`.
    falcon.HTTPNotFound
        For :class:`NotFoundError`.
    falcon.HTTPConflict
        For :class:`ConflictError`.
    falcon.HTTPServiceUnavailable
        For :class:`StorageError`.
    """
    try:
        yield
    except ValidationError as exc:
        raise HTTPValidationError(exc) from exc
    except NotFoundError as exc:
        raise falcon.HTTPNotFound(description=str(exc)) from exc
    except ConflictError as exc:
        raise falcon.HTTPConflict(description=str(exc)) from exc
    except StorageError as exc:
        log_error(logger, "Catalogue storage unavailable: %s", exc, exc_info=exc)
        raise falcon.HTTPServiceUnavailable(
            description="Catalogue storage is unavailable."
        ) from exc


async def run_service[ResultT](
    uow_factory: UowFactory,
    service_fn: cabc.Callable[..., cabc.Awaitable[ResultT]],
    /,
    **kwargs: object,
) -> ResultT:
    """Call ``service_fn`` inside a fresh unit of work.

    Parameters
    ----------
    uow_factory : UowFactory
        Factory that creates unit-of-work instances.
    service_fn : cabc.Callable[..., cabc.Awaitable[ResultT]]
        Catalogue service taking the unit of work first.
    **kwargs : object
        Keyword arguments forwarded to the service.

    Returns
    -------
    ResultT
        Whatever the service returns.
    """
    with translate_errors():
        async with uow_factory() as uow:
            return await service_fn(uow, **kwargs)


def page_response[ItemT](
    page: Page[ItemT],
    options: QueryOptions,
    serializer_fn: cabc.Callable[[ItemT], JsonPayload],
) -> JsonPayload:
    """Render one page of results with its total and page count."""
    return {
        "items": [serializer_fn(item) for item in page.items],
        "total": page.total,
        "page_count": options.page_count(page.total),
    }
