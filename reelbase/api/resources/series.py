"""Series Falcon resources."""

from __future__ import annotations

import typing as typ

import falcon

from reelbase.api.handlers import page_response
from reelbase.api.helpers import (
    SERIES_QUERY,
    build_series_create_data,
    build_series_patch,
    parse_uuid,
)
from reelbase.api.resources.base import (
    _AuditsResourceBase,
    _InvalidateResourceBase,
    _ResourceBase,
)
from reelbase.api.serializers import serialize_series, serialize_series_audit
from reelbase.catalogue.services import (
    create_series,
    get_series,
    invalidate_series,
    list_series,
    list_series_audits,
    update_series,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from reelbase.api.types import JsonPayload
    from reelbase.catalogue.domain import Series, SeriesAudit


def _series_target(**kwargs: str) -> dict[str, object]:
    return {"series_id": parse_uuid(kwargs["series_id"], "series_id")}


class SeriesCollectionResource(_ResourceBase):
    """Handle collection operations for series."""

    async def on_get(self, req: falcon.Request, resp: falcon.Response) -> None:
        """List one page of series."""
        options = self._options(req, SERIES_QUERY)
        page = await self._call(list_series, options=options)
        resp.media = page_response(page, options, serialize_series)

    async def on_post(self, req: falcon.Request, resp: falcon.Response) -> None:
        """Create a series contributed by the requesting user."""
        user_id = self._user_id(req)
        data = self._parse(build_series_create_data, await self._payload(req))
        series = await self._call(
            create_series, data=data, user_id=user_id, rules=self._rules
        )
        resp.media = serialize_series(series)
        resp.status = falcon.HTTP_201


class SeriesResource(_ResourceBase):
    """Handle single-series reads and partial updates."""

    async def on_get(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        series_id: str,
    ) -> None:
        """Fetch the live version of a series."""
        del req
        series = await self._call(get_series, **_series_target(series_id=series_id))
        resp.media = serialize_series(series)

    async def on_patch(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        series_id: str,
    ) -> None:
        """Apply a partial update; the previous version is audited."""
        user_id = self._user_id(req)
        target = _series_target(series_id=series_id)
        patch = self._parse(build_series_patch, await self._payload(req))
        series = await self._call(
            update_series, user_id=user_id, patch=patch, rules=self._rules, **target
        )
        resp.media = serialize_series(series)


class SeriesInvalidateResource(_InvalidateResourceBase["Series"]):
    """Invalidate a series or clear its invalidation."""

    @staticmethod
    @typ.override
    def _target(**kwargs: str) -> dict[str, object]:
        return _series_target(**kwargs)

    @staticmethod
    @typ.override
    def _service_fn() -> cabc.Callable[..., cabc.Awaitable[Series]]:
        return invalidate_series

    @staticmethod
    @typ.override
    def _serialize(result: Series) -> JsonPayload:
        return serialize_series(result)


class SeriesAuditsResource(_AuditsResourceBase["SeriesAudit"]):
    """List a series' historical versions."""

    @staticmethod
    @typ.override
    def _target(**kwargs: str) -> dict[str, object]:
        return _series_target(**kwargs)

    @staticmethod
    @typ.override
    def _service_fn() -> cabc.Callable[..., cabc.Awaitable[typ.Any]]:
        return list_series_audits

    @staticmethod
    @typ.override
    def _serializer_fn() -> cabc.Callable[[SeriesAudit], JsonPayload]:
        return serialize_series_audit
