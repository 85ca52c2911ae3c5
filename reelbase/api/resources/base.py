"""Shared base resources for Falcon catalogue API adapters.

This module provides the resource base classes that standardize request
handling across concrete adapters. ``_ResourceBase`` stores the application
context and offers the common steps (authentication, query options, payload
parsing, service dispatch). The audit-list and invalidate bases implement the
whole endpoint; subclasses only say which entity the path addresses, which
service to call and how to serialize the result.

Examples
--------
>>> class MovieAuditsResource(_AuditsResourceBase): ...
>>> app.add_route("/movies/{film_id}/audits", MovieAuditsResource(context))
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ
from abc import ABC, abstractmethod

from reelbase.api.handlers import page_response, run_service, translate_errors
from reelbase.api.helpers import (
    AUDITS_QUERY,
    parse_invalidation_note,
    query_params,
    require_payload_dict,
)

if typ.TYPE_CHECKING:
    import uuid

    import falcon

    from reelbase.api.types import ApiContext, JsonPayload
    from reelbase.catalogue.columns import Entity
    from reelbase.catalogue.query import QueryDefaults, QueryOptions
    from reelbase.config import ValidationRules

type ReadProfile = tuple[QueryDefaults, Entity | None]


class _ResourceBase:
    """Shared base resource that stores the application context."""

    def __init__(self, context: ApiContext) -> None:
        self._context = context

    @property
    def _rules(self) -> ValidationRules:
        return self._context.rules

    def _user_id(self, req: falcon.Request) -> uuid.UUID:
        """Return the authenticated requesting user."""
        return self._context.authenticate(req)

    def _options(self, req: falcon.Request, read_profile: ReadProfile) -> QueryOptions:
        """Build validated query options from the request's query string."""
        defaults, entity = read_profile
        with translate_errors():
            return self._context.query_builder.build(
                query_params(req),
                defaults=defaults,
                entity=entity,
            )

    @staticmethod
    async def _payload(
        req: falcon.Request,
        *,
        allow_empty: bool = False,
    ) -> JsonPayload:
        """Return the request body as a JSON object."""
        if allow_empty:
            return require_payload_dict(await req.get_media(default_when_empty={}))
        return require_payload_dict(await req.get_media())

    @staticmethod
    def _parse[ParsedT](
        builder: cabc.Callable[[JsonPayload], ParsedT],
        payload: JsonPayload,
    ) -> ParsedT:
        """Run a payload builder, reporting its field errors as HTTP 400."""
        with translate_errors():
            return builder(payload)

    async def _call[ResultT](
        self,
        service_fn: cabc.Callable[..., cabc.Awaitable[ResultT]],
        /,
        **kwargs: object,
    ) -> ResultT:
        """Call a catalogue service in a request-scoped unit of work."""
        return await run_service(self._context.uow_factory, service_fn, **kwargs)


class _AuditsResourceBase[AuditT](_ResourceBase, ABC):
    """Base resource for paged audit-history endpoints."""

    @staticmethod
    @abstractmethod
    def _target(**kwargs: str) -> dict[str, object]:
        """Return service keyword arguments addressing the audited entity."""

    @staticmethod
    @abstractmethod
    def _service_fn() -> cabc.Callable[..., cabc.Awaitable[typ.Any]]:
        """Return the audit-list service function."""

    @staticmethod
    @abstractmethod
    def _serializer_fn() -> cabc.Callable[[AuditT], JsonPayload]:
        """Return the serializer for one audit row."""

    async def on_get(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        **kwargs: str,
    ) -> None:
        """List historical versions, newest first unless asked otherwise."""
        target = self._target(**kwargs)
        options = self._options(req, AUDITS_QUERY)
        page = await self._call(self._service_fn(), options=options, **target)
        resp.media = page_response(page, options, self._serializer_fn())


class _InvalidateResourceBase[ResultT](_ResourceBase, ABC):
    """Base resource for invalidate endpoints.

    The body is an optional JSON object with a ``note``; an empty body or an
    empty note clears the invalidation.
    """

    @staticmethod
    @abstractmethod
    def _target(**kwargs: str) -> dict[str, object]:
        """Return service keyword arguments addressing the entity."""

    @staticmethod
    @abstractmethod
    def _service_fn() -> cabc.Callable[..., cabc.Awaitable[ResultT]]:
        """Return the invalidate service function."""

    @staticmethod
    @abstractmethod
    def _serialize(result: ResultT) -> JsonPayload:
        """Return the response body for the service result."""

    async def on_post(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        **kwargs: str,
    ) -> None:
        """Invalidate the addressed entity or clear its invalidation."""
        user_id = self._user_id(req)
        target = self._target(**kwargs)
        payload = await self._payload(req, allow_empty=True)
        note = self._parse(parse_invalidation_note, payload)
        result = await self._call(
            self._service_fn(),
            user_id=user_id,
            note=note,
            rules=self._rules,
            **target,
        )
        resp.media = self._serialize(result)
