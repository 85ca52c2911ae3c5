"""Movie Falcon resources."""

from __future__ import annotations

import typing as typ

import falcon

from reelbase.api.handlers import page_response
from reelbase.api.helpers import (
    MOVIES_QUERY,
    build_film_create_data,
    build_film_patch,
    parse_uuid,
)
from reelbase.api.resources.base import (
    _AuditsResourceBase,
    _InvalidateResourceBase,
    _ResourceBase,
)
from reelbase.api.serializers import serialize_film, serialize_film_audit
from reelbase.catalogue.services import (
    create_movie,
    get_movie,
    invalidate_movie,
    list_movie_audits,
    list_movies,
    update_movie,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from reelbase.api.types import JsonPayload
    from reelbase.catalogue.domain import Film, FilmAudit


def _movie_target(**kwargs: str) -> dict[str, object]:
    return {"film_id": parse_uuid(kwargs["film_id"], "film_id")}


class MoviesResource(_ResourceBase):
    """Handle collection operations for movies.

    Raises
    ------
    falcon.HTTPBadRequest
        Raised when query options or the create payload are invalid.
    """

    async def on_get(self, req: falcon.Request, resp: falcon.Response) -> None:
        """List one page of movies."""
        options = self._options(req, MOVIES_QUERY)
        page = await self._call(list_movies, options=options)
        resp.media = page_response(page, options, serialize_film)

    async def on_post(self, req: falcon.Request, resp: falcon.Response) -> None:
        """Create a movie contributed by the requesting user."""
        user_id = self._user_id(req)
        data = self._parse(build_film_create_data, await self._payload(req))
        movie = await self._call(
            create_movie, data=data, user_id=user_id, rules=self._rules
        )
        resp.media = serialize_film(movie)
        resp.status = falcon.HTTP_201


class MovieResource(_ResourceBase):
    """Handle single-movie reads and partial updates."""

    async def on_get(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        film_id: str,
    ) -> None:
        """Fetch the live version of a movie."""
        del req
        movie = await self._call(get_movie, **_movie_target(film_id=film_id))
        resp.media = serialize_film(movie)

    async def on_patch(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        film_id: str,
    ) -> None:
        """Apply a partial update; the previous version is audited."""
        user_id = self._user_id(req)
        target = _movie_target(film_id=film_id)
        patch = self._parse(build_film_patch, await self._payload(req))
        movie = await self._call(
            update_movie, user_id=user_id, patch=patch, rules=self._rules, **target
        )
        resp.media = serialize_film(movie)


class MovieInvalidateResource(_InvalidateResourceBase["Film"]):
    """Invalidate a movie or clear its invalidation."""

    @staticmethod
    @typ.override
    def _target(**kwargs: str) -> dict[str, object]:
        return _movie_target(**kwargs)

    @staticmethod
    @typ.override
    def _service_fn() -> cabc.Callable[..., cabc.Awaitable[Film]]:
        return invalidate_movie

    @staticmethod
    @typ.override
    def _serialize(result: Film) -> JsonPayload:
        return serialize_film(result)


class MovieAuditsResource(_AuditsResourceBase["FilmAudit"]):
    """List a movie's historical versions."""

    @staticmethod
    @typ.override
    def _target(**kwargs: str) -> dict[str, object]:
        return _movie_target(**kwargs)

    @staticmethod
    @typ.override
    def _service_fn() -> cabc.Callable[..., cabc.Awaitable[typ.Any]]:
        return list_movie_audits

    @staticmethod
    @typ.override
    def _serializer_fn() -> cabc.Callable[[FilmAudit], JsonPayload]:
        return serialize_film_audit
