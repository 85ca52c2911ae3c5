"""Episode and season Falcon resources.

Episodes are addressed by position,
``/series/{series_id}/seasons/{season_number}/episodes/{episode_number}``,
rather than by film identifier. Season routes act on every episode of one
season at once.
"""

from __future__ import annotations

import typing as typ

import falcon

from reelbase.api.handlers import page_response
from reelbase.api.helpers import (
    EPISODES_QUERY,
    build_film_create_data,
    build_film_patch,
    build_season_episodes,
    parse_episode_key,
    parse_positive_int,
    parse_uuid,
)
from reelbase.api.resources.base import (
    _AuditsResourceBase,
    _InvalidateResourceBase,
    _ResourceBase,
)
from reelbase.api.serializers import serialize_film, serialize_film_audit
from reelbase.catalogue.services import (
    create_episode,
    get_episode,
    invalidate_all_by_season,
    invalidate_episode,
    list_episode_audits,
    list_episodes_by_season,
    list_episodes_by_series,
    list_season_audits,
    put_all_by_season,
    put_episode,
    update_episode,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from reelbase.api.types import JsonPayload
    from reelbase.catalogue.domain import Film, FilmAudit


def _season_target(**kwargs: str) -> dict[str, object]:
    return {
        "series_id": parse_uuid(kwargs["series_id"], "series_id"),
        "season_number": parse_positive_int(kwargs["season_number"], "season_number"),
    }


def _episode_target(**kwargs: str) -> dict[str, object]:
    return {
        "key": parse_episode_key(
            kwargs["series_id"],
            kwargs["season_number"],
            kwargs["episode_number"],
        )
    }


def _serialize_films(films: list[Film]) -> JsonPayload:
    return {"items": [serialize_film(film) for film in films]}


class SeriesEpisodesResource(_ResourceBase):
    """List a series' episodes across all seasons."""

    async def on_get(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        series_id: str,
    ) -> None:
        """List one page of episodes ordered by season, then episode."""
        parsed_series_id = parse_uuid(series_id, "series_id")
        options = self._options(req, EPISODES_QUERY)
        page = await self._call(
            list_episodes_by_series, series_id=parsed_series_id, options=options
        )
        resp.media = page_response(page, options, serialize_film)


class SeasonEpisodesResource(_ResourceBase):
    """Read or replace the numbered episode list of one season."""

    async def on_get(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        series_id: str,
        season_number: str,
    ) -> None:
        """List one page of a season's episodes."""
        target = _season_target(series_id=series_id, season_number=season_number)
        options = self._options(req, EPISODES_QUERY)
        page = await self._call(list_episodes_by_season, options=options, **target)
        resp.media = page_response(page, options, serialize_film)

    async def on_put(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        series_id: str,
        season_number: str,
    ) -> None:
        """Replace episodes ``1..n`` of the season with the given list."""
        user_id = self._user_id(req)
        target = _season_target(series_id=series_id, season_number=season_number)
        episodes = self._parse(build_season_episodes, await self._payload(req))
        written = await self._call(
            put_all_by_season,
            user_id=user_id,
            episodes=episodes,
            rules=self._rules,
            **target,
        )
        resp.media = _serialize_films(written)


class SeasonInvalidateResource(_InvalidateResourceBase["list[Film]"]):
    """Invalidate every episode of a season."""

    @staticmethod
    @typ.override
    def _target(**kwargs: str) -> dict[str, object]:
        return _season_target(**kwargs)

    @staticmethod
    @typ.override
    def _service_fn() -> cabc.Callable[..., cabc.Awaitable[list[Film]]]:
        return invalidate_all_by_season

    @staticmethod
    @typ.override
    def _serialize(result: list[Film]) -> JsonPayload:
        return _serialize_films(result)


class SeasonAuditsResource(_AuditsResourceBase["FilmAudit"]):
    """List historical versions across a season's episodes."""

    @staticmethod
    @typ.override
    def _target(**kwargs: str) -> dict[str, object]:
        return _season_target(**kwargs)

    @staticmethod
    @typ.override
    def _service_fn() -> cabc.Callable[..., cabc.Awaitable[typ.Any]]:
        return list_season_audits

    @staticmethod
    @typ.override
    def _serializer_fn() -> cabc.Callable[[FilmAudit], JsonPayload]:
        return serialize_film_audit


class EpisodeResource(_ResourceBase):
    """Handle one episode addressed by its position."""

    async def on_get(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        **kwargs: str,
    ) -> None:
        """Fetch the live version of an episode."""
        del req
        episode = await self._call(get_episode, **_episode_target(**kwargs))
        resp.media = serialize_film(episode)

    async def on_post(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        **kwargs: str,
    ) -> None:
        """Create an episode at a free position."""
        user_id = self._user_id(req)
        target = _episode_target(**kwargs)
        data = self._parse(build_film_create_data, await self._payload(req))
        episode = await self._call(
            create_episode, data=data, user_id=user_id, rules=self._rules, **target
        )
        resp.media = serialize_film(episode)
        resp.status = falcon.HTTP_201

    async def on_put(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        **kwargs: str,
    ) -> None:
        """Create the episode or replace the one already at this position."""
        user_id = self._user_id(req)
        target = _episode_target(**kwargs)
        data = self._parse(build_film_create_data, await self._payload(req))
        episode = await self._call(
            put_episode, data=data, user_id=user_id, rules=self._rules, **target
        )
        resp.media = serialize_film(episode)

    async def on_patch(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        **kwargs: str,
    ) -> None:
        """Apply a partial update; the previous version is audited."""
        user_id = self._user_id(req)
        target = _episode_target(**kwargs)
        patch = self._parse(build_film_patch, await self._payload(req))
        episode = await self._call(
            update_episode, user_id=user_id, patch=patch, rules=self._rules, **target
        )
        resp.media = serialize_film(episode)


class EpisodeInvalidateResource(_InvalidateResourceBase["Film"]):
    """Invalidate one episode or clear its invalidation."""

    @staticmethod
    @typ.override
    def _target(**kwargs: str) -> dict[str, object]:
        return _episode_target(**kwargs)

    @staticmethod
    @typ.override
    def _service_fn() -> cabc.Callable[..., cabc.Awaitable[Film]]:
        return invalidate_episode

    @staticmethod
    @typ.override
    def _serialize(result: Film) -> JsonPayload:
        return serialize_film(result)


class EpisodeAuditsResource(_AuditsResourceBase["FilmAudit"]):
    """List one episode's historical versions."""

    @staticmethod
    @typ.override
    def _target(**kwargs: str) -> dict[str, object]:
        return _episode_target(**kwargs)

    @staticmethod
    @typ.override
    def _service_fn() -> cabc.Callable[..., cabc.Awaitable[typ.Any]]:
        return list_episode_audits

    @staticmethod
    @typ.override
    def _serializer_fn() -> cabc.Callable[[FilmAudit], JsonPayload]:
        return serialize_film_audit
