"""Watchlist Falcon resources.

Every route acts on the requesting user's own watchlist; rows of other users
answer 404.
"""

from __future__ import annotations

import typing as typ

import falcon

from reelbase.api.handlers import page_response
from reelbase.api.helpers import WATCHLIST_QUERY, parse_film_reference, parse_uuid
from reelbase.api.resources.base import _ResourceBase
from reelbase.api.serializers import serialize_watchfilm, serialize_watchlist_item
from reelbase.catalogue.services import (
    add_to_watchlist,
    list_watchlist,
    mark_watched,
    remove_from_watchlist,
)


class WatchlistResource(_ResourceBase):
    """List the user's watchlist or add a film to it."""

    async def on_get(self, req: falcon.Request, resp: falcon.Response) -> None:
        """List one page of the watchlist, filtered by ``filter``."""
        user_id = self._user_id(req)
        options = self._options(req, WATCHLIST_QUERY)
        page = await self._call(list_watchlist, user_id=user_id, options=options)
        resp.media = page_response(page, options, serialize_watchlist_item)

    async def on_post(self, req: falcon.Request, resp: falcon.Response) -> None:
        """Add ``film_id`` to the watchlist; an existing row is returned as is."""
        user_id = self._user_id(req)
        film_id = self._parse(parse_film_reference, await self._payload(req))
        watchfilm = await self._call(add_to_watchlist, user_id=user_id, film_id=film_id)
        resp.media = serialize_watchfilm(watchfilm)
        resp.status = falcon.HTTP_201


class WatchlistEntryResource(_ResourceBase):
    """Remove one row from the user's watchlist."""

    async def on_delete(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        watch_id: str,
    ) -> None:
        """Delete the row; 404 when it is missing or not the user's."""
        user_id = self._user_id(req)
        await self._call(
            remove_from_watchlist,
            user_id=user_id,
            watch_id=parse_uuid(watch_id, "watch_id"),
        )
        resp.status = falcon.HTTP_204


class WatchlistWatchedResource(_ResourceBase):
    """Mark a watchlist row as watched."""

    async def on_post(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        watch_id: str,
    ) -> None:
        """Stamp ``time_watched``; repeated calls keep the first stamp."""
        user_id = self._user_id(req)
        watchfilm = await self._call(
            mark_watched,
            user_id=user_id,
            watch_id=parse_uuid(watch_id, "watch_id"),
        )
        resp.media = serialize_watchfilm(watchfilm)
