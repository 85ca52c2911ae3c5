"""Shared types for the Falcon catalogue API adapter.

This module defines the aliases used across API adapters: ``UowFactory`` for
request-scoped units of work, ``Authenticator`` for resolving the requesting
user and ``JsonPayload`` for JSON request and response objects. It also holds
:class:`ApiContext`, the bundle of collaborators every resource is built with.

Example
-------
Define and use a unit-of-work factory:

>>> factory: UowFactory = (  # doctest: +SKIP
...     lambda: SqlAlchemyUnitOfWork(session_factory)
... )
>>> uow = factory()  # doctest: +SKIP
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    import uuid

    import falcon

    from reelbase.catalogue.ports import CatalogueUnitOfWork
    from reelbase.catalogue.query import QueryOptionsBuilder
    from reelbase.config import ValidationRules

type UowFactory = cabc.Callable[[], CatalogueUnitOfWork]
type Authenticator = cabc.Callable[[falcon.Request], uuid.UUID]
type JsonPayload = dict[str, object]


@dc.dataclass(frozen=True, slots=True)
class ApiContext:
    """Collaborators shared by every resource of one application."""

    uow_factory: UowFactory
    query_builder: QueryOptionsBuilder
    rules: ValidationRules
    authenticate: Authenticator
