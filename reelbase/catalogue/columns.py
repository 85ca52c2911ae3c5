"""Static registry of the column names callers may sort on.

Read paths accept a free-text sort field from callers. Before any such value
reaches SQL it must name a real column of the entity being queried; this module
is the single source of truth for that check. The mapping is written out by
hand and verified for completeness when the module is imported, so a missing
entity stops the process before it serves traffic. Credential columns are left
out so no caller can order users by them.

Examples
--------
>>> COLUMN_REGISTRY.exists(Entity.FILMS, "title")
True
>>> COLUMN_REGISTRY.exists("films", "title; DROP TABLE films")
False
"""

from __future__ import annotations

import enum
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class Entity(enum.StrEnum):
    """Entities whose columns can appear in caller-supplied query options."""

    USERS = "users"
    FILMS = "films"
    FILMS_AUDIT = "films_audit"
    SERIESES = "serieses"
    SERIESES_AUDIT = "serieses_audit"
    WATCHFILMS = "watchfilms"


class ColumnRegistryError(RuntimeError):
    """Raised when the registry is built without a field set for an entity."""


_FILM_AUDIT_FIELDS = (
    "id",
    "title",
    "descriptions",
    "date_released",
    "duration",
    "series_id",
    "season_number",
    "episode_number",
    "invalidation",
    "contributed_by",
    "contributed_at",
)
_SERIES_AUDIT_FIELDS = (
    "id",
    "title",
    "descriptions",
    "date_started",
    "date_ended",
    "invalidation",
    "contributed_by",
    "contributed_at",
)

ENTITY_FIELDS: typ.Final[dict[str, tuple[str, ...]]] = {
    # users.hashed_password is stored but never sortable.
    Entity.USERS: (
        "id",
        "email",
        "first_name",
        "last_name",
        "bio",
        "birthdate",
        "avatar",
        "jointime",
    ),
    Entity.FILMS: (*_FILM_AUDIT_FIELDS, "poster"),
    Entity.FILMS_AUDIT: _FILM_AUDIT_FIELDS,
    Entity.SERIESES: (*_SERIES_AUDIT_FIELDS, "poster"),
    Entity.SERIESES_AUDIT: _SERIES_AUDIT_FIELDS,
    Entity.WATCHFILMS: ("id", "user_id", "film_id", "time_added", "time_watched"),
}


class ColumnRegistry:
    """Read-only mapping from entity name to its valid field names.

    Parameters
    ----------
    fields : collections.abc.Mapping[str, collections.abc.Iterable[str]]
        Field names per entity.
    entities : collections.abc.Iterable[str], optional
        Entities that must all be present in ``fields``. Defaults to every
        :class:`Entity` member.

    Raises
    ------
    ColumnRegistryError
        If any required entity has no field set.
    """

    __slots__ = ("_fields",)

    def __init__(
        self,
        fields: cabc.Mapping[str, cabc.Iterable[str]],
        *,
        entities: cabc.Iterable[str] = tuple(Entity),
    ) -> None:
        missing = sorted(str(entity) for entity in entities if entity not in fields)
        if missing:
            msg = f"Column registry has no field set for: {', '.join(missing)}."
            raise ColumnRegistryError(msg)
        self._fields: dict[str, frozenset[str]] = {
            str(entity): frozenset(names) for entity, names in fields.items()
        }

    def exists(self, entity: str, field: str) -> bool:
        """Return True when ``field`` is a column of ``entity``.

        Unknown entities report False rather than raising, so "entity not
        registered" and "field not found" read the same to callers.
        """
        names = self._fields.get(str(entity))
        return names is not None and field in names

    def fields(self, entity: str) -> frozenset[str]:
        """Return the field names registered for ``entity``."""
        return self._fields.get(str(entity), frozenset())

    def entities(self) -> frozenset[str]:
        """Return every registered entity name."""
        return frozenset(self._fields)


COLUMN_REGISTRY: typ.Final[ColumnRegistry] = ColumnRegistry(ENTITY_FIELDS)


__all__ = [
    "COLUMN_REGISTRY",
    "ENTITY_FIELDS",
    "ColumnRegistry",
    "ColumnRegistryError",
    "Entity",
]
