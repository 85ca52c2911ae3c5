"""Error taxonomy raised by catalogue services.

Every service failure is a :class:`CatalogueError` subclass carrying a stable
machine-readable ``code``, the identifier of the entity involved (when there
is one) and whether an automatic retry could succeed. Adapters translate these
into transport errors; nothing here knows about HTTP.

Examples
--------
>>> raise NotFoundError("Movie <id> not found.", entity_id=str(film_id))
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class CatalogueError(Exception):
    """Base exception with structured metadata for catalogue services."""

    error_code: typ.ClassVar[str] = "catalogue_error"
    default_retryable: typ.ClassVar[bool] = False

    code: str
    entity_id: str | None
    retryable: bool

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        entity_id: str | None = None,
        retryable: bool | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code if code is not None else type(self).error_code
        self.entity_id = entity_id
        self.retryable = (
            type(self).default_retryable if retryable is None else retryable
        )


class ValidationError(CatalogueError):
    """Raised when one or more input fields fail their constraints.

    Attributes
    ----------
    errors : dict[str, str]
        Map of field name to the reason that field was rejected. Every invalid
        field of one request is reported together.
    """

    error_code: typ.ClassVar[str] = "validation_failed"

    errors: dict[str, str]

    def __init__(
        self,
        errors: cabc.Mapping[str, str],
        *,
        entity_id: str | None = None,
    ) -> None:
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Invalid fields: {fields}.", entity_id=entity_id)


class NotFoundError(CatalogueError):
    """Raised when a referenced entity, parent or watch row does not exist."""

    error_code: typ.ClassVar[str] = "not_found"


class ConflictError(CatalogueError):
    """Raised when a write collides with existing data.

    Registration raises it for a taken email; storage raises it, retryable, when
    a concurrent writer took the same unique position or row first.
    """

    error_code: typ.ClassVar[str] = "conflict"


class StorageError(CatalogueError):
    """Raised when the backing store fails; the cause is chained unchanged."""

    error_code: typ.ClassVar[str] = "storage_error"


class ValidationErrors:
    """Collect field errors and raise them as one :class:`ValidationError`.

    Examples
    --------
    >>> errors = ValidationErrors()
    >>> errors.add("title", "must not be empty")
    >>> errors.raise_if_any()
    Traceback (most recent call last):
    ...
    ValidationError: Invalid fields: title.
    """

    __slots__ = ("_errors",)

    def __init__(self) -> None:
        self._errors: dict[str, str] = {}

    def add(self, field: str, reason: str | None) -> None:
        """Record ``reason`` for ``field`` unless it is None.

        The first reason recorded for a field wins.
        """
        if reason is not None:
            self._errors.setdefault(field, reason)

    def merge(self, error: ValidationError, *, prefix: str = "") -> None:
        """Fold the field errors of another validation error into this one."""
        for field, reason in error.errors.items():
            self.add(f"{prefix}{field}", reason)

    def __bool__(self) -> bool:
        return bool(self._errors)

    def raise_if_any(self, *, entity_id: str | None = None) -> None:
        """Raise the collected errors, if any were recorded."""
        if self._errors:
            raise ValidationError(self._errors, entity_id=entity_id)


__all__ = [
    "CatalogueError",
    "ConflictError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
    "ValidationErrors",
]
