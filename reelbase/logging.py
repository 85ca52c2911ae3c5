"""femtologging helpers shared across the catalogue service.

Every module obtains its logger through :func:`get_logger` and emits records
through the ``log_*`` helpers, which accept percent-style templates so callers
never build strings eagerly at the call site.

Examples
--------
Configure logging from the process settings and emit a message:

>>> level, used_default = configure_logging(settings.log_level)
>>> log_info(get_logger(__name__), "Created movie %s.", film.id)
"""

from __future__ import annotations

import enum
import typing as typ

from femtologging import basicConfig, get_logger


class LogLevel(enum.StrEnum):
    """Log levels understood by femtologging."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


_LEVEL_ALIASES: typ.Final[dict[str, LogLevel]] = {"WARN": LogLevel.WARNING}


def parse_log_level(level: str | None) -> tuple[LogLevel, bool]:
    """Normalise a textual log level.

    Parameters
    ----------
    level : str | None
        Requested level name, case-insensitive. ``WARN`` is accepted as an
        alias of ``WARNING``.

    Returns
    -------
    tuple[LogLevel, bool]
        The effective level and whether the ``INFO`` default was used because
        the input was missing or unknown.
    """
    requested = level.strip().upper() if level else ""
    if requested in _LEVEL_ALIASES:
        return (_LEVEL_ALIASES[requested], False)
    if requested in LogLevel.__members__:
        return (LogLevel(requested), False)
    return (LogLevel.INFO, True)


def configure_logging(level: str | None, *, force: bool = False) -> tuple[str, bool]:
    """Configure femtologging and return the normalised level.

    Parameters
    ----------
    level : str | None
        Requested log level, or None to use the default.
    force : bool, optional
        Whether to force reconfiguration of logging handlers.

    Returns
    -------
    tuple[str, bool]
        A tuple of (effective_level, used_default).
    """
    normalised, used_default = parse_log_level(level)
    basicConfig(level=normalised, force=force)
    return (normalised, used_default)


class _SupportsLog(typ.Protocol):
    """Structural type for femtologging loggers."""

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> None: ...


def _emit(
    logger: _SupportsLog,
    level: LogLevel,
    template: str,
    args: tuple[object, ...],
    exc_info: object | None,
) -> None:
    message = template % args if args else template
    logger.log(level, message, exc_info=exc_info, stack_info=False)


def log_debug(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Format and emit a DEBUG log message."""
    _emit(logger, LogLevel.DEBUG, template, args, exc_info)


def log_info(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Format and emit an INFO log message.

    Parameters
    ----------
    logger : _SupportsLog
        Logger instance that supports the femtologging log API.
    template : str
        Percent-style format string for the log message.
    *args : object
        Arguments interpolated into the template.
    exc_info : object | None, optional
        Exception info to attach to the log record.

    Raises
    ------
    TypeError
        If the template and arguments do not align for percent formatting.
    """
    _emit(logger, LogLevel.INFO, template, args, exc_info)


def log_warning(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Format and emit a WARNING log message."""
    _emit(logger, LogLevel.WARNING, template, args, exc_info)


def log_error(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Format and emit an ERROR log message.

    Parameters
    ----------
    logger : _SupportsLog
        Logger instance that supports the femtologging log API.
    template : str
        Percent-style format string for the log message.
    *args : object
        Arguments interpolated into the template.
    exc_info : object | None, optional
        Exception info to attach to the log record, typically the exception
        being translated.
    """
    _emit(logger, LogLevel.ERROR, template, args, exc_info)


__all__ = (
    "LogLevel",
    "configure_logging",
    "get_logger",
    "log_debug",
    "log_error",
    "log_info",
    "log_warning",
    "parse_log_level",
)
