"""Unit tests for femtologging helpers."""

from __future__ import annotations

import typing as typ

import pytest

from reelbase.logging import (
    LogLevel,
    log_error,
    log_info,
    log_warning,
    parse_log_level,
)


class _RecordingLogger:
    """Collect emitted records instead of writing them."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str, object | None]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> None:
        del stack_info
        self.records.append((level, message, exc_info))


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("debug", (LogLevel.DEBUG, False)),
        (" Warning ", (LogLevel.WARNING, False)),
        ("WARN", (LogLevel.WARNING, False)),
        ("verbose", (LogLevel.INFO, True)),
        (None, (LogLevel.INFO, True)),
    ],
)
def test_parse_log_level(raw: str | None, expected: tuple[LogLevel, bool]) -> None:
    """Level names are normalised and unknown names fall back to INFO."""
    assert parse_log_level(raw) == expected, f"Unexpected level for {raw!r}."


def test_helpers_format_templates_lazily() -> None:
    """Templates are interpolated with the given arguments."""
    logger = _RecordingLogger()

    log_info(typ.cast("typ.Any", logger), "Created movie %s by %s.", "m1", "u1")
    log_warning(typ.cast("typ.Any", logger), "100% literal")

    assert logger.records == [
        (LogLevel.INFO, "Created movie m1 by u1.", None),
        (LogLevel.WARNING, "100% literal", None),
    ], "Expected formatted records."


def test_error_helper_attaches_exception() -> None:
    """Error records carry the exception they describe."""
    logger = _RecordingLogger()
    exc = RuntimeError("boom")

    log_error(typ.cast("typ.Any", logger), "Commit failed.", exc_info=exc)

    assert logger.records == [(LogLevel.ERROR, "Commit failed.", exc)], (
        "Expected the exception to be attached."
    )
