"""Structured log events for stores, codecs and the CLI.

Every event is a short snake_case message such as ``config_key_set`` plus a
``context`` dict attached to the log record (``record.context``). The context
always carries the bound ``trace_id``; store events add ``action`` and
``key``, file events add ``path``.

The package logger only has a ``NullHandler``. Nothing is printed until the
host application configures logging, for example with
``logging.basicConfig(level=logging.DEBUG)``.

Contents
    - ``TRACE_ID`` / ``bind_trace_id``: identifier copied into every event.
    - ``get_logger``: the ``lib_schema_config`` logger.
    - ``log_debug`` / ``log_info`` / ``log_error``: emit one event.
    - ``make_event``: ``action``/``key`` fields for store operations.

Key writes and file I/O log at DEBUG; opening, reloading, merging and
resetting a store log at INFO; rejected data logs at ERROR.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Final, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("lib_schema_config_trace_id", default=None)
"""Trace identifier of the current context, ``None`` when unbound."""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_schema_config")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Return the package logger; attach handlers here to see store events."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Tag subsequent events of this context with *trace_id* (``None`` unbinds).

    The CLI binds ``--trace-id`` for one invocation and unbinds it in ``main``.

    >>> bind_trace_id('abc123')
    >>> TRACE_ID.get()
    'abc123'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


def log_debug(message: str, **fields: Any) -> None:
    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    _emit(logging.INFO, message, fields)


def log_error(message: str, **fields: Any) -> None:
    _emit(logging.ERROR, message, fields)


def make_event(action: str, key: str | None, payload: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Return the fields of a store event.

    *action* names the store operation (``"set"``, ``"reload"``, ``"merge"``
    ...), *key* the absolute key it addressed or ``None`` for whole-store
    operations. Entries of *payload* are added after those two.

    >>> make_event('reload', None, {'changed': 3})
    {'action': 'reload', 'key': None, 'changed': 3}
    """

    event: dict[str, Any] = {"action": action, "key": key}
    if payload:
        event.update(payload)
    return event


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    context = {"trace_id": TRACE_ID.get(), **fields}
    _LOGGER.log(level, message, extra={"context": context})
