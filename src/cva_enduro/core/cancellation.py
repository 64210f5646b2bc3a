"""Cooperative cancellation of activity attempts.

The engine runs each attempt in a worker thread it cannot kill. Instead it
binds a ``threading.Event`` to the attempt and sets it once the attempt is
abandoned. Code with externally visible side effects calls
``raise_if_cancelled`` right before making them visible.
"""

from __future__ import annotations

import contextvars
import threading
from contextlib import contextmanager
from typing import Iterator

from cva_enduro.core.exceptions import AttemptCancelledError

_current_cancel_event: contextvars.ContextVar[threading.Event | None] = contextvars.ContextVar(
    "cva_enduro_cancel_event", default=None
)


@contextmanager
def cancellation_scope(event: threading.Event) -> Iterator[threading.Event]:
    """Bind ``event`` as the cancellation signal of the code run inside."""
    token = _current_cancel_event.set(event)
    try:
        yield event
    finally:
        _current_cancel_event.reset(token)


def is_cancelled() -> bool:
    event = _current_cancel_event.get()
    return event is not None and event.is_set()


def raise_if_cancelled(action: str) -> None:
    if is_cancelled():
        raise AttemptCancelledError(f"{action}: attempt was abandoned")
