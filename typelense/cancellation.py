"""Cooperative cancellation for long-running collection passes."""

from __future__ import annotations

import signal
import threading
from contextlib import contextmanager
from typing import Iterator


class CancellationToken:
    """Flag checked between units of work; setting it never preempts a unit."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def reset(self) -> None:
        self._event.clear()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@contextmanager
def cancel_on_interrupt(token: CancellationToken) -> Iterator[CancellationToken]:
    """Route SIGINT to ``token.cancel`` for the duration of the block.

    The previous handler is restored on exit. Outside the main thread signal
    handlers cannot be installed, so the token is yielded unchanged.
    """
    if threading.current_thread() is not threading.main_thread():
        yield token
        return

    def _handler(signum: int, frame: object) -> None:
        token.cancel()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield token
    finally:
        signal.signal(signal.SIGINT, previous)


__all__ = ["CancellationToken", "cancel_on_interrupt"]
