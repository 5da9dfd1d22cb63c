from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)

TimerCallback = Callable[[], None]


class TimerHandle(Protocol):
    """Cancellable timer token. `cancel()` must be idempotent."""

    @property
    def active(self) -> bool:  # pragma: no cover
        ...

    def cancel(self) -> None:  # pragma: no cover
        ...


class TimerService(Protocol):
    """Schedules one-shot and repeating callbacks on millisecond delays."""

    def now_ms(self) -> float:  # pragma: no cover
        ...

    def call_later(self, delay_ms: float, callback: TimerCallback) -> TimerHandle:  # pragma: no cover
        ...

    def call_repeating(self, interval_ms: float, callback: TimerCallback) -> TimerHandle:  # pragma: no cover
        ...


def run_callback(callback: TimerCallback) -> None:
    """Run a timer callback, logging instead of propagating its errors."""

    try:
        callback()
    except Exception:
        logger.exception("Timer callback %r failed", callback)


class LoopTimerHandle:
    def __init__(self) -> None:
        self._handle: asyncio.TimerHandle | None = None
        self._done = False

    @property
    def active(self) -> bool:
        return not self._done

    def cancel(self) -> None:
        if self._done:
            return
        self._done = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class AsyncioTimerService:
    """TimerService backed by `loop.call_later`.

    Every callback runs on the event loop thread, so callbacks, event handling
    and API handlers never interleave mid-operation.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now_ms(self) -> float:
        return self.loop.time() * 1000.0

    def call_later(self, delay_ms: float, callback: TimerCallback) -> LoopTimerHandle:
        handle = LoopTimerHandle()

        def _fire() -> None:
            if not handle.active:
                return
            # One-shot: spent before running, so cancel() from inside is a no-op.
            handle._done = True
            handle._handle = None
            run_callback(callback)

        handle._handle = self.loop.call_later(delay_ms / 1000.0, _fire)
        return handle

    def call_repeating(self, interval_ms: float, callback: TimerCallback) -> LoopTimerHandle:
        handle = LoopTimerHandle()

        def _fire() -> None:
            if not handle.active:
                return
            # Re-arm before running so the callback can cancel its own repetition.
            handle._handle = self.loop.call_later(interval_ms / 1000.0, _fire)
            run_callback(callback)

        handle._handle = self.loop.call_later(interval_ms / 1000.0, _fire)
        return handle
