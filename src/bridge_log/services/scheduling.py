"""Delayed callbacks and debouncing."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol


class ScheduledCall(Protocol):
    """Handle for a callback that has not run yet."""

    def cancel(self) -> None:
        """Prevent the callback from running."""


class Scheduler(Protocol):
    """Runs a callback after a delay."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        """Run ``callback`` after ``delay`` seconds and return a handle."""


@dataclass
class AsyncioScheduler(Scheduler):
    """Scheduler backed by the running asyncio event loop."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        """Schedule ``callback`` on the running loop."""
        return asyncio.get_running_loop().call_later(delay, callback)


@dataclass
class Debouncer:
    """Coalesces bursts of calls into one call of the latest callback.

    Every ``call`` cancels the pending callback and starts the delay again.
    """

    scheduler: Scheduler
    delay: float
    _pending: ScheduledCall | None = field(default=None, init=False, repr=False)
    _callback: Callable[[], None] | None = field(
        default=None, init=False, repr=False
    )

    def call(self, callback: Callable[[], None]) -> None:
        if self._pending is not None:
            self._pending.cancel()
        self._callback = callback
        self._pending = self.scheduler.schedule(self.delay, self._run)

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self._callback = None

    def flush(self) -> bool:
        """Run the pending callback now; return False when nothing was pending."""
        if self._pending is None:
            return False
        self._pending.cancel()
        self._run()
        return True

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def _run(self) -> None:
        callback = self._callback
        self._pending = None
        self._callback = None
        if callback is not None:
            callback()
