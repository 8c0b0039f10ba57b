"""Debounced, single-flight execution of an async action."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class Debouncer:
    """Runs ``action`` once, ``delay`` seconds after the last ``schedule()``.

    Every ``schedule()`` restarts the pending timer, so a burst of edits
    produces a single run. Runs never overlap: a run whose timer fires while
    the previous one is still in flight waits for it to finish first.
    """

    def __init__(self, action: Callable[[], Awaitable[None]], delay: float):
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self._action = action
        self._delay = delay
        self._timer: asyncio.Task | None = None
        self._lock = asyncio.Lock()

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def schedule(self) -> None:
        """(Re)start the timer. Must be called from the running event loop."""
        self.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._fire())

    def cancel(self) -> None:
        """Drop the pending timer, if any. Idempotent."""
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def flush(self) -> None:
        """Run now if a timer is pending, skipping the remaining delay.

        With nothing pending, waits for a run already in flight, so callers
        always observe the result of the latest scheduled run.
        """
        if not self.pending:
            await self.wait_idle()
            return
        self.cancel()
        await self._run()

    async def wait_idle(self) -> None:
        """Return once no run is in flight."""
        async with self._lock:
            pass

    async def _fire(self) -> None:
        await asyncio.sleep(self._delay)
        # Detach so a schedule() issued during the run starts a new timer
        # instead of cancelling the in-flight save.
        self._timer = None
        await self._run()

    async def _run(self) -> None:
        async with self._lock:
            await self._action()
