"""Background event loop for the synchronous console front-end.

The console blocks on ``input()``, but the usage pollers and the autosave
timer need a loop that keeps turning while the user types. The bridge owns
one asyncio loop in a daemon thread; the console submits coroutines to it
and waits on the returned futures.

    +------------------+         +----------------------+
    | CONSOLE THREAD   |         | BRIDGE THREAD        |
    |                  |         |                      |
    | run_sync(coro)   |-------->| asyncio event loop   |
    |   input() ...    |         |   - pollers          |
    |                  |<--------|   - autosave timer   |
    +------------------+         +----------------------+
"""

import asyncio
import threading
from concurrent.futures import Future
from typing import Any, Callable, Coroutine


class AsyncBridge:
    """Persistent asyncio loop running in a dedicated thread.

    Example:
        bridge = AsyncBridge()
        bridge.start()
        caso = bridge.run_sync(cases.get_case(42), timeout=30)
        bridge.stop()
    """

    def __init__(self):
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._started = threading.Event()
        self._lock = threading.Lock()

    def _run_loop(self):
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._started.set()

        try:
            self._loop.run_forever()
        finally:
            # Pollers and autosave timers still pending at shutdown
            pending = asyncio.all_tasks(self._loop)
            for task in pending:
                task.cancel()
            if pending:
                self._loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            self._loop.close()
            self._loop = None

    def start(self) -> None:
        """Start the loop thread. No-op if already running."""
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return

            self._started.clear()
            self._thread = threading.Thread(
                target=self._run_loop,
                name="abogadai-loop",
                daemon=True,
            )
            self._thread.start()

            self._started.wait(timeout=5.0)
            if not self._started.is_set():
                raise RuntimeError("Failed to start async bridge event loop")

    def stop(self) -> None:
        """Stop the loop and join the thread. Safe to call multiple times."""
        with self._lock:
            if self._loop is not None:
                self._loop.call_soon_threadsafe(self._loop.stop)
            if self._thread is not None:
                self._thread.join(timeout=5.0)
                self._thread = None
            self._started.clear()

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._loop is not None
            and self._loop.is_running()
        )

    def submit(self, coro: Coroutine[Any, Any, Any]) -> Future:
        """Schedule a coroutine on the bridge loop from any thread.

        Raises:
            RuntimeError: If the bridge is not started
        """
        if self._loop is None:
            raise RuntimeError("AsyncBridge not started. Call start() first.")
        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def run_sync(self, coro: Coroutine[Any, Any, Any], timeout: float | None = None) -> Any:
        """Submit a coroutine and block the calling thread for its result."""
        return self.submit(coro).result(timeout=timeout)

    def call(self, fn: Callable[[], Any], timeout: float | None = None) -> Any:
        """Run a plain callable on the loop thread (e.g. ``reader.start``)."""

        async def _call():
            return fn()

        return self.run_sync(_call(), timeout=timeout)
