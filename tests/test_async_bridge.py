import asyncio
import threading

import pytest

from abogadai.async_bridge import AsyncBridge


def test_bridge_runs_coroutines_and_callables_on_its_thread():
    bridge = AsyncBridge()
    bridge.start()
    try:
        assert bridge.is_running

        async def add(a, b):
            await asyncio.sleep(0)
            return a + b, threading.current_thread().name

        total, thread_name = bridge.run_sync(add(2, 3), timeout=5)
        assert total == 5
        assert thread_name == "abogadai-loop"

        # call() runs on the loop, so it can create tasks there
        def schedule():
            loop = asyncio.get_running_loop()
            return loop.create_task(asyncio.sleep(0)) is not None

        assert bridge.call(schedule, timeout=5) is True
    finally:
        bridge.stop()

    assert not bridge.is_running


def test_bridge_propagates_exceptions():
    bridge = AsyncBridge()
    bridge.start()
    try:
        async def boom():
            raise ValueError("bad field")

        with pytest.raises(ValueError, match="bad field"):
            bridge.run_sync(boom(), timeout=5)
    finally:
        bridge.stop()


def test_bridge_cancels_pending_tasks_on_stop():
    bridge = AsyncBridge()
    bridge.start()
    cancelled = threading.Event()

    async def forever():
        try:
            await asyncio.sleep(60)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    bridge.call(lambda: asyncio.get_running_loop().create_task(forever()), timeout=5)
    bridge.stop()
    bridge.stop()

    assert cancelled.is_set()


def test_bridge_submit_requires_start():
    bridge = AsyncBridge()

    async def noop():
        return None

    coro = noop()
    with pytest.raises(RuntimeError):
        bridge.submit(coro)
    coro.close()
