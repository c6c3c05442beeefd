# src/imagecache/utils/delivery_queue.py
from __future__ import annotations

import asyncio
import logging
import queue
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class DeliveryQueue:
    """
    Single-consumer channel from fetch workers back to the display context.

    Workers `post()` callbacks from any thread; the thread owning the display calls
    `drain()` (or `run_until()`), which runs them one at a time, in posting order.
    """

    def __init__(self):
        self._queue: "queue.SimpleQueue[Callable[[], None]]" = queue.SimpleQueue()

    def post(self, callback: Callable[[], None]) -> None:
        self._queue.put(callback)

    def _run(self, callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception as e:
            logger.error("Delivery callback failed: %s", e, exc_info=True)

    def drain(self, timeout: Optional[float] = None) -> int:
        """
        Runs every pending callback. With a timeout, first waits up to `timeout`
        seconds for at least one to arrive. Returns the number of callbacks run.
        """
        count = 0
        if timeout is not None:
            try:
                self._run(self._queue.get(timeout=timeout))
                count += 1
            except queue.Empty:
                return 0
        while True:
            try:
                callback = self._queue.get_nowait()
            except queue.Empty:
                return count
            self._run(callback)
            count += 1

    def run_until(self, predicate: Callable[[], bool], timeout: float = 30.0) -> bool:
        """Pumps callbacks until `predicate()` holds or `timeout` seconds pass."""
        deadline = time.monotonic() + timeout
        while not predicate():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            self.drain(timeout=min(remaining, 0.1))
        return True


class LoopDelivery:
    """Delivers callbacks onto an asyncio event loop owned by the display."""

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self.loop = loop

    def post(self, callback: Callable[[], None]) -> None:
        self.loop.call_soon_threadsafe(callback)
