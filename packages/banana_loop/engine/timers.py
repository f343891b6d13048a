"""Delayed visual callbacks on the asyncio event loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class AsyncioTimerQueue:
    """
    TimerQueue backed by ``loop.call_later``.

    Must be used from the event loop thread. Callback exceptions are
    logged and never reach the scheduler.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop
        self._handles: set[asyncio.TimerHandle] = set()

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        handle: asyncio.TimerHandle

        def fire() -> None:
            self._handles.discard(handle)
            try:
                callback(*args)
            except Exception as e:
                logger.warning(f"Visual callback failed: {e}")

        handle = loop.call_later(max(0.0, delay), fire)
        self._handles.add(handle)
        return handle

    def cancel_all(self) -> None:
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()

    @property
    def pending_count(self) -> int:
        return len(self._handles)
