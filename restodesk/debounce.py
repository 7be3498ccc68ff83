"""Cancellable single-slot timer for coalescing rapid input."""
from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

Action = Callable[[], Union[Awaitable[Any], Any]]


class Debouncer:
    """Runs only the most recent action, ``delay`` seconds after the last call.

    Every :meth:`call` cancels the pending timer and starts a new one. Must be
    used from inside a running event loop.
    """

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self._handle: Optional[asyncio.Task] = None
        self._action: Optional[Action] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None and not self._handle.done()

    def call(self, action: Action) -> asyncio.Task:
        self.cancel()
        self._action = action
        self._handle = asyncio.get_running_loop().create_task(self._fire(action))
        return self._handle

    def cancel(self) -> None:
        if self._handle is not None and not self._handle.done():
            self._handle.cancel()
        self._handle = None
        self._action = None

    async def flush(self) -> None:
        """Run the pending action now instead of waiting for the timer."""
        action = self._action
        if action is None:
            return
        self.cancel()
        await _run(action)

    async def _fire(self, action: Action) -> None:
        await asyncio.sleep(self.delay)
        # Past this point the action is no longer cancellable through the timer.
        self._handle = None
        self._action = None
        await _run(action)


async def _run(action: Action) -> None:
    result = action()
    if inspect.isawaitable(result):
        await result
