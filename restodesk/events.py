"""Typed publish/subscribe bus for admin live updates."""
from __future__ import annotations

import asyncio
import inspect
import itertools
import logging
from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Dict, List, Set, Tuple, Union

logger = logging.getLogger(__name__)

Callback = Callable[[Any], Any]


class SocketEvent(str, Enum):
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    NEW_ORDER = "order:new"
    ORDER_UPDATE = "order:update"
    NOTIFICATION = "notification"
    ADMIN_STATS = "admin:stats"
    REQUEST_STATS = "admin:request-stats"


def _event_name(event: Union[SocketEvent, str]) -> str:
    return event.value if isinstance(event, SocketEvent) else str(event)


class Subscription:
    """Handle returned by every subscribe call; unsubscribing twice is a no-op."""

    def __init__(self, cancel: Callable[[], None]) -> None:
        self._cancel = cancel
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._cancel()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unsubscribe()


class EventBus:
    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Tuple[int, Callback]]] = defaultdict(list)
        self._tokens = itertools.count()
        self._pending: Set["asyncio.Future[Any]"] = set()

    def subscribe(self, event: Union[SocketEvent, str], callback: Callback) -> Subscription:
        name = _event_name(event)
        token = next(self._tokens)
        self._subscribers[name].append((token, callback))
        return Subscription(lambda: self._remove(name, token))

    def _remove(self, name: str, token: int) -> None:
        entries = self._subscribers.get(name)
        if not entries:
            return
        entries[:] = [entry for entry in entries if entry[0] != token]

    def subscriber_count(self, event: Union[SocketEvent, str]) -> int:
        return len(self._subscribers.get(_event_name(event), ()))

    def publish(self, event: Union[SocketEvent, str], payload: Any = None) -> int:
        """Deliver ``payload`` to every subscriber in subscription order.

        A failing subscriber is logged and skipped. Coroutine callbacks are
        scheduled on the running loop. Returns the number of subscribers called.
        """
        name = _event_name(event)
        delivered = 0
        for _, callback in list(self._subscribers.get(name, ())):
            try:
                result = callback(payload)
                if inspect.isawaitable(result):
                    self._track(asyncio.ensure_future(result), callback, name)
            except Exception:
                logger.exception("Subscriber %r for %s failed", callback, name)
            delivered += 1
        return delivered

    def _track(self, task: "asyncio.Future[Any]", callback: Callback, name: str) -> None:
        self._pending.add(task)

        def done(finished: "asyncio.Future[Any]") -> None:
            self._pending.discard(finished)
            if finished.cancelled():
                return
            exc = finished.exception()
            if exc is not None:
                logger.error("Subscriber %r for %s failed", callback, name, exc_info=exc)

        task.add_done_callback(done)

    async def drain(self) -> None:
        """Wait for coroutine subscribers still running."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def clear(self) -> None:
        self._subscribers.clear()
