"""Socket.IO connection for admin live updates.

Incoming socket events are re-published on an :class:`EventBus`; consumers
subscribe there and get an unsubscribe handle back. The service is constructed
and passed around explicitly; nothing here is a module-level singleton.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol

import socketio
from socketio.exceptions import ConnectionError as SocketConnectionError

from .config import settings
from .events import Callback, EventBus, SocketEvent, Subscription
from .notifications import NotificationService

logger = logging.getLogger(__name__)

FORWARDED_EVENTS = (
    SocketEvent.ORDER_UPDATE,
    SocketEvent.NOTIFICATION,
    SocketEvent.ADMIN_STATS,
)


class SocketTransport(Protocol):
    connected: bool

    def on(self, event: str, handler: Callable[..., Any]) -> Any: ...

    async def connect(self, url: str, auth: Any = None) -> None: ...

    async def disconnect(self) -> None: ...

    async def emit(self, event: str, data: Any = None) -> None: ...


def default_transport() -> socketio.AsyncClient:
    return socketio.AsyncClient(reconnection=True, reconnection_delay=1, reconnection_attempts=5)


def _first(args: tuple) -> Any:
    return args[0] if args else None


class SocketService:
    def __init__(
        self,
        url: Optional[str] = None,
        *,
        bus: Optional[EventBus] = None,
        notifier: Optional[NotificationService] = None,
        transport_factory: Callable[[], SocketTransport] = default_transport,
    ) -> None:
        self.url = url or settings.socket_url
        self.bus = bus or EventBus()
        self.notifier = notifier
        self._transport_factory = transport_factory
        self._transport: Optional[SocketTransport] = None
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self, token: str) -> bool:
        """Open the socket with ``token``; returns whether it is connected."""
        if self._transport is not None and self._connected:
            return True

        transport = self._transport_factory()
        transport.on(SocketEvent.CONNECT.value, self._handle_connect)
        transport.on(SocketEvent.DISCONNECT.value, self._handle_disconnect)
        transport.on("error", self._handle_error)
        transport.on(SocketEvent.NEW_ORDER.value, self._handle_new_order)
        for event in FORWARDED_EVENTS:
            transport.on(event.value, self._forwarder(event))

        try:
            await transport.connect(self.url, auth={"token": token})
        except SocketConnectionError as exc:
            logger.error("Socket connection to %s failed: %s", self.url, exc)
            return False
        self._transport = transport
        self._connected = True
        return True

    async def disconnect(self) -> None:
        transport, self._transport = self._transport, None
        self._connected = False
        if transport is not None:
            await transport.disconnect()

    async def join_admin_dashboard(self) -> None:
        if self._transport is not None and self._connected:
            await self._transport.emit(SocketEvent.REQUEST_STATS.value)

    def _handle_connect(self) -> None:
        logger.info("Socket connected to %s", self.url)
        self._connected = True
        self.bus.publish(SocketEvent.CONNECT)

    def _handle_disconnect(self, *args: Any) -> None:
        logger.info("Socket disconnected")
        self._connected = False
        self.bus.publish(SocketEvent.DISCONNECT, _first(args))

    def _handle_error(self, *args: Any) -> None:
        logger.error("Socket error: %s", _first(args))

    def _handle_new_order(self, *args: Any) -> None:
        order = _first(args)
        if not isinstance(order, dict):
            logger.warning("Ignoring malformed order payload %r", order)
            return
        logger.info("New order received: %s", order.get("orderNumber"))
        if self.notifier is not None and self.notifier.enabled:
            self.notifier.show_new_order_notification(order)
        self.bus.publish(SocketEvent.NEW_ORDER, order)

    def _forwarder(self, event: SocketEvent) -> Callable[..., None]:
        def forward(*args: Any) -> None:
            self.bus.publish(event, _first(args))

        return forward

    def on_new_order(self, callback: Callback) -> Subscription:
        return self.bus.subscribe(SocketEvent.NEW_ORDER, callback)

    def on_order_update(self, callback: Callback) -> Subscription:
        return self.bus.subscribe(SocketEvent.ORDER_UPDATE, callback)

    def on_notification(self, callback: Callback) -> Subscription:
        return self.bus.subscribe(SocketEvent.NOTIFICATION, callback)

    def on_admin_stats(self, callback: Callback) -> Subscription:
        return self.bus.subscribe(SocketEvent.ADMIN_STATS, callback)
