"""Desktop notification payloads for new and updated orders.

Delivery to the desktop is up to the injected sink; without one, notifications
are only logged.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

NEW_ORDER_TITLE = "New Order Received!"
STATUS_TITLES = {
    "confirmed": "Order Confirmed",
    "preparing": "Order Being Prepared",
    "ready": "Order Ready",
    "picked_up": "Out for Delivery",
    "delivered": "Order Delivered",
    "cancelled": "Order Cancelled",
}
DEFAULT_STATUS_TITLE = "Order Status Updated"


@dataclass
class Notification:
    title: str
    body: str = ""
    tag: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    require_interaction: bool = True


NotificationSink = Callable[[Notification], None]


def _log_sink(notification: Notification) -> None:
    logger.info("notification: %s | %s", notification.title, notification.body.replace("\n", " / "))


def _customer_name(order: Mapping[str, Any]) -> str:
    customer = order.get("customer") or {}
    return customer.get("name", "") if isinstance(customer, Mapping) else str(customer)


def _final_amount(order: Mapping[str, Any]) -> float:
    pricing = order.get("pricing") or {}
    try:
        return float(pricing.get("finalAmount") or 0)
    except (TypeError, ValueError):
        return 0.0


class NotificationService:
    def __init__(self, sink: Optional[NotificationSink] = None, *, enabled: bool = True) -> None:
        self.sink = sink or _log_sink
        self.enabled = enabled

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def show(self, title: str, **options: Any) -> Optional[Notification]:
        if not self.enabled:
            logger.warning("Notifications not enabled, dropping %r", title)
            return None
        notification = Notification(title=title, **options)
        try:
            self.sink(notification)
        except Exception:
            logger.exception("Failed to show notification %r", title)
            return None
        return notification

    def show_new_order_notification(self, order: Mapping[str, Any]) -> Optional[Notification]:
        order_id = order.get("_id")
        number = order.get("orderNumber")
        return self.show(
            NEW_ORDER_TITLE,
            body=f"Order #{number}\n{_customer_name(order)}\n₹{_final_amount(order):.2f}",
            tag=f"order-{order_id}",
            data={"orderId": order_id, "orderNumber": number, "type": "NEW_ORDER"},
        )

    def show_order_status_notification(self, order: Mapping[str, Any], status: str) -> Optional[Notification]:
        order_id = order.get("_id")
        number = order.get("orderNumber")
        return self.show(
            STATUS_TITLES.get(status, DEFAULT_STATUS_TITLE),
            body=f"Order #{number}\n{_customer_name(order)}",
            tag=f"order-status-{order_id}",
            data={
                "orderId": order_id,
                "orderNumber": number,
                "type": "ORDER_STATUS_UPDATE",
                "status": status,
            },
        )
