"""Dashboard counters aggregated from several stats endpoints."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional

from .api_client import AdminApi
from .events import Subscription
from .utils import describe_error, extract_pagination

logger = logging.getLogger(__name__)

Extractor = Callable[[Any], Dict[str, Any]]


@dataclass(frozen=True)
class StatsSource:
    name: str
    fetch: Callable[[], Awaitable[Any]]
    extract: Extractor


class StatsAggregator:
    """Flat stats object fed by independent sources.

    Sources run concurrently; each one merges its fields as soon as it
    resolves. A failed source records an entry in ``errors`` and keeps its
    previous fields, without holding back the others.
    """

    def __init__(self, sources: Iterable[StatsSource], initial: Optional[Mapping[str, Any]] = None) -> None:
        self.sources: List[StatsSource] = list(sources)
        self.stats: Dict[str, Any] = dict(initial or {})
        self.errors: Dict[str, str] = {}
        self._listeners: Dict[int, Callable[[Dict[str, Any]], None]] = {}
        self._next_listener = 0

    def subscribe(self, listener: Callable[[Dict[str, Any]], None]) -> Subscription:
        token = self._next_listener
        self._next_listener += 1
        self._listeners[token] = listener
        return Subscription(lambda: self._listeners.pop(token, None))

    def _notify(self) -> None:
        snapshot = dict(self.stats)
        for listener in list(self._listeners.values()):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Stats listener %r failed", listener)

    async def refresh(self) -> Dict[str, Any]:
        await asyncio.gather(*(self._refresh_source(source) for source in self.sources))
        return dict(self.stats)

    async def _refresh_source(self, source: StatsSource) -> None:
        try:
            body = await source.fetch()
            fields = source.extract(body)
        except Exception as exc:
            self.errors[source.name] = describe_error(exc)
            logger.warning("Stats source %s failed: %s", source.name, self.errors[source.name])
            self._notify()
            return
        self.errors.pop(source.name, None)
        self.stats.update(fields)
        logger.debug("Stats source %s -> %s", source.name, fields)
        self._notify()

    def apply_live(self, payload: Any) -> None:
        """Merge a pushed ``admin:stats`` payload."""
        if not isinstance(payload, Mapping):
            logger.debug("Ignoring live stats payload %r", payload)
            return
        self.stats.update(payload)
        self._notify()


def _unwrap(body: Any) -> Dict[str, Any]:
    if not isinstance(body, dict):
        return {}
    data = body.get("data")
    return data if isinstance(data, dict) else body


def _bucket_count(buckets: Any, key: str) -> int:
    for bucket in buckets or []:
        if isinstance(bucket, dict) and bucket.get("_id") == key:
            return bucket.get("count") or 0
    return 0


def order_overview_stats(body: Any) -> Dict[str, Any]:
    payload = _unwrap(body)
    overview = payload.get("overview") or {}
    return {
        "totalOrders": overview.get("totalOrders") or 0,
        "totalRevenue": overview.get("totalRevenue") or 0,
        "pendingOrders": _bucket_count(payload.get("statusStats"), "PENDING"),
    }


def customer_stats(body: Any) -> Dict[str, Any]:
    payload = _unwrap(body)
    return {"totalCustomers": _bucket_count(payload.get("roleStats"), "customer")}


def total_items_as(field: str) -> Extractor:
    def extract(body: Any) -> Dict[str, Any]:
        pagination = extract_pagination(body)
        return {field: pagination.totalItems if pagination else 0}

    return extract


def dashboard_sources(api: AdminApi) -> List[StatsSource]:
    return [
        StatsSource("orders", api.orders.stats, order_overview_stats),
        StatsSource("users", api.users.stats, customer_stats),
    ]


def menu_sources(api: AdminApi) -> List[StatsSource]:
    # Each count is the totalItems of a one-row page with the matching filter.
    def count(params: Dict[str, Any]) -> Callable[[], Awaitable[Any]]:
        return lambda: api.menu.list({"page": 1, "limit": 1, **params})

    return [
        StatsSource("total", count({}), total_items_as("total")),
        StatsSource("available", count({"isAvailable": True}), total_items_as("available")),
        StatsSource("unavailable", count({"isAvailable": False}), total_items_as("unavailable")),
    ]
