"""Paginated, filterable, debounced-search state for one admin list screen.

The controller owns ``page``, ``limit``, ``filters`` and ``search_text`` and
keeps ``items``/``pagination`` in sync with a remote collection through an
injected fetch coroutine. It is the error boundary for that collection: a
failed call only sets ``error`` and leaves the last good data in place.

Every fetch is tagged with a sequence number. A response is applied only when
its request is still the most recently issued one, so a slow response for an
old page or search can never overwrite a newer result.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from .config import settings
from .debounce import Debouncer
from .events import Subscription
from .models import Pagination
from .utils import describe_error, normalize_envelope

logger = logging.getLogger(__name__)

FetchFunction = Callable[[Dict[str, Any]], Awaitable[Any]]
Listener = Callable[["ListState"], None]

# Filter values meaning "no filter", as sent by the filter chips.
CLEARED_FILTER_VALUES = (None, "", "All", "ALL")


@dataclass
class ListState:
    items: List[Any] = field(default_factory=list)
    pagination: Pagination = field(default_factory=Pagination)
    loading: bool = False
    error: Optional[str] = None
    page: int = 1
    limit: int = 10
    filters: Dict[str, Any] = field(default_factory=dict)
    search_text: str = ""


class ListController:
    def __init__(
        self,
        fetch_fn: FetchFunction,
        *,
        limit: Optional[int] = None,
        filters: Optional[Mapping[str, Any]] = None,
        debounce_seconds: Optional[float] = None,
        name: str = "list",
    ) -> None:
        self.name = name
        self._fetch_fn = fetch_fn
        self.items: List[Any] = []
        self.limit = limit or settings.default_page_limit
        self.pagination = Pagination(limit=self.limit)
        self.loading = False
        self.error: Optional[str] = None
        self.page = 1
        self.filters: Dict[str, Any] = {}
        self.search_text = ""
        self._sequence = 0
        self._listeners: Dict[int, Listener] = {}
        self._next_listener = 0
        if debounce_seconds is None:
            debounce_seconds = settings.list_debounce_ms / 1000
        self._debouncer = Debouncer(debounce_seconds)
        for key, value in (filters or {}).items():
            self._merge_filter(key, value)

    @property
    def state(self) -> ListState:
        return ListState(
            items=list(self.items),
            pagination=self.pagination.model_copy(),
            loading=self.loading,
            error=self.error,
            page=self.page,
            limit=self.limit,
            filters=copy.deepcopy(self.filters),
            search_text=self.search_text,
        )

    @property
    def search_pending(self) -> bool:
        return self._debouncer.pending

    def subscribe(self, listener: Listener) -> Subscription:
        token = self._next_listener
        self._next_listener += 1
        self._listeners[token] = listener
        return Subscription(lambda: self._listeners.pop(token, None))

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.state
        for listener in list(self._listeners.values()):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("%s listener %r failed", self.name, listener)

    def build_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page": self.page, "limit": self.limit}
        params.update(self.filters)
        search = self.search_text.strip()
        if search:
            params["search"] = search
        return params

    def set_search_text(self, text: str) -> None:
        """Record the text now and fetch once typing has paused."""
        self.search_text = text
        self.page = 1
        self._notify()
        self._debouncer.call(self.fetch)

    async def flush_search(self) -> ListState:
        """Fire a pending debounced search immediately."""
        if self._debouncer.pending:
            await self._debouncer.flush()
        return self.state

    def _merge_filter(self, name: str, value: Any) -> None:
        if value in CLEARED_FILTER_VALUES:
            self.filters.pop(name, None)
        else:
            self.filters[name] = value

    async def set_filter(self, name: str, value: Any) -> ListState:
        self._merge_filter(name, value)
        self.page = 1
        return await self.fetch()

    async def set_filters(self, filters: Mapping[str, Any]) -> ListState:
        for key, value in filters.items():
            self._merge_filter(key, value)
        self.page = 1
        return await self.fetch()

    async def clear_filters(self) -> ListState:
        self.filters.clear()
        self.page = 1
        return await self.fetch()

    def clamp_page(self, page: int) -> int:
        last_page = max(1, self.pagination.totalPages)
        return min(max(1, page), last_page)

    async def go_to_page(self, page: int) -> ListState:
        """Move to ``page``, clamped into ``[1, totalPages]``."""
        target = self.clamp_page(page)
        if target != page:
            logger.debug("%s page %s clamped to %s", self.name, page, target)
        self.page = target
        return await self.fetch()

    async def change_limit(self, limit: int) -> ListState:
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")
        self.limit = limit
        self.page = 1
        return await self.fetch()

    async def refresh(self) -> ListState:
        return await self.fetch()

    async def fetch(self) -> ListState:
        self._sequence += 1
        request_id = self._sequence
        params = self.build_params()
        self.loading = True
        self._notify()
        logger.debug("%s fetch #%s params=%s", self.name, request_id, params)

        try:
            body = await self._fetch_fn(params)
            response = normalize_envelope(body, params["page"], params["limit"])
        except Exception as exc:
            if request_id != self._sequence:
                logger.debug("%s dropping stale failure of #%s", self.name, request_id)
                return self.state
            self.error = describe_error(exc)
            logger.warning("%s fetch #%s failed: %s", self.name, request_id, self.error)
        else:
            if request_id != self._sequence:
                logger.debug("%s dropping stale response of #%s", self.name, request_id)
                return self.state
            self.items = response.items
            self.pagination = response.pagination
            self.error = None
            logger.info(
                "%s loaded page=%s items=%s total=%s",
                self.name,
                self.pagination.page,
                len(self.items),
                self.pagination.totalItems,
            )

        self.loading = False
        self._notify()
        return self.state

    def close(self) -> None:
        self._debouncer.cancel()
        self._listeners.clear()
