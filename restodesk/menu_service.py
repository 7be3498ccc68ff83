"""Storefront menu search: ranking plus result caching and timing logs."""
from __future__ import annotations

import copy
import logging
from time import perf_counter
from typing import Dict, List, Optional, Sequence

from .cache import CacheBackend, get_cache
from .catalog import catalog_fingerprint, get_catalog
from .config import settings
from .debounce import Debouncer
from .models import CatalogItem, ScoredItem
from .search import ALL_CATEGORIES, rank
from .utils import hash_query

logger = logging.getLogger(__name__)


def _answer(payload: Dict[str, object], text: str) -> Dict[str, object]:
    # Returned payloads never alias the cached one.
    answer = dict(payload)
    answer["query"] = text
    answer["results"] = copy.deepcopy(payload["results"])
    return answer


def search_menu(
    query: str,
    category: str = ALL_CATEGORIES,
    *,
    catalog: Optional[Sequence[CatalogItem]] = None,
    cache: Optional[CacheBackend] = None,
) -> Dict[str, object]:
    """Rank the menu for ``query`` within ``category``.

    Uses the configured catalog and cache unless others are passed in.
    """
    text = (query or "").strip()
    items = get_catalog() if catalog is None else catalog
    store = get_cache() if cache is None else cache

    cache_key = hash_query(text.lower(), category, catalog_fingerprint(items))
    t0 = perf_counter()
    cached = store.get(cache_key)
    if cached is not None:
        logger.info(
            "timing: total=%.2fms cache_hit=1 q=%r category=%r",
            (perf_counter() - t0) * 1000,
            text,
            category,
        )
        return _answer(cached, text)

    ranked = rank(items, text, category)
    took_ms = (perf_counter() - t0) * 1000
    logger.info(
        "timing: total=%.2fms cache_hit=0 q=%r category=%r hits=%s of=%s",
        took_ms,
        text,
        category,
        len(ranked),
        len(items),
    )

    response = {
        "query": text,
        "category": category,
        "results": [item.model_dump() for item in ranked],
        "took_ms": took_ms,
    }
    store.set(cache_key, response, settings.cache_ttl_seconds)
    return _answer(response, text)


class MenuView:
    """Query and category state of the storefront menu page.

    Typing is debounced before results are recomputed; picking a category
    applies immediately.
    """

    def __init__(
        self,
        catalog: Sequence[CatalogItem],
        *,
        debounce_seconds: Optional[float] = None,
    ) -> None:
        self.catalog = catalog
        self.category = ALL_CATEGORIES
        self.search_query = ""
        self.applied_query = ""
        if debounce_seconds is None:
            debounce_seconds = settings.menu_debounce_ms / 1000
        self._debouncer = Debouncer(debounce_seconds)
        self.results: List[ScoredItem] = rank(catalog, "", ALL_CATEGORIES)

    def _apply(self) -> None:
        self.applied_query = self.search_query
        self.results = rank(self.catalog, self.applied_query, self.category)

    def set_search_query(self, text: str) -> None:
        self.search_query = text
        self._debouncer.call(self._apply)

    def clear_search(self) -> None:
        self.set_search_query("")

    def select_category(self, category: str) -> None:
        self.category = category
        self.results = rank(self.catalog, self.applied_query, self.category)

    async def flush(self) -> None:
        await self._debouncer.flush()

    @property
    def summary(self) -> str:
        query = self.applied_query.strip()
        if not query:
            return ""
        if not self.results:
            return f'No dishes found for "{query}". Try a different search term.'
        noun = "dish" if len(self.results) == 1 else "dishes"
        return f'Found {len(self.results)} {noun} matching "{query}"'
