"""Menu catalog loading for the storefront search."""
from __future__ import annotations

import hashlib
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Sequence

from pydantic import ValidationError

from .config import settings
from .models import CatalogItem
from .search import ALL_CATEGORIES

logger = logging.getLogger(__name__)

# Display order of the category chips on the menu page.
MENU_CATEGORIES = [
    ALL_CATEGORIES,
    "Tandoori Snacks",
    "Non-Vegetarian",
    "Vegetarian",
    "Biryani",
    "Rice Dishes",
    "Chinese Snacks",
    "Thali",
    "Main Course Veg",
    "Main Course Non-Veg",
    "Raita",
    "Egg Dishes",
    "Breads",
    "Chaap Gravy Items",
    "Veg Combo",
    "Non-Veg Combo",
    "Soup",
]


def _prepare_item(raw: dict) -> dict:
    categories = raw.get("categories")
    if categories is None:
        category = raw.get("category")
        categories = [category] if category else []
    elif isinstance(categories, str):
        categories = [categories]

    item = dict(raw)
    item["name"] = (raw.get("name") or raw.get("title") or "").strip()
    item["categories"] = list(categories)
    item.setdefault("description", "")
    return item


def parse_catalog(payload: list | dict) -> List[CatalogItem]:
    """Build catalog items from a list or a ``{"dishes": [...]}`` document.

    Entries without a usable name are skipped with a warning.
    """
    raw_items = payload.get("dishes", []) if isinstance(payload, dict) else payload
    items: List[CatalogItem] = []
    for raw in raw_items:
        try:
            items.append(CatalogItem.model_validate(_prepare_item(raw)))
        except ValidationError as exc:
            logger.warning("Skipping catalog entry %r: %s", raw.get("id"), exc.errors()[0]["msg"])
    return items


def load_catalog(path: str | Path) -> List[CatalogItem]:
    file_path = Path(path)
    if not file_path.exists():
        logger.warning("Catalog file %s is missing", file_path)
        return []
    with file_path.open("r", encoding="utf-8") as fh:
        payload = json.load(fh)
    items = parse_catalog(payload)
    logger.info("Loaded %s menu items from %s", len(items), file_path)
    return items


@lru_cache(maxsize=1)
def get_catalog() -> tuple[CatalogItem, ...]:
    return tuple(load_catalog(settings.catalog_path))


def catalog_fingerprint(catalog: Sequence[CatalogItem]) -> str:
    """Digest of the searchable fields, used to scope cached search results."""
    rows = [(str(item.id), item.name, item.categories) for item in catalog]
    payload = json.dumps(rows, ensure_ascii=False)
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


def categories_of(catalog: List[CatalogItem]) -> List[str]:
    """Known chip categories first, then any extra ones found in the catalog."""
    seen = set(MENU_CATEGORIES)
    extra: List[str] = []
    for item in catalog:
        for category in item.categories:
            if category not in seen:
                seen.add(category)
                extra.append(category)
    return MENU_CATEGORIES + extra
