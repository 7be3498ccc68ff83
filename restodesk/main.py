"""FastAPI application serving the storefront menu search."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import List, Sequence

from fastapi import Depends, FastAPI, Query

from .cache import CacheBackend, get_cache
from .catalog import categories_of, get_catalog
from .config import settings
from .menu_service import search_menu
from .models import CatalogItem, MenuSearchResponse
from .search import ALL_CATEGORIES

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL = logging.getLevelName(settings.log_level.upper())

# Replace uvicorn's default handlers so library loggers share one format.
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, force=True)
for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    logging.getLogger(name).setLevel(LOG_LEVEL)

logger = logging.getLogger(__name__)


def catalog_dependency() -> Sequence[CatalogItem]:
    return get_catalog()


def cache_dependency() -> CacheBackend:
    return get_cache()


@asynccontextmanager
async def lifespan(app: FastAPI):
    catalog = get_catalog()
    logger.info("Menu search ready with %s items from %s", len(catalog), settings.catalog_path)
    yield


app = FastAPI(title="Restaurant Menu Search", lifespan=lifespan)


@app.get("/health")
async def health(
    catalog: Sequence[CatalogItem] = Depends(catalog_dependency),
    cache: CacheBackend = Depends(cache_dependency),
) -> dict:
    return {"status": "ok", "items": len(catalog), "cache": type(cache).__name__}


@app.get("/menu/categories", response_model=List[str])
async def menu_categories(catalog: Sequence[CatalogItem] = Depends(catalog_dependency)) -> List[str]:
    return categories_of(list(catalog))


@app.get("/menu/search", response_model=MenuSearchResponse)
async def menu_search(
    q: str = Query("", description="Free-text dish query; empty lists the whole category"),
    category: str = Query(ALL_CATEGORIES, description="Category filter"),
    catalog: Sequence[CatalogItem] = Depends(catalog_dependency),
    cache: CacheBackend = Depends(cache_dependency),
) -> MenuSearchResponse:
    payload = search_menu(q, category, catalog=catalog, cache=cache)
    return MenuSearchResponse(**payload)
