"""Helpers for normalizing API envelopes and errors.

List endpoints of the admin API do not agree on where the payload lives: the
orders endpoint nests it under ``data.orders``, the menu under
``data.menuItems``, users under ``data.users`` and a few simple endpoints just
return a bare ``data`` list. Everything here folds those shapes into one.
"""
from __future__ import annotations

import hashlib
import json
import math
from typing import Any, Optional

import httpx

from .models import ListResponse, Pagination

# Lookup order matters: the first key holding a list wins.
ITEM_KEYS = ("orders", "menuItems", "users", "data")
DEFAULT_ERROR_MESSAGE = "An error occurred"


def extract_items(body: Any) -> list:
    if isinstance(body, list):
        return body
    if not isinstance(body, dict):
        return []
    nested = body.get("data")
    for container in (nested, body):
        if not isinstance(container, dict):
            continue
        for key in ITEM_KEYS:
            value = container.get(key)
            if isinstance(value, list):
                return value
    return []


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def extract_pagination(body: Any) -> Optional[Pagination]:
    """Read ``pagination`` from the top level, then from ``data``."""
    if not isinstance(body, dict):
        return None
    raw = body.get("pagination")
    if not isinstance(raw, dict):
        nested = body.get("data")
        raw = nested.get("pagination") if isinstance(nested, dict) else None
    if not isinstance(raw, dict):
        return None

    page = _as_int(raw.get("page"), 1)
    limit = _as_int(raw.get("limit"), 0)
    total_items = _as_int(raw.get("totalItems", raw.get("total")), 0)
    total_pages = raw.get("totalPages", raw.get("pages"))
    if total_pages is None and limit > 0:
        total_pages = math.ceil(total_items / limit)
    return Pagination(page=page, limit=limit, totalItems=total_items, totalPages=_as_int(total_pages, 0))


def normalize_envelope(body: Any, page: int = 1, limit: int = 10) -> ListResponse:
    """Fold any list envelope into ``{items, pagination}``.

    Envelopes without pagination are treated as a single page holding every
    returned item.
    """
    items = extract_items(body)
    pagination = extract_pagination(body)
    if pagination is None:
        pagination = Pagination(page=page, limit=limit, totalItems=len(items), totalPages=1 if items else 0)
    return ListResponse(items=items, pagination=pagination)


def describe_error(exc: BaseException) -> str:
    """Display message for a failed call: server message first, then the exception text."""
    message = getattr(exc, "message", None)
    if message:
        return str(message)
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
    return str(exc) or DEFAULT_ERROR_MESSAGE


def hash_query(*parts: Any) -> str:
    payload = json.dumps(parts, ensure_ascii=False, sort_keys=True, default=str)
    return "menu-search:" + hashlib.sha1(payload.encode("utf-8")).hexdigest()
