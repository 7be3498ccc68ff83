"""Pydantic models for catalog, list and search payloads."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CatalogItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int | str
    name: str = Field(..., min_length=1)
    categories: list[str] = Field(default_factory=list)
    price: float = 0
    description: str = ""


class ScoredItem(CatalogItem):
    relevanceScore: int = Field(0, ge=0)


class MenuQuery(BaseModel):
    text: str = ""
    category: str = "All"


class Pagination(BaseModel):
    page: int = 1
    limit: int = 10
    totalItems: int = 0
    totalPages: int = 0


class ListResponse(BaseModel):
    items: list[Any] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)


class MenuSearchResponse(BaseModel):
    query: str
    category: str
    results: list[ScoredItem]
    took_ms: float
