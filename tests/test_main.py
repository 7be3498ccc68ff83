"""HTTP surface of the menu search."""

import pytest
from fastapi.testclient import TestClient

from restodesk.cache import InMemoryCache
from restodesk.catalog import parse_catalog
from restodesk.main import app, cache_dependency, catalog_dependency

CATALOG = tuple(
    parse_catalog(
        [
            {"id": 1, "name": "Chicken Biryani", "categories": ["Biryani", "Non-Vegetarian"], "price": 220},
            {"id": 2, "name": "Veg Biryani", "categories": ["Biryani", "Vegetarian"], "price": 160},
            {"id": 3, "name": "Paneer Tikka", "categories": ["Tandoori Snacks", "Vegetarian"], "price": 240},
        ]
    )
)


@pytest.fixture
def client():
    cache = InMemoryCache()
    app.dependency_overrides[catalog_dependency] = lambda: CATALOG
    app.dependency_overrides[cache_dependency] = lambda: cache
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "items": 3, "cache": "InMemoryCache"}


def test_search_ranks_and_filters(client):
    response = client.get("/menu/search", params={"q": "biryani", "category": "Vegetarian"})

    assert response.status_code == 200
    body = response.json()
    assert [item["name"] for item in body["results"]] == ["Veg Biryani"]
    assert body["results"][0]["relevanceScore"] == 900


def test_search_without_query_lists_category(client):
    body = client.get("/menu/search", params={"category": "Vegetarian"}).json()

    assert [item["id"] for item in body["results"]] == [2, 3]


def test_unknown_category_yields_no_results(client):
    response = client.get("/menu/search", params={"q": "tikka", "category": "Desserts"})

    assert response.status_code == 200
    assert response.json()["results"] == []


def test_categories(client):
    categories = client.get("/menu/categories").json()

    assert categories[0] == "All"
    assert "Biryani" in categories
