"""Menu search service, caching and the debounced menu view."""

import asyncio

from restodesk.cache import InMemoryCache
from restodesk.catalog import categories_of, parse_catalog
from restodesk.menu_service import MenuView, search_menu

CATALOG = parse_catalog(
    {
        "dishes": [
            {"id": 1, "name": "Chicken Biryani", "categories": ["Biryani"], "price": 220},
            {"id": 2, "name": "Veg Biryani", "categories": ["Biryani", "Vegetarian"], "price": 160},
            {"id": 3, "name": "Paneer Tikka", "categories": ["Tandoori Snacks"], "price": 240},
            {"id": 4, "name": "Butter Naan", "category": "Breads", "price": 50},
        ]
    }
)


class CountingCache(InMemoryCache):
    def __init__(self):
        super().__init__()
        self.hits = 0

    def get(self, key):
        value = super().get(key)
        if value is not None:
            self.hits += 1
        return value


def test_parse_catalog_normalizes_categories_and_skips_bad_rows():
    items = parse_catalog([{"id": 1, "title": "Tomato Soup", "category": "Soup"}, {"id": 2, "name": ""}])

    assert len(items) == 1
    assert items[0].name == "Tomato Soup"
    assert items[0].categories == ["Soup"]


def test_categories_keep_chip_order_and_append_unknown():
    items = parse_catalog([{"id": 1, "name": "Kulfi", "categories": ["Desserts"]}])

    categories = categories_of(items)

    assert categories[0] == "All"
    assert categories[-1] == "Desserts"


def test_search_menu_returns_ranked_payload():
    payload = search_menu("biryani", catalog=CATALOG, cache=InMemoryCache())

    assert payload["query"] == "biryani"
    assert [item["name"] for item in payload["results"]] == ["Chicken Biryani", "Veg Biryani"]
    assert payload["results"][0]["relevanceScore"] == 900


def test_search_menu_uses_cache():
    cache = CountingCache()

    first = search_menu("naan", "Breads", catalog=CATALOG, cache=cache)
    second = search_menu("NAAN ", "Breads", catalog=CATALOG, cache=cache)

    assert cache.hits == 1
    assert first["results"] == second["results"]
    assert second["query"] == "NAAN"


def test_in_memory_cache_expires_and_evicts():
    cache = InMemoryCache(max_entries=2)
    cache.set("a", {"v": 1}, ttl=60)
    cache.set("b", {"v": 2}, ttl=60)
    cache.get("a")
    cache.set("c", {"v": 3}, ttl=60)

    assert cache.get("b") is None
    assert cache.get("a") == {"v": 1}

    cache.set("gone", {"v": 0}, ttl=-1)
    assert cache.get("gone") is None


def test_menu_view_debounces_typing():
    async def scenario():
        view = MenuView(CATALOG, debounce_seconds=0.2)
        view.set_search_query("chi")
        view.set_search_query("chiken")
        before = [item.id for item in view.results]
        await asyncio.sleep(0.4)
        return view, before

    view, before = asyncio.run(scenario())

    assert before == [1, 2, 3, 4]
    assert view.applied_query == "chiken"
    assert [item.id for item in view.results] == [1]
    assert view.summary == 'Found 1 dish matching "chiken"'


def test_menu_view_category_applies_immediately():
    async def scenario():
        view = MenuView(CATALOG, debounce_seconds=0.2)
        view.select_category("Biryani")
        return view

    view = asyncio.run(scenario())

    assert [item.id for item in view.results] == [1, 2]
    assert view.summary == ""


def test_menu_view_reports_no_results():
    async def scenario():
        view = MenuView(CATALOG, debounce_seconds=0)
        view.set_search_query("pizza")
        await view.flush()
        return view

    view = asyncio.run(scenario())

    assert view.results == []
    assert view.summary == 'No dishes found for "pizza". Try a different search term.'


def test_cache_is_scoped_to_catalog_contents():
    cache = InMemoryCache()
    biryani = parse_catalog([{"id": 1, "name": "Chicken Biryani", "categories": ["Biryani"]}])
    tikka = parse_catalog([{"id": 1, "name": "Paneer Tikka", "categories": ["Tandoori Snacks"]}])

    first = search_menu("biryani", catalog=biryani, cache=cache)
    second = search_menu("biryani", catalog=tikka, cache=cache)

    assert [item["name"] for item in first["results"]] == ["Chicken Biryani"]
    assert second["results"] == []


def test_cached_results_are_not_shared_with_callers():
    cache = InMemoryCache()

    first = search_menu("Biryani", catalog=CATALOG, cache=cache)
    first["results"].clear()
    second = search_menu("biryani", catalog=CATALOG, cache=cache)

    assert second["query"] == "biryani"
    assert [item["id"] for item in second["results"]] == [1, 2]
