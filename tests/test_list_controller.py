"""List controller pagination, filtering, debounce and race handling."""

import asyncio

from restodesk.api_client import ApiError
from restodesk.list_controller import ListController


def _page(items, page=1, total_pages=3, limit=10):
    return {
        "data": {"orders": items},
        "pagination": {"page": page, "limit": limit, "totalItems": total_pages * limit, "totalPages": total_pages},
    }


class RecordingFetch:
    """Fetch double that answers immediately and records every request."""

    def __init__(self, responses=None):
        self.calls = []
        self.responses = list(responses or [])

    async def __call__(self, params):
        self.calls.append(dict(params))
        if self.responses:
            response = self.responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return _page([{"page": params["page"]}], page=params["page"])


class ControlledFetch:
    """Fetch double whose calls stay pending until resolved by the test."""

    def __init__(self):
        self.calls = []
        self.futures = []

    async def __call__(self, params):
        future = asyncio.get_running_loop().create_future()
        self.calls.append(dict(params))
        self.futures.append(future)
        return await future


def test_refresh_loads_items_and_pagination():
    async def scenario():
        controller = ListController(RecordingFetch(), limit=10)
        state = await controller.refresh()
        return state

    state = asyncio.run(scenario())

    assert state.items == [{"page": 1}]
    assert state.pagination.totalPages == 3
    assert state.loading is False
    assert state.error is None


def test_params_include_filters_and_trimmed_search():
    fetch = RecordingFetch()

    async def scenario():
        controller = ListController(fetch, limit=5, filters={"status": "PENDING", "role": "All"}, debounce_seconds=0)
        controller.set_search_text("  biryani ")
        await controller.flush_search()

    asyncio.run(scenario())

    assert fetch.calls[-1] == {"page": 1, "limit": 5, "status": "PENDING", "search": "biryani"}


def test_set_filter_resets_page_and_fetches_immediately():
    fetch = RecordingFetch()

    async def scenario():
        controller = ListController(fetch)
        await controller.refresh()
        await controller.go_to_page(3)
        state = await controller.set_filter("status", "DELIVERED")
        return state

    state = asyncio.run(scenario())

    assert state.page == 1
    assert fetch.calls[-1]["status"] == "DELIVERED"
    assert fetch.calls[-1]["page"] == 1


def test_clearing_a_filter_removes_it():
    fetch = RecordingFetch()

    async def scenario():
        controller = ListController(fetch, filters={"status": "PENDING"})
        await controller.set_filter("status", "ALL")
        return controller

    controller = asyncio.run(scenario())

    assert "status" not in fetch.calls[-1]
    assert controller.filters == {}


def test_go_to_page_keeps_filters_and_search():
    fetch = RecordingFetch()

    async def scenario():
        controller = ListController(fetch, filters={"status": "READY"}, debounce_seconds=0)
        controller.set_search_text("rahul")
        await controller.flush_search()
        await controller.go_to_page(2)

    asyncio.run(scenario())

    assert fetch.calls[-1] == {"page": 2, "limit": 10, "status": "READY", "search": "rahul"}


def test_go_to_page_clamps_out_of_range():
    fetch = RecordingFetch()

    async def scenario():
        controller = ListController(fetch)
        await controller.refresh()
        high = await controller.go_to_page(99)
        low = await controller.go_to_page(0)
        return high, low

    high, low = asyncio.run(scenario())

    assert high.page == 3
    assert low.page == 1
    assert [call["page"] for call in fetch.calls] == [1, 3, 1]


def test_change_limit_resets_page():
    fetch = RecordingFetch()

    async def scenario():
        controller = ListController(fetch)
        await controller.refresh()
        await controller.go_to_page(2)
        return await controller.change_limit(25)

    state = asyncio.run(scenario())

    assert state.limit == 25
    assert fetch.calls[-1] == {"page": 1, "limit": 25}


def test_search_is_debounced_to_last_keystroke():
    fetch = RecordingFetch()

    async def scenario():
        controller = ListController(fetch, debounce_seconds=0.2)
        for text in ("c", "ch", "chi", "chicken"):
            controller.set_search_text(text)
            await asyncio.sleep(0.01)
        assert fetch.calls == []
        assert controller.search_pending
        await asyncio.sleep(0.4)
        return controller

    controller = asyncio.run(scenario())

    assert len(fetch.calls) == 1
    assert fetch.calls[0]["search"] == "chicken"
    assert controller.search_pending is False


def test_search_resets_page():
    fetch = RecordingFetch()

    async def scenario():
        controller = ListController(fetch, debounce_seconds=0)
        await controller.refresh()
        await controller.go_to_page(2)
        controller.set_search_text("naan")
        assert controller.page == 1
        await controller.flush_search()

    asyncio.run(scenario())

    assert fetch.calls[-1]["page"] == 1


def test_latest_request_wins_over_late_stale_response():
    fetch = ControlledFetch()

    async def scenario():
        controller = ListController(fetch)
        first = asyncio.create_task(controller.refresh())
        await asyncio.sleep(0)
        second = asyncio.create_task(controller.set_filter("status", "READY"))
        await asyncio.sleep(0)

        fetch.futures[1].set_result(_page([{"id": "B"}]))
        await second
        fetch.futures[0].set_result(_page([{"id": "A"}]))
        await first
        return controller.state

    state = asyncio.run(scenario())

    assert state.items == [{"id": "B"}]
    assert state.loading is False


def test_stale_response_is_dropped_while_newer_request_pending():
    fetch = ControlledFetch()

    async def scenario():
        controller = ListController(fetch)
        first = asyncio.create_task(controller.refresh())
        await asyncio.sleep(0)
        second = asyncio.create_task(controller.refresh())
        await asyncio.sleep(0)

        fetch.futures[0].set_result(_page([{"id": "A"}]))
        await first
        during = controller.state
        fetch.futures[1].set_result(_page([{"id": "B"}]))
        await second
        return during, controller.state

    during, final = asyncio.run(scenario())

    assert during.items == []
    assert during.loading is True
    assert final.items == [{"id": "B"}]


def test_failure_keeps_previous_items_and_sets_error():
    fetch = RecordingFetch([_page([{"id": 1}, {"id": 2}]), ApiError("Service unavailable", status_code=503)])

    async def scenario():
        controller = ListController(fetch)
        await controller.refresh()
        return await controller.go_to_page(2)

    state = asyncio.run(scenario())

    assert state.items == [{"id": 1}, {"id": 2}]
    assert state.pagination.totalPages == 3
    assert state.error == "Service unavailable"
    assert state.loading is False


def test_success_clears_previous_error():
    fetch = RecordingFetch([RuntimeError("timeout"), _page([{"id": 1}])])

    async def scenario():
        controller = ListController(fetch)
        failed = await controller.refresh()
        recovered = await controller.refresh()
        return failed, recovered

    failed, recovered = asyncio.run(scenario())

    assert failed.error == "timeout"
    assert recovered.error is None
    assert recovered.items == [{"id": 1}]


def test_listeners_see_loading_then_result():
    seen = []

    async def scenario():
        controller = ListController(RecordingFetch())
        subscription = controller.subscribe(lambda state: seen.append((state.loading, len(state.items))))
        await controller.refresh()
        subscription.unsubscribe()
        await controller.refresh()

    asyncio.run(scenario())

    assert seen == [(True, 0), (False, 1)]
