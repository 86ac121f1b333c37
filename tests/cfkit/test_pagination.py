import asyncio
import typing as t

import httpx
import pytest

from cfkit import CancelToken, ClientError, RequestCancelledError, Zone


def _zones(page: int, per_page: int = 2) -> t.List[t.Dict[str, str]]:
    start = (page - 1) * per_page
    return [{"id": f"z{i}", "name": f"zone{i}.com"} for i in range(start, start + per_page)]


def _paged_handler(envelope, total_pages: int = 3, failures: t.Optional[t.Dict[int, t.List[int]]] = None):
    """Serves ``total_pages`` pages of two zones; ``failures`` maps a page to statuses returned first"""
    failures = {k: list(v) for k, v in (failures or {}).items()}

    def handler(request: httpx.Request):
        page = int(request.url.params.get("page", "1"))
        if failures.get(page):
            return httpx.Response(failures[page].pop(0), text = "boom")
        return httpx.Response(200, json = envelope(
            _zones(page),
            result_info = {"page": page, "per_page": 2, "count": 2, "total_count": total_pages * 2, "total_pages": total_pages},
        ))

    return handler


def _cursor_handler(envelope, pages: t.Dict[t.Optional[str], t.Tuple[t.List[t.Any], t.Optional[str]]], items_key: t.Optional[str] = None):
    def handler(request: httpx.Request):
        cursor = request.url.params.get("cursor")
        items, next_cursor = pages[cursor]
        result = {items_key: items} if items_key else items
        return httpx.Response(200, json = envelope(result, result_info = {"count": len(items), "per_page": 2, "cursor": next_cursor}))

    return handler


# ============================================================================
# Page-based
# ============================================================================

def test_page_listing_yields_every_item_in_order(make_client, envelope):
    client, recorder = make_client(_paged_handler(envelope, total_pages = 3))

    zones = list(client.api.get_paginated("zones", Zone, params = {"status": "active"}, per_page = 2))

    assert [z.id for z in zones] == [f"z{i}" for i in range(6)]
    assert [r.url.params["page"] for r in recorder.requests] == ["1", "2", "3"]
    assert all(r.url.params["per_page"] == "2" for r in recorder.requests)
    assert all(r.url.params["status"] == "active" for r in recorder.requests)


def test_page_params_in_filters_are_replaced_per_page(make_client, envelope):
    client, recorder = make_client(_paged_handler(envelope, total_pages = 3))

    zones = list(client.api.get_paginated("zones", Zone, params = {"page": 2, "per_page": 2}))

    assert [z.id for z in zones] == ["z2", "z3", "z4", "z5"]
    assert [r.url.params.get_list("page") for r in recorder.requests] == [["2"], ["3"]]


def test_single_page_listing_returns_page_info(make_client, envelope):
    client, recorder = make_client(_paged_handler(envelope, total_pages = 3))

    result = client.api.get_page_paginated_result("zones", Zone, page = 2, per_page = 2)

    assert [z.id for z in result.items] == ["z2", "z3"]
    assert result.page_info.page == 2
    assert result.page_info.total_pages == 3
    assert result.has_more
    assert recorder.count == 1


@pytest.mark.parametrize("result_info", [None, {"page": 1, "per_page": 20, "count": 0, "total_count": 0, "total_pages": 0}])
def test_listing_without_more_pages_sends_one_request(make_client, envelope, result_info):
    client, recorder = make_client(lambda request: httpx.Response(200, json = envelope([], result_info = result_info)))

    assert list(client.api.get_paginated("zones", Zone)) == []
    assert recorder.count == 1


def test_sequences_are_lazy_and_relisting_starts_over(make_client, envelope):
    client, recorder = make_client(_paged_handler(envelope, total_pages = 2))

    items = client.api.get_paginated("zones", Zone)
    assert recorder.count == 0
    next(items)
    assert recorder.count == 1

    first = [z.id for z in client.api.get_paginated("zones", Zone)]
    second = [z.id for z in client.api.get_paginated("zones", Zone)]
    assert first == second == ["z0", "z1", "z2", "z3"]


def test_transient_failure_mid_listing_is_retried(make_client, envelope):
    client, recorder = make_client(_paged_handler(envelope, total_pages = 3, failures = {2: [503, 429]}))

    zones = list(client.api.get_paginated("zones", Zone))

    assert len(zones) == 6
    assert recorder.count == 5


def test_fatal_failure_mid_listing_surfaces_at_iteration(make_client, envelope):
    client, _ = make_client(_paged_handler(envelope, total_pages = 3, failures = {2: [403]}))

    seen = []
    with pytest.raises(ClientError) as exc_info:
        for zone in client.api.get_paginated("zones", Zone):
            seen.append(zone.id)

    assert seen == ["z0", "z1"]
    assert exc_info.value.status_code == 403


def test_dedup_drops_repeated_ids_across_pages(make_client, envelope):
    def handler(request: httpx.Request):
        page = int(request.url.params["page"])
        items = [{"id": "a", "name": "a.com"}, {"id": "b", "name": "b.com"}] if page == 1 else [{"id": "b", "name": "b.com"}, {"id": "c", "name": "c.com"}]
        return httpx.Response(200, json = envelope(items, result_info = {"page": page, "per_page": 2, "count": 2, "total_count": 4, "total_pages": 2}))

    client, _ = make_client(handler)

    assert [z.id for z in client.api.get_paginated("zones", Zone, unique_by = "id")] == ["a", "b", "c"]
    assert [z.id for z in client.api.get_paginated("zones", Zone)] == ["a", "b", "b", "c"]


def test_cancelling_mid_listing_stops_fetching(make_client, envelope):
    client, recorder = make_client(_paged_handler(envelope, total_pages = 3))
    token = CancelToken()

    seen = []
    with pytest.raises(RequestCancelledError):
        for zone in client.api.get_paginated("zones", Zone, cancel_token = token):
            seen.append(zone.id)
            token.cancel()

    assert recorder.count == 1
    assert seen == ["z0", "z1"]


def test_async_page_listing(make_client, envelope):
    client, recorder = make_client(_paged_handler(envelope, total_pages = 3))

    async def runner():
        return [z.id async for z in client.api.aget_paginated("zones", Zone)]

    assert asyncio.run(runner()) == [f"z{i}" for i in range(6)]
    assert recorder.count == 3


# ============================================================================
# Cursor-based
# ============================================================================

def test_cursor_listing_follows_cursors_until_empty(make_client, envelope):
    pages = {
        None: ([1, 2], "c1"),
        "c1": ([3, 4], "c2"),
        "c2": ([5], None),
    }
    client, recorder = make_client(_cursor_handler(envelope, pages))

    assert list(client.api.get_cursor_paginated("items", int, per_page = 2)) == [1, 2, 3, 4, 5]
    assert [r.url.params.get("cursor") for r in recorder.requests] == [None, "c1", "c2"]
    assert all(r.url.params["per_page"] == "2" for r in recorder.requests)


def test_empty_string_cursor_ends_listing(make_client, envelope):
    client, recorder = make_client(_cursor_handler(envelope, {None: ([1], "")}))

    assert list(client.api.get_cursor_paginated("items", int)) == [1]
    assert recorder.count == 1


def test_repeated_cursor_ends_listing(make_client, envelope):
    client, recorder = make_client(_cursor_handler(envelope, {None: ([1], "same"), "same": ([2], "same")}))

    assert list(client.api.get_cursor_paginated("items", int)) == [1, 2]
    assert recorder.count == 2


def test_single_cursor_page_round_trips_cursor(make_client, envelope):
    client, recorder = make_client(_cursor_handler(envelope, {"opaque==": ([7, 8], "next==")}))

    result = client.api.get_cursor_paginated_result("items", int, cursor = "opaque==")

    assert result.items == [7, 8]
    assert result.next_cursor == "next=="
    assert recorder.requests[0].url.params["cursor"] == "opaque=="


def test_cursor_items_nested_under_key(make_client, envelope):
    pages = {
        None: ([{"name": "b1"}, {"name": "b2"}], "c1"),
        "c1": ([{"name": "b2"}, {"name": "b3"}], None),
    }
    client, _ = make_client(_cursor_handler(envelope, pages, items_key = "buckets"))

    names = [b["name"] for b in client.api.get_cursor_paginated("buckets", dict, items_key = "buckets", unique_by = "name")]
    assert names == ["b1", "b2", "b3"]


def test_async_cursor_listing(make_client, envelope):
    pages = {None: (["a"], "c1"), "c1": (["b"], None)}
    client, recorder = make_client(_cursor_handler(envelope, pages))

    async def runner():
        return [item async for item in client.api.aget_cursor_paginated("items", str)]

    assert asyncio.run(runner()) == ["a", "b"]
    assert recorder.count == 2
