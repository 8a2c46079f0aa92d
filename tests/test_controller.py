# -*- coding: utf-8 -*-
"""Tests covering the list view controller end to end with fake fetchers."""

import asyncio

import pytest

from adminlist.core.controller import ListViewController
from adminlist.core.exceptions import CollectionFetchError, UnknownFieldError
from adminlist.core.resolver import ReferenceSpec
from adminlist.resources.builtin import CATEGORIES, ORDERS

from tests.conftest import FetchRecorder, make_loader, make_settings

USERS = {"u1": "Ann", "u2": "Bob", "u3": "Cid"}


def _orders(count: int, users=("u1", "u2", "u3")) -> list[dict]:
    return [
        {
            "id": f"o{i:02d}",
            "userId": users[i % len(users)],
            "status": "SHIPPED" if i % 2 else "PENDING",
            "createdAt": f"2023-01-{i + 1:02d}",
        }
        for i in range(count)
    ]


def _controller(loader, recorder, **overrides) -> ListViewController:
    spec = ReferenceSpec("userId", "users", recorder.fetch_one)
    options = {"default_page_size": 5, **overrides}
    return ListViewController(
        ORDERS,
        loader,
        references=[spec],
        settings=make_settings(**options),
    )


@pytest.mark.asyncio
async def test_refresh_loads_and_resolves_visible_page() -> None:
    recorder = FetchRecorder(USERS)
    controller = _controller(make_loader(_orders(12)), recorder)

    view = await controller.refresh()

    assert view.total_pages == 3
    assert [r["id"] for r in view.visible] == ["o11", "o10", "o09", "o08", "o07"]
    assert sorted(recorder.one_calls) == ["u1", "u2", "u3"]
    assert controller.rows()[0]["userIdDisplay"] in USERS.values()


@pytest.mark.asyncio
async def test_lazy_resolution_only_fetches_visible_ids() -> None:
    """Ids outside the current page are resolved when paged into view."""

    records = _orders(4, users=("u1",)) + [
        {"id": "late", "userId": "u2", "createdAt": "2022-01-01"}
    ]
    recorder = FetchRecorder(USERS)
    controller = _controller(make_loader(records), recorder, default_page_size=4)

    await controller.refresh()
    assert recorder.one_calls == ["u1"]

    controller.set_page(2)
    assert controller.lookup("userId", "u2") == "Unknown"
    await controller.sync_references()

    assert recorder.one_calls == ["u1", "u2"]
    assert controller.rows()[0]["userIdDisplay"] == "Bob"


@pytest.mark.asyncio
async def test_eager_resolution_when_lazy_disabled() -> None:
    recorder = FetchRecorder(USERS)
    records = _orders(4, users=("u1",)) + [{"id": "late", "userId": "u2"}]
    controller = _controller(
        make_loader(records), recorder, default_page_size=4, lazy_references=False
    )

    await controller.refresh()

    assert sorted(recorder.one_calls) == ["u1", "u2"]


@pytest.mark.asyncio
async def test_sorting_by_reference_resolves_every_id() -> None:
    records = _orders(4, users=("u2",)) + [{"id": "x", "userId": "u1"}]
    recorder = FetchRecorder(USERS)
    controller = _controller(make_loader(records), recorder, default_page_size=4)
    await controller.refresh()

    controller.set_sort("userId", "asc")
    view = await controller.sync_references()

    assert view.visible[0]["id"] == "x"


@pytest.mark.asyncio
async def test_refresh_keeps_resolved_references() -> None:
    """A second refresh fetches only ids that were never seen before."""

    first = _orders(3)
    second = first + [{"id": "o99", "userId": "u9", "createdAt": "2024-01-01"}]
    recorder = FetchRecorder({**USERS, "u9": "Zoe"})
    controller = _controller(make_loader(first, second), recorder)

    await controller.refresh()
    await controller.refresh()

    assert sorted(recorder.one_calls) == ["u1", "u2", "u3", "u9"]
    assert controller.store.generation == 2
    assert controller.lookup("userId", "u9") == "Zoe"


@pytest.mark.asyncio
async def test_failed_refresh_keeps_projection() -> None:
    calls = []

    async def loader():
        calls.append(1)
        if len(calls) > 1:
            raise RuntimeError("network down")
        return _orders(3)

    controller = _controller(loader, FetchRecorder(USERS))
    before = await controller.refresh()

    with pytest.raises(CollectionFetchError):
        await controller.refresh()

    assert controller.view == before


@pytest.mark.asyncio
async def test_reference_failures_render_placeholder() -> None:
    recorder = FetchRecorder(USERS, failing=["u2"])
    controller = _controller(make_loader(_orders(3)), recorder, placeholder="n/a")

    await controller.refresh()

    displays = {row["userId"]: row["userIdDisplay"] for row in controller.rows()}
    assert displays == {"u1": "Ann", "u2": "n/a", "u3": "Cid"}


@pytest.mark.asyncio
async def test_setters_reproject_synchronously_and_reset_page() -> None:
    controller = _controller(make_loader(_orders(12)), FetchRecorder(USERS))
    await controller.refresh()

    assert controller.set_page(3).page_index == 3
    view = controller.set_filter("status", "SHIPPED")

    assert view.page_index == 1
    assert view.filtered_count == 6
    assert controller.set_search("o0").filtered_count == 5
    assert controller.toggle_sort("createdAt").visible[0]["id"] == "o01"
    assert controller.clear_filter().filtered_count == 10


@pytest.mark.asyncio
async def test_refresh_with_reset_restores_defaults() -> None:
    controller = _controller(make_loader(_orders(6)), FetchRecorder(USERS))
    await controller.refresh()
    controller.set_search("o01")
    controller.set_sort("id", "asc")

    view = await controller.refresh(reset=True)

    assert controller.state.filter.is_empty
    assert controller.state.sort.key == "createdAt"
    assert view.filtered_count == 6


@pytest.mark.asyncio
async def test_listeners_receive_new_projections() -> None:
    controller = _controller(make_loader(_orders(3)), FetchRecorder(USERS))
    seen = []
    controller.add_listener(seen.append)

    await controller.refresh()
    controller.set_page_size(2)
    controller.remove_listener(seen.append)
    controller.set_page(2)

    assert seen[-1].page_size == 2
    assert all(p.page_index == 1 for p in seen)


@pytest.mark.asyncio
async def test_resolve_reference_on_demand() -> None:
    recorder = FetchRecorder(USERS)
    controller = _controller(make_loader([]), recorder)

    assert await controller.resolve_reference("userId", "u3") == "Cid"
    with pytest.raises(UnknownFieldError):
        controller.lookup("status", "x")


@pytest.mark.asyncio
async def test_close_discards_in_flight_refresh() -> None:
    gate = asyncio.Event()

    async def loader():
        await gate.wait()
        return _orders(3)

    controller = _controller(loader, FetchRecorder(USERS))
    pending = asyncio.ensure_future(controller.refresh())
    await asyncio.sleep(0)

    controller.close()
    gate.set()
    view = await pending

    assert view.visible == ()
    assert controller.closed is True



@pytest.mark.asyncio
async def test_sorting_by_a_non_sortable_field_is_rejected() -> None:
    records = [{"id": "a", "description": "zz"}, {"id": "b", "description": "aa"}]
    controller = ListViewController(CATEGORIES, make_loader(records), settings=make_settings())
    await controller.refresh()
    controller.set_sort(None)

    with pytest.raises(UnknownFieldError):
        controller.set_sort("description", "asc")
    with pytest.raises(UnknownFieldError):
        controller.toggle_sort("description")

    assert [r["id"] for r in controller.view.visible] == ["a", "b"]
    assert controller.state.sort.key is None


# The End
