# -*- coding: utf-8 -*-
"""Tests covering search, filtering, sorting and pagination of list views."""

import random

import pytest

from adminlist.core.cache import ReferenceCache
from adminlist.core.filters import FilterSpec, FilterState
from adminlist.core.pipeline import ViewPipeline
from adminlist.core.schema import FieldSpec, ResourceSchema
from adminlist.core.state import PageState, SortState
from adminlist.resources.builtin import CARTS, ORDERS


PETS = ResourceSchema(
    name="pets",
    fields=[
        FieldSpec(name="name", searchable=True),
        FieldSpec(name="status"),
        FieldSpec(name="createdAt", kind="date"),
    ],
)

SCENARIO = [
    {"id": "a", "name": "Cat", "status": "PENDING", "createdAt": "2023-01-01"},
    {"id": "b", "name": "Dog", "status": "SHIPPED", "createdAt": "2023-06-01"},
]


def _project(
    records,
    *,
    schema=PETS,
    cache=None,
    search="",
    predicates=(),
    sort=SortState(),
    page=PageState(1, 10),
):
    return ViewPipeline(schema).project(
        records,
        cache or ReferenceCache(),
        FilterState(search=search, predicates=tuple(predicates)),
        sort,
        page,
    )


def _ids(projection) -> list[str]:
    return [record["id"] for record in projection.visible]


def test_filter_and_sort_scenario() -> None:
    """Filtering by status and sorting by date desc keeps only the shipped record."""

    projection = _project(
        SCENARIO,
        predicates=[FilterSpec("status", "eq", "SHIPPED")],
        sort=SortState("createdAt", "desc"),
    )

    assert _ids(projection) == ["b"]
    assert projection.total_pages == 1


def test_case_insensitive_search_scenario() -> None:
    assert _ids(_project(SCENARIO, search="cat")) == ["a"]


def test_pagination_scenario() -> None:
    records = [{"id": str(i)} for i in range(25)]

    projection = _project(records, page=PageState(3, 10))

    assert len(projection.visible) == 5
    assert projection.total_pages == 3
    assert projection.has_next is False
    assert projection.has_previous is True


def test_null_dates_lead_ascending_and_trail_descending() -> None:
    records = [
        {"id": "x", "createdAt": "2023-03-01"},
        {"id": "n", "createdAt": None},
        {"id": "y", "createdAt": "2023-01-01"},
    ]

    ascending = _project(records, sort=SortState("createdAt", "asc"))
    descending = _project(records, sort=SortState("createdAt", "desc"))

    assert _ids(ascending) == ["n", "y", "x"]
    assert _ids(descending) == ["x", "y", "n"]


def test_malformed_values_sort_like_nulls() -> None:
    """Unparseable dates never raise and sort with the nulls."""

    records = [
        {"id": "ok", "createdAt": "2023-01-01"},
        {"id": "bad", "createdAt": "yesterday-ish"},
    ]

    assert _ids(_project(records, sort=SortState("createdAt", "asc"))) == ["bad", "ok"]
    assert _ids(_project(records, sort=SortState("createdAt", "desc"))) == ["ok", "bad"]


def test_search_results_are_subset_of_unsearched() -> None:
    rng = random.Random(7)
    words = ["cat", "Catalog", "dog", "bird", "Scatter", "", None]
    records = [{"id": str(i), "name": rng.choice(words)} for i in range(60)]
    everything = set(_ids(_project(records, page=PageState(1, 100))))

    for term in ["cat", "CAT", "d", "zzz", " "]:
        found = set(_ids(_project(records, search=term, page=PageState(1, 100))))
        assert found <= everything


def test_projection_is_idempotent() -> None:
    records = [{"id": str(i), "name": f"n{i % 7}", "createdAt": None if i % 5 else "2024-01-02"} for i in range(30)]
    args = dict(search="n", sort=SortState("createdAt", "desc"), page=PageState(2, 7))

    assert _project(records, **args) == _project(records, **args)


def test_pages_concatenate_to_filtered_sorted_set() -> None:
    """Walking every page reproduces the full filtered and sorted sequence."""

    rng = random.Random(3)
    records = [
        {"id": str(i), "name": rng.choice(["a", "b", "c", None]), "status": rng.choice(["NEW", "OLD"])}
        for i in range(47)
    ]
    options = dict(
        predicates=[FilterSpec("status", "eq", "NEW")],
        sort=SortState("name", "asc"),
    )
    full = _ids(_project(records, page=PageState(1, 1000), **options))
    first = _project(records, page=PageState(1, 6), **options)

    walked: list[str] = []
    for index in range(1, first.total_pages + 1):
        walked.extend(_ids(_project(records, page=PageState(index, 6), **options)))

    assert walked == full
    assert len(set(walked)) == len(walked)


def test_sort_is_a_total_order_for_non_null_values() -> None:
    records = [{"id": str(i), "price": value} for i, value in enumerate([3, 1.5, 2, 10, -1, 2])]
    schema = ResourceSchema(name="p", fields=[FieldSpec(name="price", kind="number")])

    ordered = _project(records, schema=schema, sort=SortState("price", "asc"))
    prices = [record["price"] for record in ordered.visible]

    assert prices == sorted(prices)
    assert _ids(ordered)[2:4] == ["2", "5"]


def test_boolean_sort_places_false_first() -> None:
    schema = ResourceSchema(name="p", fields=[FieldSpec(name="isCOD", kind="boolean")])
    records = [{"id": "t", "isCOD": True}, {"id": "f", "isCOD": False}, {"id": "n"}]

    assert _ids(_project(records, schema=schema, sort=SortState("isCOD", "asc"))) == ["n", "f", "t"]


def test_undeclared_numeric_field_sorts_numerically() -> None:
    records = [{"id": "a", "stock": 10}, {"id": "b", "stock": 9}, {"id": "c", "stock": 100}]

    assert _ids(_project(records, sort=SortState("stock", "asc"))) == ["b", "a", "c"]


def test_page_index_is_clamped_into_range() -> None:
    records = [{"id": str(i)} for i in range(3)]

    past_end = _project(records, page=PageState(9, 2))
    empty = _project([], page=PageState(4, 2))

    assert past_end.page_index == 2
    assert _ids(past_end) == ["2"]
    assert empty.total_pages == 1
    assert empty.visible == ()


def test_search_uses_resolved_reference_values() -> None:
    """Reference fields match by display value, falling back to the raw id."""

    cache = ReferenceCache()
    cache.store("users", "u1", "Alice")
    records = [
        {"id": "o1", "userId": "u1"},
        {"id": "o2", "userId": "u2-alice-raw"},
        {"id": "o3", "userId": "u3"},
    ]

    assert _ids(_project(records, schema=ORDERS, cache=cache, search="alice")) == ["o1", "o2"]
    assert _ids(_project(records, schema=ORDERS, cache=cache, search="u1")) == []


def test_sort_by_reference_uses_display_values() -> None:
    cache = ReferenceCache()
    cache.store("users", "u1", "Zed")
    cache.store("users", "u2", "Amy")
    records = [{"id": "o1", "userId": "u1"}, {"id": "o2", "userId": "u2"}]

    projection = _project(records, schema=ORDERS, cache=cache, sort=SortState("userId", "asc"))

    assert _ids(projection) == ["o2", "o1"]


def test_nested_and_computed_fields() -> None:
    """Cart search walks nested items; computed totals sort numerically."""

    carts = [
        {"id": "c1", "items": [{"product": {"name": "Lamp"}, "quantity": 2, "price": 5}]},
        {"id": "c2", "items": [{"product": {"name": "Desk"}, "quantity": 1, "price": 50}]},
        {"id": "c3", "items": []},
    ]

    assert _ids(_project(carts, schema=CARTS, search="lamp")) == ["c1"]
    by_total = _project(carts, schema=CARTS, sort=SortState("totalAmount", "desc"))
    assert _ids(by_total) == ["c2", "c1", "c3"]
    assert _ids(
        _project(carts, schema=CARTS, predicates=[FilterSpec("itemCount", "gte", 1)])
    ) == ["c1", "c2"]


def test_filters_combine_with_and() -> None:
    records = [
        {"id": "1", "status": "NEW", "price": 5},
        {"id": "2", "status": "NEW", "price": 50},
        {"id": "3", "status": "OLD", "price": 50},
    ]

    projection = _project(
        records,
        predicates=[FilterSpec("status", "eq", "NEW"), FilterSpec("price", "gte", 10)],
    )

    assert _ids(projection) == ["2"]


@pytest.mark.parametrize("direction", ["asc", "desc"])
def test_stable_sort_keeps_fetch_order_for_ties(direction) -> None:
    records = [{"id": str(i), "status": "same"} for i in range(5)]

    projection = _project(records, sort=SortState("status", direction))

    assert _ids(projection) == ["0", "1", "2", "3", "4"]



def test_non_sortable_field_keeps_fetch_order() -> None:
    schema = ResourceSchema(name="notes", fields=[FieldSpec(name="body", sortable=False)])
    records = [{"id": "a", "body": "zebra"}, {"id": "b", "body": "apple"}]

    projection = _project(records, schema=schema, sort=SortState("body", "asc"))

    assert _ids(projection) == ["a", "b"]


def test_reference_target_names_ignore_case() -> None:
    """A reference declared as ``Users`` reads values cached under ``users``."""

    schema = ResourceSchema(
        name="orders",
        fields=[FieldSpec(name="userId", reference="Users", searchable=True)],
    )
    cache = ReferenceCache()
    cache.store("users", "u1", "Alice")
    cache.store("users", "u2", "Bob")
    records = [{"id": "o1", "userId": "u2"}, {"id": "o2", "userId": "u1"}]

    assert _ids(_project(records, schema=schema, cache=cache, search="alice")) == ["o2"]
    assert _ids(_project(records, schema=schema, cache=cache, sort=SortState("userId"))) == [
        "o2",
        "o1",
    ]


# The End
