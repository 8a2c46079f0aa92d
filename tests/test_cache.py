# -*- coding: utf-8 -*-
"""Tests covering the per-session reference cache."""

from adminlist.core.cache import ReferenceCache, ReferenceState


def test_unknown_pairs_are_unresolved() -> None:
    cache = ReferenceCache()

    assert cache.state("users", "u1") is ReferenceState.UNRESOLVED
    assert cache.display("users", "u1") == "Unknown"
    assert cache.resolved_value("users", "u1") is None
    assert ("users", "u1") not in cache


def test_success_is_never_overwritten() -> None:
    """Once resolved, neither failures nor new values replace an entry."""

    cache = ReferenceCache()

    assert cache.store("users", "u1", "Ann") is True
    assert cache.fail("users", "u1") is False
    assert cache.store("users", "u1", "Bob") is False
    assert cache.display("users", "u1") == "Ann"


def test_failure_can_later_succeed() -> None:
    cache = ReferenceCache()
    cache.fail("users", "u1")

    assert cache.display("users", "u1", placeholder="-") == "-"
    assert cache.store("users", "u1", "Ann") is True
    assert cache.state("users", "u1") is ReferenceState.RESOLVED


def test_missing_skips_settled_ids_only() -> None:
    cache = ReferenceCache()
    cache.store("users", "u1", "Ann")
    cache.fail("users", "u2")
    cache.mark_pending("users", "u3")

    assert cache.missing("users", ["u1", "u2", "u3", "u4", "u4"]) == ["u3", "u4"]


def test_mark_pending_does_not_touch_settled_entries() -> None:
    cache = ReferenceCache()
    cache.store("users", "u1", "Ann")

    cache.mark_pending("users", "u1")

    assert cache.display("users", "u1") == "Ann"


def test_snapshot_and_counts() -> None:
    cache = ReferenceCache()
    cache.store("users", "u1", "Ann")
    cache.fail("users", "u2")
    cache.store("products", "p1", "Lamp")

    assert cache.snapshot() == {"users": {"u1": "Ann"}, "products": {"p1": "Lamp"}}
    assert cache.counts()[ReferenceState.RESOLVED] == 2
    assert cache.counts()[ReferenceState.FAILED] == 1
    assert len(cache) == 3



def test_resource_names_are_case_insensitive() -> None:
    cache = ReferenceCache()
    cache.store("Users", "u1", "Ann")

    assert cache.display("users", "u1") == "Ann"
    assert ("USERS", "u1") in cache
    assert cache.store("users", "u1", "Other") is False


# The End
