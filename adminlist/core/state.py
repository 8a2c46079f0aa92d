# -*- coding: utf-8 -*-
"""
state

Mutable view state: search, predicates, sort and page position.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterator, List

from .filters import FilterSpec, FilterState
from .schema import SortDirection


@dataclass(frozen=True)
class SortState:
    """Sort key and direction; ``key=None`` keeps fetch order."""

    key: str | None = None
    direction: SortDirection = "asc"

    def __post_init__(self) -> None:
        if self.direction not in ("asc", "desc"):
            raise ValueError(f"Unsupported sort direction: {self.direction!r}")

    @property
    def descending(self) -> bool:
        return self.direction == "desc"

    def toggled(self, key: str) -> "SortState":
        """Flip the direction for the current key, start ascending for a new one."""

        if key == self.key:
            return replace(self, direction="asc" if self.descending else "desc")
        return SortState(key=key, direction="asc")


@dataclass(frozen=True)
class PageState:
    """Requested page position; the effective page is clamped by the pipeline."""

    page_index: int = 1
    page_size: int = 10

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError("page_size must be a positive integer")
        if self.page_index < 1:
            object.__setattr__(self, "page_index", 1)


StateObserver = Callable[["ViewState"], None]


class ViewState:
    """Hold filter, sort and page state for one list view.

    Every setter notifies observers so the owner can re-run the pipeline.
    Changing the search, a predicate, the sort or the page size moves the
    view back to the first page. The derived page count is not stored here.
    """

    def __init__(
        self,
        *,
        default_sort: SortState | None = None,
        page_size: int = 10,
        max_page_size: int | None = None,
    ) -> None:
        """Create state initialised with resource defaults."""

        self._default_sort = default_sort or SortState()
        self._default_page_size = page_size
        self._max_page_size = max_page_size
        self._filter = FilterState()
        self._sort = self._default_sort
        self._page = PageState(page_index=1, page_size=self._clamp_size(page_size))
        self._observers: List[StateObserver] = []
        self._hold = 0
        self._pending = False

    # Read access -------------------------------------------------------
    @property
    def filter(self) -> FilterState:
        return self._filter

    @property
    def sort(self) -> SortState:
        return self._sort

    @property
    def page(self) -> PageState:
        return self._page

    # Observers ---------------------------------------------------------
    def subscribe(self, callback: StateObserver) -> None:
        """Invoke ``callback`` after every state mutation."""

        self._observers.append(callback)

    def unsubscribe(self, callback: StateObserver) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    @contextmanager
    def deferred(self) -> Iterator["ViewState"]:
        """Group several mutations into a single observer notification."""

        self._hold += 1
        try:
            yield self
        finally:
            self._hold -= 1
            if self._hold == 0 and self._pending:
                self._pending = False
                self._changed()

    # Setters -----------------------------------------------------------
    def set_search(self, search: str | None) -> None:
        """Replace the free-text search and return to the first page."""

        self._filter = self._filter.with_search(search)
        self._first_page()
        self._changed()

    def set_filter(self, field_name: str, value: Any, op: str = "eq") -> None:
        """Install a predicate on ``field_name``; ``"all"`` or ``None`` clears it."""

        spec = FilterSpec(field_name, op, value)
        if spec.active:
            self._filter = self._filter.with_predicate(spec)
        else:
            self._filter = self._filter.without(field_name, spec.op)
        self._first_page()
        self._changed()

    def clear_filter(self, field_name: str | None = None) -> None:
        """Drop predicates on ``field_name``, or all predicates when omitted."""

        if field_name is None:
            self._filter = replace(self._filter, predicates=())
        else:
            self._filter = self._filter.without(field_name)
        self._first_page()
        self._changed()

    def set_sort(self, key: str | None, direction: SortDirection = "asc") -> None:
        self._sort = SortState(key=key, direction=direction)
        self._first_page()
        self._changed()

    def toggle_sort(self, key: str) -> None:
        """Apply the column-header behaviour: same key flips, new key ascends."""

        self._sort = self._sort.toggled(key)
        self._first_page()
        self._changed()

    def set_page(self, page_index: int) -> None:
        self._page = replace(self._page, page_index=max(1, int(page_index)))
        self._changed()

    def set_page_size(self, page_size: int) -> None:
        self._page = PageState(page_index=1, page_size=self._clamp_size(page_size))
        self._changed()

    def reset(self) -> None:
        """Restore the defaults: no search, no predicates, default sort, page one."""

        self._filter = FilterState()
        self._sort = self._default_sort
        self._page = PageState(page_index=1, page_size=self._clamp_size(self._default_page_size))
        self._changed()

    # Helpers -----------------------------------------------------------
    def _first_page(self) -> None:
        if self._page.page_index != 1:
            self._page = replace(self._page, page_index=1)

    def _clamp_size(self, page_size: int) -> int:
        size = max(1, int(page_size))
        if self._max_page_size is not None:
            size = min(size, self._max_page_size)
        return size

    def _changed(self) -> None:
        if self._hold:
            self._pending = True
            return
        for callback in list(self._observers):
            callback(self)


__all__ = ["PageState", "SortState", "StateObserver", "ViewState"]


# The End
