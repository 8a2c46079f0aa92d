# -*- coding: utf-8 -*-
"""
pipeline

Pure search, filter, sort and pagination over an in-memory collection.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Sequence, Tuple

from ..conf import DEFAULT_DATE_FIELDS
from .cache import ReferenceCache
from .comparators import infer_kind, sort_key_for
from .filters import FilterSpec, FilterState
from .records import Record
from .schema import FieldKind, FieldSpec, ResourceSchema
from .state import PageState, SortState


@dataclass(frozen=True)
class Projection:
    """Visible page of records together with the derived page count."""

    visible: Tuple[Record, ...]
    total_pages: int
    page_index: int
    page_size: int
    filtered_count: int
    total_count: int

    @property
    def has_next(self) -> bool:
        return self.page_index < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page_index > 1


class ViewPipeline:
    """Project a raw collection into the visible page of a list view.

    ``project`` is synchronous and side-effect free: identical inputs always
    produce equal projections and malformed values never raise. Steps run in
    a fixed order: search, field filters, sort, paginate.
    """

    def __init__(
        self,
        schema: ResourceSchema,
        *,
        date_fields: Iterable[str] = DEFAULT_DATE_FIELDS,
    ) -> None:
        """Bind the pipeline to the field schema of one resource type."""

        self.schema = schema
        self.date_fields = tuple(date_fields)

    def project(
        self,
        records: Sequence[Record],
        cache: ReferenceCache,
        filter_state: FilterState,
        sort_state: SortState,
        page_state: PageState,
    ) -> Projection:
        """Return the page of ``records`` selected by the given state."""

        rows = list(records)
        rows = self.search(rows, cache, filter_state.search_term)
        rows = self.apply_filters(rows, filter_state.active_predicates)
        rows = self.sort(rows, cache, sort_state)
        return self.paginate(rows, page_state, total_count=len(records))

    # Steps -------------------------------------------------------------
    def search(
        self, rows: List[Record], cache: ReferenceCache, term: str
    ) -> List[Record]:
        """Keep rows where any searchable field contains ``term``."""

        if not term:
            return rows
        fields = self._search_fields(rows)
        return [row for row in rows if self._row_contains(row, fields, cache, term)]

    def apply_filters(
        self, rows: List[Record], predicates: Sequence[FilterSpec]
    ) -> List[Record]:
        """Keep rows satisfying every active predicate."""

        for predicate in predicates:
            spec = self._field(predicate.field)
            kind = self._kind_for(spec, rows)
            rows = [row for row in rows if predicate.matches(spec.read_all(row), kind)]
        return rows

    def sort(
        self, rows: List[Record], cache: ReferenceCache, sort_state: SortState
    ) -> List[Record]:
        """Order ``rows`` by the sort key; nulls lead ascending and trail descending.

        Keys declared with ``sortable=False`` keep fetch order.
        """

        if not sort_state.key or not self.schema.is_sortable(sort_state.key):
            return rows
        spec = self._field(sort_state.key)
        if spec.reference:
            target = spec.reference

            def read(row: Record) -> Any:
                raw = spec.read(row)
                if raw is None:
                    return None
                resolved = cache.resolved_value(target, str(raw))
                return raw if resolved is None else resolved

            kind: FieldKind = "string"
        else:
            read = spec.read
            kind = self._kind_for(spec, rows)

        key_of = sort_key_for(kind)
        nulls: List[Record] = []
        keyed: List[Tuple[Any, Record]] = []
        for row in rows:
            key = key_of(read(row))
            if key is None:
                nulls.append(row)
            else:
                keyed.append((key, row))
        keyed.sort(key=lambda pair: pair[0], reverse=sort_state.descending)
        ordered = [row for _, row in keyed]
        if sort_state.descending:
            return ordered + nulls
        return nulls + ordered

    def paginate(
        self, rows: List[Record], page_state: PageState, *, total_count: int | None = None
    ) -> Projection:
        """Clamp the requested page into range and slice it out."""

        size = max(1, page_state.page_size)
        filtered = len(rows)
        total_pages = max(1, math.ceil(filtered / size))
        page_index = min(max(1, page_state.page_index), total_pages)
        start = (page_index - 1) * size
        return Projection(
            visible=tuple(rows[start : start + size]),
            total_pages=total_pages,
            page_index=page_index,
            page_size=size,
            filtered_count=filtered,
            total_count=filtered if total_count is None else total_count,
        )

    # Helpers -----------------------------------------------------------
    def _field(self, name: str) -> FieldSpec:
        return self.schema.field_for(name, self.date_fields)

    def _kind_for(self, spec: FieldSpec, rows: Sequence[Record]) -> FieldKind:
        if self.schema.field(spec.name) is not None or spec.kind != "string":
            return spec.kind
        return infer_kind(spec.read(row) for row in rows)

    def _search_fields(self, rows: Sequence[Record]) -> List[FieldSpec]:
        fields = self.schema.searchable_fields()
        if fields:
            return fields
        if self.schema.fields:
            return list(self.schema.fields)
        names: dict[str, None] = {}
        for row in rows:
            for name, value in row.items():
                if isinstance(value, (str, int, float)) and not isinstance(value, bool):
                    names.setdefault(name, None)
        return [FieldSpec(name=name) for name in names]

    @staticmethod
    def _row_contains(
        row: Record, fields: Sequence[FieldSpec], cache: ReferenceCache, term: str
    ) -> bool:
        for spec in fields:
            for value in spec.read_all(row):
                if isinstance(value, (dict, list, tuple)):
                    continue
                if spec.reference:
                    resolved = cache.resolved_value(spec.reference, str(value))
                    if resolved is not None:
                        value = resolved
                if term in str(value).casefold():
                    return True
        return False


__all__ = ["Projection", "ViewPipeline"]


# The End
