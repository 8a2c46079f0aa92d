# -*- coding: utf-8 -*-
"""
filters

Field predicates and search state for in-memory list queries.

Version: 0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Any, Iterable, Tuple

from .comparators import parse_timestamp, sort_key_for
from .schema import FieldKind

ALL = "all"
FILTER_OPS = {
    "": "eq",
    "eq": "eq",
    "icontains": "icontains",
    "gte": "gte",
    "lte": "lte",
    "gt": "gt",
    "lt": "lt",
    "in": "in",
    "isnull": "isnull",
}
_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_END_OF_DAY = 86400.0 - 0.001


@dataclass(slots=True, frozen=True)
class FilterSpec:
    """Represent a single filter condition."""

    field: str
    op: str = "eq"
    value: Any = None

    def __post_init__(self) -> None:
        if self.op not in FILTER_OPS:
            raise ValueError(f"Unsupported filter operator: {self.op!r}")
        object.__setattr__(self, "op", FILTER_OPS[self.op])

    @classmethod
    def from_lookup(cls, lookup: str, value: Any) -> "FilterSpec":
        """Build a spec from a ``field__op`` lookup, ``eq`` when no operator."""

        path, _, op = lookup.rpartition("__")
        if not path or op not in FILTER_OPS:
            path, op = lookup, "eq"
        return cls(path.replace("__", "."), op, value)

    @property
    def active(self) -> bool:
        """Return ``False`` for predicates that match everything."""

        value = self.value
        if value is None:
            return False
        if isinstance(value, str) and (not value.strip() or value.strip().lower() == ALL):
            return False
        if self.op == "in" and not _as_sequence(value):
            return False
        return True

    def matches(self, values: Iterable[Any], kind: FieldKind = "string") -> bool:
        """Return ``True`` when any of ``values`` satisfies the condition.

        Values that cannot be coerced to ``kind`` count as null, so they never
        satisfy a comparison.
        """

        if not self.active:
            return True
        present = [v for v in values if v is not None]
        if self.op == "isnull":
            wanted = sort_key_for("boolean")(self.value)
            if wanted is None:
                wanted = int(bool(self.value))
            return (not present) == bool(wanted)
        if self.op == "icontains":
            needle = str(self.value).casefold()
            return any(
                needle in str(v).casefold()
                for v in present
                if not isinstance(v, (dict, list, tuple))
            )
        if self.op == "in":
            options = [self._coerce(o, kind) for o in _as_sequence(self.value)]
            options = [o for o in options if o is not None]
            return any(self._coerce(v, kind) in options for v in present)

        expected = self._bound(kind)
        if expected is None:
            return False
        for raw in present:
            actual = self._coerce(raw, kind)
            if actual is None:
                continue
            try:
                if self._compare(actual, expected):
                    return True
            except TypeError:
                continue
        return False

    def _bound(self, kind: FieldKind) -> Any:
        if kind == "date" and isinstance(self.value, str) and _DATE_ONLY.match(self.value.strip()):
            start = parse_timestamp(self.value.strip())
            if start is None:
                return None
            if self.op in {"lte", "gt"}:
                # a bare day covers the whole day
                return start + _END_OF_DAY
            return start
        return self._coerce(self.value, kind)

    def _compare(self, actual: Any, expected: Any) -> bool:
        if self.op == "eq":
            return actual == expected
        if self.op == "gt":
            return actual > expected
        if self.op == "gte":
            return actual >= expected
        if self.op == "lt":
            return actual < expected
        if self.op == "lte":
            return actual <= expected
        return False

    @staticmethod
    def _coerce(value: Any, kind: FieldKind) -> Any:
        if kind == "string":
            if value is None or isinstance(value, (dict, list, tuple)):
                return None
            if isinstance(value, bool):
                return "true" if value else "false"
            return str(value)
        return sort_key_for(kind)(value)


def _as_sequence(value: Any) -> list[Any]:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


@dataclass(frozen=True)
class FilterState:
    """Free-text search plus field-scoped predicates combined with AND."""

    search: str = ""
    predicates: Tuple[FilterSpec, ...] = ()

    @property
    def search_term(self) -> str:
        """Return the normalized search needle, empty when searching is off."""

        return self.search.strip().casefold()

    @property
    def active_predicates(self) -> Tuple[FilterSpec, ...]:
        return tuple(p for p in self.predicates if p.active)

    @property
    def is_empty(self) -> bool:
        return not self.search_term and not self.active_predicates

    def with_search(self, search: str | None) -> "FilterState":
        return replace(self, search=search or "")

    def with_predicate(self, spec: FilterSpec) -> "FilterState":
        """Return a copy where ``spec`` replaces any predicate on the same field and op."""

        kept = tuple(
            p for p in self.predicates if (p.field, p.op) != (spec.field, spec.op)
        )
        return replace(self, predicates=kept + (spec,))

    def without(self, field_name: str, op: str | None = None) -> "FilterState":
        """Return a copy without predicates on ``field_name`` (and ``op`` if given)."""

        normalized = FILTER_OPS.get(op, op) if op is not None else None
        kept = tuple(
            p
            for p in self.predicates
            if p.field != field_name or (normalized is not None and p.op != normalized)
        )
        return replace(self, predicates=kept)

    def predicate(self, field_name: str, op: str = "eq") -> FilterSpec | None:
        normalized = FILTER_OPS.get(op, op)
        for p in self.predicates:
            if p.field == field_name and p.op == normalized:
                return p
        return None


__all__ = ["ALL", "FILTER_OPS", "FilterSpec", "FilterState"]


# The End
