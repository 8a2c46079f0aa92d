# -*- coding: utf-8 -*-
"""
records

Helpers for reading values out of loosely shaped backend records.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping

Record = Mapping[str, Any]


def value_at(record: Record, path: str) -> Any:
    """Return the value stored under dotted ``path`` or ``None``.

    Only mappings are traversed; a path that runs into a list, a scalar or a
    missing key yields ``None``. The final value is returned untouched, so a
    field holding a list comes back as that list.
    """

    current: Any = record
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
        if current is None:
            return None
    return current


def values_at(record: Record, path: str) -> list[Any]:
    """Return every non-null value reachable through dotted ``path``.

    Lists met along the way are fanned out, which lets ``items.product.name``
    collect the product name of every cart line.
    """

    current: list[Any] = [record]
    for part in path.split("."):
        following: list[Any] = []
        for item in current:
            if not isinstance(item, Mapping):
                continue
            value = item.get(part)
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                following.extend(v for v in value if v is not None)
            else:
                following.append(value)
        current = following
    return current


def record_id(record: Record, pk_attr: str = "id") -> str | None:
    """Return the primary key of ``record`` as a string."""

    value = record.get(pk_attr) if isinstance(record, Mapping) else None
    if value is None:
        return None
    return str(value)


def iter_ids(records: Iterable[Record], path: str) -> Iterator[str]:
    """Yield distinct non-null ids referenced through ``path`` in first-seen order."""

    seen: set[str] = set()
    for record in records:
        for value in values_at(record, path):
            if isinstance(value, (Mapping, bool)):
                continue
            key = str(value)
            if not key or key in seen:
                continue
            seen.add(key)
            yield key


__all__ = ["Record", "iter_ids", "record_id", "value_at", "values_at"]


# The End
