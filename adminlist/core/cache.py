# -*- coding: utf-8 -*-
"""
cache

Per-session reference cache mapping foreign-key ids to display values.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Tuple


class ReferenceState(str, Enum):
    """Resolution state of a single ``(resource type, id)`` pair."""

    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Outcome recorded for one referenced id."""

    state: ReferenceState
    value: Any = None


_UNRESOLVED = CacheEntry(ReferenceState.UNRESOLVED)
_FAILED = CacheEntry(ReferenceState.FAILED)


class ReferenceCache:
    """Append-only store of resolved references for one list-view session.

    A successful resolution is final: later failures or repeated successes for
    the same pair never replace it. Resource names are case-insensitive, as in
    the resource registry.
    """

    def __init__(self) -> None:
        """Create an empty cache."""

        self._entries: Dict[str, Dict[str, CacheEntry]] = {}

    def get(self, resource: str, pk: str) -> CacheEntry | None:
        """Return the entry recorded for ``resource``/``pk`` if any."""

        return self._entries.get(resource.lower(), {}).get(str(pk))

    def state(self, resource: str, pk: str) -> ReferenceState:
        """Return the resolution state, ``UNRESOLVED`` for unknown pairs."""

        entry = self.get(resource, pk)
        return entry.state if entry is not None else ReferenceState.UNRESOLVED

    def display(self, resource: str, pk: str, placeholder: Any = "Unknown") -> Any:
        """Return the resolved display value or ``placeholder``."""

        entry = self.get(resource, pk)
        if entry is None or entry.state is not ReferenceState.RESOLVED:
            return placeholder
        return entry.value

    def resolved_value(self, resource: str, pk: str) -> Any | None:
        """Return the display value when resolved, ``None`` otherwise."""

        entry = self.get(resource, pk)
        if entry is None or entry.state is not ReferenceState.RESOLVED:
            return None
        return entry.value

    def is_settled(self, resource: str, pk: str) -> bool:
        """Return ``True`` once the pair resolved or failed."""

        return self.state(resource, pk) is not ReferenceState.UNRESOLVED

    def missing(self, resource: str, ids: Iterable[str]) -> list[str]:
        """Return the distinct ids of ``ids`` not yet settled, in input order."""

        result: list[str] = []
        seen: set[str] = set()
        for pk in ids:
            key = str(pk)
            if key in seen:
                continue
            seen.add(key)
            if not self.is_settled(resource, key):
                result.append(key)
        return result

    def mark_pending(self, resource: str, pk: str) -> None:
        """Record that ``pk`` is being fetched without touching settled entries."""

        bucket = self._entries.setdefault(resource.lower(), {})
        bucket.setdefault(str(pk), _UNRESOLVED)

    def store(self, resource: str, pk: str, value: Any) -> bool:
        """Record a successful resolution; return ``False`` if already resolved."""

        bucket = self._entries.setdefault(resource.lower(), {})
        key = str(pk)
        current = bucket.get(key)
        if current is not None and current.state is ReferenceState.RESOLVED:
            return False
        bucket[key] = CacheEntry(ReferenceState.RESOLVED, value)
        return True

    def fail(self, resource: str, pk: str) -> bool:
        """Record a failed resolution unless the pair already resolved."""

        bucket = self._entries.setdefault(resource.lower(), {})
        key = str(pk)
        current = bucket.get(key)
        if current is not None and current.state is ReferenceState.RESOLVED:
            return False
        bucket[key] = _FAILED
        return True

    def items(self) -> Iterator[Tuple[Tuple[str, str], CacheEntry]]:
        """Yield ``((resource, pk), entry)`` pairs."""

        for resource, bucket in self._entries.items():
            for pk, entry in bucket.items():
                yield (resource, pk), entry

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        """Return a plain mapping of resolved display values per resource."""

        return {
            resource: {
                pk: entry.value
                for pk, entry in bucket.items()
                if entry.state is ReferenceState.RESOLVED
            }
            for resource, bucket in self._entries.items()
        }

    def counts(self) -> Dict[ReferenceState, int]:
        """Return the number of entries per state."""

        counter: Counter[ReferenceState] = Counter(entry.state for _, entry in self.items())
        return {state: counter.get(state, 0) for state in ReferenceState}

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        resource, pk = key
        return self.get(str(resource), str(pk)) is not None

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._entries.values())


__all__ = ["CacheEntry", "ReferenceCache", "ReferenceState"]


# The End
