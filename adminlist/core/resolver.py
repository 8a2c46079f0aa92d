# -*- coding: utf-8 -*-
"""
resolver

Concurrent, deduplicated resolution of foreign-key fields into display values.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Sequence, Tuple

from ..conf import ListViewSettings, current_settings
from .cache import ReferenceCache
from .records import Record, iter_ids

FetchOne = Callable[[str], Awaitable[Any]]
FetchMany = Callable[[Sequence[str]], Awaitable[Mapping[str, Any]]]
ReferenceListener = Callable[[str, str], None]


@dataclass(frozen=True)
class ReferenceSpec:
    """Declare that ``source_field`` holds ids of ``target`` records.

    ``fetch_one`` returns the display value for a single id, or ``None`` when
    the backend does not know it. ``fetch_many`` is optional and, when given,
    returns display values keyed by id for a whole batch.

    The cache is keyed by ``target``, so specs sharing a target share one
    set of fetchers: the first spec of each target in a ``resolve`` call
    performs the fetches for every field pointing at it.
    """

    source_field: str
    target: str
    fetch_one: FetchOne
    fetch_many: FetchMany | None = None


@dataclass
class ResolutionReport:
    """Summary of one ``resolve`` call."""

    requested: int = 0
    fetched: int = 0
    resolved: int = 0
    failed: int = 0
    calls: int = 0


class ReferenceResolver:
    """Resolve referenced ids exactly once per session and merge them into a cache."""

    def __init__(
        self,
        cache: ReferenceCache | None = None,
        *,
        settings: ListViewSettings | None = None,
    ) -> None:
        """Bind the resolver to ``cache`` and the active settings."""

        self.cache = cache if cache is not None else ReferenceCache()
        self._settings = settings or current_settings()
        self._semaphore = asyncio.Semaphore(self._settings.resolver_concurrency)
        self._inflight: Dict[Tuple[str, str], asyncio.Future[None]] = {}
        self._listeners: List[ReferenceListener] = []
        self.logger = logging.getLogger(__name__)
        self.last_report = ResolutionReport()

    # Observers ---------------------------------------------------------
    def add_listener(self, callback: ReferenceListener) -> None:
        """Invoke ``callback(target, pk)`` after each merged outcome."""

        self._listeners.append(callback)

    def remove_listener(self, callback: ReferenceListener) -> None:
        """Stop notifying ``callback``."""

        if callback in self._listeners:
            self._listeners.remove(callback)

    # Lookup ------------------------------------------------------------
    def lookup(self, target: str, pk: str | None) -> Any:
        """Return the display value for ``pk`` or the configured placeholder."""

        if pk is None:
            return self._settings.placeholder
        return self.cache.display(target, str(pk), self._settings.placeholder)

    def lookup_function(self, target: str) -> Callable[[str | None], Any]:
        """Return a one-argument lookup bound to ``target``."""

        def _lookup(pk: str | None) -> Any:
            return self.lookup(target, pk)

        return _lookup

    @property
    def pending(self) -> int:
        """Return the number of fetches currently in flight."""

        return len(self._inflight)

    # Resolution --------------------------------------------------------
    def collect_ids(
        self, records: Iterable[Record], specs: Sequence[ReferenceSpec]
    ) -> Dict[str, List[str]]:
        """Return distinct referenced ids grouped by target resource type."""

        materialized = list(records)
        grouped: Dict[str, List[str]] = {}
        for spec in specs:
            bucket = grouped.setdefault(spec.target, [])
            known = set(bucket)
            for pk in iter_ids(materialized, spec.source_field):
                if pk not in known:
                    known.add(pk)
                    bucket.append(pk)
        return grouped

    async def resolve(
        self, records: Iterable[Record], specs: Sequence[ReferenceSpec]
    ) -> ReferenceCache:
        """Fetch every unseen referenced id and return the merged cache.

        Uses settle-all semantics: individual failures are recorded as
        ``failed`` entries and never propagate.
        """

        grouped = self.collect_ids(records, specs)
        fetchers: Dict[str, ReferenceSpec] = {}
        for spec in specs:
            fetchers.setdefault(spec.target, spec)

        report = ResolutionReport()
        jobs: List[Awaitable[None]] = []
        waiting: List[asyncio.Future[None]] = []
        claimed: List[Tuple[str, str]] = []
        for target, ids in grouped.items():
            report.requested += len(ids)
            fresh: List[str] = []
            for pk in self.cache.missing(target, ids):
                running = self._inflight.get((target, pk))
                if running is not None:
                    waiting.append(running)
                    continue
                fresh.append(pk)
            if not fresh:
                continue
            spec = fetchers[target]
            for pk in fresh:
                self._claim(target, pk)
                claimed.append((target, pk))
            report.fetched += len(fresh)
            if spec.fetch_many is not None and self._settings.prefer_batch:
                jobs.append(self._fetch_batch(spec, fresh, report))
            else:
                jobs.extend(self._fetch_one(spec, pk, report) for pk in fresh)

        try:
            if jobs:
                self.logger.debug(
                    "Resolving %d reference(s) with %d call(s)", report.fetched, len(jobs)
                )
                outcomes = await asyncio.gather(*jobs, return_exceptions=True)
                for outcome in outcomes:
                    if isinstance(outcome, Exception):
                        self.logger.error(
                            "Reference resolution job failed", exc_info=outcome
                        )
            if waiting:
                await asyncio.gather(*waiting, return_exceptions=True)
        except asyncio.CancelledError:
            # unstarted jobs never reach their own cleanup
            for target, pk in claimed:
                self._release(target, pk)
            raise
        self.last_report = report
        return self.cache

    async def _fetch_one(
        self, spec: ReferenceSpec, pk: str, report: ResolutionReport
    ) -> None:
        try:
            async with self._semaphore:
                report.calls += 1
                value = await asyncio.wait_for(
                    spec.fetch_one(pk), timeout=self._settings.reference_timeout
                )
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # settle-all: one failure never aborts the rest
            self.logger.warning("Failed to resolve %s %s: %s", spec.target, pk, exc)
            self._merge_failure(spec.target, pk, report)
        else:
            if value is None:
                self.logger.warning("Reference %s %s not found", spec.target, pk)
                self._merge_failure(spec.target, pk, report)
            else:
                self._merge_success(spec.target, pk, value, report)
        finally:
            self._release(spec.target, pk)

    async def _fetch_batch(
        self, spec: ReferenceSpec, ids: List[str], report: ResolutionReport
    ) -> None:
        assert spec.fetch_many is not None
        try:
            async with self._semaphore:
                report.calls += 1
                values = await asyncio.wait_for(
                    spec.fetch_many(list(ids)), timeout=self._settings.reference_timeout
                )
            if not isinstance(values, Mapping):
                raise TypeError(
                    f"batch answer must be a mapping, got {type(values).__name__}"
                )
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # settle-all: the batch degrades to failures
            self.logger.warning(
                "Batch resolution of %d %s reference(s) failed: %s",
                len(ids),
                spec.target,
                exc,
            )
            for pk in ids:
                self._merge_failure(spec.target, pk, report)
        else:
            for pk in ids:
                value = values.get(pk)
                if value is None:
                    self._merge_failure(spec.target, pk, report)
                else:
                    self._merge_success(spec.target, pk, value, report)
        finally:
            for pk in ids:
                self._release(spec.target, pk)

    def _claim(self, target: str, pk: str) -> None:
        self.cache.mark_pending(target, pk)
        loop = asyncio.get_running_loop()
        self._inflight[(target, pk)] = loop.create_future()

    def _release(self, target: str, pk: str) -> None:
        future = self._inflight.pop((target, pk), None)
        if future is not None and not future.done():
            future.set_result(None)

    def _merge_success(
        self, target: str, pk: str, value: Any, report: ResolutionReport
    ) -> None:
        if self.cache.store(target, pk, value):
            report.resolved += 1
            self._notify(target, pk)

    def _merge_failure(self, target: str, pk: str, report: ResolutionReport) -> None:
        if self.cache.fail(target, pk):
            report.failed += 1
            self._notify(target, pk)

    def _notify(self, target: str, pk: str) -> None:
        for callback in list(self._listeners):
            try:
                callback(target, pk)
            except Exception:
                self.logger.exception("Reference listener failed for %s %s", target, pk)


__all__ = [
    "FetchMany",
    "FetchOne",
    "ReferenceListener",
    "ReferenceResolver",
    "ReferenceSpec",
    "ResolutionReport",
]


# The End
