# -*- coding: utf-8 -*-
"""
store

Raw collection store guarded by a generation token.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence, Tuple, Union

from .exceptions import CollectionFetchError
from .records import Record


@dataclass(frozen=True)
class CollectionPage:
    """Full collection as returned by a collection endpoint."""

    items: Tuple[Record, ...]
    total: int


@dataclass(frozen=True)
class LoadResult:
    """Outcome of one ``CollectionStore.load`` call."""

    committed: bool
    token: int
    generation: int
    records: Tuple[Record, ...]


Loader = Callable[[], Awaitable[Union[CollectionPage, Sequence[Record]]]]


class CollectionStore:
    """Hold the latest full collection of one resource type.

    ``replace`` is the only mutation. Every ``load`` takes a token; a result is
    committed only when its token is still the most recently issued one when
    the fetch completes, so superseded fetches are dropped silently.
    """

    def __init__(self, resource: str, loader: Loader) -> None:
        """Create an empty store fed by ``loader``."""

        self.resource = resource
        self._loader = loader
        self._records: Tuple[Record, ...] = ()
        self._total = 0
        self._generation = 0
        self._issued = 0
        self._in_flight = 0
        self._loaded = False
        self.last_error: Exception | None = None
        self.logger = logging.getLogger(__name__)

    @property
    def records(self) -> Tuple[Record, ...]:
        """Return the committed collection in fetch order."""

        return self._records

    @property
    def total(self) -> int:
        """Return the backend-reported total of the committed collection."""

        return self._total

    @property
    def generation(self) -> int:
        """Return the number of commits performed so far."""

        return self._generation

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def loading(self) -> bool:
        """Return ``True`` while at least one load is in flight."""

        return self._in_flight > 0

    def replace(self, records: Sequence[Record], total: int | None = None) -> int:
        """Swap in ``records`` wholesale and return the new generation."""

        self._records = tuple(records)
        self._total = len(self._records) if total is None else int(total)
        self._generation += 1
        self._loaded = True
        return self._generation

    def invalidate(self) -> None:
        """Supersede every load currently in flight."""

        self._issued += 1

    async def load(self) -> LoadResult:
        """Fetch a fresh collection and commit it unless superseded.

        Raises :class:`CollectionFetchError` when the current load fails; the
        previously committed collection is kept in that case.
        """

        self._issued += 1
        token = self._issued
        self._in_flight += 1
        try:
            payload = await self._loader()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if token != self._issued:
                self.logger.debug(
                    "Ignoring failure of superseded %s load #%d: %s", self.resource, token, exc
                )
                return self._result(False, token)
            self.last_error = exc
            self.logger.warning("Failed to load %s collection: %s", self.resource, exc)
            raise CollectionFetchError(self.resource, str(exc)) from exc
        finally:
            self._in_flight -= 1

        if token != self._issued:
            self.logger.debug(
                "Discarding superseded %s load #%d (current #%d)",
                self.resource,
                token,
                self._issued,
            )
            return self._result(False, token)

        if isinstance(payload, CollectionPage):
            self.replace(payload.items, payload.total)
        else:
            self.replace(payload)
        self.last_error = None
        self.logger.debug(
            "Committed %d %s record(s) as generation %d",
            len(self._records),
            self.resource,
            self._generation,
        )
        return self._result(True, token)

    def _result(self, committed: bool, token: int) -> LoadResult:
        return LoadResult(
            committed=committed,
            token=token,
            generation=self._generation,
            records=self._records,
        )


__all__ = ["CollectionPage", "CollectionStore", "LoadResult", "Loader"]


# The End
