# -*- coding: utf-8 -*-
"""
controller

List view controller wiring the store, resolver, state and pipeline together.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Sequence

from ..conf import ListViewSettings, current_settings
from .cache import ReferenceCache, ReferenceState
from .exceptions import UnknownFieldError
from .pipeline import Projection, ViewPipeline
from .records import Record, value_at
from .resolver import ReferenceResolver, ReferenceSpec
from .schema import ResourceSchema, SortDirection
from .state import SortState, ViewState
from .store import CollectionStore, Loader

if TYPE_CHECKING:  # pragma: no cover
    from ..client.http import BackendClient
    from ..resources.registry import ResourceRegistry

ViewListener = Callable[[Projection], None]


class ListViewController:
    """Drive one list view of a resource type.

    Setters mutate the :class:`ViewState` and re-run the pipeline
    synchronously. Network work happens only in :meth:`refresh` and
    :meth:`sync_references`. The reference cache lives as long as the
    controller, so a refresh keeps every resolved display value.
    """

    def __init__(
        self,
        schema: ResourceSchema,
        loader: Loader,
        *,
        references: Sequence[ReferenceSpec] = (),
        settings: ListViewSettings | None = None,
        cache: ReferenceCache | None = None,
    ) -> None:
        """Build the view around ``loader`` and the given reference specs."""

        self.schema = schema
        self._settings = settings or current_settings()
        self.logger = logging.getLogger(__name__)
        self.store = CollectionStore(schema.name, loader)
        self.resolver = ReferenceResolver(
            cache if cache is not None else ReferenceCache(), settings=self._settings
        )
        self.pipeline = ViewPipeline(schema, date_fields=self._settings.date_fields)
        default_sort = (
            SortState(key=schema.default_sort, direction=schema.default_direction)
            if schema.default_sort
            else SortState()
        )
        self.state = ViewState(
            default_sort=default_sort,
            page_size=self._settings.default_page_size,
            max_page_size=self._settings.max_page_size,
        )
        self._references: Dict[str, ReferenceSpec] = {
            spec.source_field: spec for spec in references
        }
        self._listeners: List[ViewListener] = []
        self._dirty = False
        self._closed = False
        self.state.subscribe(self._on_state_change)
        self.resolver.add_listener(self._on_reference)
        self._projection = self._project()

    @classmethod
    def from_client(
        cls,
        schema: ResourceSchema,
        client: "BackendClient",
        registry: "ResourceRegistry",
        *,
        settings: ListViewSettings | None = None,
    ) -> "ListViewController":
        """Create a controller fetching through ``client``.

        Every reference field of ``schema`` is resolved against the target
        schema found in ``registry``.
        """

        references = [
            client.reference_spec(field.name, registry.get(field.reference))
            for field in schema.reference_fields()
            if field.reference
        ]
        return cls(
            schema,
            client.loader(schema),
            references=references,
            settings=settings or client.settings,
        )

    # Read access -------------------------------------------------------
    @property
    def settings(self) -> ListViewSettings:
        return self._settings

    @property
    def cache(self) -> ReferenceCache:
        return self.resolver.cache

    @property
    def references(self) -> tuple[ReferenceSpec, ...]:
        return tuple(self._references.values())

    @property
    def view(self) -> Projection:
        """Return the latest projection, re-running the pipeline if stale."""

        if self._dirty:
            self._reproject()
        return self._projection

    @property
    def closed(self) -> bool:
        return self._closed

    def lookup(self, field_name: str, pk: Any) -> Any:
        """Return the display value of ``pk`` for reference field ``field_name``."""

        spec = self._reference(field_name)
        return self.resolver.lookup(spec.target, None if pk is None else str(pk))

    def reference_state(self, field_name: str, pk: Any) -> ReferenceState:
        spec = self._reference(field_name)
        return self.cache.state(spec.target, str(pk))

    def display_row(self, record: Record) -> Dict[str, Any]:
        """Return ``record`` with ``<field>Display`` values for reference fields."""

        row = dict(record)
        for name, spec in self._references.items():
            raw = value_at(record, name)
            row[f"{name}Display"] = self.resolver.lookup(
                spec.target, None if raw is None else str(raw)
            )
        return row

    def rows(self) -> List[Dict[str, Any]]:
        """Return the visible page with display values attached."""

        return [self.display_row(record) for record in self.view.visible]

    # Listeners ---------------------------------------------------------
    def add_listener(self, callback: ViewListener) -> None:
        """Invoke ``callback(projection)`` whenever the projection is recomputed."""

        self._listeners.append(callback)

    def remove_listener(self, callback: ViewListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    # Network -----------------------------------------------------------
    async def refresh(self, *, reset: bool = False) -> Projection:
        """Reload the collection and resolve the references it needs.

        With ``reset`` the view state returns to its defaults first. A failed
        fetch raises :class:`CollectionFetchError` and leaves the committed
        collection and the projection untouched.
        """

        if reset:
            self.state.reset()
        result = await self.store.load()
        if not result.committed:
            return self.view
        self._reproject()
        await self.sync_references()
        return self._projection

    async def sync_references(self) -> Projection:
        """Resolve ids referenced by the records that need display values."""

        if self._references:
            records = self._records_to_resolve()
            await self.resolver.resolve(records, self.references)
            report = self.resolver.last_report
            if report.fetched:
                self.logger.debug(
                    "%s references: %d fetched, %d resolved, %d failed in %d call(s)",
                    self.schema.name,
                    report.fetched,
                    report.resolved,
                    report.failed,
                    report.calls,
                )
        self._reproject()
        return self._projection

    async def resolve_reference(self, field_name: str, pk: Any) -> Any:
        """Resolve a single ``pk`` of ``field_name`` and return its display value."""

        spec = self._reference(field_name)
        probe: Dict[str, Any] = {}
        node = probe
        *parents, leaf = spec.source_field.split(".")
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = str(pk)
        await self.resolver.resolve([probe], [spec])
        return self.lookup(field_name, pk)

    # Setters -----------------------------------------------------------
    def set_search(self, search: str | None) -> Projection:
        self.state.set_search(search)
        return self.view

    def set_filter(self, field_name: str, value: Any, op: str = "eq") -> Projection:
        self.state.set_filter(field_name, value, op)
        return self.view

    def clear_filter(self, field_name: str | None = None) -> Projection:
        self.state.clear_filter(field_name)
        return self.view

    def set_sort(self, key: str | None, direction: SortDirection = "asc") -> Projection:
        self._require_sortable(key)
        self.state.set_sort(key, direction)
        return self.view

    def toggle_sort(self, key: str) -> Projection:
        self._require_sortable(key)
        self.state.toggle_sort(key)
        return self.view

    def set_page(self, page_index: int) -> Projection:
        self.state.set_page(page_index)
        return self.view

    def set_page_size(self, page_size: int) -> Projection:
        self.state.set_page_size(page_size)
        return self.view

    def reset(self) -> Projection:
        """Return search, predicates, sort and page to their defaults."""

        self.state.reset()
        return self.view

    def close(self) -> None:
        """Supersede in-flight loads and detach from state and resolver events."""

        if self._closed:
            return
        self._closed = True
        self.store.invalidate()
        self.state.unsubscribe(self._on_state_change)
        self.resolver.remove_listener(self._on_reference)
        self._listeners.clear()

    # Helpers -----------------------------------------------------------
    def _require_sortable(self, key: str | None) -> None:
        if key and not self.schema.is_sortable(key):
            raise UnknownFieldError(f"{self.schema.name}.{key} is not sortable")

    def _reference(self, field_name: str) -> ReferenceSpec:
        spec = self._references.get(field_name)
        if spec is None:
            raise UnknownFieldError(
                f"{self.schema.name}.{field_name} is not a reference field"
            )
        return spec

    def _records_to_resolve(self) -> Iterable[Record]:
        if not self._settings.lazy_references or self._needs_all_references():
            return self.store.records
        return self.view.visible

    def _needs_all_references(self) -> bool:
        # ordering or searching by display value needs every id resolved
        if self.state.sort.key in self._references:
            return True
        if self.state.filter.search_term:
            fields = self.schema.searchable_fields()
            return any(f.name in self._references for f in fields)
        return False

    def _project(self) -> Projection:
        return self.pipeline.project(
            self.store.records,
            self.cache,
            self.state.filter,
            self.state.sort,
            self.state.page,
        )

    def _reproject(self) -> None:
        self._projection = self._project()
        self._dirty = False
        for callback in list(self._listeners):
            try:
                callback(self._projection)
            except Exception:  # pragma: no cover - runtime guard
                self.logger.exception("View listener failed for %s", self.schema.name)

    def _on_state_change(self, _state: ViewState) -> None:
        self._reproject()

    def _on_reference(self, _target: str, _pk: str) -> None:
        self._dirty = True


__all__ = ["ListViewController", "ViewListener"]


# The End
