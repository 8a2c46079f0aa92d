# -*- coding: utf-8 -*-
"""views

HTTP views exposing list-view projections of backend resources.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Literal

from fastapi import APIRouter, HTTPException, Query

from ..client.http import BackendClient
from ..conf import (
    ListViewSettings,
    current_settings,
    register_settings_observer,
    unregister_settings_observer,
)
from ..core.controller import ListViewController
from ..core.exceptions import CollectionFetchError, UnknownFieldError, UnknownResourceError
from ..core.filters import FILTER_OPS
from ..core.pipeline import Projection
from ..resources.builtin import default_registry
from ..resources.registry import ResourceRegistry


class ListViewAPIConfiguration:
    """Shared state for list-view API views: registry, client and controllers."""

    def __init__(
        self,
        registry: ResourceRegistry | None = None,
        client: BackendClient | None = None,
        *,
        settings: ListViewSettings | None = None,
    ) -> None:
        """Initialize configuration shared by the list-view API views."""

        self._logger = logging.getLogger(__name__)
        self._settings = settings or (client.settings if client else current_settings())
        self._registry = registry or default_registry()
        self._client = client or BackendClient(self._settings)
        self._controllers: Dict[str, ListViewController] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        register_settings_observer(self.apply_settings)

    @property
    def settings(self) -> ListViewSettings:
        return self._settings

    @property
    def registry(self) -> ResourceRegistry:
        return self._registry

    @property
    def client(self) -> BackendClient:
        return self._client

    @property
    def views_prefix(self) -> str:
        """Return the router prefix, empty when mounted at the root."""

        prefix = self._settings.views_prefix
        return "" if prefix == "/" else prefix

    def apply_settings(self, settings: ListViewSettings) -> None:
        """Apply runtime settings; controllers are rebuilt on next access.

        The backend client keeps the connection settings it was created with.
        """

        self._settings = settings
        for controller in self._controllers.values():
            controller.close()
        self._controllers.clear()

    def controller(self, resource: str) -> ListViewController:
        """Return the controller of ``resource`` or raise a 404."""

        try:
            schema = self._registry.get(resource)
        except UnknownResourceError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        controller = self._controllers.get(schema.name)
        if controller is None or controller.closed:
            controller = ListViewController.from_client(
                schema, self._client, self._registry, settings=self._settings
            )
            self._controllers[schema.name] = controller
        return controller

    def lock(self, resource: str) -> asyncio.Lock:
        """Return the lock serializing requests against one controller."""

        lock = self._locks.get(resource)
        if lock is None:
            lock = self._locks[resource] = asyncio.Lock()
        return lock

    async def refresh(self, controller: ListViewController, *, reset: bool = False) -> None:
        """Reload ``controller`` mapping fetch failures to 502."""

        try:
            await controller.refresh(reset=reset)
        except CollectionFetchError as exc:
            self._logger.warning("Refresh of %s failed: %s", controller.schema.name, exc)
            raise HTTPException(status_code=502, detail=str(exc)) from exc

    async def ensure_loaded(self, controller: ListViewController) -> None:
        if not controller.store.loaded:
            await self.refresh(controller)

    def parse_filter(self, raw: str) -> tuple[str, str, str]:
        """Split ``field:op:value`` (or ``field:value``) into its parts."""

        parts = raw.split(":", 2)
        if len(parts) == 3 and parts[1] in FILTER_OPS:
            field_name, op, value = parts
        elif len(parts) >= 2:
            field_name, value = parts[0], raw[len(parts[0]) + 1 :]
            op = "eq"
        else:
            raise HTTPException(status_code=400, detail=f"Invalid filter '{raw}'")
        if not field_name:
            raise HTTPException(status_code=400, detail=f"Invalid filter '{raw}'")
        return field_name, op, value

    def serialize(self, controller: ListViewController, projection: Projection) -> Dict[str, Any]:
        """Return the JSON payload describing ``projection``."""

        state = controller.state
        return {
            "resource": controller.schema.name,
            "items": [controller.display_row(record) for record in projection.visible],
            "page": projection.page_index,
            "page_size": projection.page_size,
            "total_pages": projection.total_pages,
            "filtered": projection.filtered_count,
            "total": projection.total_count,
            "search": state.filter.search,
            "filters": [
                {"field": p.field, "op": p.op, "value": p.value}
                for p in state.filter.active_predicates
            ],
            "sort": {"key": state.sort.key, "direction": state.sort.direction},
        }

    async def aclose(self) -> None:
        """Close every controller and the backend client, then stop observing settings."""

        unregister_settings_observer(self.apply_settings)
        for controller in self._controllers.values():
            controller.close()
        self._controllers.clear()
        await self._client.aclose()


class BaseListViewAPIView:
    """Base helper providing configuration access for list-view API views."""

    def __init__(self, config: ListViewAPIConfiguration) -> None:
        """Store ``config`` for use by concrete view implementations."""

        self._config = config
        self.logger = logging.getLogger(__name__)

    @property
    def config(self) -> ListViewAPIConfiguration:
        return self._config


class ResourceListView(BaseListViewAPIView):
    """Return one page of a resource collection."""

    async def get(
        self,
        resource: str,
        search: str = "",
        filter: List[str] = Query(default=[]),
        sort: str | None = None,
        direction: Literal["asc", "desc"] | None = None,
        page: int = Query(1, ge=1),
        page_size: int | None = Query(None, ge=1),
    ):
        """Apply the query to the resource view and return the visible page."""

        controller = self.config.controller(resource)
        predicates = [self.config.parse_filter(raw) for raw in filter]
        if sort and not controller.schema.is_sortable(sort):
            raise HTTPException(
                status_code=400, detail=f"{controller.schema.name}.{sort} is not sortable"
            )
        async with self.config.lock(controller.schema.name):
            await self.config.ensure_loaded(controller)
            state = controller.state
            try:
                with state.deferred():
                    state.reset()
                    state.set_search(search)
                    for field_name, op, value in predicates:
                        state.set_filter(field_name, value, op)
                    if sort:
                        state.set_sort(sort, direction or "asc")
                    elif direction and state.sort.key:
                        state.set_sort(state.sort.key, direction)
                    if page_size is not None:
                        state.set_page_size(page_size)
                    state.set_page(page)
            except ValueError as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc
            projection = await controller.sync_references()
            return self.config.serialize(controller, projection)


class ResourceRefreshView(BaseListViewAPIView):
    """Reload a resource collection from the backend."""

    async def post(self, resource: str, reset: bool = False):
        """Refetch the collection, optionally resetting the view state."""

        controller = self.config.controller(resource)
        async with self.config.lock(controller.schema.name):
            await self.config.refresh(controller, reset=reset)
            return self.config.serialize(controller, controller.view)


class ReferenceLookupView(BaseListViewAPIView):
    """Resolve one reference id of a resource field."""

    async def get(self, resource: str, field: str, pk: str):
        """Return the display value of ``pk`` for reference field ``field``."""

        controller = self.config.controller(resource)
        try:
            value = await controller.resolve_reference(field, pk)
            state = controller.reference_state(field, pk)
        except UnknownFieldError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        target = controller.schema.field(field)
        return {
            "field": field,
            "id": pk,
            "target": target.reference if target else None,
            "value": value,
            "state": state.value,
        }


class ListViewAPIViewSet:
    """Bundle the list-view API views for router registration."""

    def __init__(self, config: ListViewAPIConfiguration | None = None) -> None:
        """Create the view set and instantiate individual views."""

        self._config = config or ListViewAPIConfiguration()
        self.list = ResourceListView(self._config)
        self.refresh = ResourceRefreshView(self._config)
        self.lookup = ReferenceLookupView(self._config)

    @property
    def config(self) -> ListViewAPIConfiguration:
        return self._config

    def register(self, router: APIRouter) -> None:
        """Attach all view handlers to ``router`` under the views prefix."""

        prefix = self._config.views_prefix
        router.get(f"{prefix}/{{resource}}", name="adminlist.api.list")(self.list.get)
        router.post(
            f"{prefix}/{{resource}}/refresh", name="adminlist.api.refresh"
        )(self.refresh.post)
        router.get(
            f"{prefix}/{{resource}}/lookup/{{field}}/{{pk}}", name="adminlist.api.lookup"
        )(self.lookup.get)


__all__ = [
    "BaseListViewAPIView",
    "ListViewAPIConfiguration",
    "ListViewAPIViewSet",
    "ReferenceLookupView",
    "ResourceListView",
    "ResourceRefreshView",
]


# The End
