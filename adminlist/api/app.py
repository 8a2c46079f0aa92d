# -*- coding: utf-8 -*-
"""
app

Factory assembling a FastAPI application serving list views.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import APIRouter, FastAPI

from ..client.http import BackendClient
from ..conf import ListViewSettings
from ..resources.registry import ResourceRegistry
from .views import ListViewAPIConfiguration, ListViewAPIViewSet


class ApplicationFactory:
    """Create FastAPI applications exposing the list-view API."""

    def __init__(
        self,
        *,
        settings: ListViewSettings | None = None,
        registry: ResourceRegistry | None = None,
        client: BackendClient | None = None,
    ) -> None:
        """Persist the collaborators used for application builds."""

        self._settings = settings
        self._registry = registry
        self._client = client

    def build_router(self, config: ListViewAPIConfiguration) -> APIRouter:
        """Return a router with every list-view endpoint registered."""

        router = APIRouter()
        ListViewAPIViewSet(config).register(router)
        return router

    def build(self, *, title: str = "Admin list views") -> FastAPI:
        """Return a FastAPI instance wired with the list-view API."""

        config = ListViewAPIConfiguration(
            self._registry, self._client, settings=self._settings
        )

        @asynccontextmanager
        async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
            try:
                yield
            finally:
                await config.aclose()

        app = FastAPI(title=title, lifespan=lifespan)
        app.state.list_views = config
        app.include_router(self.build_router(config))
        return app


def create_app(
    settings: ListViewSettings | None = None,
    *,
    registry: ResourceRegistry | None = None,
    client: BackendClient | None = None,
) -> FastAPI:
    """Shortcut for ``ApplicationFactory(...).build()``."""

    return ApplicationFactory(settings=settings, registry=registry, client=client).build()


__all__ = ["ApplicationFactory", "create_app"]


# The End
