# -*- coding: utf-8 -*-
"""
http

Async client for the dashboard backend's collection, detail and batch endpoints.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Mapping, Sequence

import httpx

from ..conf import ListViewSettings, current_settings
from ..core.exceptions import (
    AuthenticationError,
    BackendError,
    BackendHTTPError,
    BackendResponseError,
    BackendTransportError,
    NotFoundError,
)
from ..core.records import Record, record_id, value_at
from ..core.resolver import ReferenceSpec
from ..core.schema import ResourceSchema
from ..core.store import CollectionPage, Loader
from .envelope import Envelope, extract_item, extract_items, extract_total


class BackendClient:
    """Talk to the envelope API with a bearer token, timeout and bounded retries.

    Transport failures and 5xx answers are retried with exponential backoff;
    4xx answers and ``error`` envelopes are raised immediately.
    """

    def __init__(
        self,
        settings: ListViewSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Prepare the client; the underlying ``httpx`` client is created lazily."""

        self._settings = settings or current_settings()
        self._client = client
        self._transport = transport
        self._owns_client = client is None
        self.logger = logging.getLogger(__name__)

    @property
    def settings(self) -> ListViewSettings:
        return self._settings

    async def __aenter__(self) -> "BackendClient":
        self._ensure_client()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the owned ``httpx`` client."""

        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # Endpoints ---------------------------------------------------------
    async def list_records(self, schema: ResourceSchema) -> CollectionPage:
        """Fetch the full collection of ``schema``'s resource type."""

        data = await self.request("GET", schema.endpoint)
        items = extract_items(data, self._keys(schema.items_key, "items"))
        return CollectionPage(items=tuple(items), total=extract_total(data, len(items)))

    async def get_record(self, schema: ResourceSchema, pk: str) -> Record:
        """Fetch one record by primary key."""

        data = await self.request("GET", schema.detail_path(pk))
        item = extract_item(data, self._keys(schema.item_key, "item"))
        if item is None:
            raise BackendResponseError(f"{schema.name} {pk} payload has no record")
        return item

    async def get_records_batch(
        self, schema: ResourceSchema, ids: Sequence[str]
    ) -> list[Record]:
        """Fetch several records of ``schema`` in a single batch call."""

        data = await self.request("POST", schema.batch_path, json={"ids": list(ids)})
        return extract_items(data, self._keys(schema.items_key, "items"))

    # Reference helpers -------------------------------------------------
    def display_of(self, schema: ResourceSchema, record: Record) -> Any:
        """Return the human readable value of ``record``, its id as fallback."""

        value = value_at(record, schema.display_field)
        if value is None or value == "":
            return record_id(record, schema.pk_attr)
        return value

    def loader(self, schema: ResourceSchema) -> Loader:
        """Return a collection loader suitable for :class:`CollectionStore`."""

        async def _load() -> CollectionPage:
            return await self.list_records(schema)

        return _load

    def reference_spec(
        self, source_field: str, target: ResourceSchema
    ) -> ReferenceSpec:
        """Build a reference spec resolving ids of ``target`` to display values."""

        async def fetch_one(pk: str) -> Any:
            record = await self.get_record(target, pk)
            return self.display_of(target, record)

        fetch_many = None
        if target.batch:

            async def fetch_many(ids: Sequence[str]) -> Mapping[str, Any]:
                records = await self.get_records_batch(target, ids)
                found: Dict[str, Any] = {}
                for record in records:
                    pk = record_id(record, target.pk_attr)
                    if pk is not None:
                        found[pk] = self.display_of(target, record)
                return found

        return ReferenceSpec(
            source_field=source_field,
            target=target.name,
            fetch_one=fetch_one,
            fetch_many=fetch_many,
        )

    # Transport ---------------------------------------------------------
    async def request(self, method: str, path: str, *, json: Any = None) -> Any:
        """Perform ``method`` on ``path`` and return the unwrapped ``data``."""

        client = self._ensure_client()
        attempts = self._settings.max_retries + 1
        last_error: BackendError | None = None
        for attempt in range(attempts):
            try:
                response = await client.request(method, path, json=json)
            except httpx.TimeoutException as exc:
                last_error = BackendTransportError(f"{method} {path} timed out: {exc}")
            except httpx.TransportError as exc:
                last_error = BackendTransportError(f"{method} {path} failed: {exc}")
            else:
                if response.status_code >= 400:
                    error = self._http_error(response)
                    if not error.retryable:
                        raise error
                    last_error = error
                else:
                    return self._unwrap(response)
            if attempt + 1 < attempts:
                delay = self._settings.retry_backoff * (2 ** attempt)
                self.logger.warning(
                    "Retrying %s %s in %.2fs (attempt %d/%d): %s",
                    method,
                    path,
                    delay,
                    attempt + 1,
                    attempts,
                    last_error,
                )
                await asyncio.sleep(delay)
        assert last_error is not None
        raise last_error

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/json", "Content-Type": "application/json"}
            if self._settings.access_token:
                headers["Authorization"] = f"Bearer {self._settings.access_token}"
            self._client = httpx.AsyncClient(
                base_url=self._settings.api_root,
                headers=headers,
                timeout=httpx.Timeout(self._settings.request_timeout),
                transport=self._transport,
            )
            self._owns_client = True
        return self._client

    @staticmethod
    def _unwrap(response: httpx.Response) -> Any:
        try:
            payload = response.json()
        except ValueError as exc:
            raise BackendResponseError("Backend answered with invalid JSON") from exc
        return Envelope.parse(payload).unwrap()

    @staticmethod
    def _http_error(response: httpx.Response) -> BackendHTTPError:
        detail = f"{response.request.method} {response.request.url.path} -> {response.status_code}"
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, Mapping) and payload.get("message"):
            detail = f"{detail}: {payload['message']}"
        if response.status_code == 401:
            return AuthenticationError(detail)
        if response.status_code == 404:
            return NotFoundError(detail)
        return BackendHTTPError(detail, status_code=response.status_code)

    @staticmethod
    def _keys(*keys: str) -> tuple[str, ...]:
        return tuple(dict.fromkeys(keys))


__all__ = ["BackendClient"]


# The End
