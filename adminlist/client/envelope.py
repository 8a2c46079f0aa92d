# -*- coding: utf-8 -*-
"""
envelope

Response envelope returned by every backend endpoint.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations

from typing import Any, Literal, Mapping, Sequence

from pydantic import BaseModel, ValidationError

from ..core.exceptions import BackendResponseError
from ..core.records import Record


class Envelope(BaseModel):
    """``{status, message, data}`` wrapper around backend payloads."""
    status: Literal["success", "error"]
    message: str = ""
    data: Any = None

    @classmethod
    def parse(cls, payload: Any) -> "Envelope":
        """Validate ``payload`` or raise :class:`BackendResponseError`."""
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise BackendResponseError(f"Malformed response envelope: {exc}") from exc

    def unwrap(self) -> Any:
        """Return ``data`` for successful envelopes, raise for ``error`` ones."""
        if self.status != "success":
            raise BackendResponseError(self.message or "Backend reported an error")
        return self.data


def extract_items(data: Any, keys: Sequence[str]) -> list[Record]:
    """Return the record list stored under the first present key of ``keys``."""

    if isinstance(data, list):
        return [item for item in data if isinstance(item, Mapping)]
    if not isinstance(data, Mapping):
        raise BackendResponseError("Collection payload is not an object")
    for key in keys:
        items = data.get(key)
        if isinstance(items, list):
            return [item for item in items if isinstance(item, Mapping)]
    raise BackendResponseError(f"Collection payload lacks any of {list(keys)}")


def extract_item(data: Any, keys: Sequence[str]) -> Record | None:
    """Return the single record stored under the first present key of ``keys``."""

    if not isinstance(data, Mapping):
        return None
    for key in keys:
        item = data.get(key)
        if isinstance(item, Mapping):
            return item
    return None


def extract_total(data: Any, default: int) -> int:
    """Return the backend-reported total, ``default`` when absent or invalid."""

    if isinstance(data, Mapping):
        total = data.get("total")
        if isinstance(total, int) and not isinstance(total, bool):
            return total
    return default


__all__ = ["Envelope", "extract_item", "extract_items", "extract_total"]

# The End
