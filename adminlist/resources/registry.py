# -*- coding: utf-8 -*-
"""
registry

Registry of resource schemas available to list views.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator

from ..core.exceptions import UnknownResourceError
from ..core.schema import ResourceSchema


class ResourceRegistry:
    """Store :class:`ResourceSchema` objects keyed by resource name."""

    def __init__(self, schemas: Iterable[ResourceSchema] = ()) -> None:
        self._schemas: Dict[str, ResourceSchema] = {}
        for schema in schemas:
            self.register(schema)

    def register(self, schema: ResourceSchema, *, replace: bool = False) -> ResourceSchema:
        """Register ``schema`` under its name.

        Registering the same name twice raises ``ValueError`` unless
        ``replace`` is set. Reference targets are not checked here; use
        :meth:`validate` once every schema is registered.
        """

        key = schema.name.lower()
        if key in self._schemas and not replace:
            if self._schemas[key] is schema:
                return schema  # Idempotent
            raise ValueError(f"Resource already registered: {schema.name}")
        self._schemas[key] = schema
        return schema

    def unregister(self, name: str) -> None:
        self._schemas.pop(name.lower(), None)

    def get(self, name: str) -> ResourceSchema:
        """Return the schema registered as ``name`` or raise."""

        try:
            return self._schemas[name.lower()]
        except KeyError as exc:
            raise UnknownResourceError(f"Unknown resource: {name}") from exc

    def validate(self) -> None:
        """Ensure every reference field points at a registered resource."""

        for schema in self._schemas.values():
            for field in schema.reference_fields():
                if field.reference and field.reference.lower() not in self._schemas:
                    raise UnknownResourceError(
                        f"{schema.name}.{field.name} references unknown resource "
                        f"{field.reference}"
                    )

    def names(self) -> list[str]:
        return [schema.name for schema in self._schemas.values()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._schemas

    def __iter__(self) -> Iterator[ResourceSchema]:
        return iter(list(self._schemas.values()))

    def __len__(self) -> int:
        return len(self._schemas)


__all__ = ["ResourceRegistry"]


# The End
