# -*- coding: utf-8 -*-
"""
schema

Resource schema descriptors driving search, filtering and sorting.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Literal, Mapping, Optional

from pydantic import BaseModel, Field as PField, model_validator

from .records import value_at, values_at

# Semantic field types understood by the comparator table
FieldKind = Literal["string", "number", "boolean", "date"]
SortDirection = Literal["asc", "desc"]

Accessor = Callable[[Mapping[str, Any]], Any]


class FieldSpec(BaseModel):
    """Declaration of one record field as seen by a list view."""
    name: str  # dotted path inside the record
    kind: FieldKind = "string"
    label: str | None = None
    searchable: bool = False
    sortable: bool = True
    reference: Optional[str] = None  # target resource type for foreign keys
    compute: Optional[Accessor] = None

    def read(self, record: Mapping[str, Any]) -> Any:
        """Return the field value for ``record``, ``None`` when unreadable."""
        if self.compute is None:
            return value_at(record, self.name)
        try:
            return self.compute(record)
        except (AttributeError, KeyError, TypeError, ValueError):
            return None

    def read_all(self, record: Mapping[str, Any]) -> list[Any]:
        """Return every value of the field, fanning out through nested lists."""
        if self.compute is None:
            return values_at(record, self.name)
        value = self.read(record)
        return [] if value is None else [value]

    @property
    def title(self) -> str:
        return self.label or self.name


class ResourceSchema(BaseModel):
    """Metadata describing one backend resource type for list views."""
    name: str
    endpoint: str = ""
    label: str | None = None
    pk_attr: str = "id"
    display_field: str = "name"

    # Envelope keys; the dashboard backend historically used per-resource keys
    items_key: str = "items"
    item_key: str = "item"
    batch: bool = False

    fields: list[FieldSpec] = PField(default_factory=list)
    default_sort: str | None = "createdAt"
    default_direction: SortDirection = "desc"

    @model_validator(mode="after")
    def _default_endpoint(self) -> "ResourceSchema":
        if not self.endpoint:
            self.endpoint = f"/{self.name}"
        elif not self.endpoint.startswith("/"):
            self.endpoint = f"/{self.endpoint}"
        self.endpoint = self.endpoint.rstrip("/") or "/"
        return self

    def field(self, name: str) -> FieldSpec | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def is_sortable(self, name: str) -> bool:
        """Return ``False`` only for declared fields marked ``sortable=False``."""
        declared = self.field(name)
        return declared is None or declared.sortable

    @property
    def fields_map(self) -> dict[str, FieldSpec]:
        """Return a mapping of field names to descriptors."""
        return {f.name: f for f in self.fields}

    def searchable_fields(self) -> list[FieldSpec]:
        """Return the fields matched by the free-text search box."""
        return [f for f in self.fields if f.searchable]

    def reference_fields(self) -> list[FieldSpec]:
        """Return the foreign-key fields that need reference resolution."""
        return [f for f in self.fields if f.reference]

    def detail_path(self, pk: str) -> str:
        return f"{self.endpoint}/{pk}"

    @property
    def batch_path(self) -> str:
        return f"{self.endpoint}/batch"

    def field_for(self, name: str, date_fields: Iterable[str] = ()) -> FieldSpec:
        """Return the declared field or an ad-hoc one for undeclared ``name``.

        Undeclared fields listed in ``date_fields`` are treated as dates; any
        other undeclared field keeps ``string`` as a placeholder kind which the
        pipeline refines from the data once per sort.
        """
        declared = self.field(name)
        if declared is not None:
            return declared
        leaf = name.rsplit(".", 1)[-1]
        kind: FieldKind = "date" if leaf in set(date_fields) else "string"
        return FieldSpec(name=name, kind=kind)


__all__ = ["Accessor", "FieldKind", "FieldSpec", "ResourceSchema", "SortDirection"]

# The End
