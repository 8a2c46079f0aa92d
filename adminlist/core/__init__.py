# -*- coding: utf-8 -*-
"""core

Collection store, reference resolver, view state and pipeline.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from .cache import CacheEntry, ReferenceCache, ReferenceState
from .controller import ListViewController
from .exceptions import (
    AuthenticationError,
    BackendError,
    BackendHTTPError,
    BackendResponseError,
    BackendTransportError,
    CollectionFetchError,
    ListViewError,
    NotFoundError,
    UnknownFieldError,
    UnknownResourceError,
)
from .filters import FilterSpec, FilterState
from .pipeline import Projection, ViewPipeline
from .resolver import ReferenceResolver, ReferenceSpec, ResolutionReport
from .schema import FieldSpec, ResourceSchema
from .state import PageState, SortState, ViewState
from .store import CollectionPage, CollectionStore, LoadResult

__all__ = [
    "AuthenticationError",
    "BackendError",
    "BackendHTTPError",
    "BackendResponseError",
    "BackendTransportError",
    "CacheEntry",
    "CollectionFetchError",
    "CollectionPage",
    "CollectionStore",
    "FieldSpec",
    "FilterSpec",
    "FilterState",
    "ListViewController",
    "ListViewError",
    "LoadResult",
    "NotFoundError",
    "PageState",
    "Projection",
    "ReferenceCache",
    "ReferenceResolver",
    "ReferenceSpec",
    "ReferenceState",
    "ResolutionReport",
    "ResourceSchema",
    "SortState",
    "UnknownFieldError",
    "UnknownResourceError",
    "ViewPipeline",
    "ViewState",
]

# The End
