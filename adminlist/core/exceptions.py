# -*- coding: utf-8 -*-
"""
exceptions

Custom domain exceptions for the list-view core.

Version: 0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations


class ListViewError(Exception):
    """Base class for list-view specific exceptions."""


class UnknownResourceError(ListViewError):
    """Raised when a resource type is not registered."""


class UnknownFieldError(ListViewError):
    """Raised when a field is not declared on a resource schema."""


class CollectionFetchError(ListViewError):
    """Raised when the collection endpoint cannot deliver a fresh collection."""

    def __init__(self, resource: str, detail: str | None = None) -> None:
        message = f"Failed to fetch '{resource}' collection"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.resource = resource
        self.detail = detail


# --- Backend errors ----------------------------------------------------------

class BackendError(ListViewError):
    """Base class for failures talking to the backend API."""


class BackendResponseError(BackendError):
    """Raised when the backend answers with an ``error`` envelope or bad payload."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or "")
        self.detail = detail


class BackendTransportError(BackendError):
    """Raised when the backend cannot be reached or does not answer in time."""


class BackendHTTPError(BackendError):
    """Base class for exceptions carrying an HTTP status code."""

    status_code: int = 500

    def __init__(self, detail: str | None = None, *, status_code: int | None = None) -> None:
        super().__init__(detail or "")
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code

    @property
    def retryable(self) -> bool:
        """Return ``True`` when the status denotes a transient server failure."""

        return self.status_code >= 500


class AuthenticationError(BackendHTTPError):
    """Raised when the backend rejects the configured access token."""

    status_code = 401


class NotFoundError(BackendHTTPError):
    """Raised when a requested record or endpoint does not exist."""

    status_code = 404


__all__ = [
    "AuthenticationError",
    "BackendError",
    "BackendHTTPError",
    "BackendResponseError",
    "BackendTransportError",
    "CollectionFetchError",
    "ListViewError",
    "NotFoundError",
    "UnknownFieldError",
    "UnknownResourceError",
]


# The End
