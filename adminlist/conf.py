# -*- coding: utf-8 -*-
"""
conf

Runtime configuration utilities for the list-view package.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from threading import RLock
from typing import Callable, Mapping


DEFAULT_DATE_FIELDS: tuple[str, ...] = ("createdAt", "updatedAt", "deletedAt")


@dataclass
class ListViewSettings:
    """Container for list-view configuration derived from environment variables."""

    api_base_url: str = "http://localhost:8000"
    api_prefix: str = "/v1"
    access_token: str | None = None
    request_timeout: float = 10.0
    max_retries: int = 2
    retry_backoff: float = 0.2
    reference_timeout: float = 15.0
    resolver_concurrency: int = 10
    prefer_batch: bool = True
    lazy_references: bool = True
    default_page_size: int = 10
    max_page_size: int = 100
    placeholder: str = "Unknown"
    date_fields: tuple[str, ...] = field(default_factory=lambda: DEFAULT_DATE_FIELDS)
    views_prefix: str = "/views"

    def __post_init__(self) -> None:
        """Normalize prefixes and clamp numeric limits to sane values."""
        self.api_base_url = self.api_base_url.rstrip("/")
        self.api_prefix = self._normalize_prefix(self.api_prefix)
        self.views_prefix = self._normalize_prefix(self.views_prefix)
        self.max_retries = max(0, int(self.max_retries))
        self.resolver_concurrency = max(1, int(self.resolver_concurrency))
        self.max_page_size = max(1, int(self.max_page_size))
        self.default_page_size = max(1, min(int(self.default_page_size), self.max_page_size))
        if isinstance(self.date_fields, str):
            self.date_fields = self._split_names(self.date_fields)
        else:
            self.date_fields = tuple(self.date_fields)

    @property
    def api_root(self) -> str:
        """Return the absolute URL every backend endpoint is relative to."""
        if self.api_prefix == "/":
            return self.api_base_url
        return f"{self.api_base_url}{self.api_prefix}"

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        *,
        prefix: str = "ADMINLIST_",
    ) -> "ListViewSettings":
        """Build a settings instance from environment variables."""
        source = os.environ if env is None else env
        data = {key[len(prefix) :]: value for key, value in source.items() if key.startswith(prefix)}
        api_base_url = data.get("API_URL") or source.get("API_URL") or "http://localhost:8000"
        api_prefix = data.get("API_PREFIX") or "/v1"
        access_token = data.get("ACCESS_TOKEN") or None
        date_fields_raw = data.get("DATE_FIELDS")
        date_fields = (
            cls._split_names(date_fields_raw) if date_fields_raw else DEFAULT_DATE_FIELDS
        )
        return cls(
            api_base_url=api_base_url,
            api_prefix=api_prefix,
            access_token=access_token,
            request_timeout=cls._to_float(data.get("REQUEST_TIMEOUT"), default=10.0),
            max_retries=cls._to_int(data.get("MAX_RETRIES"), default=2),
            retry_backoff=cls._to_float(data.get("RETRY_BACKOFF"), default=0.2),
            reference_timeout=cls._to_float(data.get("REFERENCE_TIMEOUT"), default=15.0),
            resolver_concurrency=cls._to_int(data.get("RESOLVER_CONCURRENCY"), default=10),
            prefer_batch=cls._to_bool(data.get("PREFER_BATCH"), default=True),
            lazy_references=cls._to_bool(data.get("LAZY_REFERENCES"), default=True),
            default_page_size=cls._to_int(data.get("PAGE_SIZE"), default=10),
            max_page_size=cls._to_int(data.get("MAX_PAGE_SIZE"), default=100),
            placeholder=data.get("PLACEHOLDER") or "Unknown",
            date_fields=date_fields,
            views_prefix=data.get("VIEWS_PREFIX") or "/views",
        )

    @staticmethod
    def _to_int(value: str | None, *, default: int) -> int:
        """Return an integer from ``value`` or ``default`` when conversion fails."""
        if value is None:
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    @staticmethod
    def _to_float(value: str | None, *, default: float) -> float:
        """Return a float from ``value`` or ``default`` when conversion fails."""
        if value is None:
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    @staticmethod
    def _to_bool(value: str | None, *, default: bool = False) -> bool:
        """Return a boolean parsed from ``value`` with a ``default`` fallback."""

        if value is None:
            return default
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
        return default

    @staticmethod
    def _split_names(value: str) -> tuple[str, ...]:
        return tuple(part.strip() for part in value.split(",") if part.strip())

    @staticmethod
    def _normalize_prefix(value: str) -> str:
        """Ensure paths always contain a single leading slash and no trailing one."""
        stripped = value.strip().strip("/")
        if not stripped:
            return "/"
        return "/" + stripped


class SettingsManager:
    """Central storage for the active ``ListViewSettings`` instance."""

    def __init__(self, initial: ListViewSettings | None = None) -> None:
        """Prepare storage with an optional preconfigured ``initial`` settings."""

        self._lock = RLock()
        self._settings = initial
        self._callbacks: list[Callable[[ListViewSettings], None]] = []

    def configure(self, settings: ListViewSettings) -> None:
        """Install a new settings instance and notify observers."""
        with self._lock:
            self._settings = settings
            for callback in list(self._callbacks):
                callback(settings)

    def current(self) -> ListViewSettings:
        """Return the active settings, lazily initializing from the environment."""
        with self._lock:
            if self._settings is None:
                self._settings = ListViewSettings.from_env()
            return self._settings

    def register(self, callback: Callable[[ListViewSettings], None]) -> None:
        """Register a callback invoked whenever settings change."""
        with self._lock:
            self._callbacks.append(callback)

    def unregister(self, callback: Callable[[ListViewSettings], None]) -> None:
        """Remove a previously registered settings change callback if present."""
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)


_settings_manager = SettingsManager()


def configure(settings: ListViewSettings) -> None:
    """Public entry point to install application specific settings."""
    _settings_manager.configure(settings)


def current_settings() -> ListViewSettings:
    """Return the active settings instance used by list-view components."""
    return _settings_manager.current()


def register_settings_observer(callback: Callable[[ListViewSettings], None]) -> None:
    """Subscribe to configuration changes."""
    _settings_manager.register(callback)


def unregister_settings_observer(callback: Callable[[ListViewSettings], None]) -> None:
    """Unsubscribe from configuration changes previously registered."""
    _settings_manager.unregister(callback)


__all__ = [
    "DEFAULT_DATE_FIELDS",
    "ListViewSettings",
    "SettingsManager",
    "configure",
    "current_settings",
    "register_settings_observer",
    "unregister_settings_observer",
]


# The End
