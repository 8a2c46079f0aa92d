# -*- coding: utf-8 -*-
"""conftest

Shared testing utilities for the list-view test-suite.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Dict, List, Sequence

import pytest

from adminlist.conf import ListViewSettings, _settings_manager


class SettingsState:
    """Manage the global list-view settings during tests."""

    def __init__(self) -> None:
        """Capture the settings manager shared by every component."""

        self._manager = _settings_manager

    def reset(self) -> None:
        """Install deterministic settings with no retry delays."""

        self._manager._settings = make_settings()  # type: ignore[attr-defined]
        self._manager._callbacks.clear()  # type: ignore[attr-defined]


class AsyncioTestPlugin:
    """Minimal asyncio runner enabling ``async def`` tests without extras."""

    def __init__(self) -> None:
        """Configure the event-loop factory used for async test execution."""

        self._loop_factory = asyncio.new_event_loop

    def pytest_pyfunc_call(self, pyfuncitem: pytest.Function) -> bool | None:
        """Execute coroutine test functions inside a dedicated event loop."""

        if not inspect.iscoroutinefunction(pyfuncitem.obj):
            return None
        signature = inspect.signature(pyfuncitem.obj)
        kwargs = {
            name: pyfuncitem.funcargs[name]
            for name in signature.parameters
            if name in pyfuncitem.funcargs
        }
        loop = self._loop_factory()
        try:
            loop.run_until_complete(pyfuncitem.obj(**kwargs))
            pending = [task for task in asyncio.all_tasks(loop) if not task.done()]
            if pending:
                for task in pending:
                    task.cancel()
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.run_until_complete(loop.shutdown_asyncgens())
        finally:
            loop.close()
        return True


class PytestPluginRegistrar:
    """Register custom pytest plugins following project conventions."""

    def __init__(self) -> None:
        """Instantiate and expose plugin objects for registration."""

        self.asyncio_plugin = AsyncioTestPlugin()

    def configure(self, config: pytest.Config) -> None:
        """Register required plugins with the pytest plugin manager."""

        config.addinivalue_line(
            "markers", "asyncio: execute test using the built-in asyncio loop"
        )
        config.pluginmanager.register(self.asyncio_plugin, "adminlist-asyncio-plugin")


class FetchRecorder:
    """Fake reference fetcher recording every call it receives."""

    def __init__(
        self,
        values: Dict[str, Any],
        *,
        failing: Sequence[str] = (),
        delay: float = 0.0,
    ) -> None:
        self.values = dict(values)
        self.failing = set(failing)
        self.delay = delay
        self.one_calls: List[str] = []
        self.many_calls: List[List[str]] = []

    async def fetch_one(self, pk: str) -> Any:
        self.one_calls.append(pk)
        if self.delay:
            await asyncio.sleep(self.delay)
        if pk in self.failing:
            raise RuntimeError(f"boom {pk}")
        return self.values.get(pk)

    async def fetch_many(self, ids: Sequence[str]) -> Dict[str, Any]:
        self.many_calls.append(list(ids))
        if self.delay:
            await asyncio.sleep(self.delay)
        return {pk: self.values[pk] for pk in ids if pk in self.values and pk not in self.failing}

    @property
    def calls(self) -> int:
        return len(self.one_calls) + len(self.many_calls)


def make_settings(**overrides: Any) -> ListViewSettings:
    """Return settings tuned for fast tests."""

    options: Dict[str, Any] = {
        "api_base_url": "http://backend.test",
        "retry_backoff": 0.0,
        "reference_timeout": 2.0,
        "request_timeout": 2.0,
    }
    options.update(overrides)
    return ListViewSettings(**options)


def make_loader(*batches: Sequence[Dict[str, Any]]) -> Callable[[], Awaitable[List[Dict[str, Any]]]]:
    """Return a loader yielding ``batches`` in turn, repeating the last one."""

    queue = [list(batch) for batch in batches]

    async def _load() -> List[Dict[str, Any]]:
        if len(queue) > 1:
            return queue.pop(0)
        return list(queue[0]) if queue else []

    return _load


settings_state = SettingsState()
_plugin_registrar = PytestPluginRegistrar()


def pytest_configure(config: pytest.Config) -> None:
    """Integrate custom plugins with pytest's plugin manager."""

    _plugin_registrar.configure(config)


@pytest.fixture(autouse=True)
def _isolated_settings():
    """Give every test fresh global settings."""

    settings_state.reset()
    yield
    settings_state.reset()


@pytest.fixture
def settings() -> ListViewSettings:
    return make_settings()


__all__ = ["FetchRecorder", "make_loader", "make_settings", "settings_state"]


# The End
