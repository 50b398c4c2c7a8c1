"""Shared pytest fixtures for the tapedeck test suite."""

from __future__ import annotations

import asyncio
from typing import Callable, Generator

import pytest

import tapedeck.core as core
from tapedeck.config import Settings, override_settings
from tapedeck.core import Tapedeck
from tapedeck.plugins.base import BaseAdapter, BasePersister


# ---------------------------------------------------------------------------
# Stub plugins
# ---------------------------------------------------------------------------


class StubAdapter(BaseAdapter):
    """Adapter that counts hook calls instead of intercepting anything."""

    PLUGIN_ID = "stub"
    instances: list["StubAdapter"] = []

    def __init__(self, recording: Tapedeck) -> None:
        super().__init__(recording)
        self.connect_calls = 0
        self.disconnect_calls = 0
        type(self).instances.append(self)

    def on_connect(self) -> None:
        self.connect_calls += 1

    def on_disconnect(self) -> None:
        self.disconnect_calls += 1


class StubPersister(BasePersister):
    """Persister that optionally sleeps and/or fails before 'persisting'."""

    PLUGIN_ID = "memory"
    delay: float = 0.0
    error: Exception | None = None
    instances: list["StubPersister"] = []

    def __init__(self, recording: Tapedeck) -> None:
        super().__init__(recording)
        self.persist_calls = 0
        self.persisted = False
        type(self).instances.append(self)

    async def persist(self) -> None:
        self.persist_calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        self.persisted = True


@pytest.fixture
def make_adapter() -> Callable[..., type[StubAdapter]]:
    """Build a fresh StubAdapter subclass with its own instance list."""

    def _make(plugin_id: str = "stub") -> type[StubAdapter]:
        name = f"StubAdapter_{plugin_id.replace('-', '_')}"
        return type(name, (StubAdapter,), {"PLUGIN_ID": plugin_id, "instances": []})

    return _make


@pytest.fixture
def make_persister() -> Callable[..., type[StubPersister]]:
    """Build a fresh StubPersister subclass with its own behaviour."""

    def _make(
        plugin_id: str = "memory",
        delay: float = 0.0,
        error: Exception | None = None,
    ) -> type[StubPersister]:
        name = f"StubPersister_{plugin_id.replace('-', '_')}"
        return type(
            name,
            (StubPersister,),
            {"PLUGIN_ID": plugin_id, "delay": delay, "error": error, "instances": []},
        )

    return _make


# ---------------------------------------------------------------------------
# Process-wide state isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def test_settings() -> Generator[Settings, None, None]:
    settings = Settings()
    override_settings(settings)
    yield settings
    override_settings(None)


@pytest.fixture(autouse=True)
def _clean_event_registry() -> Generator[None, None, None]:
    """Snapshot and restore global subscriptions around each test."""
    subscriptions = {e: list(subs) for e, subs in core._EVENTS._subscriptions.items()}
    registrations = dict(core._FACTORY_REGISTRATION)
    yield
    core._EVENTS._subscriptions = subscriptions
    core._FACTORY_REGISTRATION.clear()
    core._FACTORY_REGISTRATION.update(registrations)


# ---------------------------------------------------------------------------
# Recordings
# ---------------------------------------------------------------------------


@pytest.fixture
def recording() -> Tapedeck:
    return Tapedeck("test recording")
