"""Tapedeck — the recording-scoped orchestrator.

One ``Tapedeck`` instance owns one recording: its identity, the adapters
intercepting traffic for it, the persister storing it, its operating mode
and every request observed while it runs.

Construction::

    recording = Tapedeck("users/create a user", {"adapters": ["httpx"], "persister": "fs"})

Construction emits ``register`` (with the fresh plugin container) and
``create`` (with the instance) synchronously, then runs ``configure`` once.

Process-wide registration::

    Tapedeck.register(HttpxAdapter)      # every later instance can connect "httpx"
    Tapedeck.on("stop", notify)          # awaited before stop() returns
    Tapedeck.unregister(HttpxAdapter)    # affects instances created afterwards

The event registry and the registration memo below are process-wide and
unsynchronised: register/unregister must not race with the construction of
new instances.  Call them at import or setup time from the thread that
creates recordings.

Shutdown::

    await recording.flush()   # optional: wait for in-flight requests
    await recording.stop()    # disconnect, persist, STOPPED, emit "stop"
"""

from __future__ import annotations

import asyncio
import functools
from typing import Any, Callable, Mapping

from tapedeck import __version__
from tapedeck.config import RecordingConfig, Settings, get_settings
from tapedeck.events.emitter import EventRegistry, Listener
from tapedeck.logging import (
    ContextTokens,
    bind_recording_context,
    get_logger,
    reset_recording_context,
)
from tapedeck.orchestration.adapters import AdapterManager
from tapedeck.orchestration.config_resolver import ConfigInput, ConfigResolver
from tapedeck.orchestration.modes import Mode, ModeController
from tapedeck.orchestration.persister import PersisterManager
from tapedeck.orchestration.requests import RequestTracker, TrackedRequest
from tapedeck.plugins.base import BaseAdapter, BasePersister
from tapedeck.plugins.container import PluginContainer, PluginFactory
from tapedeck.plugins.refs import PluginRef
from tapedeck.request_logger import RequestLogger
from tapedeck.utils.guid import guid_for_recording
from tapedeck.utils.validators import validate_recording_name

log = get_logger(__name__)

_EVENTS = EventRegistry(event_names=("register", "create", "stop"))

# One container-installing callback per plugin class.  Entries are dropped
# by ``Tapedeck.unregister`` once no subscription of the callback remains.
_FACTORY_REGISTRATION: dict[PluginFactory, Callable[[PluginContainer], None]] = {}


def _install_factory(factory: PluginFactory, container: PluginContainer) -> None:
    container.register(factory)


class Tapedeck:
    VERSION = __version__

    def __init__(
        self,
        recording_name: str,
        config: ConfigInput = None,
        *,
        settings: Settings | None = None,
    ) -> None:
        self._recording_name = ""
        self._recording_id = ""
        self.recording_name = recording_name

        self.logger = RequestLogger(self)
        self.container = PluginContainer()

        _EVENTS.emit_sync("register", self.container)

        self._adapters = AdapterManager(self.container, self)
        self._persisters = PersisterManager(self.container, self)
        self._requests = RequestTracker(self)
        self._resolver = ConfigResolver(
            (settings or get_settings()).recording_defaults(),
            self._adapters,
            self._persisters,
            self._requests,
        )
        self._modes = ModeController(self._resolver)
        self._stop_lock = asyncio.Lock()
        self._context_tokens: list[ContextTokens] = []

        self.logger.connect()
        _EVENTS.emit_sync("create", self)
        self.configure(config)
        log.info(
            "recording_created",
            recording_id=self._recording_id,
            recording_name=self._recording_name,
            mode=self.mode.value,
        )

    def __repr__(self) -> str:
        return f"<Tapedeck {self._recording_name!r} mode={self.mode.value}>"

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def recording_name(self) -> str:
        return self._recording_name

    @recording_name.setter
    def recording_name(self, name: str) -> None:
        validate_recording_name(name)
        self._recording_name = name
        self._recording_id = guid_for_recording(name)

    @property
    def recording_id(self) -> str:
        return self._recording_id

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> RecordingConfig:
        return self._resolver.config

    @property
    def mode(self) -> Mode:
        return self._modes.mode

    @mode.setter
    def mode(self, mode: "Mode | str") -> None:
        self._modes.mode = mode

    @property
    def paused_mode(self) -> Mode | None:
        return self._modes.paused_mode

    @property
    def adapters(self) -> Mapping[str, BaseAdapter]:
        return self._adapters.as_mapping()

    @property
    def persister(self) -> BasePersister | None:
        return self._persisters.persister

    @property
    def requests(self) -> list[TrackedRequest]:
        return list(self._requests)

    # ------------------------------------------------------------------
    # Process-wide event and plugin registration
    # ------------------------------------------------------------------

    @classmethod
    def on(cls, event: str, listener: Listener) -> type["Tapedeck"]:
        _EVENTS.on(event, listener)
        return cls

    @classmethod
    def once(cls, event: str, listener: Listener) -> type["Tapedeck"]:
        _EVENTS.once(event, listener)
        return cls

    @classmethod
    def off(cls, event: str, listener: Listener | None = None) -> type["Tapedeck"]:
        _EVENTS.off(event, listener)
        return cls

    @classmethod
    def register(cls, factory: PluginFactory) -> type["Tapedeck"]:
        """Make *factory* available to every instance constructed afterwards.

        Registering the same class again adds another subscription; each
        one needs its own ``unregister``.
        """
        PluginContainer.validate_factory(factory)
        callback = _FACTORY_REGISTRATION.get(factory)
        if callback is None:
            callback = _FACTORY_REGISTRATION[factory] = functools.partial(_install_factory, factory)
        cls.on("register", callback)
        log.debug("plugin_registered_globally", plugin_id=factory.PLUGIN_ID)
        return cls

    @classmethod
    def unregister(cls, factory: PluginFactory) -> type["Tapedeck"]:
        """Undo one ``register(factory)``; instances already built keep the plugin."""
        callback = _FACTORY_REGISTRATION.get(factory)
        if callback is not None:
            cls.off("register", callback)
            if not _EVENTS.has_listener("register", callback):
                del _FACTORY_REGISTRATION[factory]
        return cls

    # ------------------------------------------------------------------
    # Configuration and modes
    # ------------------------------------------------------------------

    def configure(self, config: ConfigInput = None) -> None:
        self._resolver.configure(config)

    def record(self) -> None:
        self._modes.record()

    def replay(self) -> None:
        self._modes.replay()

    def pause(self) -> None:
        self._modes.pause()

    def play(self) -> None:
        self._modes.play()

    # ------------------------------------------------------------------
    # Adapters
    # ------------------------------------------------------------------

    def connect_to(self, name_or_factory: "str | PluginFactory | PluginRef") -> BaseAdapter:
        return self._adapters.connect_to(name_or_factory)

    def disconnect_from(self, name_or_factory: "str | PluginFactory | PluginRef") -> None:
        self._adapters.disconnect_from(name_or_factory)

    def disconnect(self) -> None:
        self._adapters.disconnect()

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def register_request(self, data: Mapping[str, Any] | None = None) -> TrackedRequest:
        """Track a request observed by an adapter.  Adapter-facing."""
        request = self._requests.register(dict(data or {}))
        self.logger.log_request(request)
        return request

    async def flush(self) -> None:
        """Wait until every request observed so far has settled."""
        await self._requests.flush()

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Disconnect, persist and stop the recording.  Idempotent.

        The mode becomes STOPPED even when persisting fails; the
        ``PersistenceError`` then propagates and ``stop`` listeners are
        not notified.  In-flight requests are not awaited: call
        :meth:`flush` first if they must be persisted.
        """
        async with self._stop_lock:
            if self._modes.is_stopped:
                return

            self._adapters.disconnect()
            self.logger.disconnect()
            try:
                await self._persisters.persist()
            finally:
                self._modes.stop()
                log.info("recording_stopped", recording_id=self._recording_id)

            await _EVENTS.emit("stop", self)

    async def __aenter__(self) -> "Tapedeck":
        self._context_tokens.append(
            bind_recording_context(self._recording_id, self._recording_name)
        )
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        try:
            await self.stop()
        finally:
            reset_recording_context(self._context_tokens.pop())
