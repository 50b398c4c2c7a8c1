"""Plugin layer — base classes for adapters and persisters.

Every plugin, built-in or third-party, subclasses ``BaseAdapter`` or
``BasePersister`` and sets a ``PLUGIN_ID``.  The class itself is the
factory: the recording instantiates it with itself as the only argument.

Adapters install interception for one transport on ``connect()`` and
remove it on ``disconnect()``; every intercepted call is reported through
``register_request()``.  Persisters durably store the interactions of a
recording when ``persist()`` is awaited.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any

from tapedeck.logging import get_logger

if TYPE_CHECKING:
    from tapedeck.core import Tapedeck
    from tapedeck.orchestration.requests import TrackedRequest

log = get_logger(__name__)


class PluginType(str, Enum):
    ADAPTER = "adapter"
    PERSISTER = "persister"


class BasePlugin(ABC):
    """Common plugin surface: identity and the owning recording."""

    PLUGIN_TYPE: PluginType
    PLUGIN_ID: str = ""

    def __init__(self, recording: "Tapedeck") -> None:
        self.recording = recording

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.PLUGIN_TYPE.value}:{self.PLUGIN_ID}>"


class BaseAdapter(BasePlugin):
    """Abstract base class for transport interception plugins.

    Subclasses must:
      1. Set ``PLUGIN_ID`` (e.g. ``"httpx"``)
      2. Implement :meth:`on_connect` to install interception
      3. Implement :meth:`on_disconnect` to remove it
    """

    PLUGIN_TYPE = PluginType.ADAPTER

    def __init__(self, recording: "Tapedeck") -> None:
        super().__init__(recording)
        self.is_connected = False

    @property
    def options(self) -> dict[str, Any]:
        """Adapter-specific options from ``config.adapter_options[PLUGIN_ID]``."""
        return dict(self.recording.config.adapter_options.get(self.PLUGIN_ID, {}))

    def connect(self) -> None:
        if not self.is_connected:
            self.on_connect()
            self.is_connected = True
            log.debug("adapter_interception_installed", adapter=self.PLUGIN_ID)

    def disconnect(self) -> None:
        if self.is_connected:
            self.on_disconnect()
            self.is_connected = False
            log.debug("adapter_interception_removed", adapter=self.PLUGIN_ID)

    def register_request(self, data: dict[str, Any]) -> "TrackedRequest":
        """Report an intercepted call to the owning recording."""
        return self.recording.register_request(data)

    @abstractmethod
    def on_connect(self) -> None:
        """Install interception for this adapter's transport."""

    @abstractmethod
    def on_disconnect(self) -> None:
        """Remove the interception installed by :meth:`on_connect`."""


class BasePersister(BasePlugin):
    """Abstract base class for durable-storage plugins.

    There is no connect/disconnect pair: a persister is constructed when
    the recording is configured and simply replaced on reconfiguration.
    """

    PLUGIN_TYPE = PluginType.PERSISTER

    @property
    def options(self) -> dict[str, Any]:
        """Persister-specific options from ``config.persister_options``."""
        return dict(self.recording.config.persister_options)

    @abstractmethod
    async def persist(self) -> None:
        """Durably store the interactions captured by the recording."""
