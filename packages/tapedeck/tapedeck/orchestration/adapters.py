"""Orchestration layer — Adapter lifecycle.

Keeps at most one connected adapter instance per identifier.  Connecting
to an identifier that is already connected always disconnects the existing
instance first, so two instances never intercept the same transport.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Iterator, Mapping

from tapedeck.logging import get_logger
from tapedeck.plugins.base import BaseAdapter, PluginType
from tapedeck.plugins.container import PluginContainer, PluginFactory
from tapedeck.plugins.refs import PluginRef, plugin_ref

if TYPE_CHECKING:
    from tapedeck.core import Tapedeck

log = get_logger(__name__)


class AdapterManager:
    """Connects and disconnects named adapter instances for one recording."""

    def __init__(self, container: PluginContainer, recording: "Tapedeck") -> None:
        self._container = container
        self._recording = recording
        # Insertion ordered: disconnect() walks adapters in connection order.
        self._adapters: dict[str, BaseAdapter] = {}

    def connect_to(self, name_or_factory: "str | PluginFactory | PluginRef") -> BaseAdapter:
        """Connect a fresh instance of the adapter named by *name_or_factory*.

        Raises:
            PluginNotRegisteredError: No adapter is registered under the identifier.
        """
        adapter_id = plugin_ref(name_or_factory).resolve(self._container)

        factory = self._container.lookup(PluginType.ADAPTER, adapter_id)
        self.disconnect_from(adapter_id)

        adapter = factory(self._recording)
        adapter.connect()
        self._adapters[adapter_id] = adapter
        log.info("adapter_connected", adapter=adapter_id)
        return adapter

    def disconnect_from(self, name_or_factory: "str | PluginFactory | PluginRef") -> None:
        """Disconnect the adapter named by *name_or_factory*, if connected."""
        adapter_id = plugin_ref(name_or_factory).plugin_id
        adapter = self._adapters.get(adapter_id)
        if adapter is None:
            return
        adapter.disconnect()
        del self._adapters[adapter_id]
        log.info("adapter_disconnected", adapter=adapter_id)

    def disconnect(self) -> None:
        """Disconnect every connected adapter, in connection order."""
        for adapter_id in list(self._adapters):
            self.disconnect_from(adapter_id)

    @property
    def names(self) -> list[str]:
        return list(self._adapters)

    def get(self, adapter_id: str) -> BaseAdapter | None:
        return self._adapters.get(adapter_id)

    def as_mapping(self) -> Mapping[str, BaseAdapter]:
        """Read-only live view of the connected adapters."""
        return MappingProxyType(self._adapters)

    def __contains__(self, adapter_id: object) -> bool:
        return adapter_id in self._adapters

    def __len__(self) -> int:
        return len(self._adapters)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._adapters))
