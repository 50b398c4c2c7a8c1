"""Plugin layer — per-recording plugin container.

The container is the recording's view of which plugin classes are
available.  It is populated during construction by the listeners of the
process-wide ``register`` event and by ``connect_to`` / ``configure``
calls that pass a plugin class directly.

Adapters and persisters live in separate registries, so an adapter and a
persister may share an identifier without colliding.
"""

from __future__ import annotations

from typing import Type, Union

from tapedeck.exceptions import PluginNotRegisteredError
from tapedeck.logging import get_logger
from tapedeck.plugins.base import BaseAdapter, BasePersister, PluginType

log = get_logger(__name__)

PluginFactory = Union[Type[BaseAdapter], Type[BasePersister]]


class PluginContainer:
    """Registry of plugin classes keyed by capability and identifier.

    Usage::

        container = PluginContainer()
        container.register(HttpxAdapter)
        container.has(PluginType.ADAPTER, "httpx")        # True
        factory = container.lookup(PluginType.ADAPTER, "httpx")
    """

    def __init__(self) -> None:
        self._adapters: dict[str, Type[BaseAdapter]] = {}
        self._persisters: dict[str, Type[BasePersister]] = {}

    @staticmethod
    def validate_factory(factory: object) -> None:
        """Raise if *factory* cannot be registered.

        Raises:
            TypeError:  *factory* is not a ``BaseAdapter`` / ``BasePersister`` subclass.
            ValueError: *factory* has no ``PLUGIN_ID``.
        """
        if not isinstance(factory, type) or not issubclass(factory, (BaseAdapter, BasePersister)):
            raise TypeError(
                f"Plugin factory must be a subclass of BaseAdapter or BasePersister, "
                f"got {factory!r}"
            )
        plugin_id = factory.PLUGIN_ID
        if not plugin_id or not isinstance(plugin_id, str):
            raise ValueError(f"Plugin class {factory.__name__} has no PLUGIN_ID.")

    def register(self, factory: PluginFactory) -> None:
        """Register *factory* under its ``PLUGIN_ID``."""
        self.validate_factory(factory)
        plugin_id = factory.PLUGIN_ID
        registry = self._registry(factory.PLUGIN_TYPE)
        existing = registry.get(plugin_id)
        if existing is not None and existing is not factory:
            log.warning(
                "plugin_registration_overwritten",
                plugin_type=factory.PLUGIN_TYPE.value,
                plugin_id=plugin_id,
            )
        registry[plugin_id] = factory  # type: ignore[assignment]
        log.debug("plugin_registered", plugin_type=factory.PLUGIN_TYPE.value, plugin_id=plugin_id)

    def unregister(self, factory: PluginFactory) -> None:
        registry = self._registry(factory.PLUGIN_TYPE)
        if registry.get(factory.PLUGIN_ID) is factory:
            del registry[factory.PLUGIN_ID]

    def has(self, plugin_type: PluginType, plugin_id: str) -> bool:
        return plugin_id in self._registry(plugin_type)

    def lookup(self, plugin_type: PluginType, plugin_id: str) -> PluginFactory:
        """Return the class registered as *plugin_id*.

        Raises:
            PluginNotRegisteredError: Nothing is registered under *plugin_id*.
        """
        registry = self._registry(plugin_type)
        if plugin_id not in registry:
            raise PluginNotRegisteredError(plugin_type.value, plugin_id)
        return registry[plugin_id]

    def list_registered(self, plugin_type: PluginType) -> list[str]:
        return sorted(self._registry(plugin_type))

    def _registry(self, plugin_type: PluginType) -> dict:
        if plugin_type is PluginType.ADAPTER:
            return self._adapters
        return self._persisters
