"""Plugin contracts and the per-recording plugin container."""

from tapedeck.plugins.base import BaseAdapter, BasePersister, BasePlugin, PluginType
from tapedeck.plugins.container import PluginContainer, PluginFactory
from tapedeck.plugins.refs import ByFactory, ByName, PluginRef, plugin_ref

__all__ = [
    "BaseAdapter",
    "BasePersister",
    "BasePlugin",
    "PluginType",
    "PluginContainer",
    "PluginFactory",
    "ByFactory",
    "ByName",
    "PluginRef",
    "plugin_ref",
]
