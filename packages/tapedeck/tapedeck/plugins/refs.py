"""Plugin references — a plugin named by identifier or given as a class.

``connect_to``, ``disconnect_from`` and the ``adapters`` / ``persister``
config fields accept either form.  ``plugin_ref`` turns user input into
one of the two variants so the managers never inspect raw argument types.
Only the ``ByFactory`` variant carries a class that may need registering.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from tapedeck.plugins.container import PluginContainer, PluginFactory


@dataclass(frozen=True)
class ByName:
    name: str

    @property
    def plugin_id(self) -> str:
        return self.name

    def resolve(self, container: PluginContainer) -> str:
        return self.name


@dataclass(frozen=True)
class ByFactory:
    factory: PluginFactory

    @property
    def plugin_id(self) -> str:
        return self.factory.PLUGIN_ID

    def resolve(self, container: PluginContainer) -> str:
        """Register the factory into *container* and return its identifier."""
        container.register(self.factory)
        return self.factory.PLUGIN_ID


PluginRef = Union[ByName, ByFactory]


def plugin_ref(value: "str | PluginFactory | PluginRef") -> PluginRef:
    """Wrap *value* in the matching reference variant.

    Raises:
        TypeError: *value* is neither an identifier nor a class.
    """
    if isinstance(value, (ByName, ByFactory)):
        return value
    if isinstance(value, str):
        return ByName(value)
    if isinstance(value, type):
        return ByFactory(value)
    raise TypeError(f"Expected a plugin identifier or plugin class, got {value!r}")
