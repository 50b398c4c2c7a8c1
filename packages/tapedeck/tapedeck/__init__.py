"""tapedeck — orchestration core for HTTP interaction record/replay.

A ``Tapedeck`` instance scopes one named recording and coordinates:
    1. Plugins — adapters intercepting transports, one persister storing traffic
    2. Modes   — record / replay / passthrough, and the terminal stopped state
    3. Config  — layered defaults ⊕ current ⊕ overrides, validated by pydantic
    4. Events  — process-wide ``register`` / ``create`` / ``stop`` notifications
    5. Requests — in-flight tracking used to flush before shutdown
"""

__version__ = "0.1.0"

from tapedeck.core import Tapedeck
from tapedeck.orchestration.modes import Mode
from tapedeck.plugins.base import BaseAdapter, BasePersister, PluginType

__all__ = [
    "__version__",
    "Tapedeck",
    "Mode",
    "BaseAdapter",
    "BasePersister",
    "PluginType",
]
