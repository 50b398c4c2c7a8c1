"""Event publish/subscribe primitives."""

from tapedeck.events.emitter import EventRegistry, Listener

__all__ = ["EventRegistry", "Listener"]
