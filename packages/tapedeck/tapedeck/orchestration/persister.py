"""Orchestration layer — Persister slot.

A recording holds at most one persister instance.  Every ``load`` builds a
new instance and replaces the previous one; persisters have no
connect/disconnect hooks, so nothing is torn down on replacement.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tapedeck.exceptions import PersistenceError
from tapedeck.logging import get_logger
from tapedeck.plugins.base import BasePersister, PluginType
from tapedeck.plugins.container import PluginContainer, PluginFactory
from tapedeck.plugins.refs import PluginRef, plugin_ref

if TYPE_CHECKING:
    from tapedeck.core import Tapedeck

log = get_logger(__name__)


class PersisterManager:
    def __init__(self, container: PluginContainer, recording: "Tapedeck") -> None:
        self._container = container
        self._recording = recording
        self._persister: BasePersister | None = None

    @property
    def persister(self) -> BasePersister | None:
        return self._persister

    def load(self, name_or_factory: "str | PluginFactory | PluginRef") -> BasePersister:
        """Instantiate the persister named by *name_or_factory* into the slot.

        Raises:
            PluginNotRegisteredError: No persister is registered under the identifier.
        """
        persister_id = plugin_ref(name_or_factory).resolve(self._container)

        factory = self._container.lookup(PluginType.PERSISTER, persister_id)
        self._persister = factory(self._recording)
        log.info("persister_loaded", persister=persister_id)
        return self._persister

    async def persist(self) -> None:
        """Await the persister's ``persist()``; no-op when the slot is empty.

        Raises:
            PersistenceError: The persister failed.  The original error is
                available as ``cause`` and chained as ``__cause__``.
        """
        persister = self._persister
        if persister is None:
            return
        try:
            await persister.persist()
        except Exception as exc:
            log.error(
                "persist_failed",
                persister=persister.PLUGIN_ID,
                recording_id=self._recording.recording_id,
                error=str(exc),
            )
            raise PersistenceError(
                self._recording.recording_id, persister.PLUGIN_ID, exc
            ) from exc
        log.info("recording_persisted", persister=persister.PLUGIN_ID)
