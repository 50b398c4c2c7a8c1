"""Orchestration layer — Configuration resolution.

``configure`` rebuilds the recording's plugin state from a layered merge:

    defaults  ⊕  current resolved config  ⊕  overrides

It may only run before any request has been observed and while the
recording is not stopped.  Its effects are strictly sequential: every
adapter is disconnected before the merge, then the merged adapter list is
connected in order, then the persister (if any) is loaded.
"""

from __future__ import annotations

from typing import Any, Mapping, Union

from pydantic import ValidationError

from tapedeck.config import RecordingConfig
from tapedeck.exceptions import ConfigurationLockedError, ConfigValidationError
from tapedeck.logging import get_logger
from tapedeck.orchestration.adapters import AdapterManager
from tapedeck.orchestration.modes import Mode
from tapedeck.orchestration.persister import PersisterManager
from tapedeck.orchestration.requests import RequestTracker
from tapedeck.utils.merge import merge_configs

log = get_logger(__name__)

ConfigInput = Union[Mapping[str, Any], RecordingConfig, None]


class ConfigResolver:
    def __init__(
        self,
        defaults: Mapping[str, Any],
        adapters: AdapterManager,
        persisters: PersisterManager,
        requests: RequestTracker,
    ) -> None:
        self._defaults = dict(defaults)
        self._adapters = adapters
        self._persisters = persisters
        self._requests = requests
        self._config = self._validate(merge_configs(self._defaults))

    @property
    def config(self) -> RecordingConfig:
        return self._config

    def merge(self, overrides: ConfigInput = None) -> RecordingConfig:
        """Return defaults ⊕ current ⊕ *overrides*, validated, without applying it."""
        return self._validate(
            merge_configs(self._defaults, dict(self._config), _as_layer(overrides))
        )

    def configure(self, overrides: ConfigInput = None) -> RecordingConfig:
        """Apply *overrides* and reconnect plugins.

        Raises:
            ConfigurationLockedError: Requests were already observed, or the
                recording is stopped.
            ConfigValidationError:    The merged configuration is invalid.
            PluginNotRegisteredError: A configured adapter or persister is unknown.
        """
        if len(self._requests) > 0:
            raise ConfigurationLockedError("requests_handled")
        if self._config.mode is Mode.STOPPED:
            raise ConfigurationLockedError("stopped")

        self._adapters.disconnect()

        self._config = self.merge(overrides)

        for adapter in self._config.adapters:
            self._adapters.connect_to(adapter)

        if self._config.persister:
            self._persisters.load(self._config.persister)

        log.debug(
            "recording_configured",
            mode=self._config.mode.value,
            adapters=list(self._adapters),
            persister=getattr(self._persisters.persister, "PLUGIN_ID", None),
        )
        return self._config

    @staticmethod
    def _validate(data: dict[str, Any]) -> RecordingConfig:
        if "mode" in data:
            data["mode"] = Mode.parse_settable(data["mode"])
        try:
            return RecordingConfig.model_validate(data)
        except ValidationError as exc:
            raise ConfigValidationError(
                f"Invalid recording configuration: {exc.error_count()} error(s)",
                errors=exc.errors(include_url=False),
            ) from exc


def _as_layer(overrides: ConfigInput) -> Mapping[str, Any] | None:
    """Turn *overrides* into a merge layer, keeping field values by reference.

    For a model only the explicitly set fields, extras included, form the
    layer.
    """
    if isinstance(overrides, RecordingConfig):
        return {k: v for k, v in overrides if k in overrides.model_fields_set}
    return overrides
