"""tapedeck — Exception hierarchy.

All exceptions raised by the core inherit from TapedeckError so that callers
can catch the full family with a single except clause when needed.

Hierarchy:
    TapedeckError
    ├── TapedeckValidationError
    │   ├── InvalidRecordingNameError
    │   ├── InvalidModeError
    │   ├── InvalidEventError
    │   ├── ConfigurationLockedError
    │   ├── ConfigValidationError
    │   └── RecordingStoppedError
    ├── PluginError
    │   └── PluginNotRegisteredError
    └── PersistenceError

Failures of individual tracked requests are never raised: ``flush()``
observes and discards them.
"""

from __future__ import annotations

from typing import Any


class TapedeckError(Exception):
    """Base exception for all tapedeck errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context})"


# ---------------------------------------------------------------------------
# Validation (synchronous, fail-fast)
# ---------------------------------------------------------------------------


class TapedeckValidationError(TapedeckError):
    """Base for all input and ordering validation errors."""


class InvalidRecordingNameError(TapedeckValidationError):
    """The recording name is not a string or is blank."""

    def __init__(self, name: object, reason: str) -> None:
        super().__init__(
            f"Invalid recording name provided: {reason}",
            context={"name": repr(name), "reason": reason},
        )
        self.name = name
        self.reason = reason


class InvalidModeError(TapedeckValidationError):
    """The mode is not one of the recognised operating modes."""

    def __init__(self, mode: object, possible_modes: list[str]) -> None:
        super().__init__(
            f"Invalid mode provided: {mode!r}. "
            f"Possible modes: {', '.join(possible_modes)}.",
            context={"mode": repr(mode), "possible_modes": possible_modes},
        )
        self.mode = mode
        self.possible_modes = possible_modes


class InvalidEventError(TapedeckValidationError):
    """The event name is not recognised by the event registry."""

    def __init__(self, event: str, event_names: list[str]) -> None:
        super().__init__(
            f"Invalid event name provided: {event!r}. "
            f"Possible events: {', '.join(event_names)}.",
            context={"event": event, "event_names": event_names},
        )
        self.event = event


class ConfigurationLockedError(TapedeckValidationError):
    """``configure`` was called when the recording can no longer be configured."""

    REASONS = {
        "requests_handled": "Cannot call `configure` once requests have been handled.",
        "stopped": "Cannot call `configure` on a recording that is not running.",
    }

    def __init__(self, reason: str) -> None:
        super().__init__(self.REASONS[reason], context={"reason": reason})
        self.reason = reason


class ConfigValidationError(TapedeckValidationError):
    """The merged configuration failed schema validation."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message, context={"validation_errors": errors or []})
        self.errors = errors or []


class RecordingStoppedError(TapedeckValidationError):
    """A mode transition was attempted after the recording stopped."""

    def __init__(self, transition: str) -> None:
        super().__init__(
            f"Cannot {transition}: the recording has been stopped",
            context={"transition": transition},
        )
        self.transition = transition


# ---------------------------------------------------------------------------
# Plugins
# ---------------------------------------------------------------------------


class PluginError(TapedeckError):
    """Base for plugin registration and lookup errors."""


class PluginNotRegisteredError(PluginError, LookupError):
    """No adapter or persister is registered under the requested identifier."""

    def __init__(self, plugin_type: str, plugin_id: str) -> None:
        super().__init__(
            f"{plugin_type.capitalize()} matching the name '{plugin_id}' was not registered.",
            context={"plugin_type": plugin_type, "plugin_id": plugin_id},
        )
        self.plugin_type = plugin_type
        self.plugin_id = plugin_id


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class PersistenceError(TapedeckError):
    """The persister failed to store the recording during shutdown."""

    def __init__(self, recording_id: str, persister_id: str, cause: BaseException) -> None:
        super().__init__(
            f"Persister '{persister_id}' failed to persist recording "
            f"'{recording_id}': {cause}",
            context={
                "recording_id": recording_id,
                "persister_id": persister_id,
                "cause": str(cause),
            },
        )
        self.recording_id = recording_id
        self.persister_id = persister_id
        self.cause = cause
