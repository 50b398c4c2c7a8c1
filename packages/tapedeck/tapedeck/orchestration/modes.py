"""Orchestration layer — Operating mode state machine.

Transitions:
    record()  -> RECORD
    replay()  -> REPLAY
    pause()   -> PASSTHROUGH   (snapshot := current mode)
    play()    -> snapshot      (no-op without a snapshot)
    stop()    -> STOPPED       (terminal, shutdown only)

The mode itself lives on the resolved configuration, so ``configure`` and
the transitions above always agree on the current value.  ``pause()``
overwrites any existing snapshot: pausing twice before ``play()`` restores
PASSTHROUGH, not the mode active before the first pause.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from tapedeck.exceptions import InvalidModeError, RecordingStoppedError
from tapedeck.logging import get_logger

if TYPE_CHECKING:
    from tapedeck.orchestration.config_resolver import ConfigResolver

log = get_logger(__name__)


class Mode(str, Enum):
    RECORD = "record"
    REPLAY = "replay"
    PASSTHROUGH = "passthrough"
    STOPPED = "stopped"

    @classmethod
    def parse(cls, value: object) -> "Mode":
        """Return the mode named by *value*, case-insensitively.

        Raises:
            InvalidModeError: *value* names no mode.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidModeError(value, [m.name for m in cls])

    @classmethod
    def parse_settable(cls, value: object) -> "Mode":
        """Like :meth:`parse`, but STOPPED is rejected: only shutdown reaches it."""
        settable = [m.name for m in cls if m is not cls.STOPPED]
        try:
            mode = cls.parse(value)
        except InvalidModeError:
            raise InvalidModeError(value, settable) from None
        if mode is cls.STOPPED:
            raise InvalidModeError(value, settable)
        return mode


class ModeController:
    """Finite state machine over :class:`Mode` for one recording."""

    def __init__(self, resolver: "ConfigResolver") -> None:
        self._resolver = resolver
        self._paused_mode: Mode | None = None

    @property
    def mode(self) -> Mode:
        return self._resolver.config.mode

    @mode.setter
    def mode(self, value: "Mode | str") -> None:
        self._ensure_running("change mode")
        self._set(Mode.parse_settable(value))

    @property
    def paused_mode(self) -> Mode | None:
        return self._paused_mode

    @property
    def is_stopped(self) -> bool:
        return self.mode is Mode.STOPPED

    def record(self) -> None:
        self.mode = Mode.RECORD

    def replay(self) -> None:
        self.mode = Mode.REPLAY

    def pause(self) -> None:
        self._ensure_running("pause")
        self._paused_mode = self.mode
        self._set(Mode.PASSTHROUGH)

    def play(self) -> None:
        self._ensure_running("play")
        if self._paused_mode is not None:
            self._set(self._paused_mode)
            self._paused_mode = None

    def stop(self) -> None:
        self._paused_mode = None
        self._set(Mode.STOPPED)

    def _set(self, mode: Mode) -> None:
        previous = self.mode
        self._resolver.config.mode = mode
        if previous is not mode:
            log.debug("mode_changed", previous=previous.value, mode=mode.value)

    def _ensure_running(self, transition: str) -> None:
        if self.is_stopped:
            raise RecordingStoppedError(transition)
