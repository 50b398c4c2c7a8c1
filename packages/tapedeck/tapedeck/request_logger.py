"""Request logging sink.

Connected for the whole running life of a recording and disconnected
during shutdown.  While connected, and only when the recording's
``logging`` option is on, every observed request is written to the
structured log together with the mode it was observed under.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tapedeck.logging import get_logger

if TYPE_CHECKING:
    from tapedeck.core import Tapedeck
    from tapedeck.orchestration.requests import TrackedRequest

log = get_logger(__name__)


class RequestLogger:
    def __init__(self, recording: "Tapedeck") -> None:
        self.recording = recording
        self.is_connected = False

    def connect(self) -> None:
        self.is_connected = True

    def disconnect(self) -> None:
        self.is_connected = False

    def log_request(self, request: "TrackedRequest") -> None:
        if not self.is_connected or not self.recording.config.logging:
            return
        log.info(
            "request_observed",
            recording_id=self.recording.recording_id,
            mode=self.recording.mode.value,
            order=request.order,
            method=request.data.get("method"),
            url=request.data.get("url"),
        )
