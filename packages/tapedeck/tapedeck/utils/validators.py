"""Input validators raising the tapedeck validation family."""

from __future__ import annotations

from tapedeck.exceptions import InvalidRecordingNameError


def validate_recording_name(name: object) -> str:
    """Return *name* unchanged if it is a usable recording name.

    Raises:
        InvalidRecordingNameError: *name* is not a string or is blank.
    """
    if not isinstance(name, str):
        raise InvalidRecordingNameError(
            name, f"expected a string, received {type(name).__name__}"
        )
    if not name.strip():
        raise InvalidRecordingNameError(name, "received an empty string")
    return name
