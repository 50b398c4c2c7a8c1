"""Pure helpers shared by the orchestration layer."""

from tapedeck.utils.guid import guid_for_recording
from tapedeck.utils.merge import merge_configs
from tapedeck.utils.validators import validate_recording_name

__all__ = ["guid_for_recording", "merge_configs", "validate_recording_name"]
