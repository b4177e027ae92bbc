"""Recording layer - Bounded note sessions and their persistence."""

from .recorder import Recorder, RecorderConfig, RecorderState
from .storage import save_recording, load_recording

__all__ = [
    "Recorder",
    "RecorderConfig",
    "RecorderState",
    "save_recording",
    "load_recording",
]
