"""Detection layer - Magnitude frames to confirmed notes.

Peaks above a fixed amplitude threshold are mapped to note names and
debounced so that short blips never count as notes.
"""

from .detector import NoteDetector, DetectorConfig

__all__ = [
    "NoteDetector",
    "DetectorConfig",
]
