"""Analysis layer - Pitch mapping and spectrum history.

- Frequency <-> note name mapping (equal temperament, A4 = 440 Hz)
- Spectrogram history buffer for display collaborators
"""

from .pitch import (
    note_from_frequency,
    frequency_from_note,
    frequency_to_midi,
    midi_from_note,
    frequencies_to_notes,
    bin_frequencies,
)
from .history import SpectrogramHistory

__all__ = [
    "note_from_frequency",
    "frequency_from_note",
    "frequency_to_midi",
    "midi_from_note",
    "frequencies_to_notes",
    "bin_frequencies",
    "SpectrogramHistory",
]
