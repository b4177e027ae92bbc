"""Frequency/note-name mapping on the 12-tone equal-tempered scale.

All mappings are anchored at A4 = 440 Hz = MIDI 69. Unmappable input
yields a sentinel (``""`` for names, ``0.0`` for frequencies, ``-1`` for
MIDI pitches) instead of raising.
"""

import numpy as np
from typing import List

from ..core import Note
from ..core.constants import A4_FREQ, A4_MIDI, MIDI_MIN, MIDI_MAX


def frequency_to_midi(frequency: float) -> int:
    """Convert frequency (Hz) to MIDI pitch, -1 for non-positive input.

    Half-semitone ties round upward. The result is not range checked.
    """
    if not np.isfinite(frequency) or frequency <= 0:
        return -1
    return int(np.floor(12 * np.log2(frequency / A4_FREQ) + 0.5)) + A4_MIDI


def note_from_frequency(frequency: float) -> str:
    """Map a frequency in Hz to a note name such as 'A4'.

    Returns an empty string for non-positive frequencies and for
    frequencies whose MIDI pitch falls outside [0, 127].
    """
    midi = frequency_to_midi(frequency)
    if midi < MIDI_MIN or midi > MIDI_MAX:
        return ""
    return Note.midi_to_name(midi)


def midi_from_note(name: str) -> int:
    """Parse a note name into a MIDI pitch, -1 if it cannot be parsed."""
    return Note.name_to_midi(name)


def frequency_from_note(name: str) -> float:
    """Map a note name back to its equal-tempered frequency in Hz.

    Returns 0.0 when the name cannot be parsed.
    """
    midi = Note.name_to_midi(name)
    if midi < 0:
        return 0.0
    return Note.midi_to_freq(midi)


def frequencies_to_notes(frequencies: np.ndarray) -> List[str]:
    """Vectorized ``note_from_frequency`` for an array of frequencies."""
    frequencies = np.asarray(frequencies, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        midi = A4_MIDI + np.floor(12 * np.log2(frequencies / A4_FREQ) + 0.5)
    valid = np.isfinite(midi) & (frequencies > 0) & (midi >= MIDI_MIN) & (midi <= MIDI_MAX)
    return [
        Note.midi_to_name(int(m)) if ok else ""
        for m, ok in zip(midi, valid)
    ]


def bin_frequencies(n_bins: int, sample_rate: float, fft_size: int) -> np.ndarray:
    """Center frequency of each of the first ``n_bins`` FFT bins."""
    return np.arange(n_bins) * float(sample_rate) / fft_size
