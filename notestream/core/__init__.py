"""Core types and constants for notestream."""

from .note import Note, RecordedNote
from .constants import (
    PITCH_NAMES,
    DEFAULT_FFT_SIZE,
    DEFAULT_HISTORY_SIZE,
    DEFAULT_MIN_NOTE_DURATION_MS,
    DEFAULT_NOTE_THRESHOLD,
    DEFAULT_NOTES_TO_SHOW,
    DEFAULT_MAX_FREQ_SCALE,
    DEFAULT_RECORD_DURATION_MS,
    DEFAULT_NOTES_TO_RECORD,
)

__all__ = [
    "Note",
    "RecordedNote",
    "PITCH_NAMES",
    "DEFAULT_FFT_SIZE",
    "DEFAULT_HISTORY_SIZE",
    "DEFAULT_MIN_NOTE_DURATION_MS",
    "DEFAULT_NOTE_THRESHOLD",
    "DEFAULT_NOTES_TO_SHOW",
    "DEFAULT_MAX_FREQ_SCALE",
    "DEFAULT_RECORD_DURATION_MS",
    "DEFAULT_NOTES_TO_RECORD",
]
