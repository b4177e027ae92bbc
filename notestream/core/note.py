"""Note types - the units the note-event pipeline produces."""

import re
from dataclasses import dataclass, asdict
from typing import Any, Dict

from .constants import A4_FREQ, A4_MIDI, PITCH_NAMES

_NOTE_NAME_RE = re.compile(r"^([A-G]#?)(-?\d+)$")


@dataclass(frozen=True)
class RecordedNote:
    """A finalized note event from a recording session.

    Times are milliseconds; ``start_time`` is relative to the start of
    the recording session.
    """

    note: str  # Note name (e.g. 'A4', 'C#3')
    start_time: float  # Offset from session start in ms
    duration: float  # Duration in ms

    @property
    def end_time(self) -> float:
        """Offset of the note-off from session start in ms."""
        return self.start_time + self.duration

    @property
    def pitch(self) -> int:
        """MIDI pitch for the note name, -1 if the name is unmappable."""
        return Note.name_to_midi(self.note)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecordedNote":
        """Build from a dictionary produced by ``to_dict``."""
        return cls(
            note=str(data["note"]),
            start_time=float(data["start_time"]),
            duration=float(data["duration"]),
        )


class Note:
    """Note-name helpers shared by the mapper, player and exporter."""

    @staticmethod
    def midi_to_name(midi: int) -> str:
        """Get note name (e.g., 'C4', 'A#3') for a MIDI pitch."""
        octave = (midi // 12) - 1
        return f"{PITCH_NAMES[midi % 12]}{octave}"

    @staticmethod
    def name_to_midi(name: str) -> int:
        """Parse a note name into a MIDI pitch, -1 if it cannot be parsed.

        C-1 is 0, C4 is 60 and A4 is 69.
        """
        match = _NOTE_NAME_RE.match(name or "")
        if not match:
            return -1
        index = PITCH_NAMES.index(match.group(1))
        octave = int(match.group(2))
        return (octave + 1) * 12 + index

    @staticmethod
    def midi_to_freq(midi: int) -> float:
        """Convert MIDI pitch to frequency (Hz)."""
        return A4_FREQ * (2 ** ((midi - A4_MIDI) / 12.0))
