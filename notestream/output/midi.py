"""MIDI export functionality."""

import warnings
import pretty_midi
from typing import List
from pathlib import Path

from ..core import RecordedNote


class MIDIExporter:
    """Export a recording to MIDI format."""

    def __init__(
        self,
        tempo: float = 120.0,
        velocity: int = 100,
        instrument_name: str = "Acoustic Grand Piano",
        instrument_program: int = 0,
    ):
        """
        Initialize MIDIExporter.

        Args:
            tempo: Tempo in BPM
            velocity: Velocity given to every note (recordings carry none)
            instrument_name: MIDI instrument name
            instrument_program: MIDI program number (0-127)
        """
        self.tempo = tempo
        self.velocity = velocity
        self.instrument_name = instrument_name
        self.instrument_program = instrument_program

    def export(self, recording: List[RecordedNote], output_path: str) -> None:
        """
        Export a recording to a MIDI file.

        Args:
            recording: Recorded note events
            output_path: Path to output MIDI file
        """
        midi = self.to_pretty_midi(recording)

        # Ensure output directory exists
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        midi.write(str(output_path))

    def to_pretty_midi(self, recording: List[RecordedNote]) -> pretty_midi.PrettyMIDI:
        """Convert a recording to a PrettyMIDI object without saving.

        Notes whose names do not map to a MIDI pitch are skipped with a warning.
        """
        midi = pretty_midi.PrettyMIDI(initial_tempo=self.tempo)

        instrument = pretty_midi.Instrument(
            program=self.instrument_program,
            name=self.instrument_name,
        )

        skipped = 0
        for item in sorted(recording, key=lambda n: n.start_time):
            pitch = item.pitch
            if not 0 <= pitch <= 127:
                skipped += 1
                continue
            start = item.start_time / 1000.0
            instrument.notes.append(
                pretty_midi.Note(
                    velocity=self.velocity,
                    pitch=pitch,
                    start=start,
                    end=start + item.duration / 1000.0,
                )
            )

        if skipped:
            warnings.warn(f"Skipped {skipped} notes with unmappable names")

        midi.instruments.append(instrument)
        return midi
