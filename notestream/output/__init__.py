"""Output layer - Export recordings to other formats."""

from .midi import MIDIExporter

__all__ = [
    "MIDIExporter",
]
