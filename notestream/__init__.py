"""notestream - Live spectrum to musical notes, lanes and recordings.

Architecture Layers:
    1. input/      - Audio acquisition and per-tick spectrum frames
    2. analysis/   - Frequency <-> note mapping, spectrogram history
    3. detection/  - Peak picking and debouncing into confirmed notes
    4. display/    - Stable lane assignment for renderers
    5. recording/  - Bounded recording sessions and their storage
    6. playback/   - Resynthesis of recordings as enveloped tones
    7. output/     - Export (MIDI)

The pipeline module ties layers 3-5 into one per-frame tick.
"""

__version__ = "0.1.0"

# Core types
from .core import Note, RecordedNote

# Input layer
from .input import (
    AudioLoader,
    AudioSourceError,
    SpectrumFrame,
    AudioFileFrameSource,
    MicrophoneFrameSource,
)

# Analysis layer
from .analysis import note_from_frequency, frequency_from_note, SpectrogramHistory

# Detection layer
from .detection import NoteDetector, DetectorConfig

# Display layer
from .display import LaneAssignor, LaneUpdate

# Recording layer
from .recording import Recorder, RecorderConfig, RecorderState

# Playback layer
from .playback import Player, OfflineToneRenderer, LiveToneScheduler, ToneScheduler

# Output layer
from .output import MIDIExporter

# Pipeline
from .pipeline import NoteStream, PipelineConfig, TickResult

__all__ = [
    # Core
    "Note",
    "RecordedNote",
    # Input
    "AudioLoader",
    "AudioSourceError",
    "SpectrumFrame",
    "AudioFileFrameSource",
    "MicrophoneFrameSource",
    # Analysis
    "note_from_frequency",
    "frequency_from_note",
    "SpectrogramHistory",
    # Detection
    "NoteDetector",
    "DetectorConfig",
    # Display
    "LaneAssignor",
    "LaneUpdate",
    # Recording
    "Recorder",
    "RecorderConfig",
    "RecorderState",
    # Playback
    "Player",
    "OfflineToneRenderer",
    "LiveToneScheduler",
    "ToneScheduler",
    # Output
    "MIDIExporter",
    # Pipeline
    "NoteStream",
    "PipelineConfig",
    "TickResult",
]
