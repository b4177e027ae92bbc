"""Note-event pipeline - one tick drives detection, lanes and recording.

Each frame runs, in order: NoteDetector -> LaneAssignor -> Recorder.
Everything is synchronous and single threaded; callers that read the
recorder from another thread must serialize access themselves.
"""

import json
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from .analysis import SpectrogramHistory
from .core import RecordedNote
from .core.constants import (
    DEFAULT_AMPLITUDE_LOG_SCALE,
    DEFAULT_FFT_SIZE,
    DEFAULT_HISTORY_SIZE,
    DEFAULT_MAX_FREQ_SCALE,
    DEFAULT_MIN_NOTE_DURATION_MS,
    DEFAULT_NOTE_THRESHOLD,
    DEFAULT_NOTES_TO_RECORD,
    DEFAULT_NOTES_TO_SHOW,
    DEFAULT_RECORD_DURATION_MS,
)
from .detection import DetectorConfig, NoteDetector
from .display import LaneAssignor, LaneUpdate
from .input import FrameSource, SpectrumFrame
from .recording import Recorder, RecorderConfig


@dataclass
class PipelineConfig:
    """All externally supplied constants of the pipeline.

    Attributes:
        fft_size: FFT window length behind each frame (default: 2048)
        history_size: Frames kept for the spectrogram (default: 512)
        min_note_duration_ms: Debounce window in ms (default: 50)
        note_threshold: Peak amplitude threshold, 0-255 (default: 100)
        notes_to_show: Peaks kept per frame (default: 5)
        num_lanes: Display lanes, None means notes_to_show (default: None)
        max_freq_scale: Fraction of the bins scanned (default: 0.3)
        amplitude_log_scale: Spectrogram log compression (default: 10.0)
        record_duration_ms: Maximum recording length in ms (default: 30000)
        notes_to_record: Maximum simultaneously recorded notes (default: 10)
    """

    fft_size: int = DEFAULT_FFT_SIZE
    history_size: int = DEFAULT_HISTORY_SIZE
    min_note_duration_ms: float = DEFAULT_MIN_NOTE_DURATION_MS
    note_threshold: int = DEFAULT_NOTE_THRESHOLD
    notes_to_show: int = DEFAULT_NOTES_TO_SHOW
    num_lanes: Optional[int] = None
    max_freq_scale: float = DEFAULT_MAX_FREQ_SCALE
    amplitude_log_scale: float = DEFAULT_AMPLITUDE_LOG_SCALE
    record_duration_ms: float = DEFAULT_RECORD_DURATION_MS
    notes_to_record: int = DEFAULT_NOTES_TO_RECORD

    @property
    def lanes(self) -> int:
        return self.notes_to_show if self.num_lanes is None else self.num_lanes

    def detector_config(self) -> DetectorConfig:
        return DetectorConfig(
            fft_size=self.fft_size,
            threshold=self.note_threshold,
            notes_to_show=self.notes_to_show,
            max_freq_scale=self.max_freq_scale,
            min_note_duration_ms=self.min_note_duration_ms,
        )

    def recorder_config(self) -> RecorderConfig:
        return RecorderConfig(
            max_duration_ms=self.record_duration_ms,
            max_notes=self.notes_to_record,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineConfig":
        """Build from a dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "PipelineConfig":
        """Load from a JSON file holding a flat object of settings."""
        return cls.from_dict(json.loads(Path(path).read_text()))


@dataclass
class TickResult:
    """What one frame produced."""

    timestamp_ms: float
    confirmed: List[str]
    lanes: LaneUpdate
    recording: bool = False
    recorded: List[RecordedNote] = field(default_factory=list)  # finalized this tick


class NoteStream:
    """Owns one detector, lane assignor, recorder and spectrogram history."""

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()
        self.detector = NoteDetector(config=self.config.detector_config())
        self.lanes = LaneAssignor(num_lanes=self.config.lanes)
        self.recorder = Recorder(config=self.config.recorder_config())
        self.history = SpectrogramHistory(
            n_bins=self.config.fft_size // 2,
            history_size=self.config.history_size,
        )

    def process(self, frame: SpectrumFrame) -> TickResult:
        """Run one tick for ``frame``."""
        self.history.push(frame.magnitudes)

        confirmed = self.detector.detect(
            frame.magnitudes, frame.sample_rate, frame.timestamp_ms
        )
        lane_update = self.lanes.update(confirmed)

        recorded = self.recorder.update(confirmed, frame.timestamp_ms)

        return TickResult(
            timestamp_ms=frame.timestamp_ms,
            confirmed=confirmed,
            lanes=lane_update,
            recording=self.recorder.is_recording,
            recorded=recorded,
        )

    def run(self, source: FrameSource) -> Iterator[TickResult]:
        """Process every frame of ``source``."""
        for frame in source.frames():
            yield self.process(frame)

    def start_recording(self, now_ms: float) -> None:
        self.recorder.start(now_ms)

    def stop_recording(self, now_ms: float) -> List[RecordedNote]:
        """Stop recording and return the finished session."""
        self.recorder.stop(now_ms)
        return self.recorder.get_recording()

    def recording(self) -> List[RecordedNote]:
        return self.recorder.get_recording()

    def reset(self) -> None:
        """Forget candidates, lanes and spectrogram history.

        A recording in progress is left as is.
        """
        self.detector.reset()
        self.lanes.clear()
        self.history.clear()
