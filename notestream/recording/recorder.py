"""Note recording - bounded capture of note-on/note-off into events.

Timestamps are caller-supplied milliseconds from the same clock the
detector sees. A note's onset is the tick at which the recorder first
sees it among the confirmed notes, so the detector's debounce window is
not included in ``start_time``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from ..core import RecordedNote
from ..core.constants import DEFAULT_NOTES_TO_RECORD, DEFAULT_RECORD_DURATION_MS


class RecorderState(Enum):
    """Recording session states."""

    IDLE = "idle"
    RECORDING = "recording"


@dataclass
class RecorderConfig:
    """Configuration for the recorder.

    Attributes:
        max_duration_ms: Session length after which recording stops (default: 30000)
        max_notes: Maximum notes tracked at the same time (default: 10)
    """

    max_duration_ms: float = DEFAULT_RECORD_DURATION_MS
    max_notes: int = DEFAULT_NOTES_TO_RECORD

    def __post_init__(self):
        if self.max_duration_ms <= 0:
            raise ValueError(f"max_duration_ms must be positive, got {self.max_duration_ms}")
        if self.max_notes < 0:
            raise ValueError(f"max_notes must be >= 0, got {self.max_notes}")


class Recorder:
    """Convert a stream of confirmed-note sets into RecordedNote events."""

    def __init__(
        self,
        max_duration_ms: float = DEFAULT_RECORD_DURATION_MS,
        max_notes: int = DEFAULT_NOTES_TO_RECORD,
        config: Optional[RecorderConfig] = None,
    ):
        """Initialize Recorder.

        Args:
            max_duration_ms: Session length after which recording stops
            max_notes: Maximum notes tracked at the same time
            config: Optional RecorderConfig, overrides the other arguments
        """
        self.config = config or RecorderConfig(
            max_duration_ms=max_duration_ms,
            max_notes=max_notes,
        )
        self.state = RecorderState.IDLE
        self._start_time = 0.0
        self._events: List[RecordedNote] = []
        # Note name -> onset timestamp (ms)
        self._active: Dict[str, float] = {}

    @property
    def is_recording(self) -> bool:
        return self.state is RecorderState.RECORDING

    @property
    def start_time(self) -> float:
        """Timestamp (ms) the current or last session started at."""
        return self._start_time

    @property
    def active_notes(self) -> Dict[str, float]:
        """Copy of the notes currently held (note -> onset ms)."""
        return dict(self._active)

    def elapsed(self, now_ms: float) -> float:
        """Milliseconds since the session started, 0 when idle."""
        if not self.is_recording:
            return 0.0
        return now_ms - self._start_time

    def start(self, now_ms: float) -> None:
        """Start a new session, discarding the previous one."""
        self._events = []
        self._active = {}
        self._start_time = now_ms
        self.state = RecorderState.RECORDING

    def stop(self, now_ms: float) -> List[RecordedNote]:
        """Finalize every held note and go idle.

        Args:
            now_ms: Stop timestamp. A stop that arrives after the session
                deadline (``start_time + max_duration_ms``) is clamped to
                the deadline, since the session had already ended there.

        Returns:
            The events finalized by this stop; empty when idle
        """
        if not self.is_recording:
            return []
        now_ms = min(now_ms, self._start_time + self.config.max_duration_ms)
        finalized = self._finalize(list(self._active), now_ms)
        self.state = RecorderState.IDLE
        return finalized

    def update(self, confirmed: Iterable[str], now_ms: float) -> List[RecordedNote]:
        """
        Feed one tick of confirmed notes.

        Notes that are no longer confirmed are finalized at ``now_ms``.
        New notes are tracked while fewer than ``max_notes`` are held;
        the rest are dropped. Once the session has run for
        ``max_duration_ms`` it stops at that deadline and the tick's
        notes are ignored.

        Returns:
            The events finalized on this tick
        """
        if not self.is_recording:
            return []

        deadline = self._start_time + self.config.max_duration_ms
        if now_ms >= deadline:
            return self.stop(deadline)

        confirmed = list(dict.fromkeys(confirmed))
        held = set(confirmed)
        finalized = self._finalize([n for n in self._active if n not in held], now_ms)

        for note in confirmed:
            if note in self._active:
                continue
            if len(self._active) < self.config.max_notes:
                self._active[note] = now_ms

        return finalized

    def get_recording(self) -> List[RecordedNote]:
        """Snapshot of the finalized events; held notes are not included."""
        return list(self._events)

    def _finalize(self, notes: List[str], now_ms: float) -> List[RecordedNote]:
        finalized = []
        for note in notes:
            onset = self._active.pop(note)
            finalized.append(
                RecordedNote(
                    note=note,
                    start_time=onset - self._start_time,
                    duration=now_ms - onset,
                )
            )
        self._events.extend(finalized)
        return finalized
