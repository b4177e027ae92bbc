"""Note detection - per-frame spectral peaks to debounced note names."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
import warnings

import numpy as np

from ..analysis.pitch import bin_frequencies, frequencies_to_notes
from ..core.constants import (
    DEFAULT_FFT_SIZE,
    DEFAULT_MAX_FREQ_SCALE,
    DEFAULT_MIN_NOTE_DURATION_MS,
    DEFAULT_NOTE_THRESHOLD,
    DEFAULT_NOTES_TO_SHOW,
)


@dataclass
class DetectorConfig:
    """Configuration for note detection.

    Attributes:
        fft_size: Analysis window length used to produce the frames (default: 2048)
        threshold: Peak amplitude threshold on the 0-255 scale (default: 100)
        notes_to_show: Maximum peaks kept per frame (default: 5)
        max_freq_scale: Fraction of the bins scanned, lowest first (default: 0.3)
        min_note_duration_ms: Debounce window in ms (default: 50)
    """

    fft_size: int = DEFAULT_FFT_SIZE
    threshold: int = DEFAULT_NOTE_THRESHOLD
    notes_to_show: int = DEFAULT_NOTES_TO_SHOW
    max_freq_scale: float = DEFAULT_MAX_FREQ_SCALE
    min_note_duration_ms: float = DEFAULT_MIN_NOTE_DURATION_MS

    def __post_init__(self):
        if self.fft_size <= 0 or self.fft_size % 2:
            raise ValueError(f"fft_size must be a positive even number, got {self.fft_size}")
        if not 0.0 < self.max_freq_scale <= 1.0:
            raise ValueError(
                f"max_freq_scale must be in (0, 1], got {self.max_freq_scale}"
            )
        if self.notes_to_show < 0:
            raise ValueError(f"notes_to_show must be >= 0, got {self.notes_to_show}")
        if self.min_note_duration_ms < 0:
            raise ValueError(
                f"min_note_duration_ms must be >= 0, got {self.min_note_duration_ms}"
            )


class NoteDetector:
    """Turn magnitude frames into a debounced set of confirmed notes.

    A note becomes a candidate the first frame it shows up among the
    loudest peaks and is confirmed once it has stayed there for longer
    than ``min_note_duration_ms``. A candidate that misses a single
    frame is forgotten, so its clock restarts if it comes back.
    """

    def __init__(
        self,
        threshold: int = DEFAULT_NOTE_THRESHOLD,
        min_note_duration_ms: float = DEFAULT_MIN_NOTE_DURATION_MS,
        notes_to_show: int = DEFAULT_NOTES_TO_SHOW,
        config: Optional[DetectorConfig] = None,
    ):
        """Initialize NoteDetector.

        Args:
            threshold: Peak amplitude threshold (0-255)
            min_note_duration_ms: Debounce window in ms
            notes_to_show: Maximum peaks kept per frame
            config: Optional DetectorConfig for advanced settings
        """
        if config is not None:
            self.config = config
        else:
            self.config = DetectorConfig(
                threshold=threshold,
                min_note_duration_ms=min_note_duration_ms,
                notes_to_show=notes_to_show,
            )

        # Note name -> first-seen timestamp (ms), in first-seen order
        self._candidates: Dict[str, float] = {}

    @property
    def candidates(self) -> Dict[str, float]:
        """Copy of the current candidate map (note -> first-seen ms)."""
        return dict(self._candidates)

    def reset(self) -> None:
        """Forget every candidate."""
        self._candidates.clear()

    def detect(
        self,
        magnitudes: Sequence[int],
        sample_rate: float,
        now_ms: float,
    ) -> List[str]:
        """
        Process one frame and return the confirmed notes.

        Args:
            magnitudes: Byte magnitudes, one per bin, low to high frequency
            sample_rate: Sample rate of the analysed signal in Hz
            now_ms: Frame timestamp in ms, monotonically increasing

        Returns:
            Confirmed note names without duplicates, in the order the
            notes were first seen
        """
        current = self.frame_notes(magnitudes, sample_rate)

        confirmed = []
        for note, first_seen in list(self._candidates.items()):
            if note not in current:
                del self._candidates[note]
            elif now_ms - first_seen > self.config.min_note_duration_ms:
                confirmed.append(note)

        for note in current:
            if note not in self._candidates:
                self._candidates[note] = now_ms

        return confirmed

    def frame_notes(self, magnitudes: Sequence[int], sample_rate: float) -> List[str]:
        """
        Note names of the loudest peaks in a single frame, no debouncing.

        Returns:
            Unique note names, loudest peak first
        """
        frame = np.asarray(magnitudes)
        if frame.ndim != 1:
            warnings.warn(f"Expected a 1-D magnitude frame, got shape {frame.shape}")
            frame = frame.ravel()

        max_bin = int(np.floor(len(frame) * self.config.max_freq_scale))
        scanned = frame[:max_bin].astype(np.int32)

        peak_bins = np.flatnonzero(scanned > self.config.threshold)
        if len(peak_bins) == 0 or self.config.notes_to_show == 0:
            return []

        # Stable sort keeps the lower bin first on equal amplitude
        order = np.argsort(-scanned[peak_bins], kind="stable")
        top_bins = peak_bins[order][: self.config.notes_to_show]

        freqs = bin_frequencies(max_bin, sample_rate, self.config.fft_size)[top_bins]
        names = frequencies_to_notes(freqs)

        # dict preserves insertion order for dedup
        return list(dict.fromkeys(name for name in names if name))
